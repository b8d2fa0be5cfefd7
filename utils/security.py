"""
Password hashing and access tokens.

Passwords are hashed with passlib, access tokens are HS256 JWTs (python-jose)
carrying the user id and role. Refresh tokens are longer lived JWTs that the
user row pins by hash, so logging out revokes them.
"""

import hashlib
import re
import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from passlib.context import CryptContext

import config
from enums.role import Role
from exceptions.user import AuthenticationException

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_PASSWORD_POLICY = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$')


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def is_strong_password(password: str) -> bool:
    """At least 8 characters with upper, lower, digit and symbol."""
    return bool(_PASSWORD_POLICY.match(password or ""))


def create_access_token(user_id: int, role: Role) -> str:
    payload = {
        "sub": str(user_id),
        "role": role.value,
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=config.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def create_refresh_token(user_id: int) -> str:
    payload = {
        "sub": str(user_id),
        "type": "refresh",
        "jti": secrets.token_hex(16),
        "exp": datetime.now(timezone.utc) + timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def hash_token(token: str) -> str:
    """sha256 hex digest; refresh and reset tokens are only stored in this form."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def decode_access_token(token: str) -> dict:
    """
    Decode and verify an access token.

    Returns:
        {"id": int, "role": Role}

    Raises:
        AuthenticationException: expired, tampered or malformed token
    """
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        if payload.get("type", "access") != "access":
            raise AuthenticationException("Invalid or expired token")
        return {"id": int(payload["sub"]), "role": Role(payload["role"])}
    except (JWTError, KeyError, ValueError):
        raise AuthenticationException("Invalid or expired token")


def decode_refresh_token(token: str) -> int:
    """Returns the user id of a valid refresh token."""
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        if payload.get("type") != "refresh":
            raise AuthenticationException("Invalid refresh token")
        return int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise AuthenticationException("Invalid refresh token")
