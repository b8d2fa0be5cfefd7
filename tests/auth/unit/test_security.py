"""
Unit Tests: password hashing and access tokens (utils/security.py)
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

import config
from enums.role import Role
from exceptions.user import AuthenticationException
from utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    is_strong_password,
    verify_password,
)


class TestPasswords:

    def test_hash_is_salted_and_verifiable(self):
        first = hash_password("Str0ng!Pass")
        second = hash_password("Str0ng!Pass")

        assert first != second
        assert verify_password("Str0ng!Pass", first)
        assert not verify_password("str0ng!pass", first)

    def test_empty_hash_never_verifies(self):
        assert not verify_password("anything", "")

    @pytest.mark.parametrize("password,strong", [
        ("Str0ng!Pass", True),
        ("Aa1!aaaa", True),
        ("Aa1!aaa", False),
        ("password", False),
        ("PASSWORD1!", False),
        ("Password1", False),
        ("", False),
        (None, False),
    ])
    def test_policy(self, password, strong):
        assert is_strong_password(password) is strong


class TestAccessToken:

    def test_round_trip(self):
        token = create_access_token(42, Role.SUPPLIER)

        assert decode_access_token(token) == {"id": 42, "role": Role.SUPPLIER}

    def test_tampered_token(self):
        token = create_access_token(42, Role.USER)
        forged = jwt.encode({"sub": "42", "role": "admin"}, "another-secret", algorithm="HS256")

        with pytest.raises(AuthenticationException):
            decode_access_token(forged)
        header, _, signature = token.split(".")
        _, admin_payload, _ = create_access_token(42, Role.ADMIN).split(".")
        with pytest.raises(AuthenticationException):
            decode_access_token(f"{header}.{admin_payload}.{signature}")

    def test_expired_token(self):
        expired = jwt.encode(
            {"sub": "1", "role": Role.USER.value, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)

        with pytest.raises(AuthenticationException):
            decode_access_token(expired)

    def test_unknown_role(self):
        token = jwt.encode({"sub": "1", "role": "superuser"}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)

        with pytest.raises(AuthenticationException):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(AuthenticationException):
            decode_access_token("not-a-token")
