"""
Shared FastAPI dependencies: database session, Redis, bearer authentication,
role checks and per-user rate limits.
"""

import uuid
from datetime import datetime
from typing import AsyncIterator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_db_session
from enums.rate_limit_operation import RateLimitOperation
from enums.role import Role
from exceptions.base import PermissionDeniedException
from exceptions.user import AuthenticationException
from middleware.rate_limit import RateLimiter
from models.user import UserDTO
from redis_instance import get_redis
from repositories.user import UserRepository
from utils.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_db_session() as session:
        yield session


def get_redis_client() -> Redis:
    return get_redis()


async def get_user_from_token(token: str, session: AsyncSession) -> UserDTO:
    """Resolve a bearer token to the stored user; the role is read from the database, not the token."""
    claims = decode_access_token(token)
    user = await UserRepository.get_by_id(claims["id"], session)
    if user is None:
        raise AuthenticationException("Invalid or expired token")
    return UserDTO.model_validate(user, from_attributes=True)


async def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
                           session: AsyncSession = Depends(get_session)) -> UserDTO:
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Not authenticated")
    return await get_user_from_token(credentials.credentials, session)


async def get_optional_user(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
                            session: AsyncSession = Depends(get_session)) -> UserDTO | None:
    if credentials is None or not credentials.credentials:
        return None
    return await get_user_from_token(credentials.credentials, session)


def require_roles(*roles: Role):
    """
    Dependency factory allowing only the given roles.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles(Role.ADMIN))])
    """

    async def checker(current_user: UserDTO = Depends(get_current_user)) -> UserDTO:
        if current_user.role not in roles:
            raise PermissionDeniedException(
                current_user.id, f"access a resource restricted to {', '.join(r.value for r in roles)}"
            )
        return current_user

    return checker


def rate_limit(operation: RateLimitOperation):
    """Dependency factory counting one call of the operation for the current user."""

    async def limiter(current_user: UserDTO = Depends(get_current_user),
                      redis: Redis = Depends(get_redis_client)) -> None:
        await RateLimiter(redis).check(operation, current_user.id)

    return limiter
