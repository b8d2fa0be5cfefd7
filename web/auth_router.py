import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.role import Role
from models.user import (
    UserDTO,
    RegisterRequest,
    VerifyOtpRequest,
    ResendOtpRequest,
    LoginRequest,
    TokenDTO,
    PasswordUpdateRequest,
    RoleUpdateRequest,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ProfileUpdateRequest,
)
from services.auth import AuthService
from services.user import UserService
from utils.pagination import PageDTO
from web.dependencies import generate_correlation_id, get_session, get_current_user, require_roles

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])
users_router = APIRouter(prefix="/users", tags=["users"])


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_session)) -> UserDTO:
    correlation_id = generate_correlation_id()
    user = await AuthService.register(payload, session)
    logger.info(f"[{correlation_id}] Registered user {user.id}")
    return user


@auth_router.post("/verify-otp")
async def verify_otp(payload: VerifyOtpRequest, session: AsyncSession = Depends(get_session)) -> TokenDTO:
    return await AuthService.verify_otp(payload, session)


@auth_router.post("/resend-otp")
async def resend_otp(payload: ResendOtpRequest, session: AsyncSession = Depends(get_session)) -> dict:
    await AuthService.resend_otp(payload.email, session)
    return {"success": True, "message": "Verification code sent"}


@auth_router.post("/login")
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)) -> TokenDTO:
    correlation_id = generate_correlation_id()
    token = await AuthService.login(payload, session)
    logger.info(f"[{correlation_id}] User {token.user.id} logged in")
    return token


@auth_router.get("/me")
async def me(current_user: UserDTO = Depends(get_current_user),
             session: AsyncSession = Depends(get_session)) -> UserDTO:
    return await AuthService.me(current_user, session)


@auth_router.put("/me")
async def update_profile(payload: ProfileUpdateRequest,
                         current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> UserDTO:
    return await UserService.update_profile(payload, current_user, session)


@auth_router.post("/refresh")
async def refresh(payload: RefreshTokenRequest, session: AsyncSession = Depends(get_session)) -> TokenDTO:
    return await AuthService.refresh(payload.refresh_token, session)


@auth_router.post("/logout")
async def logout(current_user: UserDTO = Depends(get_current_user),
                 session: AsyncSession = Depends(get_session)) -> dict:
    await AuthService.logout(current_user, session)
    return {"success": True, "message": "Logged out"}


@auth_router.post("/forgot-password")
async def forgot_password(payload: ForgotPasswordRequest, session: AsyncSession = Depends(get_session)) -> dict:
    correlation_id = generate_correlation_id()
    await AuthService.forgot_password(payload.email, session)
    logger.info(f"[{correlation_id}] Password reset token issued")
    return {"success": True, "message": "Password reset token sent"}


@auth_router.post("/reset-password")
async def reset_password(payload: ResetPasswordRequest, session: AsyncSession = Depends(get_session)) -> dict:
    await AuthService.reset_password(payload, session)
    return {"success": True, "message": "Password has been reset"}


@auth_router.put("/password")
async def update_password(payload: PasswordUpdateRequest,
                          current_user: UserDTO = Depends(get_current_user),
                          session: AsyncSession = Depends(get_session)) -> dict:
    await AuthService.update_password(payload, current_user, session)
    return {"success": True, "message": "Password updated"}


# === Admin user management ===

@users_router.get("")
async def list_users(page: int = 1, limit: int = 20, role: Role | None = None,
                     current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                     session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await UserService.get_users(page, limit, role, session)


@users_router.post("/admins", status_code=status.HTTP_201_CREATED)
async def register_admin(payload: RegisterRequest,
                         current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                         session: AsyncSession = Depends(get_session)) -> UserDTO:
    return await UserService.register_admin(payload, current_user, session)


@users_router.get("/{user_id}")
async def get_user(user_id: int,
                   current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                   session: AsyncSession = Depends(get_session)) -> UserDTO:
    return await UserService.get_user(user_id, session)


@users_router.patch("/{user_id}/role")
async def update_role(user_id: int, payload: RoleUpdateRequest,
                      current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                      session: AsyncSession = Depends(get_session)) -> UserDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Admin {current_user.id} sets role of user {user_id} to {payload.role.value}")
    return await UserService.update_role(user_id, payload.role, current_user, session)


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int,
                      current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                      session: AsyncSession = Depends(get_session)) -> None:
    await UserService.delete_user(user_id, current_user, session)
