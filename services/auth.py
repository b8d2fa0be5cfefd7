import logging
import math
import secrets
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.role import Role
from enums.supplier_status import SupplierStatus
from exceptions.supplier import SupplierNotApprovedException, SupplierNotFoundException
from exceptions.user import (
    UserAlreadyExistsException,
    UserNotFoundException,
    AuthenticationException,
    AccountLockedException,
    AccountNotVerifiedException,
    InvalidOTPException,
    WeakPasswordException,
    InvalidResetTokenException,
)
from models.user import (
    User,
    UserDTO,
    RegisterRequest,
    VerifyOtpRequest,
    LoginRequest,
    TokenDTO,
    PasswordUpdateRequest,
    ResetPasswordRequest,
)
from repositories.supplier import SupplierRepository
from repositories.user import UserRepository
from services.notification import NotificationService
from services.wallet import WalletService
from utils.security import (
    hash_password,
    verify_password,
    is_strong_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_token,
)

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    return f"{secrets.randbelow(10 ** 6):06d}"


class AuthService:

    @staticmethod
    async def _issue_tokens(user: User, session: AsyncSession) -> TokenDTO:
        """New access/refresh pair; the refresh token replaces any previous one."""
        refresh_token = create_refresh_token(user.id)
        user.refresh_token_hash = hash_token(refresh_token)
        await session_commit(session)
        return TokenDTO(
            access_token=create_access_token(user.id, user.role),
            refresh_token=refresh_token,
            user=UserDTO.model_validate(user, from_attributes=True)
        )

    @staticmethod
    async def register(request: RegisterRequest, session: AsyncSession, role: Role = Role.USER) -> UserDTO:
        """
        Create an unverified account and send its OTP.

        Admin accounts registered by another admin are verified right away.
        """
        if not is_strong_password(request.password):
            raise WeakPasswordException()
        if await UserRepository.get_by_email(request.email, session) is not None:
            raise UserAlreadyExistsException(request.email)

        otp = generate_otp()
        verified = role == Role.ADMIN
        user = await UserRepository.create(User(
            name=request.name.strip(),
            email=request.email.strip().lower(),
            phone=request.phone,
            password_hash=hash_password(request.password),
            role=role,
            account_verified=verified,
            verification_code=None if verified else otp,
            verification_code_expires_at=None if verified else datetime.now() + timedelta(minutes=config.OTP_EXPIRE_MINUTES),
        ), session)
        await WalletService.get_or_create(user.id, session)
        await session_commit(session)

        logger.info(f"👤 User {user.id} registered with role {role.value}")
        if not verified:
            await NotificationService.send_otp(user.email, otp)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def verify_otp(request: VerifyOtpRequest, session: AsyncSession) -> TokenDTO:
        user = await UserRepository.get_by_email(request.email, session)
        if user is None:
            raise UserNotFoundException(email=request.email)
        if user.account_verified:
            return await AuthService._issue_tokens(user, session)
        if not user.verification_code or not secrets.compare_digest(user.verification_code, request.otp):
            raise InvalidOTPException()
        if user.verification_code_expires_at is None or user.verification_code_expires_at < datetime.now():
            raise InvalidOTPException(expired=True)

        user.account_verified = True
        user.verification_code = None
        user.verification_code_expires_at = None
        logger.info(f"✅ User {user.id} verified")
        return await AuthService._issue_tokens(user, session)

    @staticmethod
    async def resend_otp(email: str, session: AsyncSession) -> None:
        user = await UserRepository.get_by_email(email, session)
        if user is None:
            raise UserNotFoundException(email=email)
        if user.account_verified:
            return
        otp = generate_otp()
        user.verification_code = otp
        user.verification_code_expires_at = datetime.now() + timedelta(minutes=config.OTP_EXPIRE_MINUTES)
        await session_commit(session)
        await NotificationService.send_otp(user.email, otp)

    @staticmethod
    async def login(request: LoginRequest, session: AsyncSession) -> TokenDTO:
        """
        Check credentials with brute-force lockout.

        After LOGIN_MAX_ATTEMPTS failures the account is locked for LOGIN_LOCK_MINUTES.
        """
        user = await UserRepository.get_by_email(request.email, session)
        if user is None:
            raise AuthenticationException()

        now = datetime.now()
        if user.is_locked():
            minutes_left = max(1, math.ceil((user.lock_until - now).total_seconds() / 60))
            raise AccountLockedException(user.id, minutes_left)

        if not verify_password(request.password, user.password_hash):
            user.login_attempts += 1
            if user.login_attempts >= config.LOGIN_MAX_ATTEMPTS:
                user.lock_until = now + timedelta(minutes=config.LOGIN_LOCK_MINUTES)
                user.login_attempts = 0
                await session_commit(session)
                logger.warning(f"🔒 User {user.id} locked after {config.LOGIN_MAX_ATTEMPTS} failed logins")
                raise AccountLockedException(user.id, config.LOGIN_LOCK_MINUTES)
            await session_commit(session)
            raise AuthenticationException(attempts_left=config.LOGIN_MAX_ATTEMPTS - user.login_attempts)

        if not user.account_verified:
            raise AccountNotVerifiedException(user.id)

        if user.role == Role.SUPPLIER:
            supplier = await SupplierRepository.get_by_user_id(user.id, session)
            if supplier is None:
                raise SupplierNotFoundException(user_id=user.id)
            if supplier.status != SupplierStatus.APPROVED:
                raise SupplierNotApprovedException(supplier.id, supplier.status.value)

        user.login_attempts = 0
        user.lock_until = None
        user.last_login_at = now
        logger.info(f"🔑 User {user.id} logged in")
        return await AuthService._issue_tokens(user, session)

    @staticmethod
    async def me(current_user: UserDTO, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(current_user.id, session)
        if user is None:
            raise UserNotFoundException(user_id=current_user.id)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def update_password(request: PasswordUpdateRequest, current_user: UserDTO, session: AsyncSession) -> None:
        user = await UserRepository.get_by_id(current_user.id, session)
        if user is None:
            raise UserNotFoundException(user_id=current_user.id)
        if not verify_password(request.current_password, user.password_hash):
            raise AuthenticationException("Current password is incorrect")
        if not is_strong_password(request.new_password):
            raise WeakPasswordException()
        user.password_hash = hash_password(request.new_password)
        await session_commit(session)
        logger.info(f"User {user.id} changed password")

    @staticmethod
    async def refresh(refresh_token: str, session: AsyncSession) -> TokenDTO:
        """Trade a refresh token for a new pair; the old refresh token stops working."""
        user_id = decode_refresh_token(refresh_token)
        user = await UserRepository.get_by_id(user_id, session)
        if (user is None or not user.refresh_token_hash
                or not secrets.compare_digest(user.refresh_token_hash, hash_token(refresh_token))):
            raise AuthenticationException("Invalid refresh token")
        return await AuthService._issue_tokens(user, session)

    @staticmethod
    async def logout(current_user: UserDTO, session: AsyncSession) -> None:
        user = await UserRepository.get_by_id(current_user.id, session)
        if user is None:
            raise UserNotFoundException(user_id=current_user.id)
        user.refresh_token_hash = None
        await session_commit(session)
        logger.info(f"👋 User {user.id} logged out")

    @staticmethod
    async def forgot_password(email: str, session: AsyncSession) -> None:
        """
        Issue a one-time password reset token valid for RESET_PASSWORD_EXPIRE_MINUTES.

        Only its sha256 digest is stored; the plain token goes to the user.
        """
        user = await UserRepository.get_by_email(email, session)
        if user is None:
            raise UserNotFoundException(email=email)
        token = secrets.token_urlsafe(32)
        user.reset_password_token_hash = hash_token(token)
        user.reset_password_expires_at = datetime.now() + timedelta(minutes=config.RESET_PASSWORD_EXPIRE_MINUTES)
        await session_commit(session)
        logger.info(f"🔐 Password reset requested for user {user.id}")
        await NotificationService.send_password_reset(user.email, token)

    @staticmethod
    async def reset_password(request: ResetPasswordRequest, session: AsyncSession) -> None:
        user = await UserRepository.get_by_reset_token_hash(hash_token(request.token), session)
        if user is None or user.reset_password_expires_at is None or user.reset_password_expires_at < datetime.now():
            raise InvalidResetTokenException()
        if not is_strong_password(request.new_password):
            raise WeakPasswordException()

        user.password_hash = hash_password(request.new_password)
        user.reset_password_token_hash = None
        user.reset_password_expires_at = None
        user.login_attempts = 0
        user.lock_until = None
        user.refresh_token_hash = None
        await session_commit(session)
        logger.info(f"🔐 User {user.id} reset password")
