"""
Unit Tests: AuthService

Tests for services/auth.py covering:
- Registration (password policy, duplicate email, wallet creation, OTP delivery)
- OTP verification and expiry
- Login with brute-force lockout
- Supplier approval gate at login
- Password change and e-mailed password reset
- Refresh token rotation and logout
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from conftest import TEST_PASSWORD, as_dto
from enums.role import Role
from enums.supplier_status import SupplierStatus
from exceptions.supplier import SupplierNotApprovedException
from exceptions.user import (
    AccountLockedException,
    AccountNotVerifiedException,
    AuthenticationException,
    InvalidOTPException,
    InvalidResetTokenException,
    UserAlreadyExistsException,
    UserNotFoundException,
    WeakPasswordException,
)
from models.user import LoginRequest, PasswordUpdateRequest, RegisterRequest, ResetPasswordRequest, VerifyOtpRequest
from repositories.user import UserRepository
from repositories.wallet import WalletRepository
from services.auth import AuthService, generate_otp
from utils.security import decode_access_token


def register_request(email: str = "Jane@Example.com", password: str = TEST_PASSWORD) -> RegisterRequest:
    return RegisterRequest(name=" Jane ", email=email, password=password, phone="0712345678")


class TestRegister:

    @pytest.mark.asyncio
    async def test_creates_unverified_user_with_wallet_and_sends_otp(self, test_session):
        with patch("services.auth.NotificationService.send_otp", new_callable=AsyncMock) as send_otp:
            user = await AuthService.register(register_request(), test_session)

        assert user.email == "jane@example.com"
        assert user.name == "Jane"
        assert user.role == Role.USER
        assert user.account_verified is False
        send_otp.assert_awaited_once()
        email, otp = send_otp.await_args.args
        assert email == "jane@example.com"
        assert len(otp) == 6 and otp.isdigit()
        assert await WalletRepository.get_by_user_id(user.id, test_session) is not None

    @pytest.mark.asyncio
    async def test_admin_is_verified_immediately(self, test_session):
        with patch("services.auth.NotificationService.send_otp", new_callable=AsyncMock) as send_otp:
            user = await AuthService.register(register_request(), test_session, role=Role.ADMIN)

        assert user.account_verified is True
        send_otp.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!", "NoSymbols123"])
    async def test_weak_password(self, test_session, password):
        with pytest.raises(WeakPasswordException):
            await AuthService.register(register_request(password=password), test_session)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_session, make_user):
        await make_user(email="jane@example.com")

        with pytest.raises(UserAlreadyExistsException):
            await AuthService.register(register_request(), test_session)


class TestVerifyOtp:

    @pytest.mark.asyncio
    async def test_valid_otp_verifies_and_returns_token(self, test_session):
        with patch("services.auth.NotificationService.send_otp", new_callable=AsyncMock) as send_otp:
            user = await AuthService.register(register_request(), test_session)
        otp = send_otp.await_args.args[1]

        token = await AuthService.verify_otp(VerifyOtpRequest(email=user.email, otp=otp), test_session)

        assert token.user.account_verified is True
        assert decode_access_token(token.access_token) == {"id": user.id, "role": Role.USER}

    @pytest.mark.asyncio
    async def test_wrong_otp(self, test_session, make_user):
        user = await make_user(verified=False, verification_code="123456",
                               verification_code_expires_at=datetime.now() + timedelta(minutes=5))

        with pytest.raises(InvalidOTPException):
            await AuthService.verify_otp(VerifyOtpRequest(email=user.email, otp="654321"), test_session)

    @pytest.mark.asyncio
    async def test_expired_otp(self, test_session, make_user):
        user = await make_user(verified=False, verification_code="123456",
                               verification_code_expires_at=datetime.now() - timedelta(minutes=1))

        with pytest.raises(InvalidOTPException):
            await AuthService.verify_otp(VerifyOtpRequest(email=user.email, otp="123456"), test_session)

    @pytest.mark.asyncio
    async def test_resend_replaces_code(self, test_session, make_user):
        user = await make_user(verified=False, verification_code="123456",
                               verification_code_expires_at=datetime.now() - timedelta(minutes=1))

        with patch("services.auth.NotificationService.send_otp", new_callable=AsyncMock) as send_otp:
            await AuthService.resend_otp(user.email, test_session)

        new_otp = send_otp.await_args.args[1]
        assert user.verification_code == new_otp
        assert user.verification_code_expires_at > datetime.now()

    def test_generated_otp_is_six_digits(self):
        for _ in range(20):
            otp = generate_otp()
            assert len(otp) == 6 and otp.isdigit()


class TestLogin:

    @pytest.mark.asyncio
    async def test_success_resets_attempts(self, test_session, make_user):
        user = await make_user(login_attempts=2)

        token = await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

        assert token.user.id == user.id
        assert user.login_attempts == 0
        assert user.last_login_at is not None

    @pytest.mark.asyncio
    async def test_unknown_email(self, test_session):
        with pytest.raises(AuthenticationException):
            await AuthService.login(LoginRequest(email="nobody@example.com", password=TEST_PASSWORD), test_session)

    @pytest.mark.asyncio
    async def test_lockout_after_max_attempts(self, test_session, make_user):
        user = await make_user()
        wrong = LoginRequest(email=user.email, password="Wr0ng!Pass")

        for _ in range(2):
            with pytest.raises(AuthenticationException):
                await AuthService.login(wrong, test_session)
        assert user.login_attempts == 2

        with pytest.raises(AccountLockedException):
            await AuthService.login(wrong, test_session)
        assert user.login_attempts == 0
        assert user.lock_until > datetime.now()

        # Even the right password is refused while locked
        with pytest.raises(AccountLockedException):
            await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

    @pytest.mark.asyncio
    async def test_expired_lock_allows_login(self, test_session, make_user):
        user = await make_user(lock_until=datetime.now() - timedelta(seconds=1))

        token = await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

        assert token.user.id == user.id
        assert user.lock_until is None

    @pytest.mark.asyncio
    async def test_unverified_account(self, test_session, make_user):
        user = await make_user(verified=False)

        with pytest.raises(AccountNotVerifiedException):
            await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

    @pytest.mark.asyncio
    async def test_supplier_must_be_approved(self, test_session, make_user, make_supplier):
        user = await make_user(role=Role.SUPPLIER)
        await make_supplier(status=SupplierStatus.PENDING, user=user)

        with pytest.raises(SupplierNotApprovedException):
            await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

    @pytest.mark.asyncio
    async def test_approved_supplier_logs_in(self, test_session, make_supplier):
        supplier = await make_supplier()
        user = await UserRepository.get_by_id(supplier.user_id, test_session)

        token = await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

        assert token.user.role == Role.SUPPLIER


class TestPasswordUpdate:

    @pytest.mark.asyncio
    async def test_change_password(self, test_session, make_user):
        user = await make_user()

        await AuthService.update_password(
            PasswordUpdateRequest(current_password=TEST_PASSWORD, new_password="N3w!Password"),
            as_dto(user), test_session)

        token = await AuthService.login(LoginRequest(email=user.email, password="N3w!Password"), test_session)
        assert token.user.id == user.id

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, test_session, make_user):
        user = await make_user()

        with pytest.raises(AuthenticationException):
            await AuthService.update_password(
                PasswordUpdateRequest(current_password="Wr0ng!Pass", new_password="N3w!Password"),
                as_dto(user), test_session)

    @pytest.mark.asyncio
    async def test_weak_new_password(self, test_session, make_user):
        user = await make_user()

        with pytest.raises(WeakPasswordException):
            await AuthService.update_password(
                PasswordUpdateRequest(current_password=TEST_PASSWORD, new_password="weak"),
                as_dto(user), test_session)


class TestSessionTokens:

    @pytest.mark.asyncio
    async def test_refresh_rotates_token(self, test_session, make_user):
        user = await make_user()
        token = await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

        refreshed = await AuthService.refresh(token.refresh_token, test_session)

        assert refreshed.refresh_token != token.refresh_token
        assert decode_access_token(refreshed.access_token)["id"] == user.id
        with pytest.raises(AuthenticationException):
            await AuthService.refresh(token.refresh_token, test_session)

    @pytest.mark.asyncio
    async def test_logout_revokes_refresh_token(self, test_session, make_user):
        user = await make_user()
        token = await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

        await AuthService.logout(as_dto(user), test_session)

        assert user.refresh_token_hash is None
        with pytest.raises(AuthenticationException):
            await AuthService.refresh(token.refresh_token, test_session)

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_refresh_token(self, test_session, make_user):
        user = await make_user()
        token = await AuthService.login(LoginRequest(email=user.email, password=TEST_PASSWORD), test_session)

        with pytest.raises(AuthenticationException):
            await AuthService.refresh(token.access_token, test_session)
        with pytest.raises(AuthenticationException):
            decode_access_token(token.refresh_token)


class TestPasswordReset:

    @pytest.mark.asyncio
    async def test_reset_with_emailed_token(self, test_session, make_user):
        user = await make_user(lock_until=datetime.now() + timedelta(minutes=5))
        with patch("services.auth.NotificationService.send_password_reset", new_callable=AsyncMock) as send:
            await AuthService.forgot_password(user.email, test_session)
        token = send.await_args.args[1]
        assert user.reset_password_token_hash != token

        await AuthService.reset_password(ResetPasswordRequest(token=token, new_password="N3w!Password"), test_session)

        assert user.reset_password_token_hash is None
        assert user.lock_until is None
        login = await AuthService.login(LoginRequest(email=user.email, password="N3w!Password"), test_session)
        assert login.user.id == user.id
        with pytest.raises(InvalidResetTokenException):
            await AuthService.reset_password(ResetPasswordRequest(token=token, new_password="An0ther!Pass"),
                                             test_session)

    @pytest.mark.asyncio
    async def test_expired_token(self, test_session, make_user):
        user = await make_user()
        with patch("services.auth.NotificationService.send_password_reset", new_callable=AsyncMock) as send:
            await AuthService.forgot_password(user.email, test_session)
        user.reset_password_expires_at = datetime.now() - timedelta(seconds=1)
        await test_session.commit()

        with pytest.raises(InvalidResetTokenException):
            await AuthService.reset_password(
                ResetPasswordRequest(token=send.await_args.args[1], new_password="N3w!Password"), test_session)

    @pytest.mark.asyncio
    async def test_weak_new_password_keeps_token(self, test_session, make_user):
        user = await make_user()
        with patch("services.auth.NotificationService.send_password_reset", new_callable=AsyncMock) as send:
            await AuthService.forgot_password(user.email, test_session)

        with pytest.raises(WeakPasswordException):
            await AuthService.reset_password(ResetPasswordRequest(token=send.await_args.args[1], new_password="weak"),
                                             test_session)
        assert user.reset_password_token_hash is not None

    @pytest.mark.asyncio
    async def test_unknown_email(self, test_session):
        with pytest.raises(UserNotFoundException):
            await AuthService.forgot_password("nobody@example.com", test_session)
