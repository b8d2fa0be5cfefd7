"""
User and authentication exceptions.
"""

from .base import MarketplaceException


class UserException(MarketplaceException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException):
    """Raised when user is not found in database."""

    def __init__(self, user_id: int | None = None, email: str | None = None):
        if user_id:
            message = f"User with ID {user_id} not found"
            details = {'user_id': user_id}
        elif email:
            message = "User not found"
            details = {'email': email}
        else:
            message = "User not found"
            details = {}

        super().__init__(message, details)
        self.user_id = user_id
        self.email = email


class UserAlreadyExistsException(UserException):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        super().__init__(
            "User already exists",
            details={'email': email}
        )
        self.email = email


class AuthenticationException(UserException):
    """Raised when credentials or access token are invalid."""

    def __init__(self, reason: str = "Invalid email or password", attempts_left: int | None = None):
        details = {}
        if attempts_left is not None:
            details['attempts_left'] = attempts_left
            reason = f"{reason}. {attempts_left} attempt(s) remaining."
        super().__init__(reason, details)
        self.attempts_left = attempts_left


class AccountLockedException(UserException):
    """Raised when login is attempted on a temporarily locked account."""

    def __init__(self, user_id: int, minutes_left: int):
        super().__init__(
            f"Account locked. Try again in {minutes_left} minute(s).",
            details={'user_id': user_id, 'minutes_left': minutes_left, 'account_locked': True}
        )
        self.user_id = user_id
        self.minutes_left = minutes_left


class AccountNotVerifiedException(UserException):
    """Raised when an unverified account tries to log in."""

    def __init__(self, user_id: int):
        super().__init__(
            "Please verify your account with the OTP sent to your email",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class InvalidOTPException(UserException):
    """Raised when a verification code is wrong or expired."""

    def __init__(self, expired: bool = False):
        super().__init__(
            "OTP expired" if expired else "Invalid OTP",
            details={'expired': expired}
        )
        self.expired = expired


class WeakPasswordException(UserException):
    """Raised when a password does not satisfy the strength policy."""

    def __init__(self):
        super().__init__(
            "Password must be at least 8 characters long and include uppercase, lowercase, number, and symbol."
        )


class InvalidResetTokenException(UserException):
    """Raised when a password reset token is unknown or expired."""

    def __init__(self):
        super().__init__("Reset token is invalid or has expired")
