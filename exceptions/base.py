"""
Base exception classes for the marketplace.
"""


class MarketplaceException(Exception):
    """
    Base exception for all marketplace errors.

    All custom exceptions in the application should inherit from this class.
    This allows catching all domain exceptions with a single handler
    (see utils.error_handler).

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (entity IDs, states, etc.)
    """

    def __init__(self, message: str, details: dict | None = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation with context."""
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class ValidationException(MarketplaceException):
    """Raised when request data violates a business rule."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            reason,
            details={'field': field}
        )
        self.field = field
        self.reason = reason


class PermissionDeniedException(MarketplaceException):
    """Raised when the caller's role does not allow the operation."""

    def __init__(self, user_id: int | None, action: str):
        super().__init__(
            f"User {user_id} is not allowed to {action}",
            details={'user_id': user_id, 'action': action}
        )
        self.user_id = user_id
        self.action = action


class RateLimitExceededException(MarketplaceException):
    """Raised when a user exceeds the rate limit of an operation."""

    def __init__(self, operation: str, retry_after_seconds: int):
        super().__init__(
            f"Too many requests for {operation}. Try again in {max(1, retry_after_seconds // 60)} minute(s).",
            details={'operation': operation, 'retry_after_seconds': retry_after_seconds}
        )
        self.operation = operation
        self.retry_after_seconds = retry_after_seconds
