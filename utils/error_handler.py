"""
Error Handler Utility for API routers

Provides centralized error handling with:
- Automatic exception to HTTP status mapping
- Consistent JSON error bodies
- Logging for debugging

Usage (registered once in app.py):
    @app.exception_handler(MarketplaceException)
    async def marketplace_exception_handler(request, exc):
        return error_response(exc)
"""

import logging

from fastapi.responses import JSONResponse

from exceptions import (
    MarketplaceException,
    ValidationException,
    PermissionDeniedException,
    RateLimitExceededException,
    UserNotFoundException,
    UserAlreadyExistsException,
    AuthenticationException,
    AccountLockedException,
    AccountNotVerifiedException,
    InvalidOTPException,
    WeakPasswordException,
    InvalidResetTokenException,
    SupplierNotFoundException,
    SupplierAlreadyRegisteredException,
    SupplierNotApprovedException,
    ProductNotFoundException,
    ProductUnavailableException,
    InsufficientStockException,
    CategoryNotFoundException,
    CategoryInUseException,
    DuplicateCategoryException,
    SectionNotFoundException,
    DuplicateSectionException,
    EmptyCartException,
    CartItemNotFoundException,
    InvalidQuantityException,
    WishlistItemNotFoundException,
    AddressNotFoundException,
    OrderNotFoundException,
    EmptyOrderException,
    InvalidOrderStateException,
    InvalidOrderTransitionException,
    OrderOwnershipException,
    ProductNotInOrderException,
    ProductSupplierMismatchException,
    RefundNotAllowedException,
    EscrowReleaseException,
    PaymentNotFoundException,
    InvalidPaymentMethodException,
    PaymentAlreadyProcessedException,
    InvalidPaymentTransitionException,
    InvalidPhoneNumberException,
    PaymentGatewayException,
    InvalidCallbackSignatureException,
    DisputeNotFoundException,
    DisputeAlreadyOpenException,
    DisputeNotAllowedException,
    InvalidDisputeTransitionException,
    ReviewNotFoundException,
    DuplicateReviewException,
    ReviewNotAllowedException,
    ReportNotFoundException,
    SelfReportException,
    InvalidReportTransitionException,
    ChatNotAllowedException,
    EmptyMessageException,
    CouponNotFoundException,
    DuplicateCouponException,
    CouponNotApplicableException,
    WalletNotFoundException,
    InsufficientBalanceException,
)

logger = logging.getLogger(__name__)

# Map exception types to HTTP status codes
ERROR_STATUS_MAPPING: dict[type, int] = {
    # Generic
    ValidationException: 400,
    PermissionDeniedException: 403,
    RateLimitExceededException: 429,

    # Auth / users
    UserNotFoundException: 404,
    UserAlreadyExistsException: 409,
    AuthenticationException: 401,
    AccountLockedException: 423,
    AccountNotVerifiedException: 403,
    InvalidOTPException: 400,
    WeakPasswordException: 400,
    InvalidResetTokenException: 400,

    # Suppliers
    SupplierNotFoundException: 404,
    SupplierAlreadyRegisteredException: 409,
    SupplierNotApprovedException: 403,

    # Catalogue
    ProductNotFoundException: 404,
    ProductUnavailableException: 400,
    InsufficientStockException: 409,
    CategoryNotFoundException: 404,
    CategoryInUseException: 409,
    DuplicateCategoryException: 409,
    SectionNotFoundException: 404,
    DuplicateSectionException: 409,

    # Cart / wishlist / addresses
    EmptyCartException: 400,
    CartItemNotFoundException: 404,
    InvalidQuantityException: 400,
    WishlistItemNotFoundException: 404,
    AddressNotFoundException: 404,

    # Orders
    OrderNotFoundException: 404,
    EmptyOrderException: 400,
    InvalidOrderStateException: 409,
    InvalidOrderTransitionException: 409,
    OrderOwnershipException: 403,
    ProductNotInOrderException: 400,
    ProductSupplierMismatchException: 400,
    RefundNotAllowedException: 409,
    EscrowReleaseException: 409,

    # Payments
    PaymentNotFoundException: 404,
    InvalidPaymentMethodException: 400,
    PaymentAlreadyProcessedException: 409,
    InvalidPaymentTransitionException: 409,
    InvalidPhoneNumberException: 400,
    PaymentGatewayException: 502,
    InvalidCallbackSignatureException: 401,

    # Disputes
    DisputeNotFoundException: 404,
    DisputeAlreadyOpenException: 409,
    DisputeNotAllowedException: 409,
    InvalidDisputeTransitionException: 409,

    # Reviews
    ReviewNotFoundException: 404,
    DuplicateReviewException: 409,
    ReviewNotAllowedException: 409,

    # Reports
    ReportNotFoundException: 404,
    SelfReportException: 400,
    InvalidReportTransitionException: 409,

    # Chat
    ChatNotAllowedException: 403,
    EmptyMessageException: 400,

    # Coupons
    CouponNotFoundException: 404,
    DuplicateCouponException: 409,
    CouponNotApplicableException: 400,

    # Wallet
    WalletNotFoundException: 404,
    InsufficientBalanceException: 400,
}


def handle_service_error(exception: MarketplaceException) -> tuple[int, str]:
    """
    Convert service exception to an HTTP status code and message.

    Args:
        exception: The custom exception raised by a service

    Returns:
        (status_code, message)
    """
    logger.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    status_code = ERROR_STATUS_MAPPING.get(type(exception))
    if status_code is None:
        # Subclass of a mapped type or a bare domain base class
        for exc_type, code in ERROR_STATUS_MAPPING.items():
            if isinstance(exception, exc_type):
                status_code = code
                break
        else:
            logger.error(f"Unmapped exception type: {type(exception).__name__}")
            status_code = 400

    return status_code, exception.message


def error_response(exception: MarketplaceException) -> JSONResponse:
    """Build the JSON error body returned for domain exceptions."""
    status_code, message = handle_service_error(exception)
    headers = None
    if isinstance(exception, RateLimitExceededException):
        headers = {"Retry-After": str(exception.retry_after_seconds)}
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "details": exception.details},
        headers=headers,
    )


def handle_unexpected_error(exception: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions (non-MarketplaceException).

    Logs the full traceback, never leaks it to the client.
    """
    logger.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=exception)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "details": {}},
    )
