"""
Custom exceptions for the marketplace backend.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
MarketplaceException (base)
├── ValidationException
├── PermissionDeniedException
├── RateLimitExceededException
├── UserException
│   ├── UserNotFoundException
│   ├── UserAlreadyExistsException
│   ├── AuthenticationException
│   ├── AccountLockedException
│   ├── AccountNotVerifiedException
│   ├── InvalidOTPException
│   ├── WeakPasswordException
│   └── InvalidResetTokenException
├── SupplierException
│   ├── SupplierNotFoundException
│   ├── SupplierAlreadyRegisteredException
│   └── SupplierNotApprovedException
├── ProductException
│   ├── ProductNotFoundException
│   ├── ProductUnavailableException
│   ├── InsufficientStockException
│   ├── CategoryNotFoundException
│   ├── CategoryInUseException
│   ├── DuplicateCategoryException
│   ├── SectionNotFoundException
│   └── DuplicateSectionException
├── CartException
│   ├── EmptyCartException
│   ├── CartItemNotFoundException
│   ├── InvalidQuantityException
│   └── WishlistItemNotFoundException
├── AddressException
│   └── AddressNotFoundException
├── OrderException
│   ├── OrderNotFoundException
│   ├── EmptyOrderException
│   ├── InvalidOrderStateException
│   ├── InvalidOrderTransitionException
│   ├── OrderOwnershipException
│   ├── ProductNotInOrderException
│   ├── ProductSupplierMismatchException
│   ├── RefundNotAllowedException
│   └── EscrowReleaseException
├── PaymentException
│   ├── PaymentNotFoundException
│   ├── InvalidPaymentMethodException
│   ├── PaymentAlreadyProcessedException
│   ├── InvalidPaymentTransitionException
│   ├── InvalidPhoneNumberException
│   ├── PaymentGatewayException
│   └── InvalidCallbackSignatureException
├── DisputeException
│   ├── DisputeNotFoundException
│   ├── DisputeAlreadyOpenException
│   ├── DisputeNotAllowedException
│   └── InvalidDisputeTransitionException
├── ReviewException
│   ├── ReviewNotFoundException
│   ├── DuplicateReviewException
│   └── ReviewNotAllowedException
├── ReportException
│   ├── ReportNotFoundException
│   ├── SelfReportException
│   └── InvalidReportTransitionException
├── ChatException
│   ├── ChatNotAllowedException
│   └── EmptyMessageException
├── CouponException
│   ├── CouponNotFoundException
│   ├── DuplicateCouponException
│   └── CouponNotApplicableException
└── WalletException
    ├── WalletNotFoundException
    └── InsufficientBalanceException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

The FastAPI exception handler turns them into JSON responses:
    @app.exception_handler(MarketplaceException)
    async def marketplace_exception_handler(request, exc):
        status_code, message = handle_service_error(exc)
        ...
"""

from .base import MarketplaceException, ValidationException, PermissionDeniedException, RateLimitExceededException
from .user import (
    UserException,
    UserNotFoundException,
    UserAlreadyExistsException,
    AuthenticationException,
    AccountLockedException,
    AccountNotVerifiedException,
    InvalidOTPException,
    WeakPasswordException,
    InvalidResetTokenException
)
from .supplier import (
    SupplierException,
    SupplierNotFoundException,
    SupplierAlreadyRegisteredException,
    SupplierNotApprovedException
)
from .product import (
    ProductException,
    ProductNotFoundException,
    ProductUnavailableException,
    InsufficientStockException,
    CategoryNotFoundException,
    CategoryInUseException,
    DuplicateCategoryException,
    SectionNotFoundException,
    DuplicateSectionException
)
from .cart import (
    CartException,
    EmptyCartException,
    CartItemNotFoundException,
    InvalidQuantityException,
    WishlistItemNotFoundException
)
from .address import AddressException, AddressNotFoundException
from .order import (
    OrderException,
    OrderNotFoundException,
    EmptyOrderException,
    InvalidOrderStateException,
    InvalidOrderTransitionException,
    OrderOwnershipException,
    ProductNotInOrderException,
    ProductSupplierMismatchException,
    RefundNotAllowedException,
    EscrowReleaseException
)
from .payment import (
    PaymentException,
    PaymentNotFoundException,
    InvalidPaymentMethodException,
    PaymentAlreadyProcessedException,
    InvalidPaymentTransitionException,
    InvalidPhoneNumberException,
    PaymentGatewayException,
    InvalidCallbackSignatureException
)
from .dispute import (
    DisputeException,
    DisputeNotFoundException,
    DisputeAlreadyOpenException,
    DisputeNotAllowedException,
    InvalidDisputeTransitionException
)
from .review import ReviewException, ReviewNotFoundException, DuplicateReviewException, ReviewNotAllowedException
from .report import ReportException, ReportNotFoundException, SelfReportException, InvalidReportTransitionException
from .chat import ChatException, ChatNotAllowedException, EmptyMessageException
from .coupon import CouponException, CouponNotFoundException, DuplicateCouponException, CouponNotApplicableException
from .wallet import WalletException, WalletNotFoundException, InsufficientBalanceException

__all__ = [
    # Base
    'MarketplaceException',
    'ValidationException',
    'PermissionDeniedException',
    'RateLimitExceededException',

    # User
    'UserException',
    'UserNotFoundException',
    'UserAlreadyExistsException',
    'AuthenticationException',
    'AccountLockedException',
    'AccountNotVerifiedException',
    'InvalidOTPException',
    'WeakPasswordException',
    'InvalidResetTokenException',

    # Supplier
    'SupplierException',
    'SupplierNotFoundException',
    'SupplierAlreadyRegisteredException',
    'SupplierNotApprovedException',

    # Catalogue
    'ProductException',
    'ProductNotFoundException',
    'ProductUnavailableException',
    'InsufficientStockException',
    'CategoryNotFoundException',
    'CategoryInUseException',
    'DuplicateCategoryException',
    'SectionNotFoundException',
    'DuplicateSectionException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartItemNotFoundException',
    'InvalidQuantityException',
    'WishlistItemNotFoundException',

    # Address
    'AddressException',
    'AddressNotFoundException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'EmptyOrderException',
    'InvalidOrderStateException',
    'InvalidOrderTransitionException',
    'OrderOwnershipException',
    'ProductNotInOrderException',
    'ProductSupplierMismatchException',
    'RefundNotAllowedException',
    'EscrowReleaseException',

    # Payment
    'PaymentException',
    'PaymentNotFoundException',
    'InvalidPaymentMethodException',
    'PaymentAlreadyProcessedException',
    'InvalidPaymentTransitionException',
    'InvalidPhoneNumberException',
    'PaymentGatewayException',
    'InvalidCallbackSignatureException',

    # Dispute
    'DisputeException',
    'DisputeNotFoundException',
    'DisputeAlreadyOpenException',
    'DisputeNotAllowedException',
    'InvalidDisputeTransitionException',

    # Review
    'ReviewException',
    'ReviewNotFoundException',
    'DuplicateReviewException',
    'ReviewNotAllowedException',

    # Report
    'ReportException',
    'ReportNotFoundException',
    'SelfReportException',
    'InvalidReportTransitionException',

    # Chat
    'ChatException',
    'ChatNotAllowedException',
    'EmptyMessageException',

    # Coupon
    'CouponException',
    'CouponNotFoundException',
    'DuplicateCouponException',
    'CouponNotApplicableException',

    # Wallet
    'WalletException',
    'WalletNotFoundException',
    'InsufficientBalanceException',
]
