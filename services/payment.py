import hashlib
import hmac
import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus, PaymentMethod, PaymentRecordMethod, PendingPaymentStatus
from enums.role import Role
from enums.wallet_transaction_type import WalletTransactionType
from exceptions.order import OrderOwnershipException, InvalidOrderStateException
from exceptions.payment import (
    InvalidPaymentMethodException,
    PaymentAlreadyProcessedException,
    InvalidCallbackSignatureException,
)
from models.order import Order
from models.payment import (
    MpesaPaymentRequest,
    MpesaPaymentInitiatedDTO,
    MpesaCallbackDTO,
    PaymentStatusDTO,
    PaymentDTO,
)
from models.pending_payment import PendingPayment
from models.user import UserDTO
from mpesa_api.MpesaApiWrapper import MpesaApiWrapper
from repositories.payment import PaymentRepository
from repositories.pending_payment import PendingPaymentRepository
from repositories.supplier import SupplierRepository
from services.notification import NotificationService
from services.order import OrderService
from services.wallet import WalletService
from utils.order_state_machine import OrderStateMachine, PaymentStateMachine, TransitionActor
from utils.phone import normalize_mpesa_phone

logger = logging.getLogger(__name__)

PAYMENT_TIMEOUT_REASON = "Payment timed out"


class PaymentService:

    @staticmethod
    async def initiate_mpesa(request: MpesaPaymentRequest, current_user: UserDTO,
                             session: AsyncSession) -> MpesaPaymentInitiatedDTO:
        """
        Send an STK push for the buyer's order and remember it as a pending payment.

        A previously failed payment is moved back to unpaid for the retry.
        """
        order = await OrderService.get_order_entity(request.order_id, session)
        if order.buyer_id != current_user.id:
            raise OrderOwnershipException(order.id, current_user.id)
        if order.payment_method != PaymentMethod.MPESA:
            raise InvalidPaymentMethodException(order.id, order.payment_method.value, PaymentMethod.MPESA.value)
        if order.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            raise InvalidOrderStateException(order.id, order.status.value, "not cancelled or refunded")
        if order.payment_status not in (PaymentStatus.UNPAID, PaymentStatus.FAILED):
            raise PaymentAlreadyProcessedException(order.id, order.payment_status.value)

        phone = normalize_mpesa_phone(request.phone)
        response = await MpesaApiWrapper.stk_push(
            phone=phone,
            amount=order.total_amount,
            account_reference=f"Order{order.id}",
            description=f"Payment for order {order.id}"
        )

        if order.payment_status == PaymentStatus.FAILED:
            PaymentStateMachine.ensure_transition(order.id, order.payment_status, PaymentStatus.UNPAID)
            order.payment_status = PaymentStatus.UNPAID

        await PendingPaymentRepository.create(PendingPayment(
            checkout_request_id=response.CheckoutRequestID,
            merchant_request_id=response.MerchantRequestID,
            order_id=order.id,
            phone_number=phone,
            amount=order.total_amount,
            status=PendingPaymentStatus.PENDING,
        ), session)
        await session_commit(session)

        logger.info(f"💳 M-Pesa payment initiated for order {order.id} by user {current_user.id} "
                    f"({order.total_amount:.2f} {config.CURRENCY.value})")
        return MpesaPaymentInitiatedDTO(
            order_id=order.id,
            checkout_request_id=response.CheckoutRequestID,
            merchant_request_id=response.MerchantRequestID,
            customer_message=response.CustomerMessage,
        )

    @staticmethod
    def verify_callback_signature(raw_body: bytes, signature: str | None) -> None:
        """
        HMAC-SHA256 (hex) of the raw callback body with MPESA_CALLBACK_SECRET.

        Skipped when no secret is configured.
        """
        secret = config.MPESA_CALLBACK_SECRET
        if not secret:
            return
        if signature is None:
            logger.warning("M-Pesa callback rejected: Missing X-Callback-Signature header")
            raise InvalidCallbackSignatureException()
        expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
        if not hmac.compare_digest(expected, signature.strip().lower()):
            logger.error("❌ M-Pesa callback security check failed - Invalid HMAC signature")
            raise InvalidCallbackSignatureException()

    @staticmethod
    async def mpesa_callback(callback: MpesaCallbackDTO, session: AsyncSession) -> str:
        """
        Apply an STK push result. Idempotent per checkout request id.

        Returns a short outcome tag used for logging and tests:
        ignored, completed, failed, credited.
        """
        result = callback.Body.stkCallback
        pending_payment = await PendingPaymentRepository.get_by_checkout_request_id(result.CheckoutRequestID, session)
        if pending_payment is None:
            logger.warning(f"M-Pesa callback for unknown CheckoutRequestID {result.CheckoutRequestID}, ignored")
            return "ignored"
        # A request we timed out can still be paid by the customer afterwards
        timed_out = (pending_payment.status == PendingPaymentStatus.FAILED
                     and pending_payment.failed_reason == PAYMENT_TIMEOUT_REASON)
        if pending_payment.status != PendingPaymentStatus.PENDING and not (timed_out and result.ResultCode == 0):
            logger.info(f"M-Pesa callback for {result.CheckoutRequestID} already {pending_payment.status.value}, ignored")
            return "ignored"
        if timed_out:
            logger.warning(f"⚠️ LATE PAYMENT: {result.CheckoutRequestID} confirmed after it timed out")
            pending_payment.failed_reason = None

        order = await OrderService.get_order_entity(pending_payment.order_id, session)
        logger.info(f"🔔 M-Pesa callback for order {order.id}: ResultCode={result.ResultCode} ({result.ResultDesc})")

        if result.ResultCode != 0:
            await PaymentService._fail(order, pending_payment, result.ResultDesc or "Payment was not completed", session)
            await session_commit(session)
            await NotificationService.payment_failed(order, pending_payment.failed_reason)
            return "failed"

        receipt = result.metadata_value("MpesaReceiptNumber") or result.CheckoutRequestID
        receipt = str(receipt)
        paid_amount = result.metadata_value("Amount")
        paid_amount = float(paid_amount) if paid_amount is not None else pending_payment.amount

        # Money arrived for an order that can no longer be paid
        if order.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED) or order.payment_status == PaymentStatus.PAID:
            pending_payment.status = PendingPaymentStatus.COMPLETED
            await WalletService.credit(order.buyer_id, paid_amount, WalletTransactionType.REFUND,
                                       f"M-Pesa payment {receipt} for closed order #{order.id}",
                                       receipt, session)
            await session_commit(session)
            logger.warning(f"⚠️ LATE/DUPLICATE PAYMENT: Order {order.id} is {order.status.value}/"
                           f"{order.payment_status.value}, {paid_amount:.2f} credited to buyer wallet")
            return "credited"

        # Whole shillings are charged, so compare against the rounded-up total
        if paid_amount + 1e-6 < int(-(-order.total_amount // 1)):
            await PaymentService._fail(order, pending_payment,
                                       f"Paid amount {paid_amount:.2f} is less than order total {order.total_amount:.2f}",
                                       session)
            await session_commit(session)
            await NotificationService.payment_failed(order, pending_payment.failed_reason)
            return "failed"

        pending_payment.status = PendingPaymentStatus.COMPLETED
        await OrderService.mark_paid(order, receipt, PaymentRecordMethod.MPESA, paid_amount, session)
        if order.status == OrderStatus.PENDING:
            OrderStateMachine.ensure_transition(order.id, order.status, OrderStatus.PROCESSING, TransitionActor.SYSTEM)
            order.status = OrderStatus.PROCESSING
        await session_commit(session)

        logger.info(f"✅ PAYMENT CONFIRMED: Order {order.id} paid via M-Pesa (receipt {receipt})")
        supplier = await SupplierRepository.get_by_id(order.supplier_id, session)
        await NotificationService.payment_confirmed(order, supplier.user_id if supplier else None)
        return "completed"

    @staticmethod
    async def _fail(order: Order, pending_payment: PendingPayment, reason: str, session: AsyncSession) -> None:
        pending_payment.status = PendingPaymentStatus.FAILED
        pending_payment.failed_reason = reason
        if order.payment_status == PaymentStatus.UNPAID:
            PaymentStateMachine.ensure_transition(order.id, order.payment_status, PaymentStatus.FAILED)
            order.payment_status = PaymentStatus.FAILED
        logger.warning(f"❌ PAYMENT FAILED: Order {order.id} ({pending_payment.checkout_request_id}): {reason}")

    @staticmethod
    async def expire_stale_pending_payments(session: AsyncSession, order_id: int | None = None) -> int:
        """Fail pending payments older than PAYMENT_TIMEOUT_MINUTES. Returns how many were failed."""
        created_before = datetime.now() - timedelta(minutes=config.PAYMENT_TIMEOUT_MINUTES)
        stale = await PendingPaymentRepository.get_stale(created_before, session, order_id=order_id)
        if not stale:
            return 0
        for pending_payment in stale:
            order = await OrderService.get_order_entity(pending_payment.order_id, session)
            await PaymentService._fail(order, pending_payment, PAYMENT_TIMEOUT_REASON, session)
        await session_commit(session)
        logger.info(f"⏰ {len(stale)} stale pending payment(s) failed")
        return len(stale)

    @staticmethod
    async def get_status(order_id: int, current_user: UserDTO, session: AsyncSession) -> PaymentStatusDTO:
        order = await OrderService.get_order_entity(order_id, session)
        if current_user.role != Role.ADMIN and order.buyer_id != current_user.id:
            raise OrderOwnershipException(order.id, current_user.id)

        await PaymentService.expire_stale_pending_payments(session, order_id=order.id)
        pending_payment = await PendingPaymentRepository.get_latest_by_order_id(order.id, session)
        return PaymentStatusDTO(
            order_id=order.id,
            order_status=order.status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method.value,
            transaction_id=order.transaction_id,
            paid_at=order.paid_at,
            pending_payment_status=pending_payment.status.value if pending_payment else None,
            failed_reason=pending_payment.failed_reason if pending_payment else None,
        )

    @staticmethod
    async def get_my_payments(current_user: UserDTO, session: AsyncSession) -> list[PaymentDTO]:
        return await PaymentRepository.get_by_user_id(current_user.id, session)
