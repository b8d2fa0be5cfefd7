import logging

import config
from enums.runtime_environment import RuntimeEnvironment
from models.dispute import Dispute
from models.order import Order
from services.realtime import get_realtime_hub


class NotificationService:
    """
    Pushes `notification` events to users through the realtime hub.

    Notifications are fire-and-forget: a user who is offline just doesn't get
    the push, the state is always readable through the REST API.
    """

    @staticmethod
    async def send_to_user(user_id: int, title: str, message: str, data: dict | None = None):
        hub = get_realtime_hub()
        if hub is None:
            logging.debug(f"Realtime hub not running, notification for user {user_id} skipped: {title}")
            return
        try:
            await hub.publish(user_id, "notification", {"title": title, "message": message, "data": data or {}})
        except Exception as e:
            logging.error(e)

    @staticmethod
    async def order_created(order: Order, supplier_user_id: int):
        await NotificationService.send_to_user(
            supplier_user_id,
            "New order",
            f"You received order #{order.id} ({order.total_amount:.2f} {config.CURRENCY.value})",
            {"order_id": order.id}
        )

    @staticmethod
    async def order_status_changed(order: Order):
        await NotificationService.send_to_user(
            order.buyer_id,
            "Order update",
            f"Your order #{order.id} is now {order.status.value}",
            {"order_id": order.id, "status": order.status.value}
        )

    @staticmethod
    async def payment_confirmed(order: Order, supplier_user_id: int | None):
        await NotificationService.send_to_user(
            order.buyer_id,
            "Payment received",
            f"Payment for order #{order.id} confirmed (receipt {order.transaction_id})",
            {"order_id": order.id, "payment_status": order.payment_status.value}
        )
        if supplier_user_id is not None:
            await NotificationService.send_to_user(
                supplier_user_id,
                "Order paid",
                f"Order #{order.id} has been paid and can be processed",
                {"order_id": order.id}
            )

    @staticmethod
    async def payment_failed(order: Order, reason: str | None):
        await NotificationService.send_to_user(
            order.buyer_id,
            "Payment failed",
            f"Payment for order #{order.id} failed: {reason or 'unknown reason'}",
            {"order_id": order.id, "payment_status": order.payment_status.value}
        )

    @staticmethod
    async def refund_decided(order: Order):
        await NotificationService.send_to_user(
            order.buyer_id,
            "Refund update",
            f"Your refund request for order #{order.id} was {order.refund_status.value.lower()}",
            {"order_id": order.id, "refund_status": order.refund_status.value}
        )

    @staticmethod
    async def escrow_released(order: Order, supplier_user_id: int):
        await NotificationService.send_to_user(
            supplier_user_id,
            "Payout released",
            f"{order.total_escrow_held:.2f} {config.CURRENCY.value} for order #{order.id} was added to your wallet",
            {"order_id": order.id}
        )

    @staticmethod
    async def dispute_updated(dispute: Dispute, supplier_user_id: int | None):
        recipients = [dispute.user_id]
        if supplier_user_id is not None:
            recipients.append(supplier_user_id)
        for user_id in recipients:
            await NotificationService.send_to_user(
                user_id,
                "Dispute update",
                f"Dispute #{dispute.id} for order #{dispute.order_id} is now {dispute.status.value}",
                {"dispute_id": dispute.id, "order_id": dispute.order_id, "status": dispute.status.value}
            )

    @staticmethod
    async def send_otp(email: str, otp: str):
        # E-mail delivery is out of scope; the code is only visible in DEV logs
        if config.RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
            logging.info(f"📧 Verification code for {email}: {otp}")
        else:
            logging.info("📧 Verification code issued")

    @staticmethod
    async def send_password_reset(email: str, token: str):
        if config.RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
            logging.info(f"📧 Password reset token for {email}: {token}")
        else:
            logging.info("📧 Password reset token issued")
