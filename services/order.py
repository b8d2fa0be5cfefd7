from datetime import datetime
import logging

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit, session_flush
from enums.escrow_status import EscrowStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus, PaymentMethod, PaymentRecordMethod, PaymentRecordStatus
from enums.product_status import ProductStatus, ProductVisibility
from enums.refund_status import RefundStatus
from enums.role import Role
from enums.supplier_status import SupplierStatus
from enums.wallet_transaction_type import WalletTransactionType
from exceptions.base import ValidationException
from exceptions.cart import EmptyCartException, InvalidQuantityException
from exceptions.order import (
    OrderNotFoundException,
    EmptyOrderException,
    InvalidOrderStateException,
    OrderOwnershipException,
    ProductSupplierMismatchException,
    RefundNotAllowedException,
    EscrowReleaseException,
)
from exceptions.product import ProductNotFoundException, ProductUnavailableException, InsufficientStockException
from exceptions.supplier import SupplierNotFoundException, SupplierNotApprovedException
from models.order import (
    Order,
    OrderDTO,
    OrderCreateRequest,
    CheckoutRequest,
    OrderItemRequest,
    RefundDecisionRequest,
)
from models.orderItem import OrderItem
from models.payment import Payment
from models.user import UserDTO
from repositories.cart import CartRepository
from repositories.dispute import DisputeRepository
from repositories.order import OrderRepository
from repositories.payment import PaymentRepository
from repositories.product import ProductRepository
from repositories.supplier import SupplierRepository
from services.coupon import CouponService, OffersService
from services.notification import NotificationService
from services.shipping import ShippingService
from services.wallet import WalletService
from utils.order_state_machine import OrderStateMachine, PaymentStateMachine, TransitionActor
from utils.pagination import build_page, PageDTO


class OrderService:

    # === Access ===

    @staticmethod
    async def resolve_actor(order: Order, current_user: UserDTO, session: AsyncSession) -> TransitionActor:
        """
        Role in which the user acts on this order.

        Raises:
            OrderOwnershipException: user is neither admin, buyer nor the order's supplier
        """
        if current_user.role == Role.ADMIN:
            return TransitionActor.ADMIN
        if current_user.role == Role.SUPPLIER:
            supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
            if supplier is not None and supplier.id == order.supplier_id:
                return TransitionActor.SUPPLIER
        if order.buyer_id == current_user.id:
            return TransitionActor.BUYER
        raise OrderOwnershipException(order.id, current_user.id)

    @staticmethod
    async def get_order_entity(order_id: int, session: AsyncSession) -> Order:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    # === Creation ===

    @staticmethod
    async def _build_order(buyer_id: int,
                           supplier_id: int,
                           items: list[OrderItemRequest],
                           checkout: CheckoutRequest,
                           session: AsyncSession) -> tuple[Order, bool]:
        """
        Validate items, snapshot prices, decrement stock and build the (unflushed) order.
        Coupon is applied by the caller.
        """
        if not items:
            raise EmptyOrderException()

        supplier = await SupplierRepository.get_by_id(supplier_id, session)
        if supplier is None:
            raise SupplierNotFoundException(supplier_id=supplier_id)
        if supplier.status != SupplierStatus.APPROVED:
            raise SupplierNotApprovedException(supplier.id, supplier.status.value)

        # Merge duplicate lines of the same product
        quantities: dict[int, int] = {}
        for item in items:
            if item.quantity <= 0:
                raise InvalidQuantityException(item.quantity)
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        products = await ProductRepository.get_by_ids(list(quantities.keys()), session)
        now = datetime.now()
        commission_percentage = config.COMMISSION_PERCENTAGE
        order_items = []
        subtotal = 0.0
        total_commission = 0.0
        total_escrow = 0.0

        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                raise ProductNotFoundException(product_id)
            if product.status != ProductStatus.ACTIVE or product.visibility != ProductVisibility.PUBLIC:
                raise ProductUnavailableException(product_id, product.status.value)
            if product.supplier_id != supplier.id:
                raise ProductSupplierMismatchException(product_id, supplier.id)
            if product.stock is not None:
                if product.stock < quantity:
                    raise InsufficientStockException(product_id, quantity, product.stock)
                product.stock -= quantity

            unit_price = product.price_at(now)
            line_total = round(unit_price * quantity, 2)
            commission = round(line_total * commission_percentage / 100, 2)
            escrow_amount = round(line_total - commission, 2)

            order_items.append(OrderItem(
                product_id=product_id,
                seller_id=supplier.user_id,
                quantity=quantity,
                price=unit_price,
                commission_percentage=commission_percentage,
                escrow_amount=escrow_amount,
                escrow_status=EscrowStatus.HELD,
            ))
            subtotal += line_total
            total_commission += commission
            total_escrow += escrow_amount

        all_free_shipping = all(products[pid].free_shipping for pid in quantities)

        return Order(
            buyer_id=buyer_id,
            supplier_id=supplier.id,
            status=OrderStatus.PENDING,
            subtotal=round(subtotal, 2),
            discount_amount=0.0,
            shipping_method=checkout.shipping_method,
            shipping_cost=0.0,
            total_amount=round(subtotal, 2),
            total_commission=round(total_commission, 2),
            total_escrow_held=round(total_escrow, 2),
            delivery_address=checkout.delivery_address,
            delivery_city=checkout.delivery_city,
            delivery_phone=checkout.delivery_phone,
            delivery_provider=checkout.delivery_provider,
            payment_method=checkout.payment_method,
            payment_status=PaymentStatus.UNPAID,
            escrow_status=EscrowStatus.HELD,
            items=order_items,
        ), all_free_shipping

    @staticmethod
    async def _finalize_totals(order: Order, all_free_shipping: bool, checkout: CheckoutRequest,
                               coupon_code: str | None, session: AsyncSession) -> None:
        if coupon_code:
            application = await CouponService.redeem(coupon_code, order.subtotal, session)
            order.discount_amount = application.discount
            order.coupon_code = application.code
        discounted = round(order.subtotal - order.discount_amount, 2)
        estimate = ShippingService.estimate(checkout.shipping_method, checkout.distance_km, discounted,
                                           free_shipping_products=all_free_shipping)
        order.shipping_cost = estimate.cost
        order.total_amount = round(discounted + estimate.cost, 2)

    @staticmethod
    async def create_order(request: OrderCreateRequest, current_user: UserDTO, session: AsyncSession) -> OrderDTO:
        """
        Create a single order for one supplier.

        Stock is decremented and the coupon (if any) consumed in the same transaction.
        """
        order, all_free_shipping = await OrderService._build_order(
            current_user.id, request.supplier_id, request.items, request, session)
        await OrderService._finalize_totals(order, all_free_shipping, request, request.coupon_code, session)
        order = await OrderRepository.create(order, session)
        await session_commit(session)

        logging.info(f"✅ Order {order.id} created by user {current_user.id} for supplier {order.supplier_id} "
                     f"(Total: {order.total_amount:.2f} {config.CURRENCY.value}, Payment: {order.payment_method.value})")
        supplier = await SupplierRepository.get_by_id(order.supplier_id, session)
        await NotificationService.order_created(order, supplier.user_id)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def checkout(request: CheckoutRequest, current_user: UserDTO, session: AsyncSession) -> list[OrderDTO]:
        """
        Turn the cart into one order per supplier and clear it.

        A coupon is applied to the supplier order with the largest subtotal.
        """
        cart = await CartRepository.get_or_create(current_user.id, session)
        cart_items = await CartRepository.get_items(cart.id, session)
        if not cart_items:
            raise EmptyCartException(current_user.id)

        products = await ProductRepository.get_by_ids([i.product_id for i in cart_items], session)
        items_by_supplier: dict[int, list[OrderItemRequest]] = {}
        for cart_item in cart_items:
            product = products.get(cart_item.product_id)
            if product is None:
                raise ProductNotFoundException(cart_item.product_id)
            items_by_supplier.setdefault(product.supplier_id, []).append(
                OrderItemRequest(product_id=cart_item.product_id, quantity=cart_item.quantity))

        built = []
        for supplier_id, items in items_by_supplier.items():
            built.append(await OrderService._build_order(current_user.id, supplier_id, items, request, session))

        coupon_target = max(built, key=lambda b: b[0].subtotal)[0] if request.coupon_code else None
        orders = []
        for order, all_free_shipping in built:
            coupon_code = request.coupon_code if order is coupon_target else None
            await OrderService._finalize_totals(order, all_free_shipping, request, coupon_code, session)
            orders.append(await OrderRepository.create(order, session))

        await CartRepository.clear(cart.id, session)
        await session_commit(session)

        logging.info(f"🛒 Checkout by user {current_user.id}: {len(orders)} order(s) "
                     f"{[o.id for o in orders]} created, cart cleared")
        for order in orders:
            supplier = await SupplierRepository.get_by_id(order.supplier_id, session)
            await NotificationService.order_created(order, supplier.user_id)
        return [OrderDTO.model_validate(o, from_attributes=True) for o in orders]

    # === Queries ===

    @staticmethod
    async def get_orders(current_user: UserDTO, page: int, limit: int, status: OrderStatus | None,
                         as_buyer: bool, session: AsyncSession) -> PageDTO:
        """Admin sees all, supplier sees orders placed with its shop, buyer sees own."""
        filters = {"status": status}
        if current_user.role == Role.ADMIN and not as_buyer:
            pass
        elif current_user.role == Role.SUPPLIER and not as_buyer:
            supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
            if supplier is None:
                raise SupplierNotFoundException(user_id=current_user.id)
            filters["supplier_id"] = supplier.id
        else:
            filters["buyer_id"] = current_user.id
        orders = await OrderRepository.get_paginated(page, limit, session, **filters)
        count = await OrderRepository.count(session, **filters)
        return build_page(orders, page, limit, count)

    @staticmethod
    async def get_order(order_id: int, current_user: UserDTO, session: AsyncSession) -> OrderDTO:
        order = await OrderService.get_order_entity(order_id, session)
        await OrderService.resolve_actor(order, current_user, session)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_next_statuses(order_id: int, current_user: UserDTO, session: AsyncSession) -> list[str]:
        order = await OrderService.get_order_entity(order_id, session)
        actor = await OrderService.resolve_actor(order, current_user, session)
        if OrderStateMachine.is_final_status(order.status):
            return []
        return OrderStateMachine.get_valid_transitions(order.status, actor)

    @staticmethod
    async def get_delivered_for_user(current_user: UserDTO, session: AsyncSession) -> list[OrderDTO]:
        return await OrderRepository.get_delivered_for_buyer(current_user.id, session)

    # === Status changes ===

    @staticmethod
    async def mark_paid(order: Order, transaction_id: str, method: PaymentRecordMethod,
                        amount: float, session: AsyncSession) -> None:
        """
        Record a settled payment on the order. Caller commits.

        Moves payment status to paid, writes the payment record once per
        transaction id and awards reward points.
        """
        PaymentStateMachine.ensure_transition(order.id, order.payment_status, PaymentStatus.PAID)
        order.payment_status = PaymentStatus.PAID
        order.transaction_id = transaction_id
        order.paid_at = datetime.now()
        if await PaymentRepository.get_by_transaction_id(transaction_id, session) is None:
            await PaymentRepository.create(Payment(
                order_id=order.id,
                user_id=order.buyer_id,
                method=method,
                amount=amount,
                status=PaymentRecordStatus.COMPLETED,
                transaction_id=transaction_id,
            ), session)
        await OffersService.award_points(order.buyer_id, order.total_amount, session)

    @staticmethod
    async def _refund_paid_order(order: Order, description: str, session: AsyncSession) -> None:
        """Credit the buyer's wallet and mark payment, payment records and escrow refunded. Caller commits."""
        PaymentStateMachine.ensure_transition(order.id, order.payment_status, PaymentStatus.REFUNDED)
        await WalletService.credit(order.buyer_id, order.total_amount, WalletTransactionType.REFUND,
                                   description, f"order:{order.id}", session)
        order.payment_status = PaymentStatus.REFUNDED
        order.refunded_at = datetime.now()
        for payment in await PaymentRepository.get_by_order_id(order.id, session):
            payment.status = PaymentRecordStatus.REFUNDED
        await OffersService.revoke_points(order.buyer_id, order.total_amount, session)

    @staticmethod
    def _refund_escrow(order: Order) -> None:
        order.escrow_status = EscrowStatus.REFUNDED
        for item in order.items:
            item.escrow_status = EscrowStatus.REFUNDED

    @staticmethod
    async def update_status(order_id: int, new_status: OrderStatus, current_user: UserDTO,
                            session: AsyncSession) -> OrderDTO:
        """
        Supplier of the order or admin moves the order forward.

        Cancellation goes through cancel_order, refunds through process_refund.
        """
        if new_status == OrderStatus.CANCELLED:
            return await OrderService.cancel_order(order_id, None, current_user, session)
        if new_status == OrderStatus.REFUNDED:
            raise ValidationException("status", "Orders are refunded through refund processing")

        order = await OrderService.get_order_entity(order_id, session)
        actor = await OrderService.resolve_actor(order, current_user, session)
        OrderStateMachine.ensure_transition(order.id, order.status, new_status, actor, current_user.id)

        now = datetime.now()
        order.status = new_status
        match new_status:
            case OrderStatus.SHIPPED:
                order.shipped_at = now
            case OrderStatus.DELIVERED:
                order.delivered_at = now
                if order.payment_method == PaymentMethod.COD and order.payment_status != PaymentStatus.PAID:
                    await OrderService.mark_paid(order, f"COD-{order.id}", PaymentRecordMethod.CASH_ON_DELIVERY,
                                                 order.total_amount, session)
                    logging.info(f"💵 Order {order.id} cash on delivery collected")
        await session_commit(session)

        await NotificationService.order_status_changed(order)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def cancel_order(order_id: int, reason: str | None, current_user: UserDTO,
                           session: AsyncSession) -> OrderDTO:
        """
        Cancel an order.

        Buyers cancel only unpaid pending orders. Stock is restored and escrow
        marked refunded. When an admin cancels a paid order the buyer's wallet
        is refunded in the same transaction.
        """
        order = await OrderService.get_order_entity(order_id, session)
        actor = await OrderService.resolve_actor(order, current_user, session)

        logging.info(f"🔄 CANCEL ORDER START: Order {order_id} by {actor.value} {current_user.id}, "
                     f"Status={order.status.value}, Payment={order.payment_status.value}")

        if actor == TransitionActor.BUYER and order.payment_status == PaymentStatus.PAID:
            raise InvalidOrderStateException(order.id, f"{order.status.value}/paid", "unpaid")
        OrderStateMachine.ensure_transition(order.id, order.status, OrderStatus.CANCELLED, actor, current_user.id)

        products = await ProductRepository.get_by_ids([item.product_id for item in order.items], session)
        for item in order.items:
            product = products.get(item.product_id)
            if product is not None and product.stock is not None:
                product.stock += item.quantity

        if order.payment_status == PaymentStatus.PAID:
            await OrderService._refund_paid_order(order, f"Refund for cancelled order #{order.id}", session)
            logging.info(f"💰 Order {order.id} was paid, {order.total_amount:.2f} refunded to buyer wallet")

        OrderService._refund_escrow(order)
        order.status = OrderStatus.CANCELLED
        order.cancelled_at = datetime.now()
        order.cancellation_reason = reason
        await session_commit(session)

        logging.info(f"✅ Order {order.id} cancelled")
        await NotificationService.order_status_changed(order)
        return OrderDTO.model_validate(order, from_attributes=True)

    # === Refunds ===

    @staticmethod
    async def request_refund(order_id: int, reason: str, current_user: UserDTO, session: AsyncSession) -> OrderDTO:
        order = await OrderService.get_order_entity(order_id, session)
        if order.buyer_id != current_user.id:
            raise OrderOwnershipException(order.id, current_user.id)
        if order.payment_status != PaymentStatus.PAID:
            raise RefundNotAllowedException(order.id, "order is not paid")
        if order.status not in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            raise RefundNotAllowedException(order.id, f"order is {order.status.value}")
        if order.refund_status in (RefundStatus.PENDING, RefundStatus.APPROVED):
            raise RefundNotAllowedException(order.id, f"refund already {order.refund_status.value.lower()}")
        if order.escrow_status == EscrowStatus.RELEASED:
            raise RefundNotAllowedException(order.id, "escrow already released to the supplier")

        order.refund_status = RefundStatus.PENDING
        order.refund_reason = reason
        order.refund_requested_at = datetime.now()
        order.refund_processed_at = None
        order.refund_processed_by = None
        await session_commit(session)

        logging.info(f"↩️ Refund requested for order {order.id} by user {current_user.id}")
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def process_refund(order_id: int, decision: RefundDecisionRequest, current_user: UserDTO,
                             session: AsyncSession) -> OrderDTO:
        """
        Admin decision on a pending refund request.

        Approval moves the order to Refunded, marks payment and escrow refunded
        and credits the buyer's wallet, all in one transaction.
        """
        order = await OrderService.get_order_entity(order_id, session)
        if order.refund_status != RefundStatus.PENDING:
            raise RefundNotAllowedException(order.id, "no pending refund request")

        now = datetime.now()
        if decision.approve:
            if order.escrow_status == EscrowStatus.RELEASED:
                raise RefundNotAllowedException(order.id, "escrow already released to the supplier")
            OrderStateMachine.ensure_transition(order.id, order.status, OrderStatus.REFUNDED,
                                                TransitionActor.ADMIN, current_user.id)
            await OrderService._refund_paid_order(order, f"Refund for order #{order.id}", session)
            OrderService._refund_escrow(order)
            order.status = OrderStatus.REFUNDED
            order.refund_status = RefundStatus.APPROVED
        else:
            order.refund_status = RefundStatus.REJECTED
        order.refund_processed_at = now
        order.refund_processed_by = current_user.id
        await session_commit(session)

        logging.info(f"{'✅' if decision.approve else '❌'} Refund for order {order.id} "
                     f"{order.refund_status.value} by admin {current_user.id}")
        await NotificationService.refund_decided(order)
        return OrderDTO.model_validate(order, from_attributes=True)

    # === Escrow ===

    @staticmethod
    async def release_escrow(order_id: int, admin_id: int | None, session: AsyncSession,
                             commit: bool = True) -> OrderDTO:
        """
        Pay the supplier's share (total escrow held) into the supplier's wallet.

        admin_id None means automatic release by the background job.
        """
        order = await OrderService.get_order_entity(order_id, session)
        if order.status != OrderStatus.DELIVERED:
            raise EscrowReleaseException(order.id, f"order is {order.status.value}, must be Delivered")
        if order.payment_status != PaymentStatus.PAID:
            raise EscrowReleaseException(order.id, "order is not paid")
        if order.escrow_status != EscrowStatus.HELD:
            raise EscrowReleaseException(order.id, f"escrow already {order.escrow_status.value.lower()}")
        if order.refund_status == RefundStatus.PENDING:
            raise EscrowReleaseException(order.id, "a refund request is pending")
        if await DisputeRepository.get_open_by_order_id(order.id, session) is not None:
            raise EscrowReleaseException(order.id, "the order has an open dispute")

        supplier = await SupplierRepository.get_by_id(order.supplier_id, session)
        if supplier is None:
            raise SupplierNotFoundException(supplier_id=order.supplier_id)

        if order.total_escrow_held > 0:
            await WalletService.credit(supplier.user_id, order.total_escrow_held, WalletTransactionType.PAYOUT,
                                       f"Payout for order #{order.id}", f"order:{order.id}", session)
        order.escrow_status = EscrowStatus.RELEASED
        order.released_at = datetime.now()
        order.released_by = admin_id
        for item in order.items:
            item.escrow_status = EscrowStatus.RELEASED

        if commit:
            await session_commit(session)
        else:
            await session_flush(session)

        performer = f"admin {admin_id}" if admin_id is not None else "system"
        logging.info(f"🔓 ESCROW_RELEASED: Order {order.id} {order.total_escrow_held:.2f} to supplier "
                     f"{supplier.id} by {performer}")
        await NotificationService.escrow_released(order, supplier.user_id)
        return OrderDTO.model_validate(order, from_attributes=True)

    # === Admin ===

    @staticmethod
    async def delete_order(order_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        await OrderService.get_order_entity(order_id, session)
        await OrderRepository.delete(order_id, session)
        await session_commit(session)
        logging.info(f"🗑️ Order {order_id} deleted by admin {current_user.id}")
