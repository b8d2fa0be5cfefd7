"""
Order endpoints: creation and checkout, listing, status changes,
cancellation, refunds, escrow release, shipping estimates.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.order_status import OrderStatus
from enums.rate_limit_operation import RateLimitOperation
from enums.role import Role
from models.order import (
    OrderDTO,
    CheckoutRequest,
    OrderCreateRequest,
    OrderStatusUpdateRequest,
    OrderCancelRequest,
    RefundRequest,
    RefundDecisionRequest,
    ShippingEstimateRequest,
    ShippingEstimateDTO,
)
from models.user import UserDTO
from services.order import OrderService
from services.shipping import ShippingService
from utils.pagination import PageDTO
from web.dependencies import generate_correlation_id, get_session, get_current_user, require_roles, rate_limit

logger = logging.getLogger(__name__)

order_router = APIRouter(prefix="/orders", tags=["orders"])

admin_only = require_roles(Role.ADMIN)


@order_router.post("", status_code=status.HTTP_201_CREATED,
                   dependencies=[Depends(rate_limit(RateLimitOperation.ORDER_CREATE))])
async def create_order(payload: OrderCreateRequest,
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> OrderDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Creating order for user {current_user.id} with supplier {payload.supplier_id}")
    order = await OrderService.create_order(payload, current_user, session)
    logger.info(f"[{correlation_id}] ✅ Order {order.id} created ({order.total_amount:.2f})")
    return order


@order_router.post("/checkout", status_code=status.HTTP_201_CREATED,
                   dependencies=[Depends(rate_limit(RateLimitOperation.ORDER_CREATE))])
async def checkout(payload: CheckoutRequest,
                   current_user: UserDTO = Depends(get_current_user),
                   session: AsyncSession = Depends(get_session)) -> list[OrderDTO]:
    correlation_id = generate_correlation_id()
    orders = await OrderService.checkout(payload, current_user, session)
    logger.info(f"[{correlation_id}] ✅ Checkout of user {current_user.id} created orders "
                f"{', '.join(str(o.id) for o in orders)}")
    return orders


@order_router.post("/shipping-estimate",
                   dependencies=[Depends(rate_limit(RateLimitOperation.SHIPPING_ESTIMATE))])
async def shipping_estimate(payload: ShippingEstimateRequest) -> ShippingEstimateDTO:
    return ShippingService.estimate(payload.method, payload.distance_km, payload.subtotal)


@order_router.get("")
async def list_orders(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                      order_status: OrderStatus | None = Query(None, alias="status"),
                      as_buyer: bool = False,
                      current_user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await OrderService.get_orders(current_user, page, limit, order_status, as_buyer, session)


@order_router.get("/delivered")
async def delivered_orders(current_user: UserDTO = Depends(get_current_user),
                           session: AsyncSession = Depends(get_session)) -> list[OrderDTO]:
    return await OrderService.get_delivered_for_user(current_user, session)


@order_router.get("/{order_id}")
async def get_order(order_id: int,
                    current_user: UserDTO = Depends(get_current_user),
                    session: AsyncSession = Depends(get_session)) -> OrderDTO:
    return await OrderService.get_order(order_id, current_user, session)


@order_router.get("/{order_id}/next-statuses")
async def next_statuses(order_id: int,
                        current_user: UserDTO = Depends(get_current_user),
                        session: AsyncSession = Depends(get_session)) -> list[str]:
    return await OrderService.get_next_statuses(order_id, current_user, session)


@order_router.patch("/{order_id}/status")
async def update_order_status(order_id: int, payload: OrderStatusUpdateRequest,
                              current_user: UserDTO = Depends(get_current_user),
                              session: AsyncSession = Depends(get_session)) -> OrderDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] User {current_user.id} moves order {order_id} to {payload.status.value}")
    return await OrderService.update_status(order_id, payload.status, current_user, session)


@order_router.post("/{order_id}/cancel")
async def cancel_order(order_id: int, payload: OrderCancelRequest,
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> OrderDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] User {current_user.id} cancels order {order_id}")
    return await OrderService.cancel_order(order_id, payload.reason, current_user, session)


@order_router.post("/{order_id}/refund",
                   dependencies=[Depends(rate_limit(RateLimitOperation.REFUND_REQUEST))])
async def request_refund(order_id: int, payload: RefundRequest,
                         current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> OrderDTO:
    return await OrderService.request_refund(order_id, payload.reason, current_user, session)


@order_router.patch("/{order_id}/refund")
async def process_refund(order_id: int, payload: RefundDecisionRequest,
                         current_user: UserDTO = Depends(admin_only),
                         session: AsyncSession = Depends(get_session)) -> OrderDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Admin {current_user.id} {'approves' if payload.approve else 'rejects'} "
                f"refund of order {order_id}")
    return await OrderService.process_refund(order_id, payload, current_user, session)


@order_router.post("/{order_id}/release-escrow")
async def release_escrow(order_id: int,
                         current_user: UserDTO = Depends(admin_only),
                         session: AsyncSession = Depends(get_session)) -> OrderDTO:
    return await OrderService.release_escrow(order_id, current_user.id, session)


@order_router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: int,
                       current_user: UserDTO = Depends(admin_only),
                       session: AsyncSession = Depends(get_session)) -> None:
    await OrderService.delete_order(order_id, current_user, session)
