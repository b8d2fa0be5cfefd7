import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from enums.rate_limit_operation import RateLimitOperation
from models.payment import MpesaPaymentRequest, MpesaPaymentInitiatedDTO, PaymentStatusDTO, PaymentDTO
from models.user import UserDTO
from services.payment import PaymentService
from web.dependencies import generate_correlation_id, get_session, get_current_user, rate_limit

logger = logging.getLogger(__name__)

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/mpesa", dependencies=[Depends(rate_limit(RateLimitOperation.PAYMENT_INITIATE))])
async def initiate_mpesa_payment(payload: MpesaPaymentRequest,
                                 current_user: UserDTO = Depends(get_current_user),
                                 session: AsyncSession = Depends(get_session)) -> MpesaPaymentInitiatedDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] M-Pesa payment requested for order {payload.order_id} by user {current_user.id}")
    initiated = await PaymentService.initiate_mpesa(payload, current_user, session)
    logger.info(f"[{correlation_id}] ✅ STK push sent ({initiated.checkout_request_id})")
    return initiated


@payment_router.get("/mine")
async def my_payments(current_user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)) -> list[PaymentDTO]:
    return await PaymentService.get_my_payments(current_user, session)


@payment_router.get("/{order_id}/status", dependencies=[Depends(rate_limit(RateLimitOperation.PAYMENT_CHECK))])
async def payment_status(order_id: int,
                         current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> PaymentStatusDTO:
    return await PaymentService.get_status(order_id, current_user, session)
