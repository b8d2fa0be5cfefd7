import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError

import config
from db import get_db_session
from exceptions.base import ValidationException
from models.payment import MpesaCallbackDTO
from services.payment import PaymentService

processing_router = APIRouter(prefix=f"{config.API_PREFIX}/payments/mpesa")


@processing_router.post("/callback")
async def mpesa_callback(request: Request):
    """
    Result webhook of the M-Pesa STK push.

    The raw body is verified against X-Callback-Signature (HMAC-SHA256) before
    it is parsed. Safaricom only needs an acknowledgement, so every processed
    callback is answered with ResultCode 0, whatever happened to the payment.
    """
    request_body = await request.body()

    logging.debug("=" * 80)
    logging.debug("🔔 M-PESA CALLBACK RECEIVED")
    logging.debug(f"Raw Body: {request_body.decode('utf-8', errors='replace')}")
    logging.debug("=" * 80)

    PaymentService.verify_callback_signature(request_body, request.headers.get("X-Callback-Signature"))

    try:
        callback = MpesaCallbackDTO.model_validate_json(request_body)
    except ValidationError as e:
        logging.error(f"❌ Malformed M-Pesa callback: {e.error_count()} validation error(s)")
        raise ValidationException("body", "Malformed M-Pesa callback")

    async with get_db_session() as session:
        outcome = await PaymentService.mpesa_callback(callback, session)

    logging.info(f"M-Pesa callback {callback.Body.stkCallback.CheckoutRequestID} processed: {outcome}")
    return {"ResultCode": 0, "ResultDesc": "Accepted"}
