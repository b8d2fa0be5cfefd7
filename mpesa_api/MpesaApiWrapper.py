import base64
import logging
from datetime import datetime

import aiohttp
from aiohttp import ClientError

import config
from exceptions.payment import PaymentGatewayException
from models.payment import StkPushRequestDTO, StkPushResponseDTO

logger = logging.getLogger(__name__)


class MpesaApiWrapper:
    TIMEOUT = aiohttp.ClientTimeout(total=30)

    @staticmethod
    async def fetch_api_request(url: str, method: str = "GET", data: str | None = None,
                                headers: dict | None = None, auth: aiohttp.BasicAuth | None = None) -> dict:
        try:
            async with aiohttp.ClientSession(timeout=MpesaApiWrapper.TIMEOUT) as session:
                async with session.request(method, url, data=data, headers=headers, auth=auth) as response:
                    body = await response.json(content_type=None)
                    if response.status >= 400:
                        logger.error(f"M-Pesa API {method} {url} failed with {response.status}: {body}")
                        raise PaymentGatewayException(f"HTTP {response.status}", body if isinstance(body, dict) else None)
                    return body
        except (ClientError, TimeoutError) as e:
            logger.error(f"M-Pesa API {method} {url} unreachable: {e}")
            raise PaymentGatewayException(str(e) or e.__class__.__name__)

    @staticmethod
    async def get_access_token() -> str:
        """OAuth client credentials token for the Daraja API."""
        response = await MpesaApiWrapper.fetch_api_request(
            f"{config.MPESA_API_URL}/oauth/v1/generate?grant_type=client_credentials",
            auth=aiohttp.BasicAuth(config.MPESA_CONSUMER_KEY or "", config.MPESA_CONSUMER_SECRET or "")
        )
        token = response.get("access_token")
        if not token:
            raise PaymentGatewayException("No access token in OAuth response", response)
        return token

    @staticmethod
    def build_password(timestamp: str) -> str:
        raw = f"{config.MPESA_SHORTCODE}{config.MPESA_PASSKEY}{timestamp}"
        return base64.b64encode(raw.encode("utf-8")).decode("utf-8")

    @staticmethod
    async def stk_push(phone: str, amount: float, account_reference: str, description: str) -> StkPushResponseDTO:
        """
        Send an STK push prompt to the buyer's phone.

        Amount is rounded up to whole shillings, M-Pesa does not accept cents.
        """
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        request_dto = StkPushRequestDTO(
            BusinessShortCode=str(config.MPESA_SHORTCODE),
            Password=MpesaApiWrapper.build_password(timestamp),
            Timestamp=timestamp,
            Amount=max(1, int(-(-amount // 1))),
            PartyA=phone,
            PartyB=str(config.MPESA_SHORTCODE),
            PhoneNumber=phone,
            AccountReference=account_reference,
            TransactionDesc=description,
        )
        token = await MpesaApiWrapper.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json"
        }
        response = await MpesaApiWrapper.fetch_api_request(
            f"{config.MPESA_API_URL}/mpesa/stkpush/v1/processrequest",
            method="POST",
            data=request_dto.model_dump_json(),
            headers=headers
        )
        response_dto = StkPushResponseDTO.model_validate(response)
        if response_dto.ResponseCode != "0" or not response_dto.CheckoutRequestID:
            raise PaymentGatewayException(response_dto.ResponseDescription or "STK push rejected", response)
        logger.info(f"📲 STK push sent for {account_reference} (CheckoutRequestID: {response_dto.CheckoutRequestID})")
        return response_dto
