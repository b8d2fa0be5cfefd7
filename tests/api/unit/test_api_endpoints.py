"""
Integration Tests: HTTP API

Drives the FastAPI app through httpx with the in-memory database and fake Redis:
- Health check
- Register -> verify OTP -> login -> /me
- Authentication and role guards
- Public product listing
- Order placement over HTTP
- M-Pesa callback acknowledgement and signature check
"""

import hashlib
import hmac
import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import pytest

import config
from conftest import TEST_PASSWORD, auth_headers
from enums.product_status import ProductStatus
from enums.role import Role

pytestmark = pytest.mark.integration


def callback_body(checkout_request_id: str = "ws_CO_unknown") -> bytes:
    return json.dumps({
        "Body": {
            "stkCallback": {
                "MerchantRequestID": "29115-34620561-1",
                "CheckoutRequestID": checkout_request_id,
                "ResultCode": 1032,
                "ResultDesc": "Request cancelled by user",
            }
        }
    }).encode("utf-8")


@pytest.fixture
def callback_session(test_session):
    @asynccontextmanager
    async def _session():
        yield test_session

    with patch("processing.processing.get_db_session", _session):
        yield


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        response = await api_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestAuthFlow:

    @pytest.mark.asyncio
    async def test_register_verify_login_me(self, api_client):
        with patch("services.auth.NotificationService.send_otp", new_callable=AsyncMock) as send_otp:
            response = await api_client.post("/api/v1/auth/register", json={
                "name": "Jane", "email": "jane@example.com", "password": TEST_PASSWORD,
            })
        assert response.status_code == 201
        assert response.json()["account_verified"] is False
        _, otp = send_otp.await_args.args

        response = await api_client.post("/api/v1/auth/verify-otp", json={"email": "jane@example.com", "otp": otp})
        assert response.status_code == 200

        response = await api_client.post("/api/v1/auth/login", json={
            "email": "jane@example.com", "password": TEST_PASSWORD,
        })
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = await api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["email"] == "jane@example.com"

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, api_client, make_user):
        user = await make_user()
        response = await api_client.post("/api/v1/auth/login", json={"email": user.email, "password": "Wr0ng!Pass"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_refresh_then_logout(self, api_client, make_user):
        user = await make_user()
        response = await api_client.post("/api/v1/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
        tokens = response.json()

        response = await api_client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 200
        refreshed = response.json()

        response = await api_client.post("/api/v1/auth/logout",
                                          headers={"Authorization": f"Bearer {refreshed['access_token']}"})
        assert response.status_code == 200
        response = await api_client.post("/api/v1/auth/refresh", json={"refresh_token": refreshed["refresh_token"]})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_profile(self, api_client, make_user):
        user = await make_user()

        response = await api_client.put("/api/v1/auth/me", headers=auth_headers(user),
                                        json={"name": "Jane Wanjiru", "phone": "0712345678"})

        assert response.status_code == 200
        assert response.json()["name"] == "Jane Wanjiru"
        assert response.json()["phone"] == "0712345678"

    @pytest.mark.asyncio
    async def test_me_requires_token(self, api_client):
        response = await api_client.get("/api/v1/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, api_client):
        response = await api_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestRoleGuards:

    @pytest.mark.asyncio
    async def test_admin_route_forbidden_for_buyer(self, api_client, make_user):
        buyer = await make_user()
        response = await api_client.get("/api/v1/admin/dashboard", headers=auth_headers(buyer))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_route_open_for_admin(self, api_client, make_user):
        admin = await make_user(role=Role.ADMIN)
        response = await api_client.get("/api/v1/users", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["total"] == 1


class TestProducts:

    @pytest.mark.asyncio
    async def test_public_listing_hides_pending_products(self, api_client, make_supplier, make_product):
        supplier = await make_supplier()
        await make_product(supplier, name="Visible")
        await make_product(supplier, name="Hidden", status=ProductStatus.PENDING)

        response = await api_client.get("/api/v1/products")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert [item["name"] for item in body["items"]] == ["Visible"]

    @pytest.mark.asyncio
    async def test_unknown_product_is_404(self, api_client):
        response = await api_client.get("/api/v1/products/999")
        assert response.status_code == 404


class TestOrders:

    @pytest.mark.asyncio
    async def test_place_order(self, api_client, make_user, make_supplier, make_product):
        buyer = await make_user()
        supplier = await make_supplier()
        product = await make_product(supplier, price=1000.0, stock=5)

        response = await api_client.post("/api/v1/orders", headers=auth_headers(buyer), json={
            "supplier_id": supplier.id,
            "items": [{"product_id": product.id, "quantity": 2}],
            "payment_method": "mpesa",
            "delivery_address": "Kenyatta Avenue 10",
            "delivery_city": "Nairobi",
            "delivery_phone": "0712345678",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["subtotal"] == 2000.0
        assert body["total_escrow_held"] == 1800.0
        assert body["status"] == "Pending"


class TestMpesaCallback:

    @pytest.mark.asyncio
    async def test_unknown_request_is_acknowledged(self, api_client, callback_session):
        response = await api_client.post("/api/v1/payments/mpesa/callback", content=callback_body())
        assert response.status_code == 200
        assert response.json() == {"ResultCode": 0, "ResultDesc": "Accepted"}

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, api_client, callback_session):
        response = await api_client.post("/api/v1/payments/mpesa/callback", content=b'{"Body": {}}')
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_signature_required_when_secret_set(self, api_client, callback_session, monkeypatch):
        monkeypatch.setattr(config, "MPESA_CALLBACK_SECRET", "callback-secret")
        body = callback_body()

        response = await api_client.post("/api/v1/payments/mpesa/callback", content=body)
        assert response.status_code == 401

        signature = hmac.new(b"callback-secret", body, hashlib.sha256).hexdigest()
        response = await api_client.post("/api/v1/payments/mpesa/callback", content=body,
                                         headers={"X-Callback-Signature": signature})
        assert response.status_code == 200
