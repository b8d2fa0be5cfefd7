"""
Unit Tests: Security headers middleware

Headers are only added when the corresponding config switch is on.
"""

import pytest
from httpx import ASGITransport, AsyncClient

import config


async def get_health(monkeypatch, **flags):
    from app import create_app
    for name, value in flags.items():
        monkeypatch.setattr(config, name, value)
    app = create_app(with_lifespan=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get("/health")


class TestSecurityHeaders:

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, monkeypatch):
        response = await get_health(monkeypatch)
        assert "X-Frame-Options" not in response.headers
        assert "Content-Security-Policy" not in response.headers

    @pytest.mark.asyncio
    async def test_headers_without_hsts(self, monkeypatch):
        response = await get_health(monkeypatch, SECURITY_HEADERS_ENABLED=True, HSTS_ENABLED=False)
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers

    @pytest.mark.asyncio
    async def test_hsts(self, monkeypatch):
        response = await get_health(monkeypatch, SECURITY_HEADERS_ENABLED=True, HSTS_ENABLED=True)
        assert response.headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains"

    @pytest.mark.asyncio
    async def test_csp(self, monkeypatch):
        response = await get_health(monkeypatch, CSP_ENABLED=True)
        assert response.headers["Content-Security-Policy"].startswith("default-src 'none'")
