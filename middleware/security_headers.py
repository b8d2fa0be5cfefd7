"""Security Headers Middleware

Adds security headers to HTTP responses to protect browser clients of the
storefront and back office against common web vulnerabilities.

Toggled by SECURITY_HEADERS_ENABLED, HSTS_ENABLED and CSP_ENABLED.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import config


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all HTTP responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if not config.SECURITY_HEADERS_ENABLED:
            return response

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"

        response.headers["X-XSS-Protection"] = "1; mode=block"

        # Only meaningful behind HTTPS
        if config.HSTS_ENABLED:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        response.headers["Referrer-Policy"] = "no-referrer-when-downgrade"

        # The API never needs these browser features
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=(), "
            "usb=(), magnetometer=(), gyroscope=()"
        )

        return response


class CSPMiddleware(BaseHTTPMiddleware):
    """Middleware that adds Content Security Policy headers."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if not config.CSP_ENABLED:
            return response

        # JSON-only API: restrictive policy
        csp_directives = [
            "default-src 'none'",
            "frame-ancestors 'none'",
            "base-uri 'none'",
            "form-action 'none'",
        ]

        response.headers["Content-Security-Policy"] = "; ".join(csp_directives)

        return response
