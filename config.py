import os
import sys

from dotenv import load_dotenv

from enums.currency import Currency
from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 8000
API_PREFIX = os.environ.get("API_PREFIX", "/api/v1")

# Database
DB_NAME = os.environ.get("DB_NAME", "marketplace.db")
DB_URL = os.environ.get("DB_URL") or f"sqlite+aiosqlite:///data/{DB_NAME}"

# Redis (rate limiting + realtime fan-out)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None

# Authentication
JWT_SECRET = os.environ.get("JWT_SECRET", "")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.environ.get("JWT_EXPIRE_MINUTES", str(60 * 24 * 7)))  # Default: 7 days
LOGIN_MAX_ATTEMPTS = int(os.environ.get("LOGIN_MAX_ATTEMPTS", "5"))
LOGIN_LOCK_MINUTES = int(os.environ.get("LOGIN_LOCK_MINUTES", "10"))
OTP_EXPIRE_MINUTES = int(os.environ.get("OTP_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.environ.get("REFRESH_TOKEN_EXPIRE_DAYS", "30"))
RESET_PASSWORD_EXPIRE_MINUTES = int(os.environ.get("RESET_PASSWORD_EXPIRE_MINUTES", "15"))
UNVERIFIED_ACCOUNT_TTL_HOURS = int(os.environ.get("UNVERIFIED_ACCOUNT_TTL_HOURS", "24"))

# Parse PAGE_ENTRIES with error handling
try:
    _page_entries_str = os.environ.get("PAGE_ENTRIES", "12")
    PAGE_ENTRIES = int(_page_entries_str)
    if PAGE_ENTRIES <= 0:
        raise ValueError(f"PAGE_ENTRIES must be positive (got: {PAGE_ENTRIES})")
except ValueError as e:
    print(f"\n ERROR: Invalid PAGE_ENTRIES configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected: Positive integer (e.g., 12, 20, 50)", file=sys.stderr)
    print(f"Current value: {os.environ.get('PAGE_ENTRIES', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

CHAT_PAGE_ENTRIES = int(os.environ.get("CHAT_PAGE_ENTRIES", "20"))

# Parse CURRENCY with error handling
try:
    CURRENCY = Currency(os.environ.get("CURRENCY", "KES"))
except ValueError as e:
    valid_currencies = [c.value for c in Currency]
    print(f"\n ERROR: Invalid CURRENCY configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_currencies)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('CURRENCY', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: CURRENCY={valid_currencies[0]}\n", file=sys.stderr)
    sys.exit(1)

# Marketplace economics
# Parse COMMISSION_PERCENTAGE with error handling
try:
    COMMISSION_PERCENTAGE = float(os.environ.get("COMMISSION_PERCENTAGE", "10"))
    if not 0 <= COMMISSION_PERCENTAGE < 100:
        raise ValueError(f"COMMISSION_PERCENTAGE must be in [0, 100) (got: {COMMISSION_PERCENTAGE})")
except ValueError as e:
    print(f"\n ERROR: Invalid COMMISSION_PERCENTAGE configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Current value: {os.environ.get('COMMISSION_PERCENTAGE', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

REWARD_POINTS_PER_UNIT = float(os.environ.get("REWARD_POINTS_PER_UNIT", "100"))  # 1 point per 100 spent

# Shipping estimate (distance supplied by the client)
SHIPPING_STANDARD_BASE = float(os.environ.get("SHIPPING_STANDARD_BASE", "100"))
SHIPPING_STANDARD_PER_KM = float(os.environ.get("SHIPPING_STANDARD_PER_KM", "5"))
SHIPPING_EXPRESS_BASE = float(os.environ.get("SHIPPING_EXPRESS_BASE", "200"))
SHIPPING_EXPRESS_PER_KM = float(os.environ.get("SHIPPING_EXPRESS_PER_KM", "10"))
SHIPPING_STANDARD_DAYS = int(os.environ.get("SHIPPING_STANDARD_DAYS", "3"))
SHIPPING_EXPRESS_DAYS = int(os.environ.get("SHIPPING_EXPRESS_DAYS", "1"))
FREE_SHIPPING_THRESHOLD = float(os.environ.get("FREE_SHIPPING_THRESHOLD", "5000"))

# M-Pesa (STK push) gateway
MPESA_API_URL = os.environ.get("MPESA_API_URL", "https://sandbox.safaricom.co.ke")
MPESA_CONSUMER_KEY = os.environ.get("MPESA_CONSUMER_KEY")
MPESA_CONSUMER_SECRET = os.environ.get("MPESA_CONSUMER_SECRET")
MPESA_SHORTCODE = os.environ.get("MPESA_SHORTCODE")
MPESA_PASSKEY = os.environ.get("MPESA_PASSKEY")
MPESA_CALLBACK_URL = os.environ.get("MPESA_CALLBACK_URL")
MPESA_CALLBACK_SECRET = os.environ.get("MPESA_CALLBACK_SECRET")  # Optional HMAC secret for callback signatures

# Payment / escrow lifecycle
PAYMENT_TIMEOUT_MINUTES = int(os.environ.get("PAYMENT_TIMEOUT_MINUTES", "5"))
ESCROW_AUTO_RELEASE_DAYS = int(os.environ.get("ESCROW_AUTO_RELEASE_DAYS", "7"))
BACKGROUND_TASK_INTERVAL_SECONDS = int(os.environ.get("BACKGROUND_TASK_INTERVAL_SECONDS", "60"))
ESCROW_RELEASE_INTERVAL_SECONDS = int(os.environ.get("ESCROW_RELEASE_INTERVAL_SECONDS", "3600"))

# Data Retention Configuration
DATA_RETENTION_DAYS = int(os.environ.get("DATA_RETENTION_DAYS", "30"))

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
# Dev: Use DATA_RETENTION_DAYS (30 days default) for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", str(DATA_RETENTION_DAYS)))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# Rate Limiting Configuration
MAX_REFUND_REQUESTS_PER_WINDOW = int(os.environ.get("MAX_REFUND_REQUESTS_PER_WINDOW", "5"))
REFUND_REQUEST_WINDOW_SECONDS = int(os.environ.get("REFUND_REQUEST_WINDOW_SECONDS", str(15 * 60)))
MAX_SHIPPING_ESTIMATES_PER_WINDOW = int(os.environ.get("MAX_SHIPPING_ESTIMATES_PER_WINDOW", "10"))
SHIPPING_ESTIMATE_WINDOW_SECONDS = int(os.environ.get("SHIPPING_ESTIMATE_WINDOW_SECONDS", str(10 * 60)))
MAX_PAYMENT_INITIATIONS_PER_WINDOW = int(os.environ.get("MAX_PAYMENT_INITIATIONS_PER_WINDOW", "5"))
PAYMENT_INITIATION_WINDOW_SECONDS = int(os.environ.get("PAYMENT_INITIATION_WINDOW_SECONDS", str(10 * 60)))
MAX_PAYMENT_CHECKS_PER_MINUTE = int(os.environ.get("MAX_PAYMENT_CHECKS_PER_MINUTE", "20"))  # Prevent payment status spam
MAX_ORDERS_PER_USER_PER_HOUR = int(os.environ.get("MAX_ORDERS_PER_USER_PER_HOUR", "20"))  # Prevent order spam

# HTTP Security Configuration
SECURITY_HEADERS_ENABLED = os.environ.get("SECURITY_HEADERS_ENABLED", "true") == "true"
CSP_ENABLED = os.environ.get("CSP_ENABLED", "false") == "true"
HSTS_ENABLED = os.environ.get("HSTS_ENABLED", str(RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD).lower()) == "true"
CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if os.environ.get("CORS_ALLOWED_ORIGINS") else []
