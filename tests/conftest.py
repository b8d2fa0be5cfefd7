"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from datetime import datetime
from unittest.mock import MagicMock
import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from enums.currency import Currency
from enums.runtime_environment import RuntimeEnvironment

# Mock config module completely before any imports
config_mock = MagicMock()
config_mock.RUNTIME_ENVIRONMENT = RuntimeEnvironment.TEST
config_mock.WEBAPP_HOST = "127.0.0.1"
config_mock.WEBAPP_PORT = 8000
config_mock.API_PREFIX = "/api/v1"
config_mock.DB_URL = "sqlite+aiosqlite:///:memory:"  # In-memory test database
config_mock.REDIS_HOST = "localhost"
config_mock.REDIS_PORT = 6379
config_mock.REDIS_PASSWORD = None
config_mock.JWT_SECRET = "test_jwt_secret_1234567890abcdef1234567890abcdef"
config_mock.JWT_ALGORITHM = "HS256"
config_mock.JWT_EXPIRE_MINUTES = 60
config_mock.LOGIN_MAX_ATTEMPTS = 3
config_mock.LOGIN_LOCK_MINUTES = 10
config_mock.OTP_EXPIRE_MINUTES = 15
config_mock.REFRESH_TOKEN_EXPIRE_DAYS = 30
config_mock.RESET_PASSWORD_EXPIRE_MINUTES = 15
config_mock.UNVERIFIED_ACCOUNT_TTL_HOURS = 24
config_mock.PAGE_ENTRIES = 10
config_mock.CHAT_PAGE_ENTRIES = 20
config_mock.CURRENCY = Currency.KES
config_mock.COMMISSION_PERCENTAGE = 10.0
config_mock.REWARD_POINTS_PER_UNIT = 100.0
config_mock.SHIPPING_STANDARD_BASE = 100.0
config_mock.SHIPPING_STANDARD_PER_KM = 5.0
config_mock.SHIPPING_EXPRESS_BASE = 200.0
config_mock.SHIPPING_EXPRESS_PER_KM = 10.0
config_mock.SHIPPING_STANDARD_DAYS = 3
config_mock.SHIPPING_EXPRESS_DAYS = 1
config_mock.FREE_SHIPPING_THRESHOLD = 5000.0
config_mock.MPESA_API_URL = "https://sandbox.safaricom.co.ke"
config_mock.MPESA_CONSUMER_KEY = "test_consumer_key"
config_mock.MPESA_CONSUMER_SECRET = "test_consumer_secret"
config_mock.MPESA_SHORTCODE = "174379"
config_mock.MPESA_PASSKEY = "test_passkey"
config_mock.MPESA_CALLBACK_URL = "https://example.com/api/v1/payments/mpesa/callback"
config_mock.MPESA_CALLBACK_SECRET = None  # Unsigned callbacks unless a test sets it
config_mock.PAYMENT_TIMEOUT_MINUTES = 5
config_mock.ESCROW_AUTO_RELEASE_DAYS = 7
config_mock.BACKGROUND_TASK_INTERVAL_SECONDS = 60
config_mock.ESCROW_RELEASE_INTERVAL_SECONDS = 3600
config_mock.DATA_RETENTION_DAYS = 30
config_mock.LOG_LEVEL = "INFO"
config_mock.LOG_MASK_SECRETS = True
config_mock.LOG_RETENTION_DAYS = 5
config_mock.MAX_REFUND_REQUESTS_PER_WINDOW = 5
config_mock.REFUND_REQUEST_WINDOW_SECONDS = 900
config_mock.MAX_SHIPPING_ESTIMATES_PER_WINDOW = 10
config_mock.SHIPPING_ESTIMATE_WINDOW_SECONDS = 600
config_mock.MAX_PAYMENT_INITIATIONS_PER_WINDOW = 5
config_mock.PAYMENT_INITIATION_WINDOW_SECONDS = 600
config_mock.MAX_PAYMENT_CHECKS_PER_MINUTE = 20
config_mock.MAX_ORDERS_PER_USER_PER_HOUR = 20
config_mock.SECURITY_HEADERS_ENABLED = False
config_mock.CSP_ENABLED = False
config_mock.HSTS_ENABLED = False
config_mock.CORS_ALLOWED_ORIGINS = []

sys.modules['config'] = config_mock

from enums.order_status import OrderStatus
from enums.payment_status import PaymentMethod, PaymentStatus
from enums.product_status import ProductStatus, ProductVisibility
from enums.role import Role
from enums.supplier_status import SupplierStatus
from models.category import Category
from models.order import OrderCreateRequest, OrderItemRequest
from models.product import Product
from models.supplier import Supplier
from models.user import User, UserDTO
from utils.security import hash_password

TEST_PASSWORD = "Str0ng!Pass"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


# ============================================================================
# Marketplace data factories
# ============================================================================

@pytest.fixture
def make_user(test_session):
    """Factory creating a verified user with TEST_PASSWORD."""
    counter = {"n": 0}

    async def _make(role: Role = Role.USER, verified: bool = True, **fields) -> User:
        counter["n"] += 1
        user = User(
            name=fields.pop("name", f"User {counter['n']}"),
            email=fields.pop("email", f"user{counter['n']}@example.com"),
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
            account_verified=verified,
            **fields
        )
        test_session.add(user)
        await test_session.flush()
        return user

    return _make


@pytest.fixture
def make_supplier(test_session, make_user):
    """Factory creating a supplier profile with its user."""

    async def _make(status: SupplierStatus = SupplierStatus.APPROVED, user: User | None = None) -> Supplier:
        if user is None:
            role = Role.SUPPLIER if status == SupplierStatus.APPROVED else Role.USER
            user = await make_user(role=role)
        supplier = Supplier(
            user_id=user.id,
            full_name=user.name,
            phone_number="0712345678",
            address="Moi Avenue 1, Nairobi",
            id_number="12345678",
            shop_name=f"Shop of {user.name}",
            status=status,
        )
        test_session.add(supplier)
        await test_session.flush()
        return supplier

    return _make


@pytest.fixture
def make_category(test_session):
    counter = {"n": 0}

    async def _make(name: str | None = None, parent_category_id: int | None = None) -> Category:
        counter["n"] += 1
        name = name or f"Category {counter['n']}"
        category = Category(name=name, slug=name.lower().replace(" ", "-"), parent_category_id=parent_category_id)
        test_session.add(category)
        await test_session.flush()
        return category

    return _make


@pytest.fixture
def make_product(test_session, make_category):
    """Factory creating an Active/Public product (sellable) unless told otherwise."""

    async def _make(supplier: Supplier, price: float = 1000.0, stock: int | None = 10,
                    category: Category | None = None, **fields) -> Product:
        category = category or await make_category()
        product = Product(
            name=fields.pop("name", "Test Product"),
            description=fields.pop("description", "A product"),
            category_id=category.id,
            supplier_id=supplier.id,
            price=price,
            stock=stock,
            images=[],
            status=fields.pop("status", ProductStatus.ACTIVE),
            visibility=fields.pop("visibility", ProductVisibility.PUBLIC),
            **fields
        )
        test_session.add(product)
        await test_session.flush()
        return product

    return _make


@pytest.fixture
def make_order(test_session):
    """Factory placing an order through OrderService so totals and escrow are computed."""

    async def _make(buyer: User, supplier: Supplier, products: list[tuple[Product, int]],
                    payment_method: PaymentMethod = PaymentMethod.MPESA, **fields):
        from services.order import OrderService
        request = OrderCreateRequest(
            supplier_id=supplier.id,
            items=[OrderItemRequest(product_id=p.id, quantity=q) for p, q in products],
            payment_method=payment_method,
            delivery_address="Kenyatta Avenue 10",
            delivery_city="Nairobi",
            delivery_phone="0712345678",
            **fields
        )
        return await OrderService.create_order(request, as_dto(buyer), test_session)

    return _make


def as_dto(user: User) -> UserDTO:
    return UserDTO.model_validate(user, from_attributes=True)


async def set_order_state(session: AsyncSession, order_id: int, status: OrderStatus,
                          payment_status: PaymentStatus, **fields):
    """Jump an order to a given state without going through the API."""
    from repositories.order import OrderRepository
    order = await OrderRepository.get_by_id(order_id, session)
    order.status = status
    order.payment_status = payment_status
    if payment_status == PaymentStatus.PAID and order.paid_at is None:
        order.paid_at = datetime.now()
    for field, value in fields.items():
        setattr(order, field, value)
    await session.commit()
    return order


# ============================================================================
# HTTP API Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def api_client(test_session, redis_client):
    """httpx client against the FastAPI app, sharing the test session and fake Redis."""
    from httpx import AsyncClient, ASGITransport
    from app import create_app
    from web.dependencies import get_session, get_redis_client

    app = create_app(with_lifespan=False)

    async def override_session():
        yield test_session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_redis_client] = lambda: redis_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def auth_headers(user: User) -> dict:
    from utils.security import create_access_token
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
