"""Test configuration and fixtures"""

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from storefront.main import app
from storefront.database import Base, get_db
from storefront.cart.storage import InMemoryCartStorage
from storefront.models.menu import MenuItem
from storefront.models.user import User
from storefront.payments.pesapal import PesapalClient
from storefront.payments.service import PaymentService
from storefront.realtime.hub import RealtimeHub, get_hub
from storefront.services.images import LocalImageStorage
from storefront.api.auth import create_access_token, get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PESAPAL_BASE_URL = "https://pesapal.test/pesapalv3"


class PesapalStub:
    """In-process stand-in for the PesaPal API behind httpx.MockTransport"""

    def __init__(self):
        self.token_requests = 0
        self.submitted = []
        self.status_requests = []
        self.status_code = 1
        self.submit_status = 200
        self.token_status = 200
        self.raise_network_error = False
        # Overrides the amount echoed back for the submitted order
        self.paid_amount = None

    def submitted_for(self, tracking_id: str):
        """Body of the order submitted under tracking_id, if any"""
        for index, entry in enumerate(self.submitted, start=1):
            if tracking_id == f"track-{index}":
                return entry["body"]
        return None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.raise_network_error:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path

        if path.endswith("/api/Auth/RequestToken"):
            self.token_requests += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": {"message": "invalid consumer key"}})
            return httpx.Response(200, json={"token": f"token-{self.token_requests}", "status": "200"})

        if path.endswith("/api/Transactions/SubmitOrderRequest"):
            body = json.loads(request.content)
            self.submitted.append({"body": body, "headers": dict(request.headers)})
            if self.submit_status != 200:
                return httpx.Response(self.submit_status, json={"error": {"message": "gateway unavailable"}})
            return httpx.Response(200, json={
                "order_tracking_id": f"track-{len(self.submitted)}",
                "merchant_reference": body["id"],
                "redirect_url": f"https://pay.pesapal.test/iframe?id={len(self.submitted)}",
                "status": "200",
            })

        if path.endswith("/api/Transactions/GetTransactionStatus"):
            tracking_id = request.url.params["orderTrackingId"]
            self.status_requests.append(tracking_id)
            descriptions = {0: "INVALID", 1: "Completed", 2: "Failed", 3: "Reversed"}
            submitted = self.submitted_for(tracking_id)
            amount = submitted["amount"] if submitted else 35000
            return httpx.Response(200, json={
                "status_code": self.status_code,
                "payment_status_description": descriptions.get(self.status_code, "INVALID"),
                "confirmation_code": "CONF123",
                "payment_method": "MTN Mobile Money",
                "amount": self.paid_amount if self.paid_amount is not None else amount,
                "merchant_reference": submitted["id"] if submitted else None,
                "currency": "UGX",
                "message": "Request processed successfully",
            })

        return httpx.Response(404)


@pytest.fixture
async def test_engine():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine):
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session


@pytest.fixture
def hub():
    return RealtimeHub()


@pytest.fixture
def cart_storage():
    return InMemoryCartStorage()


@pytest.fixture
def pesapal_stub():
    return PesapalStub()


@pytest.fixture
async def pesapal_client(pesapal_stub):
    http = httpx.AsyncClient(transport=httpx.MockTransport(pesapal_stub))
    client = PesapalClient(
        base_url=PESAPAL_BASE_URL,
        consumer_key="test-key",
        consumer_secret="test-secret",
        ipn_id="ipn-123",
        callback_url="http://localhost:5173/payment/callback",
        http_client=http,
    )
    yield client
    await client.aclose()


@pytest.fixture
def payment_service(test_db, pesapal_client, hub):
    return PaymentService(test_db, pesapal_client, hub)


@pytest.fixture
def image_storage(tmp_path):
    return LocalImageStorage(
        root=str(tmp_path),
        base_url="http://test/media",
        bucket="menu-images",
        max_bytes=5 * 1024 * 1024,
    )


@pytest.fixture
async def test_menu_items(test_db):
    """Create test menu items"""
    items = [
        MenuItem(
            id=uuid4(),
            name="Manziz Special Burger",
            description="Beef patty with our secret sauce",
            category="burgers",
            price=25000,
            is_favorite=True,
            tags=["signature", "beef"],
        ),
        MenuItem(
            id=uuid4(),
            name="Crispy Chicken Wings",
            description="Fried wings with your choice of sauce",
            category="chicken",
            price=18000,
            tags=["crispy", "spicy"],
        ),
        MenuItem(
            id=uuid4(),
            name="Fresh Soda",
            description="Ice-cold soft drinks",
            category="drinks",
            price=5000,
            is_available=False,
            tags=["cold"],
        ),
    ]

    for item in items:
        test_db.add(item)

    await test_db.commit()
    return items


@pytest.fixture
async def test_user(test_db):
    """Create a customer account"""
    user = User(
        id=uuid4(),
        email="customer@example.com",
        hashed_password=get_password_hash("testpass123"),
        full_name="Jane Customer",
        phone_number="+256 700 000 001",
        is_admin=False,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db):
    """Create a restaurant admin"""
    user = User(
        id=uuid4(),
        email="admin@manziz.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Admin User",
        is_admin=True,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def client(test_db, hub, cart_storage, pesapal_client, image_storage):
    """Create test client with overridden database and app state"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hub] = lambda: hub

    app.state.cart_storage = cart_storage
    app.state.pesapal = pesapal_client
    app.state.image_storage = image_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create authenticated test client"""
    token = create_access_token(test_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    token = create_access_token(test_admin_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client
