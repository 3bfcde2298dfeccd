"""Test configuration and fixtures."""

import json
import os
from datetime import date, timedelta
from decimal import Decimal

# Settings are read at import time
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_EMAIL = "owner@showersautodetail.com"
ADMIN_PASSWORD = "correct-horse-battery"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ENVIRONMENT"] = "test"
os.environ["ADMIN_EMAIL"] = ADMIN_EMAIL
os.environ["ADMIN_PASSWORD"] = ADMIN_PASSWORD
os.environ["JWT_SECRET"] = "test-signing-key"
os.environ["APP_URL"] = "https://detail.test"
os.environ["GOOGLE_PLACE_ID"] = "test-place"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from autodetail.clients import GooglePlacesClient, SquareClient  # noqa: E402
from autodetail.core import dependencies  # noqa: E402
from autodetail.core.config import settings  # noqa: E402
from autodetail.core.database import Base  # noqa: E402
from autodetail.core.rate_limit import limiter  # noqa: E402
from autodetail.models import *  # noqa: E402,F403 - Import all models
from autodetail.models.catalog import Addon, Package, Service  # noqa: E402
from autodetail.models.coupon import Coupon  # noqa: E402
from autodetail.schemas.booking import CreateBookingRequest  # noqa: E402
from autodetail.services.booking_service import BookingService  # noqa: E402
from autodetail.services.notification_service import NotificationService  # noqa: E402


class RecordingNotifications(NotificationService):
    """Keeps every notification instead of sending it."""

    def __init__(self):
        super().__init__()
        self.sent: list[tuple[str, dict]] = []

    async def send(self, notification_type, data):
        self.sent.append((notification_type, data))

    def types(self) -> list[str]:
        return [notification_type for notification_type, _ in self.sent]


class SquareStub:
    """Answers Square payment requests with a canned response."""

    def __init__(self):
        self.requests: list[dict] = []
        self.status_code = 200
        self.error: Exception | None = None
        self.body = {
            "payment": {
                "id": "sq_payment_1",
                "status": "COMPLETED",
                "receipt_url": "https://squareup.com/receipt/preview/sq_payment_1",
            }
        }

    def decline(self, detail: str = "Card declined", code: str = "GENERIC_DECLINE"):
        self.status_code = 402
        self.body = {"errors": [{"category": "PAYMENT_METHOD_ERROR", "code": code, "detail": detail}]}

    def unreachable(self):
        self.error = httpx.ConnectError("connection refused")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> SquareClient:
        return SquareClient(
            access_token="sq-test-token",
            location_id="LOC123",
            environment="sandbox",
            transport=httpx.MockTransport(self.handler),
        )


class PlacesStub:
    """Serves a fixed Google place, or an error once ``fail`` is set."""

    def __init__(self):
        self.calls = 0
        self.fail = False
        self.place = {
            "id": "test-place",
            "displayName": {"text": "Showers Auto Detail"},
            "rating": 4.9,
            "userRatingCount": 87,
            "reviews": [
                {
                    "authorAttribution": {"displayName": "Dana R.", "photoUri": "https://example.com/d.png"},
                    "rating": 5,
                    "text": {"text": "Truck looks brand new."},
                    "relativePublishTimeDescription": "2 weeks ago",
                    "publishTime": "2026-09-30T15:00:00Z",
                },
                {
                    "authorAttribution": {},
                    "rating": 4,
                    "originalText": {"text": "Great interior job."},
                },
            ],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.fail:
            return httpx.Response(503, text="backend unavailable")
        return httpx.Response(200, json=self.place)

    def client(self) -> GooglePlacesClient:
        return GooglePlacesClient(api_key="places-test-key", transport=httpx.MockTransport(self.handler))


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with empty rate limit windows."""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def square():
    return SquareStub()


@pytest.fixture
def places():
    return PlacesStub()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, notifications, square, places):
    """The real application with the database and outbound clients swapped out."""
    from autodetail.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[dependencies.get_db] = override_get_db
    app.dependency_overrides[dependencies.get_notification_service] = lambda: notifications
    app.dependency_overrides[dependencies.get_square_client] = square.client
    app.dependency_overrides[dependencies.get_google_places_client] = places.client

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_headers(test_client):
    """Authorization header of a freshly logged in admin."""
    response = await test_client.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest_asyncio.fixture
async def service(test_session):
    """Full detail: $150 sedan, $180 SUV, $220 truck."""
    row = Service(
        name="Full Detail",
        description="Interior and exterior",
        sedan_price=Decimal("150.00"),
        suv_price=Decimal("180.00"),
        truck_price=Decimal("220.00"),
        duration_minutes=240,
        features=["Hand wash", "Interior vacuum"],
        display_order=1,
    )
    test_session.add(row)
    await test_session.commit()
    return row


@pytest_asyncio.fixture
async def package(test_session):
    row = Package(
        name="Showroom Package",
        base_price=Decimal("200.00"),
        vehicle_multipliers={"sedan": 1, "suv": 1.2, "truck": 1.35},
    )
    test_session.add(row)
    await test_session.commit()
    return row


@pytest_asyncio.fixture
async def addon(test_session):
    """Pet hair removal: $25 sedan, $35 SUV, $45 commercial."""
    row = Addon(
        name="Pet Hair Removal",
        sedan_price=Decimal("25.00"),
        suv_price=Decimal("35.00"),
        commercial_price=Decimal("45.00"),
        display_order=1,
    )
    test_session.add(row)
    await test_session.commit()
    return row


@pytest_asyncio.fixture
async def coupon(test_session):
    row = Coupon(code="SAVE10", discount_type="percent", discount_value=Decimal("10"), max_uses=5)
    test_session.add(row)
    await test_session.commit()
    return row


@pytest.fixture
def booking_date():
    return date.today() + timedelta(days=7)


@pytest.fixture
def sample_booking_data(service, addon, booking_date):
    """Booking form payload as the site sends it."""
    return {
        "customerName": "Jordan Lee",
        "customerEmail": "jordan@example.com",
        "customerPhone": "(555) 010-4477",
        "vehicleType": "Sedan",
        "serviceId": service.id,
        "addonIds": [addon.id],
        "bookingDate": booking_date.isoformat(),
        "bookingTime": "10:00",
        "address": "12 Harbor Rd",
        "notes": "Dog hair in the back seat",
    }


@pytest_asyncio.fixture
async def booking(test_session, service, addon, booking_date):
    """Pending sedan booking: $175 total, $43.75 deposit."""
    result = await BookingService(test_session).create_booking(
        CreateBookingRequest(
            customer_name="Jordan Lee",
            customer_email="jordan@example.com",
            customer_phone="5550104477",
            vehicle_type="sedan",
            service_id=service.id,
            addon_ids=[addon.id],
            booking_date=booking_date,
            booking_time="10:00",
        )
    )
    return result["booking"]


@pytest.fixture
def square_config(monkeypatch):
    monkeypatch.setattr(settings, "square_application_id", "sandbox-sq0idb-test")
    monkeypatch.setattr(settings, "square_location_id", "LOC123")
    monkeypatch.setattr(settings, "square_access_token", "sq-test-token")
