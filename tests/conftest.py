import hashlib
import hmac
import json
import os
import time
from typing import Callable, Generator

# Override settings for tests before importing app modules
TEST_DATABASE_URL = "sqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_mock"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_mock"
os.environ["DEFAULT_CURRENCY"] = "usd"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.dependencies import get_payment_gateway
from storefront.errors import GatewayError
from storefront.main import app
from storefront.models.database import Base, get_db
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services.payment_gateway import PaymentIntent

WEBHOOK_SECRET = "whsec_test_mock"

# Create test database engine
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakePaymentGateway:
    """In-memory gateway that hands out sequential pi_test_N references."""

    def __init__(self):
        self.calls: list[dict] = []
        self.error: GatewayError | None = None

    def create_intent(self, amount_minor_units, currency, metadata):
        self.calls.append({"amount": amount_minor_units, "currency": currency, "metadata": dict(metadata)})
        if self.error is not None:
            raise self.error
        reference_id = f"pi_test_{len(self.calls)}"
        return PaymentIntent(reference_id=reference_id, client_secret=f"{reference_id}_secret_abc")


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db_session = TestSessionLocal()
    try:
        yield db_session
    finally:
        db_session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture(scope="function")
def client(db: Session, gateway: FakePaymentGateway) -> Generator[TestClient, None, None]:
    """Create a test client with database and payment gateway overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    from storefront.services.accounts import hash_password

    user = User(
        email="test@example.com",
        display_name="Test User",
        hashed_password=hash_password("testpassword123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user2(db: Session) -> User:
    """Create a second test user."""
    from storefront.services.accounts import hash_password

    user = User(
        email="test2@example.com",
        display_name="Test User 2",
        hashed_password=hash_password("testpassword123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_product(db: Session) -> Product:
    """Create a test product priced at 2500 cents."""
    product = Product(name="Test Course", description="A course", price_cents=2500)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def auth_token(client: TestClient, test_user: User) -> str:
    """Get auth token for test user."""
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 200
    return response.json()["accessToken"]


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Get auth headers with token."""
    return {"Authorization": f"Bearer {auth_token}"}


def sign_stripe_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a stripe-signature header the way Stripe does (HMAC-SHA256 over "t.payload")."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def stripe_event() -> Callable[..., dict]:
    """Factory for Stripe payment_intent event payloads."""

    def _make(event_type: str, intent_id: str | None = "pi_test_1", event_id: str = "evt_test", **fields) -> dict:
        obj = {"object": "payment_intent", **fields}
        if intent_id is not None:
            obj["id"] = intent_id
        return {"id": event_id, "object": "event", "type": event_type, "data": {"object": obj}}

    return _make


@pytest.fixture
def post_webhook(client: TestClient) -> Callable[..., object]:
    """POST a signed Stripe webhook; pass signature=None to omit the header."""

    def _post(event: dict, *, signature: str | None = "sign", secret: str = WEBHOOK_SECRET):
        raw_body = json.dumps(event).encode()
        headers = {"Content-Type": "application/json"}
        if signature == "sign":
            headers["stripe-signature"] = sign_stripe_payload(raw_body, secret)
        elif signature is not None:
            headers["stripe-signature"] = signature
        return client.post("/webhooks/stripe", content=raw_body, headers=headers)

    return _post


@pytest.fixture
def sign_payload() -> Callable[..., str]:
    return sign_stripe_payload
