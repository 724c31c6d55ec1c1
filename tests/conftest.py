"""Test configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient

from api.schemas import CaptureResult, VerificationOutcome
from core.dependencies import get_paypal_client
from core.settings import Settings
from main import app

WEBHOOK_ID = "WH-TEST-123"

WEBHOOK_HEADERS = {
    "paypal-auth-algo": "SHA256withRSA",
    "paypal-cert-url": "https://x",
    "paypal-transmission-id": "t1",
    "paypal-transmission-sig": "sig",
    "paypal-transmission-time": "2024-01-01T00:00:00Z",
}

WEBHOOK_EVENT = {"event_type": "PAYMENT.CAPTURE.COMPLETED"}


class MockResponse:
    """Stand-in for requests.Response with an explicit status code."""

    def __init__(self, status_code, json_data=None, text="", raise_on_json=False):
        self.status_code = status_code
        self._json_data = json_data if json_data is not None else {}
        self.text = text
        self._raise_on_json = raise_on_json

    def json(self):
        if self._raise_on_json:
            raise ValueError("No JSON object could be decoded")
        return self._json_data


class StubPayPalClient:
    """In-memory PayPal client recording every call it receives."""

    def __init__(self):
        self.outcome = VerificationOutcome.verified
        self.verify_calls = []
        self.order = {"id": "5O190127TN364715T", "status": "CREATED"}
        self.order_calls = []
        self.capture = CaptureResult(
            status_code=201, result={"id": "5O190127TN364715T", "status": "COMPLETED"}
        )
        self.capture_calls = []
        self.error = None

    def verify_webhook_signature(self, request):
        self.verify_calls.append(request)
        return self.outcome

    def create_order(self, amount, currency="USD"):
        self.order_calls.append((amount, currency))
        if self.error:
            raise self.error
        return self.order

    def capture_order(self, order_id):
        self.capture_calls.append(order_id)
        if self.error:
            raise self.error
        return self.capture


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "PAYPAL_CLIENT_ID": "test_client_id",
            "PAYPAL_SECRET": "test_secret",
            "PAYPAL_WEBHOOK_ID": WEBHOOK_ID,
            "PAYPAL_BASE": "https://api-m.sandbox.paypal.com",
            "APP_NAME": "Test Broker",
            "ENVIRONMENT": "test",
            "DISABLE_TRACING": "true",
        }
    )

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        PAYPAL_CLIENT_ID="test_client_id",
        PAYPAL_SECRET="test_secret",
        PAYPAL_WEBHOOK_ID=WEBHOOK_ID,
        PAYPAL_BASE="https://api-m.sandbox.paypal.com",
        APP_NAME="Test Broker",
        ENVIRONMENT="test",
    )


@pytest.fixture
def client():
    """Test client running the real lifespan; dependency overrides are reset afterwards."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def paypal_stub():
    stub = StubPayPalClient()
    app.dependency_overrides[get_paypal_client] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_paypal_client, None)
