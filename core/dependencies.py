from fastapi import Depends

from core.settings import Settings
from payments.dispatcher import EventDispatcher, build_default_dispatcher
from payments.paypal_client import PayPalClient
from payments.webhook_verifier import WebhookVerifier

# Process-wide singletons, built once at startup and only read afterwards
_settings = None
_paypal_client = None
_dispatcher = None


def get_settings() -> Settings:
    """Dependency that provides application settings."""
    assert (
        _settings is not None
    ), "Settings not initialized. Make sure startup() was called."
    return _settings


def get_paypal_client() -> PayPalClient:
    """Dependency that provides the shared PayPal client."""
    assert (
        _paypal_client is not None
    ), "PayPal client not initialized. Make sure startup() was called."
    return _paypal_client


def get_dispatcher() -> EventDispatcher:
    assert _dispatcher is not None, "Event dispatcher not initialized."
    return _dispatcher


def get_webhook_verifier(
    client: PayPalClient = Depends(get_paypal_client),
) -> WebhookVerifier:
    return WebhookVerifier(client)


def init_settings():
    """Initialize settings, PayPal client and dispatcher singletons.

    Raises pydantic's ValidationError when PayPal credentials are missing.
    """
    global _settings, _paypal_client, _dispatcher
    _settings = Settings()
    _paypal_client = PayPalClient(_settings)
    _dispatcher = build_default_dispatcher()


def clear_settings():
    """Clear settings singletons."""
    global _settings, _paypal_client, _dispatcher
    _settings = None
    _paypal_client = None
    _dispatcher = None
