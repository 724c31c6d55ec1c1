"""
Prometheus metrics for the webhook broker.

Exposes FastAPI request metrics plus PayPal-specific counters at /metrics,
protected outside development by the X-Metrics-Auth header.
"""

import os

from fastapi import Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

webhook_verifications = Counter(
    "paypal_webhook_verifications_total",
    "Webhook signature verifications by outcome",
    ["outcome"],  # verified, rejected, indeterminate
)

webhook_events = Counter(
    "paypal_webhook_events_total",
    "Verified webhook events handed to the dispatcher",
    ["event_type"],
)

order_operations = Counter(
    "paypal_order_operations_total",
    "Order create/capture calls by result",
    ["operation", "result"],
)


def init_metrics(app):
    """
    Initialize Prometheus metrics instrumentation for the FastAPI app.

    Args:
        app: FastAPI application instance

    Returns:
        Instrumentator instance
    """
    inst = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics"],
    )
    inst.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    return inst


def add_metrics_auth_middleware(app):
    """
    Protect the /metrics endpoint outside development.
    Set METRICS_AUTH_TOKEN and send it as X-Metrics-Auth.
    """

    @app.middleware("http")
    async def metrics_auth_middleware(request: Request, call_next):
        if request.url.path != "/metrics":
            return await call_next(request)

        if os.getenv("ENVIRONMENT", "development") == "development":
            return await call_next(request)

        expected_token = os.getenv("METRICS_AUTH_TOKEN")
        if expected_token and request.headers.get("X-Metrics-Auth") == expected_token:
            return await call_next(request)

        return JSONResponse(
            status_code=401, content={"error": "Metrics endpoint access denied"}
        )
