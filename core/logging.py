import logging
import os
import sys

import structlog
from opentelemetry.instrumentation.logging import LoggingInstrumentor

# Environments that log one JSON object per line
JSON_ENVIRONMENTS = {"test", "production"}


def get_log_level():
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_renderer(env: str):
    if env in JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)


def configure_logging():
    """Configure structlog on top of stdlib logging, with OTel trace ids."""
    env = os.getenv("ENVIRONMENT", "development")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            get_log_renderer(env),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # pytest captures stdout
    handler = logging.StreamHandler(sys.stdout if env == "test" else None)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(get_log_level())

    # Requests are logged by api.middleware
    logging.getLogger("uvicorn.error").handlers.clear()
    logging.getLogger("uvicorn.access").handlers.clear()
    # urllib3 logs full PayPal URLs at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    LoggingInstrumentor().instrument(set_logging_format=False)


# Business Event Log Names
class BusinessEvents:
    """Standard names for business event logs"""

    API_ENTRY = "api.request"
    API_EXIT = "api.response"
    WEBHOOK_RECEIVED = "webhook.received"
    WEBHOOK_MALFORMED = "webhook.malformed"
    WEBHOOK_MISCONFIGURED = "webhook.misconfigured"
    WEBHOOK_VERIFIED = "webhook.verified"
    WEBHOOK_REJECTED = "webhook.rejected"
    WEBHOOK_INDETERMINATE = "webhook.indeterminate"
    WEBHOOK_DISPATCHED = "webhook.dispatched"
    WEBHOOK_UNHANDLED = "webhook.unhandled"
    WEBHOOK_DISPATCH_FAILED = "webhook.dispatch_failed"
    ORDER_CREATED = "order.created"
    ORDER_FAILED = "order.failed"
    PAYMENT_CAPTURED = "payment.captured"
    PAYMENT_CAPTURE_FAILED = "payment.capture_failed"
    PAYMENT_DENIED = "payment.denied"
    ORDER_APPROVED = "order.approved"


# Configure logging when module is imported
configure_logging()
