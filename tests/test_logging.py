import pytest
import structlog

from conftest import WEBHOOK_EVENT, WEBHOOK_HEADERS
from core.logging import BusinessEvents, configure_logging


class _TestLogger:
    def __init__(self):
        self.output = []

    def __call__(self, logger, method_name, event_dict):
        """Process log events and store them for test assertions"""
        self.output.append(event_dict.copy())
        return event_dict


@pytest.fixture
def test_logger():
    test_logger = _TestLogger()

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            test_logger,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,  # Don't cache to ensure fresh config
    )
    yield test_logger
    configure_logging()


def test_structlog_json(test_logger):
    log = structlog.get_logger("test")
    log.bind(foo="bar").info("hello world")

    assert len(test_logger.output) > 0
    log_dict = test_logger.output[-1]

    assert log_dict["foo"] == "bar"
    assert log_dict["event"] == "hello world"
    assert "timestamp" in log_dict
    assert log_dict["level"] == "info"


def test_api_request_logging(test_logger, client, paypal_stub):
    """Webhook requests are logged without their signature headers."""
    response = client.post("/webhook", headers=WEBHOOK_HEADERS, json=WEBHOOK_EVENT)
    assert response.status_code == 200

    api_logs = [
        log
        for log in test_logger.output
        if log.get("event") == BusinessEvents.API_ENTRY
    ]
    assert len(api_logs) > 0

    log_entry = api_logs[0]
    assert log_entry["method"] == "POST"
    assert log_entry["path"] == "/webhook"
    assert log_entry["level"] == "info"

    rendered = repr(test_logger.output)
    assert "transmission_sig" not in rendered
    assert "test_secret" not in rendered


def test_business_event_names():
    assert BusinessEvents.WEBHOOK_VERIFIED == "webhook.verified"
    assert BusinessEvents.WEBHOOK_REJECTED == "webhook.rejected"
    assert BusinessEvents.WEBHOOK_INDETERMINATE == "webhook.indeterminate"
