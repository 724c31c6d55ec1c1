"""
API Schemas Module

This module defines the Pydantic models exchanged with PayPal and with
webhook callers.
"""

from enum import Enum as PyEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Inbound header -> notification field
WEBHOOK_HEADERS = {
    "paypal-auth-algo": "auth_algo",
    "paypal-cert-url": "cert_url",
    "paypal-transmission-id": "transmission_id",
    "paypal-transmission-sig": "transmission_sig",
    "paypal-transmission-time": "transmission_time",
}


class VerificationOutcome(PyEnum):
    verified = "verified"
    rejected = "rejected"
    indeterminate = "indeterminate"


class WebhookNotification(BaseModel):
    """A webhook delivery as claimed by the caller, before verification."""

    auth_algo: str = Field(min_length=1)
    cert_url: str = Field(min_length=1)
    transmission_id: str = Field(min_length=1)
    transmission_sig: str = Field(min_length=1)
    transmission_time: str = Field(min_length=1)
    webhook_event: dict[str, Any]

    model_config = ConfigDict(frozen=True)

    @property
    def event_type(self) -> str | None:
        event_type = self.webhook_event.get("event_type")
        return event_type if isinstance(event_type, str) else None


class WebhookVerificationRequest(WebhookNotification):
    """Body of PayPal's verify-webhook-signature call."""

    webhook_id: str = Field(min_length=1)

    @classmethod
    def from_notification(
        cls, notification: WebhookNotification, webhook_id: str
    ) -> "WebhookVerificationRequest":
        return cls(**notification.model_dump(), webhook_id=webhook_id)


class CaptureResult(BaseModel):
    status_code: int
    result: dict[str, Any] = {}


class WebhookAck(BaseModel):
    status: str = "OK"


class ErrorResponse(BaseModel):
    error: str
