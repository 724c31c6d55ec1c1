"""
PayPal webhook intake.

A delivery is only trusted once PayPal itself confirms the signature through
the verify-webhook-signature endpoint.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.schemas import (
    WEBHOOK_HEADERS,
    ErrorResponse,
    VerificationOutcome,
    WebhookAck,
    WebhookNotification,
)
from core.dependencies import get_dispatcher, get_settings, get_webhook_verifier
from core.logging import BusinessEvents
from core.settings import Settings
from payments.dispatcher import EventDispatcher
from payments.errors import ConfigurationError
from payments.webhook_verifier import WebhookVerifier

log = structlog.get_logger(__name__)

router = APIRouter()

# Response bodies are part of the public contract with PayPal and operators
ERROR_CONFIGURATION = "Erreur de configuration du webhook"
ERROR_MALFORMED = "Notification de webhook invalide"
ERROR_INVALID_SIGNATURE = "Signature du webhook invalide"
ERROR_PROCESSING = "Erreur lors du traitement du webhook"


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def receive_paypal_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    fields = {
        field: request.headers.get(header) for header, field in WEBHOOK_HEADERS.items()
    }
    try:
        body = await request.json()
    except ValueError:
        body = None

    log.info(
        BusinessEvents.WEBHOOK_RECEIVED,
        transmission_id=fields["transmission_id"],
        event_type=body.get("event_type") if isinstance(body, dict) else None,
    )

    if not settings.webhook_configured:
        log.error(BusinessEvents.WEBHOOK_MISCONFIGURED, setting="PAYPAL_WEBHOOK_ID")
        return _error(500, ERROR_CONFIGURATION)

    try:
        notification = WebhookNotification(**fields, webhook_event=body)
    except ValidationError as e:
        invalid = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        log.warning(BusinessEvents.WEBHOOK_MALFORMED, invalid_fields=invalid)
        return _error(400, ERROR_MALFORMED, invalid_fields=invalid)

    try:
        outcome = await verifier.verify(notification, settings.PAYPAL_WEBHOOK_ID)
    except ConfigurationError as e:
        log.error(BusinessEvents.WEBHOOK_MISCONFIGURED, error=str(e))
        return _error(500, ERROR_PROCESSING)

    log_ctx = {
        "transmission_id": notification.transmission_id,
        "event_type": notification.event_type,
    }

    if outcome is VerificationOutcome.verified:
        log.info(BusinessEvents.WEBHOOK_VERIFIED, **log_ctx)
        try:
            await dispatcher.dispatch(notification.webhook_event)
        except Exception:
            # The delivery is verified, PayPal still gets its 200
            log.exception(BusinessEvents.WEBHOOK_DISPATCH_FAILED, **log_ctx)
        return WebhookAck()

    if outcome is VerificationOutcome.rejected:
        log.warning(BusinessEvents.WEBHOOK_REJECTED, **log_ctx)
        return _error(400, ERROR_INVALID_SIGNATURE)

    log.error(BusinessEvents.WEBHOOK_INDETERMINATE, **log_ctx)
    return _error(500, ERROR_PROCESSING)
