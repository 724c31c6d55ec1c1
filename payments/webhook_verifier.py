from starlette.concurrency import run_in_threadpool

from api.schemas import VerificationOutcome, WebhookNotification, WebhookVerificationRequest
from core.metrics import webhook_verifications
from payments.errors import ConfigurationError
from payments.paypal_client import PayPalClient


class WebhookVerifier:
    """Reduces a webhook delivery to a verified/rejected/indeterminate outcome.

    Each delivery is verified on its own: no retries and no caching by
    transmission id, PayPal redelivers on any non-2xx answer.
    """

    def __init__(self, client: PayPalClient):
        self.client = client

    async def verify(
        self, notification: WebhookNotification, registered_webhook_id: str
    ) -> VerificationOutcome:
        if not registered_webhook_id or not registered_webhook_id.strip():
            raise ConfigurationError("PAYPAL_WEBHOOK_ID is not set")

        request = WebhookVerificationRequest.from_notification(
            notification, registered_webhook_id
        )
        outcome = await run_in_threadpool(self.client.verify_webhook_signature, request)
        webhook_verifications.labels(outcome=outcome.value).inc()
        return outcome
