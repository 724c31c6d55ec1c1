"""
PayPal REST adapter.

Every outbound call to PayPal goes through ``PayPalClient``:
- OAuth2 client-credentials token (cached per client)
- Checkout order creation and capture
- Webhook signature verification
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import requests
import structlog
import tenacity

from api.schemas import CaptureResult, VerificationOutcome, WebhookVerificationRequest
from core.settings import Settings
from core.tracing import get_tracer
from payments.errors import PayPalBusinessError, PayPalTransportError

log = structlog.get_logger(__name__)
tracer = get_tracer(__name__)

VERIFY_PATH = "/v1/notifications/verify-webhook-signature"
TOKEN_PATH = "/v1/oauth2/token"
ORDERS_PATH = "/v2/checkout/orders"

# Refresh this long before PayPal says the token expires
TOKEN_EXPIRY_MARGIN = timedelta(seconds=60)
DEFAULT_TOKEN_TTL = timedelta(minutes=5)


def _response_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class PayPalClient:
    def __init__(self, settings: Settings):
        self.base = settings.paypal_base_url
        self.client = settings.PAYPAL_CLIENT_ID
        self.secret = settings.PAYPAL_SECRET
        self.timeout = settings.PAYPAL_TIMEOUT_SECONDS
        self._token_cache: tuple[str, datetime] | None = None

    @property
    def _basic_auth(self) -> tuple[str, str]:
        return (self.client, self.secret)

    def _token(self) -> str:
        if self._token_cache and self._token_cache[1] > datetime.now(UTC):
            return self._token_cache[0]

        try:
            r = requests.post(
                f"{self.base}{TOKEN_PATH}",
                auth=self._basic_auth,
                data={"grant_type": "client_credentials"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PayPalTransportError(f"token request failed: {e}") from e

        if r.status_code >= 400:
            raise PayPalBusinessError(
                "token request rejected", r.status_code, _response_body(r)
            )

        try:
            payload = r.json()
            token = payload["access_token"]
            ttl = (
                timedelta(seconds=int(payload["expires_in"])) - TOKEN_EXPIRY_MARGIN
                if payload.get("expires_in")
                else DEFAULT_TOKEN_TTL
            )
        except (ValueError, KeyError, TypeError) as e:
            raise PayPalTransportError("malformed token response") from e

        self._token_cache = (token, datetime.now(UTC) + ttl)
        return self._token_cache[0]

    def _bearer_headers(self, request_id: str | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._token()}",
            "Content-Type": "application/json",
        }
        if request_id:
            headers["PayPal-Request-Id"] = request_id
        return headers

    def verify_webhook_signature(
        self, request: WebhookVerificationRequest
    ) -> VerificationOutcome:
        """
        Ask PayPal whether a webhook delivery carries a genuine signature.

        Never raises: anything that prevents a determination is reported as
        ``VerificationOutcome.indeterminate`` and the cause is logged.
        """
        log_ctx = {
            "transmission_id": request.transmission_id,
            "event_type": request.event_type,
        }
        with tracer.start_as_current_span("paypal.verify_webhook_signature"):
            try:
                response = requests.post(
                    f"{self.base}{VERIFY_PATH}",
                    json=request.model_dump(),
                    auth=self._basic_auth,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
            except requests.Timeout:
                log.error("paypal.verify_timeout", timeout=self.timeout, **log_ctx)
                return VerificationOutcome.indeterminate
            except requests.RequestException as e:
                log.error("paypal.verify_transport_error", error=str(e), **log_ctx)
                return VerificationOutcome.indeterminate

        if not 200 <= response.status_code < 300:
            log.error(
                "paypal.verify_unexpected_status",
                status_code=response.status_code,
                body=response.text,
                **log_ctx,
            )
            return VerificationOutcome.indeterminate

        try:
            data = response.json()
        except ValueError:
            log.error("paypal.verify_malformed_body", body=response.text, **log_ctx)
            return VerificationOutcome.indeterminate

        status = data.get("verification_status") if isinstance(data, dict) else None
        if not isinstance(status, str):
            log.error("paypal.verify_malformed_body", body=data, **log_ctx)
            return VerificationOutcome.indeterminate

        if status == "SUCCESS":
            return VerificationOutcome.verified

        log.warning("paypal.verify_failed", verification_status=status, **log_ctx)
        return VerificationOutcome.rejected

    @tenacity.retry(
        retry=tenacity.retry_if_exception_type(PayPalTransportError),
        stop=tenacity.stop_after_attempt(3),
        wait=tenacity.wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    def _post_order(self, body: dict[str, Any], request_id: str) -> requests.Response:
        headers = self._bearer_headers(request_id)
        try:
            return requests.post(
                f"{self.base}{ORDERS_PATH}",
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PayPalTransportError(f"order creation failed: {e}") from e

    def create_order(self, amount: str, currency: str = "USD") -> dict[str, Any]:
        """Create a CAPTURE-intent checkout order and return PayPal's order body."""
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {"amount": {"currency_code": currency, "value": amount}}
            ],
        }
        # Same request id across retries so PayPal creates at most one order
        request_id = str(uuid.uuid4())
        with tracer.start_as_current_span("paypal.create_order"):
            response = self._post_order(body, request_id)

        if response.status_code >= 400:
            raise PayPalBusinessError(
                f"order creation failed: {response.status_code}",
                response.status_code,
                _response_body(response),
            )
        try:
            return response.json()
        except ValueError as e:
            # Not retried, the order may already exist on PayPal's side
            raise PayPalTransportError("malformed order response") from e

    def capture_order(self, order_id: str) -> CaptureResult:
        """Capture an approved order. Not retried."""
        with tracer.start_as_current_span("paypal.capture_order"):
            headers = self._bearer_headers()
            try:
                response = requests.post(
                    f"{self.base}{ORDERS_PATH}/{order_id}/capture",
                    json={},
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise PayPalTransportError(f"capture failed: {e}") from e

        body = _response_body(response)
        if response.status_code >= 400:
            raise PayPalBusinessError(
                f"capture failed: {response.status_code}", response.status_code, body
            )
        return CaptureResult(
            status_code=response.status_code,
            result=body if isinstance(body, dict) else {},
        )
