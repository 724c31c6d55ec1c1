"""
Checkout order routes: thin pass-through to PayPal's Orders v2 API.
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from core.dependencies import get_paypal_client, get_settings
from core.logging import BusinessEvents
from core.metrics import order_operations
from core.settings import Settings
from payments.errors import PayPalBusinessError, PayPalError
from payments.paypal_client import PayPalClient

log = structlog.get_logger(__name__)

router = APIRouter()

ERROR_CREATE = "Erreur lors de la création de la commande"
ERROR_CAPTURE = "Erreur lors de la capture du paiement"
ERROR_CAPTURE_FAILED = "La capture du paiement a échoué"


def _details(err: PayPalError):
    if isinstance(err, PayPalBusinessError):
        return err.details
    return str(err)


@router.post("")
async def create_order(
    settings: Settings = Depends(get_settings),
    paypal: PayPalClient = Depends(get_paypal_client),
):
    try:
        order = await run_in_threadpool(
            paypal.create_order, settings.ORDER_AMOUNT, settings.ORDER_CURRENCY
        )
    except PayPalError as e:
        order_operations.labels(operation="create", result="error").inc()
        log.error(
            BusinessEvents.ORDER_FAILED,
            amount=settings.ORDER_AMOUNT,
            currency=settings.ORDER_CURRENCY,
            error=str(e),
        )
        return JSONResponse(
            status_code=500, content={"error": ERROR_CREATE, "details": _details(e)}
        )

    order_operations.labels(operation="create", result="ok").inc()
    log.info(
        BusinessEvents.ORDER_CREATED,
        order_id=order.get("id"),
        amount=settings.ORDER_AMOUNT,
        currency=settings.ORDER_CURRENCY,
    )
    return order


@router.post("/{order_id}/capture")
async def capture_order(
    order_id: str, paypal: PayPalClient = Depends(get_paypal_client)
):
    try:
        capture = await run_in_threadpool(paypal.capture_order, order_id)
    except PayPalError as e:
        order_operations.labels(operation="capture", result="error").inc()
        log.error(BusinessEvents.PAYMENT_CAPTURE_FAILED, order_id=order_id, error=str(e))
        return JSONResponse(
            status_code=500, content={"error": ERROR_CAPTURE, "details": _details(e)}
        )

    # PayPal answers 201 for a fresh capture
    if capture.status_code == 201:
        order_operations.labels(operation="capture", result="ok").inc()
        log.info(BusinessEvents.PAYMENT_CAPTURED, order_id=order_id)
        return {"status": "COMPLETED", "details": capture.result}

    order_operations.labels(operation="capture", result="failed").inc()
    log.error(
        BusinessEvents.PAYMENT_CAPTURE_FAILED,
        order_id=order_id,
        status_code=capture.status_code,
    )
    return JSONResponse(
        status_code=500,
        content={"error": ERROR_CAPTURE_FAILED, "details": capture.result},
    )
