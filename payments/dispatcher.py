"""
Routing of verified PayPal webhook events to business handlers.

Handlers receive the raw event dict. A failing handler is logged and skipped;
it never changes the answer already owed to PayPal for a verified delivery.
"""

import inspect
from collections import defaultdict
from typing import Any, Awaitable, Callable, Union

import structlog

from core.logging import BusinessEvents
from core.metrics import webhook_events

log = structlog.get_logger(__name__)

EventHandler = Callable[[dict[str, Any]], Union[None, Awaitable[None]]]


class EventDispatcher:
    def __init__(self):
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def register(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def on(self, event_type: str):
        """Decorator form of ``register``."""

        def decorator(handler: EventHandler) -> EventHandler:
            self.register(event_type, handler)
            return handler

        return decorator

    def handlers_for(self, event_type: str) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    async def dispatch(self, event: dict[str, Any]) -> int:
        """Run every handler registered for the event's type.

        Returns the number of handlers that completed without raising.
        """
        event_type = event.get("event_type")
        if not isinstance(event_type, str) or not event_type:
            event_type = "unknown"
        handlers = self.handlers_for(event_type)
        webhook_events.labels(event_type=event_type).inc()

        if not handlers:
            log.info(
                BusinessEvents.WEBHOOK_UNHANDLED,
                event_type=event_type,
                event_id=event.get("id"),
            )
            return 0

        succeeded = 0
        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                succeeded += 1
            except Exception:
                log.exception(
                    BusinessEvents.WEBHOOK_DISPATCH_FAILED,
                    event_type=event_type,
                    event_id=event.get("id"),
                    handler=getattr(handler, "__name__", repr(handler)),
                )

        log.info(
            BusinessEvents.WEBHOOK_DISPATCHED,
            event_type=event_type,
            event_id=event.get("id"),
            handlers=len(handlers),
            succeeded=succeeded,
        )
        return succeeded


def _resource(event: dict[str, Any]) -> dict[str, Any]:
    resource = event.get("resource")
    return resource if isinstance(resource, dict) else {}


def log_capture_completed(event: dict[str, Any]) -> None:
    resource = _resource(event)
    log.info(
        BusinessEvents.PAYMENT_CAPTURED,
        event_id=event.get("id"),
        capture_id=resource.get("id"),
        amount=resource.get("amount"),
    )


def log_capture_denied(event: dict[str, Any]) -> None:
    resource = _resource(event)
    log.warning(
        BusinessEvents.PAYMENT_DENIED,
        event_id=event.get("id"),
        capture_id=resource.get("id"),
        status=resource.get("status"),
    )


def log_order_approved(event: dict[str, Any]) -> None:
    log.info(
        BusinessEvents.ORDER_APPROVED,
        event_id=event.get("id"),
        order_id=_resource(event).get("id"),
    )


def build_default_dispatcher() -> EventDispatcher:
    dispatcher = EventDispatcher()
    dispatcher.register("PAYMENT.CAPTURE.COMPLETED", log_capture_completed)
    dispatcher.register("PAYMENT.CAPTURE.DENIED", log_capture_denied)
    dispatcher.register("CHECKOUT.ORDER.APPROVED", log_order_approved)
    return dispatcher
