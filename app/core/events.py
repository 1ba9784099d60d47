"""
In-process publish/subscribe for "data changed" notifications.

Writers publish after a successful store write; readers (dashboards, cached
boards) subscribe and rebuild their views. Handlers run in subscription
order and may be plain functions or coroutines.
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from app.core.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[[str, Dict[str, Any]], Union[None, Awaitable[None]]]

ANY_EVENT = "*"


class PaymentEvents:
    """Payment event type constants."""

    PAYMENT_CREATED = "payment.created"
    PAYMENT_UPDATED = "payment.updated"
    PAYMENT_DELETED = "payment.deleted"


class DataChangeBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """Register handler for event_type, or for every event with "*"."""
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: str) -> List[Handler]:
        return [*self._handlers.get(event_type, []), *self._handlers.get(ANY_EVENT, [])]

    async def publish(self, event_type: str, payload: Optional[Dict[str, Any]] = None) -> int:
        """
        Deliver an event to its subscribers.

        A failing handler is logged and skipped; the remaining handlers still
        run. Returns the number of handlers that completed.
        """
        payload = payload or {}
        delivered = 0
        for handler in self.handlers_for(event_type):
            try:
                result = handler(event_type, payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("event_handler_failed", event_type=event_type,
                                 handler=getattr(handler, "__qualname__", repr(handler)))
                continue
            delivered += 1
        logger.debug("event_published", event_type=event_type, delivered=delivered)
        return delivered


_bus: Optional[DataChangeBus] = None


def get_event_bus() -> DataChangeBus:
    """Process-wide bus used by the HTTP app."""
    global _bus
    if _bus is None:
        _bus = DataChangeBus()
    return _bus
