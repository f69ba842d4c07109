from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventBus:
    """Simple in-process event bus for entitlement and demo events.

    Subscribers are keyed by event class; events are emitted by instance.
    Delivery is synchronous and in subscription order, so the emitter's state
    is already updated when a handler runs. There is no locking; callers in a
    multithreaded host serialise access themselves.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Type[Any], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._subscribers.setdefault(event_type, []).append(handler)  # type: ignore[arg-type]
        logger.debug("Subscribed %s to %s", getattr(handler, "__name__", handler), event_type.__name__)

    def unsubscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            if not handlers:
                self._subscribers.pop(event_type, None)

    def emit(self, event: Any) -> None:
        for event_type, handlers in list(self._subscribers.items()):
            if isinstance(event, event_type):
                for h in list(handlers):
                    try:
                        h(event)
                    except Exception:
                        logger.exception("Unhandled exception in subscriber for %s", type(event).__name__)


@dataclass(frozen=True)
class OwnershipChanged:
    content_id: str
    old_state: Any  # OwnershipState
    new_state: Any


@dataclass(frozen=True)
class PurchasePrompted:
    content_id: str
    sub_content_id: str


@dataclass(frozen=True)
class DemoEnded:
    reason: Any  # DemoEndReason
    elapsed: float


@dataclass(frozen=True)
class TimeWarning:
    seconds_remaining: float


@dataclass(frozen=True)
class ContentBlocked:
    content_id: str
    message: str
