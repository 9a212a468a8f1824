"""Domain events emitted after a unit of work commits.

Subscribers are called synchronously in registration order. Every event is
also appended to a bounded outbox that the async publisher drains, once it
has enabled one.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.pm_common.enums import EventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    event_type: EventType
    market_id: str | None
    timestamp: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "market_id": self.market_id,
            "timestamp": self.timestamp,
            "payload": self.payload,
        }


Subscriber = Callable[[DomainEvent], None]


class EventBus:
    """Synchronous fan-out, plus an outbox once a publisher enables one.

    Without a publisher nothing is queued. The outbox is bounded; when it is
    full the oldest events are dropped with a warning.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._outbox: deque[DomainEvent] | None = None
        self._lock = threading.Lock()

    def subscribe(self, fn: Subscriber) -> None:
        self._subscribers.append(fn)

    def enable_outbox(self, max_pending: int = 10_000) -> None:
        with self._lock:
            if self._outbox is None:
                self._outbox = deque(maxlen=max_pending)

    def publish(self, events: list[DomainEvent]) -> None:
        with self._lock:
            if self._outbox is not None:
                _warn_if_dropping(self._outbox.maxlen, len(self._outbox) + len(events))
                self._outbox.extend(events)
        for event in events:
            logger.debug("event %s market=%s", event.event_type.value, event.market_id)
            for fn in self._subscribers:
                fn(event)

    def drain(self) -> list[DomainEvent]:
        """Remove and return everything queued in the outbox."""
        with self._lock:
            if self._outbox is None:
                return []
            drained = list(self._outbox)
            self._outbox.clear()
        return drained

    def requeue(self, events: list[DomainEvent]) -> None:
        """Put unpublished events back ahead of anything queued since."""
        with self._lock:
            if self._outbox is not None:
                self._refill(list(events) + list(self._outbox))

    def pending(self) -> int:
        return len(self._outbox) if self._outbox is not None else 0

    def _refill(self, queued: list[DomainEvent]) -> None:
        limit = self._outbox.maxlen
        _warn_if_dropping(limit, len(queued))
        self._outbox = deque(queued, maxlen=limit)


def _warn_if_dropping(limit: int, queued: int) -> None:
    if queued > limit:
        logger.warning("Event outbox full (%d); dropped %d oldest events", limit, queued - limit)
