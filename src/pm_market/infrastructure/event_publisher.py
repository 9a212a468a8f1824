"""Publishes committed domain events from the EventBus outbox to Redis.

The bus only queues events after a unit of work commits, so anything
drained here is final. A failed publish puts the batch back at the front
of the outbox for the next flush.
"""

import json
import logging

import redis.asyncio as aioredis

from src.pm_market.domain.events import EventBus

logger = logging.getLogger(__name__)


class RedisEventPublisher:
    def __init__(self, bus: EventBus, redis: aioredis.Redis, channel: str) -> None:
        self._bus = bus
        self._redis = redis
        self._channel = channel

    async def flush(self) -> int:
        """Publish every queued event in order. Returns how many were sent."""
        events = self._bus.drain()
        sent = 0
        try:
            for event in events:
                await self._redis.publish(self._channel, json.dumps(event.to_dict()))
                sent += 1
        except Exception:
            self._bus.requeue(events[sent:])
            logger.exception(
                "Event publish failed after %d/%d events; requeued the rest", sent, len(events)
            )
            raise
        if sent:
            logger.debug("Published %d events to %s", sent, self._channel)
        return sent
