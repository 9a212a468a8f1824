"""Tests for the domain event bus and the Redis publisher."""

import json
import logging
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.container import Container
from src.pm_common.enums import EventType, ShareSide
from src.pm_common.redis_client import ping_redis
from src.pm_market.domain.events import DomainEvent, EventBus
from src.pm_market.infrastructure.event_publisher import RedisEventPublisher
from src.pm_math.fixed_point import PRECISION
from tests.factories import FakeClock, create_active


def _bus(max_pending: int = 100) -> EventBus:
    bus = EventBus()
    bus.enable_outbox(max_pending)
    return bus


def _event(n: int) -> DomainEvent:
    return DomainEvent(
        event_type=EventType.TRADE_EXECUTED, market_id="m1", timestamp=n, payload={"n": n}
    )


class TestEventBus:
    def test_subscribers_called_in_order(self) -> None:
        bus = EventBus()
        seen: list[int] = []
        bus.subscribe(lambda e: seen.append(e.timestamp))
        bus.publish([_event(1), _event(2)])
        assert seen == [1, 2]

    def test_drain_empties_outbox(self) -> None:
        bus = _bus()
        bus.publish([_event(1)])
        assert bus.pending() == 1
        assert [e.timestamp for e in bus.drain()] == [1]
        assert bus.pending() == 0

    def test_requeue_goes_first(self) -> None:
        bus = _bus()
        bus.publish([_event(3)])
        bus.requeue([_event(1), _event(2)])
        assert [e.timestamp for e in bus.drain()] == [1, 2, 3]

    def test_no_outbox_until_enabled(self) -> None:
        bus = EventBus()
        seen: list[int] = []
        bus.subscribe(lambda e: seen.append(e.timestamp))
        bus.publish([_event(1), _event(2)])
        bus.requeue([_event(0)])
        assert seen == [1, 2]
        assert bus.pending() == 0
        assert bus.drain() == []

    def test_full_outbox_drops_oldest(self, caplog: pytest.LogCaptureFixture) -> None:
        bus = _bus(max_pending=2)
        with caplog.at_level(logging.WARNING, logger="src.pm_market.domain.events"):
            bus.publish([_event(1), _event(2), _event(3)])
        assert [e.timestamp for e in bus.drain()] == [2, 3]
        assert "dropped 1 oldest" in caplog.text

    def test_requeue_respects_limit(self) -> None:
        bus = _bus(max_pending=3)
        bus.publish([_event(3), _event(4)])
        bus.requeue([_event(1), _event(2)])
        assert [e.timestamp for e in bus.drain()] == [2, 3, 4]

    def test_to_dict(self) -> None:
        assert _event(5).to_dict() == {
            "event_type": "TRADE_EXECUTED",
            "market_id": "m1",
            "timestamp": 5,
            "payload": {"n": 5},
        }


class TestRedisEventPublisher:
    async def test_flush_publishes_json(self) -> None:
        bus = _bus()
        bus.publish([_event(1), _event(2)])
        redis = AsyncMock()
        publisher = RedisEventPublisher(bus, redis, "pm.events")

        assert await publisher.flush() == 2
        assert redis.publish.await_count == 2
        channel, body = redis.publish.await_args_list[0].args
        assert channel == "pm.events"
        assert json.loads(body)["payload"] == {"n": 1}
        assert bus.pending() == 0

    async def test_empty_outbox(self) -> None:
        redis = AsyncMock()
        assert await RedisEventPublisher(_bus(), redis, "pm.events").flush() == 0
        redis.publish.assert_not_awaited()

    async def test_failure_requeues_unsent(self) -> None:
        bus = _bus()
        bus.publish([_event(1), _event(2), _event(3)])
        redis = AsyncMock()
        redis.publish.side_effect = [1, ConnectionError("down")]
        publisher = RedisEventPublisher(bus, redis, "pm.events")

        with pytest.raises(ConnectionError):
            await publisher.flush()
        assert [e.timestamp for e in bus.drain()] == [2, 3]


class TestPingRedis:
    async def test_reachable(self) -> None:
        redis = AsyncMock()
        assert await ping_redis(redis) is True

    async def test_unreachable_is_reported_not_raised(self) -> None:
        redis = AsyncMock()
        redis.ping.side_effect = RedisConnectionError("refused")
        assert await ping_redis(redis) is False


class TestDefaultContainer:
    def test_trading_without_publisher_queues_nothing(self) -> None:
        container = Container(clock=FakeClock())
        market_id = create_active(container)
        container.ledger.deposit("alice", 100 * PRECISION)
        for _ in range(20):
            container.trading.buy_shares("alice", market_id, ShareSide.YES, PRECISION)
        assert container.bus.pending() == 0
