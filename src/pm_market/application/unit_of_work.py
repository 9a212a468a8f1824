"""Per-market unit of work.

MarketGuard.operation() serializes work on one market, loads it as a private
copy, runs the caller's mutations inside a ledger atomic scope, verifies the
escrow invariants, then persists the market and touched positions and
publishes the collected events. Any exception leaves stored state and
balances exactly as they were.

Operations that move value set the market's persisted is_locked flag for
their duration, so a re-entrant call arriving from a transfer callback is
rejected with ReentrancyDetectedError.
"""

import copy
import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from src.pm_clearing.domain.invariants import verify_market_invariants
from src.pm_clearing.infrastructure.ledger import ValueLedger, escrow_account
from src.pm_common.enums import EventType
from src.pm_common.errors import InternalError, MarketNotFoundError, ReentrancyDetectedError
from src.pm_market.domain.events import DomainEvent, EventBus
from src.pm_market.domain.models import Market, Position
from src.pm_market.domain.repository import (
    MarketRepositoryProtocol,
    PositionRepositoryProtocol,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(
        self, market: Market, now: int, positions: PositionRepositoryProtocol
    ) -> None:
        self.market = market
        self.now = now
        self.events: list[DomainEvent] = []
        self._positions_repo = positions
        self._positions: dict[str, Position] = {}

    def position(self, user_id: str, create: bool = False) -> Position | None:
        if user_id in self._positions:
            return self._positions[user_id]
        position = self._positions_repo.get(self.market.id, user_id)
        if position is None:
            if not create:
                return None
            position = Position(market_id=self.market.id, user_id=user_id)
        self._positions[user_id] = position
        return position

    def touched_positions(self) -> list[Position]:
        return list(self._positions.values())

    def emit(self, event_type: EventType, **payload: Any) -> None:
        self.events.append(
            DomainEvent(event_type=event_type, market_id=self.market.id, timestamp=self.now, payload=payload)
        )


class MarketGuard:
    def __init__(
        self,
        markets: MarketRepositoryProtocol,
        positions: PositionRepositoryProtocol,
        ledger: ValueLedger,
        bus: EventBus,
        clock: Callable[[], int],
    ) -> None:
        self._markets = markets
        self._positions = positions
        self._ledger = ledger
        self._bus = bus
        self._clock = clock
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, market_id: str) -> threading.RLock:
        with self._locks_guard:
            return self._locks[market_id]

    @contextmanager
    def creating(self, market: Market) -> Iterator[UnitOfWork]:
        """Unit of work for a market that does not exist yet; add() runs at commit."""
        with self._lock_for(market.id):
            uow = UnitOfWork(market, market.created_at, self._positions)
            with self._ledger.atomic():
                yield uow
                self._check_invariants(market)
                self._markets.add(market)
            self._bus.publish(uow.events)

    @contextmanager
    def operation(self, market_id: str, transfers: bool = False) -> Iterator[UnitOfWork]:
        with self._lock_for(market_id):
            market = self._markets.get(market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if market.is_locked:
                logger.warning("Re-entrant call rejected: market=%s", market_id)
                raise ReentrancyDetectedError(market_id)

            stored = copy.deepcopy(market)
            uow = UnitOfWork(market, self._clock(), self._positions)
            with self._ledger.atomic():
                if transfers:
                    market.is_locked = True
                    self._markets.save(market)
                try:
                    yield uow
                    market.is_locked = False
                    self._check_invariants(market)
                except BaseException:
                    if transfers:
                        self._markets.save(stored)
                    raise
                self._markets.save(market)
                for position in uow.touched_positions():
                    self._positions.save(position)
            self._bus.publish(uow.events)

    def _check_invariants(self, market: Market) -> None:
        violations = verify_market_invariants(
            market, self._ledger.balance_of(escrow_account(market.id))
        )
        if violations:
            raise InternalError("; ".join(violations))
