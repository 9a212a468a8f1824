"""In-memory repositories.

Reads return deep copies so a failed unit of work never leaks partial
mutations into stored state.
"""

import copy
import threading

from src.pm_common.enums import MarketState, VoteKind
from src.pm_common.errors import (
    DuplicateVoteError,
    MarketAlreadyExistsError,
    MarketNotFoundError,
)
from src.pm_market.domain.models import Market, Position, VoteRecord


class InMemoryMarketRepository:
    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._lock = threading.Lock()

    def get(self, market_id: str) -> Market | None:
        with self._lock:
            market = self._markets.get(market_id)
            return copy.deepcopy(market) if market is not None else None

    def add(self, market: Market) -> None:
        with self._lock:
            if market.id in self._markets:
                raise MarketAlreadyExistsError(market.id)
            self._markets[market.id] = copy.deepcopy(market)

    def save(self, market: Market) -> None:
        with self._lock:
            if market.id not in self._markets:
                raise MarketNotFoundError(market.id)
            self._markets[market.id] = copy.deepcopy(market)

    def list_by_state(self, state: MarketState, limit: int | None = None) -> list[Market]:
        with self._lock:
            matches = sorted(
                (m for m in self._markets.values() if m.state == state),
                key=lambda m: (m.created_at, m.id),
            )
            if limit is not None:
                matches = matches[:limit]
            return [copy.deepcopy(m) for m in matches]


class InMemoryPositionRepository:
    def __init__(self) -> None:
        self._positions: dict[tuple[str, str], Position] = {}
        self._lock = threading.Lock()

    def get(self, market_id: str, user_id: str) -> Position | None:
        with self._lock:
            position = self._positions.get((market_id, user_id))
            return copy.deepcopy(position) if position is not None else None

    def save(self, position: Position) -> None:
        with self._lock:
            self._positions[(position.market_id, position.user_id)] = copy.deepcopy(position)

    def list_for_market(self, market_id: str) -> list[Position]:
        with self._lock:
            return [
                copy.deepcopy(p) for (mid, _), p in self._positions.items() if mid == market_id
            ]


class InMemoryVoteRepository:
    def __init__(self) -> None:
        self._records: dict[tuple[str, str, VoteKind], VoteRecord] = {}
        self._lock = threading.Lock()

    def exists(self, market_id: str, voter: str, kind: VoteKind) -> bool:
        with self._lock:
            return (market_id, voter, kind) in self._records

    def add(self, record: VoteRecord) -> None:
        key = (record.market_id, record.voter, record.kind)
        with self._lock:
            if key in self._records:
                raise DuplicateVoteError(record.market_id, record.voter, record.kind.value)
            self._records[key] = record

    def list_for_market(self, market_id: str, kind: VoteKind) -> list[VoteRecord]:
        with self._lock:
            return [
                r for (mid, _, k), r in self._records.items() if mid == market_id and k == kind
            ]
