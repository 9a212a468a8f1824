# src/pm_market/domain/repository.py
"""Repository Protocols: dependency inversion for testability.

Implementations hand out copies: callers mutate their copy and persist it
with save() once the unit of work succeeds.
"""

from typing import Protocol

from src.pm_common.enums import MarketState, VoteKind
from src.pm_market.domain.models import Market, Position, VoteRecord


class MarketRepositoryProtocol(Protocol):
    def get(self, market_id: str) -> Market | None: ...

    def add(self, market: Market) -> None: ...

    def save(self, market: Market) -> None: ...

    def list_by_state(self, state: MarketState, limit: int | None = None) -> list[Market]: ...


class PositionRepositoryProtocol(Protocol):
    def get(self, market_id: str, user_id: str) -> Position | None: ...

    def save(self, position: Position) -> None: ...

    def list_for_market(self, market_id: str) -> list[Position]: ...


class VoteRepositoryProtocol(Protocol):
    def exists(self, market_id: str, voter: str, kind: VoteKind) -> bool: ...

    def add(self, record: VoteRecord) -> None: ...

    def list_for_market(self, market_id: str, kind: VoteKind) -> list[VoteRecord]: ...
