"""Composition root: one shared set of repositories, ledger and services.

Routers resolve it through the get_container dependency; tests build their
own Container with a fixed clock and override the dependency.
"""

from collections.abc import Callable

from config.settings import Settings, settings
from src.pm_account.application.service import AccountService
from src.pm_admin.application.service import AdminService
from src.pm_admin.domain.global_config import ConfigStore, GlobalConfig
from src.pm_clearing.infrastructure.ledger import ValueLedger
from src.pm_common.datetime_utils import unix_now
from src.pm_market.application.service import MarketLifecycleService
from src.pm_market.application.unit_of_work import MarketGuard
from src.pm_market.domain.events import EventBus
from src.pm_market.infrastructure.memory import (
    InMemoryMarketRepository,
    InMemoryPositionRepository,
    InMemoryVoteRepository,
)
from src.pm_monitor.jobs import MarketFinalizer, VoteAggregatorJob
from src.pm_trading.application.service import TradingService
from src.pm_voting.application.service import VotingService


class Container:
    def __init__(
        self,
        app_settings: Settings | None = None,
        clock: Callable[[], int] = unix_now,
        config: GlobalConfig | None = None,
    ) -> None:
        s = app_settings or settings
        self.settings = s
        self.clock = clock
        self.config = ConfigStore(config or GlobalConfig.from_settings(s))
        self.markets = InMemoryMarketRepository()
        self.positions = InMemoryPositionRepository()
        self.votes = InMemoryVoteRepository()
        self.ledger = ValueLedger()
        self.bus = EventBus()
        self.guard = MarketGuard(self.markets, self.positions, self.ledger, self.bus, clock)

        self.lifecycle = MarketLifecycleService(
            self.guard,
            self.markets,
            self.ledger,
            self.config,
            reserve_floor=s.MARKET_RESERVE_FLOOR,
            max_lifetime=s.MAX_MARKET_LIFETIME_SECONDS,
            clock=clock,
        )
        self.trading = TradingService(self.guard, self.positions, self.ledger, self.config)
        self.voting = VotingService(
            self.guard, self.votes, self.config, max_lifetime=s.MAX_MARKET_LIFETIME_SECONDS
        )
        self.admin = AdminService(self.config, self.bus, clock)
        self.accounts = AccountService(self.ledger)
        self.finalizer = MarketFinalizer(
            self.markets, self.lifecycle, self.config, batch_size=s.MONITOR_BATCH_SIZE
        )
        self.vote_aggregator = VoteAggregatorJob(
            self.markets, self.voting, self.config, batch_size=s.MONITOR_BATCH_SIZE
        )


_container: Container | None = None


def get_container() -> Container:
    """Get or create the process-wide container."""
    global _container  # noqa: PLW0603
    if _container is None:
        _container = Container()
    return _container
