"""Background jobs: auto-finalization and vote aggregation.

Each run scans one batch of markets in the relevant state, acts on the ones
that are due, and reports per-run counts. A failure on one market is logged
with its error code and counted; the batch continues with the next market.
"""

import logging
import threading
import time
from dataclasses import dataclass, field

from src.pm_admin.domain.global_config import ConfigStore
from src.pm_common.enums import MarketState, VoteKind
from src.pm_common.errors import AppError
from src.pm_market.application.service import MarketLifecycleService
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_voting.application.service import VotingService

logger = logging.getLogger(__name__)


@dataclass
class JobReport:
    processed: int = 0
    succeeded: list[str] = field(default_factory=list)
    skipped: int = 0
    errors: dict[str, int] = field(default_factory=dict)  # market_id -> error code
    duration_ms: float = 0.0


class _BatchJob:
    name = "job"

    def __init__(self, batch_size: int) -> None:
        self._batch_size = batch_size
        self._running = threading.Lock()

    def run(self, now: int) -> JobReport:
        if not self._running.acquire(blocking=False):
            logger.warning("[%s] Already running, skipping", self.name)
            return JobReport()
        start = time.perf_counter()
        try:
            report = self._run(now)
        finally:
            self._running.release()
        report.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "[%s] Completed: %d processed, %d succeeded, %d skipped, %d errors in %.0fms",
            self.name, report.processed, len(report.succeeded), report.skipped,
            len(report.errors), report.duration_ms,
        )
        return report

    def _run(self, now: int) -> JobReport:
        raise NotImplementedError

    def _record_error(self, report: JobReport, market_id: str, exc: AppError) -> None:
        report.errors[market_id] = exc.code
        logger.error("[%s] market=%s failed: %d %s", self.name, market_id, exc.code, exc.message)


class MarketFinalizer(_BatchJob):
    """Finalizes RESOLVING markets whose dispute window and resolution delay elapsed."""

    name = "MarketFinalizer"

    def __init__(
        self,
        markets: MarketRepositoryProtocol,
        lifecycle: MarketLifecycleService,
        config: ConfigStore,
        batch_size: int = 10,
    ) -> None:
        super().__init__(batch_size)
        self._markets = markets
        self._lifecycle = lifecycle
        self._config = config

    def _run(self, now: int) -> JobReport:
        report = JobReport()
        cfg = self._config.current
        wait = max(cfg.dispute_period, cfg.min_resolution_delay)
        for market in self._markets.list_by_state(MarketState.RESOLVING):
            if report.processed >= self._batch_size:
                break
            if market.resolution_proposed_at is None or now < market.resolution_proposed_at + wait:
                report.skipped += 1
                continue
            report.processed += 1
            try:
                self._lifecycle.finalize_market(cfg.aggregator, market.id)
            except AppError as exc:
                self._record_error(report, market.id, exc)
                continue
            report.succeeded.append(market.id)
        return report


class VoteAggregatorJob(_BatchJob):
    """Tallies recorded votes and submits them as the aggregator identity.

    Proposal tallies go to PROPOSED markets; dispute tallies go to DISPUTED
    markets. Markets without any votes are skipped.
    """

    name = "VoteAggregator"

    def __init__(
        self,
        markets: MarketRepositoryProtocol,
        voting: VotingService,
        config: ConfigStore,
        batch_size: int = 10,
    ) -> None:
        super().__init__(batch_size)
        self._markets = markets
        self._voting = voting
        self._config = config

    def _run(self, now: int) -> JobReport:
        report = JobReport()
        aggregator = self._config.current.aggregator
        targets = [
            (m.id, VoteKind.PROPOSAL) for m in self._markets.list_by_state(MarketState.PROPOSED)
        ] + [
            (m.id, VoteKind.DISPUTE) for m in self._markets.list_by_state(MarketState.DISPUTED)
        ]
        for market_id, kind in targets:
            if report.processed >= self._batch_size:
                break
            tally = self._voting.tally(market_id, kind)
            if tally.total == 0:
                report.skipped += 1
                continue
            report.processed += 1
            try:
                if kind == VoteKind.PROPOSAL:
                    result = self._voting.aggregate_proposal_votes(
                        aggregator, market_id, tally.votes_for, tally.votes_against
                    )
                else:
                    result = self._voting.aggregate_dispute_votes(
                        aggregator, market_id, tally.votes_for, tally.votes_against
                    )
            except AppError as exc:
                self._record_error(report, market_id, exc)
                continue
            if result.passed:
                report.succeeded.append(market_id)
        return report
