"""MarketLifecycleService: creation, FSM transitions and liquidity withdrawal.

Every mutating method runs inside MarketGuard.operation(), so it either
commits completely or leaves market, positions and balances untouched.
Callers are identified by an opaque id string.
"""

import logging
from collections.abc import Callable

from src.pm_admin.domain.global_config import ConfigStore, GlobalConfig
from src.pm_clearing.domain.invariants import verify_bounded_loss
from src.pm_clearing.domain.reserve import max_transferable_amount, withdrawal_floor
from src.pm_clearing.infrastructure.ledger import ValueLedger, escrow_account
from src.pm_common.enums import EventType, LedgerEntryType, MarketState, Outcome
from src.pm_common.errors import (
    AlreadyResolvedError,
    DisputePeriodEndedError,
    InsufficientLiquidityError,
    InsufficientReputationError,
    InsufficientVotesError,
    InvalidBParameterError,
    InvalidMarketStateError,
    InvalidTimestampError,
    MarketAlreadyCancelledError,
    MarketAlreadyExistsError,
    MarketNotFoundError,
    NoResolutionProposedError,
    NoVotesRecordedError,
    ProtocolPausedError,
    ResolutionPeriodNotEndedError,
    UnauthorizedError,
    ZeroAmountError,
)
from src.pm_market.application.unit_of_work import MarketGuard, UnitOfWork
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.domain.state_machine import transition
from src.pm_market.domain.validation import (
    validate_evidence,
    validate_market_id,
    validate_milestone,
)
from src.pm_math.lmsr import MAX_B, MIN_B, price_no, price_yes
from src.pm_voting.domain.aggregator import meets_threshold, rate_bps, resolve_dispute

logger = logging.getLogger(__name__)


def _stamp(uow: UnitOfWork, previous: int | None, max_lifetime: int) -> int:
    market = uow.market
    validate_milestone(
        previous if previous is not None else market.created_at,
        uow.now,
        market.created_at,
        max_lifetime,
    )
    return uow.now


def _emit_transition(uow: UnitOfWork, from_state: MarketState, **extra: object) -> None:
    uow.emit(
        EventType.MARKET_STATE_CHANGED,
        from_state=from_state.value,
        to_state=uow.market.state.value,
        **extra,
    )


def apply_approval(uow: UnitOfWork, max_lifetime: int) -> None:
    """Proposed -> Approved; tallies must already be recorded on the market."""
    market = uow.market
    market.approved_at = _stamp(uow, market.created_at, max_lifetime)
    from_state = transition(market, MarketState.APPROVED)
    _emit_transition(uow, from_state)


def apply_finalization(uow: UnitOfWork, outcome: Outcome, max_lifetime: int) -> None:
    """Resolving|Disputed -> Finalized. The bounded-loss check runs first."""
    market = uow.market
    verify_bounded_loss(market.initial_liquidity, market.current_liquidity, market.b_parameter)
    previous = market.dispute_initiated_at or market.resolution_proposed_at
    market.finalized_at = _stamp(uow, previous, max_lifetime)
    from_state = transition(market, MarketState.FINALIZED)
    market.final_outcome = outcome
    _emit_transition(
        uow, from_state, final_outcome=outcome.value, was_disputed=market.was_disputed
    )


class MarketLifecycleService:
    def __init__(
        self,
        guard: MarketGuard,
        markets: MarketRepositoryProtocol,
        ledger: ValueLedger,
        config: ConfigStore,
        reserve_floor: int,
        max_lifetime: int,
        clock: Callable[[], int],
    ) -> None:
        self._guard = guard
        self._markets = markets
        self._ledger = ledger
        self._config = config
        self._reserve_floor = reserve_floor
        self._max_lifetime = max_lifetime
        self._clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_market(self, market_id: str) -> Market:
        market = self._markets.get(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def get_prices(self, market_id: str) -> dict[str, int]:
        market = self.get_market(market_id)
        return {
            "price_yes": price_yes(market.shares_yes, market.shares_no, market.b_parameter),
            "price_no": price_no(market.shares_yes, market.shares_no, market.b_parameter),
        }

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_market(
        self,
        caller: str,
        market_id: str,
        b_parameter: int,
        initial_liquidity: int,
        evidence_ref: str,
    ) -> Market:
        """Create a market in PROPOSED; the creator funds liquidity plus the reserve floor."""
        validate_market_id(market_id)
        validate_evidence(evidence_ref)
        if not MIN_B <= b_parameter <= MAX_B:
            raise InvalidBParameterError(b_parameter)
        if initial_liquidity <= 0:
            raise ZeroAmountError()
        if self._config.current.is_paused:
            raise ProtocolPausedError()
        if self._markets.get(market_id) is not None:
            raise MarketAlreadyExistsError(market_id)

        market = Market(
            id=market_id,
            creator=caller,
            b_parameter=b_parameter,
            initial_liquidity=initial_liquidity,
            current_liquidity=initial_liquidity,
            reserve_floor=self._reserve_floor,
            created_at=self._clock(),
            evidence_ref=evidence_ref,
        )
        with self._guard.creating(market) as uow:
            self._ledger.transfer(
                caller,
                escrow_account(market_id),
                initial_liquidity + self._reserve_floor,
                LedgerEntryType.MARKET_FUNDING,
                market_id,
            )
            uow.emit(
                EventType.MARKET_CREATED,
                creator=caller,
                b_parameter=b_parameter,
                initial_liquidity=initial_liquidity,
            )
        logger.info(
            "Market created: id=%s creator=%s b=%d liquidity=%d",
            market_id, caller, b_parameter, initial_liquidity,
        )
        return market

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def approve_proposal(self, caller: str, market_id: str) -> Market:
        """Admin path to APPROVED using the tallies recorded by the aggregator."""
        self._config.require_admin(caller)
        cfg = self._config.current
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.state != MarketState.PROPOSED:
                raise InvalidMarketStateError(market_id, market.state.value)
            if market.proposal_total_votes == 0:
                raise NoVotesRecordedError(market_id)
            if not meets_threshold(
                market.proposal_likes, market.proposal_total_votes, cfg.proposal_approval_threshold
            ):
                raise InsufficientVotesError(
                    rate_bps(market.proposal_likes, market.proposal_total_votes),
                    cfg.proposal_approval_threshold,
                )
            apply_approval(uow, self._max_lifetime)
        return market

    def activate_market(self, caller: str, market_id: str) -> Market:
        cfg = self._config.current
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if caller not in (cfg.admin, market.creator):
                raise UnauthorizedError(f"{caller} may not activate market {market_id}")
            if market.current_liquidity < market.initial_liquidity:
                raise InsufficientLiquidityError(market.initial_liquidity, market.current_liquidity)
            market.activated_at = _stamp(uow, market.approved_at, self._max_lifetime)
            from_state = transition(market, MarketState.ACTIVE)
            _emit_transition(uow, from_state)
        return market

    def resolve_market(
        self,
        caller: str,
        market_id: str,
        outcome: Outcome,
        evidence_ref: str,
        resolver_reputation: int | None = None,
    ) -> Market:
        """Propose an outcome. One-shot; the caller becomes the resolver."""
        cfg = self._config.current
        validate_evidence(evidence_ref)
        if resolver_reputation is not None and resolver_reputation < cfg.min_resolver_reputation:
            raise InsufficientReputationError(resolver_reputation, cfg.min_resolver_reputation)
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.proposed_outcome is not None:
                raise AlreadyResolvedError(market_id)
            market.resolution_proposed_at = _stamp(uow, market.activated_at, self._max_lifetime)
            from_state = transition(market, MarketState.RESOLVING)
            market.proposed_outcome = outcome
            market.resolution_evidence = evidence_ref
            market.resolver = caller
            _emit_transition(uow, from_state, proposed_outcome=outcome.value, resolver=caller)
        return market

    def initiate_dispute(self, caller: str, market_id: str) -> Market:
        cfg = self._config.current
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.state != MarketState.RESOLVING:
                raise InvalidMarketStateError(market_id, market.state.value)
            proposed_at = market.resolution_proposed_at
            if proposed_at is None:
                raise NoResolutionProposedError(market_id)
            deadline = proposed_at + cfg.dispute_period
            if uow.now >= deadline:
                raise DisputePeriodEndedError(deadline)
            if uow.now <= proposed_at:
                raise InvalidTimestampError(f"dispute at {uow.now} not after resolution {proposed_at}")
            market.dispute_initiated_at = _stamp(uow, proposed_at, self._max_lifetime)
            from_state = transition(market, MarketState.DISPUTED)
            market.dispute_initiator = caller
            market.was_disputed = True
            market.dispute_agree = 0
            market.dispute_disagree = 0
            market.dispute_total_votes = 0
            _emit_transition(uow, from_state, initiator=caller)
        return market

    def finalize_market(
        self,
        caller: str,
        market_id: str,
        dispute_agree: int | None = None,
        dispute_disagree: int | None = None,
    ) -> Market:
        """Finalize a RESOLVING market after its windows, or a DISPUTED one from tallies.

        Disputed markets take tallies from the aggregator, or fall back to the
        tallies it recorded earlier.
        """
        cfg = self._config.current
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.proposed_outcome is None:
                raise NoResolutionProposedError(market_id)
            if market.state == MarketState.RESOLVING:
                outcome = self._undisputed_outcome(uow, cfg)
            elif market.state == MarketState.DISPUTED:
                outcome = self._disputed_outcome(uow, cfg, caller, dispute_agree, dispute_disagree)
            else:
                raise InvalidMarketStateError(market_id, market.state.value)
            apply_finalization(uow, outcome, self._max_lifetime)
        logger.info(
            "Market finalized: id=%s outcome=%s disputed=%s",
            market_id, market.final_outcome.value, market.was_disputed,
        )
        return market

    def _undisputed_outcome(self, uow: UnitOfWork, cfg: GlobalConfig) -> Outcome:
        market = uow.market
        proposed_at = market.resolution_proposed_at
        ends_at = proposed_at + max(cfg.dispute_period, cfg.min_resolution_delay)
        if uow.now < ends_at:
            raise ResolutionPeriodNotEndedError(ends_at)
        return market.proposed_outcome

    def _disputed_outcome(
        self,
        uow: UnitOfWork,
        cfg: GlobalConfig,
        caller: str,
        agree: int | None,
        disagree: int | None,
    ) -> Outcome:
        market = uow.market
        if agree is not None or disagree is not None:
            if caller != cfg.aggregator:
                raise UnauthorizedError(f"{caller} is not the vote aggregator")
            market.dispute_agree = agree or 0
            market.dispute_disagree = disagree or 0
            market.dispute_total_votes = market.dispute_agree + market.dispute_disagree
        if market.dispute_total_votes == 0:
            raise NoVotesRecordedError(market.id)
        return resolve_dispute(
            market.proposed_outcome,
            market.dispute_agree,
            market.dispute_total_votes,
            cfg.dispute_success_threshold,
        )

    def cancel_market(self, caller: str, market_id: str) -> Market:
        """Admin-only cancel from PROPOSED/APPROVED; refunds liquidity to the creator."""
        self._config.require_admin(caller)
        with self._guard.operation(market_id, transfers=True) as uow:
            market = uow.market
            if market.is_cancelled:
                raise MarketAlreadyCancelledError(market_id)
            market.cancelled_at = _stamp(
                uow, market.approved_at or market.created_at, self._max_lifetime
            )
            from_state = transition(market, MarketState.CANCELLED)
            market.is_cancelled = True
            refund = market.current_liquidity
            self._ledger.transfer(
                escrow_account(market_id),
                market.creator,
                refund,
                LedgerEntryType.LIQUIDITY_WITHDRAWAL,
                market_id,
            )
            market.current_liquidity = 0
            _emit_transition(uow, from_state, refunded=refund)
        return market

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def withdraw_liquidity(self, caller: str, market_id: str) -> int:
        """Creator withdraws what the finalized pool no longer owes.

        While winning shares are outstanding the pool belongs to claimants;
        unpaid resolver fees are always held back. The escrow never drops
        below reserve floor + safety margin, and a request at or under that
        floor returns 0.
        """
        with self._guard.operation(market_id, transfers=True) as uow:
            market = uow.market
            if market.state != MarketState.FINALIZED:
                raise InvalidMarketStateError(market_id, market.state.value)
            if caller != market.creator:
                raise UnauthorizedError(f"{caller} is not the creator of {market_id}")

            escrow = escrow_account(market_id)
            owed = market.unpaid_resolver_fees
            if market.winning_shares_total() > 0:
                owed += market.current_liquidity
            available = self._ledger.balance_of(escrow) - owed
            amount = max_transferable_amount(available, withdrawal_floor(market.reserve_floor))

            self._ledger.transfer(
                escrow, caller, amount, LedgerEntryType.LIQUIDITY_WITHDRAWAL, market_id
            )
            market.current_liquidity -= amount
            uow.emit(EventType.LIQUIDITY_WITHDRAWN, creator=caller, amount=amount)
        logger.info("Liquidity withdrawn: market=%s amount=%d", market_id, amount)
        return amount
