"""Tests for MarketLifecycleService: creation, transitions, cancel and withdrawal."""

import pytest

from src.container import Container
from src.pm_clearing.infrastructure.ledger import escrow_account
from src.pm_common.enums import EventType, MarketState, Outcome, ShareSide
from src.pm_common.errors import (
    AlreadyResolvedError,
    DisputePeriodEndedError,
    InsufficientFundsError,
    InsufficientReputationError,
    InsufficientVotesError,
    InvalidBParameterError,
    InvalidMarketIdError,
    InvalidMarketStateError,
    InvalidStateTransitionError,
    InvalidTimestampError,
    MarketAlreadyCancelledError,
    MarketAlreadyExistsError,
    MarketNotFoundError,
    NoResolutionProposedError,
    NoVotesRecordedError,
    ProtocolPausedError,
    ResolutionPeriodNotEndedError,
    UnauthorizedError,
)
from src.pm_math.fixed_point import PRECISION
from tests.factories import (
    ADMIN,
    AGGREGATOR,
    B,
    CREATOR,
    DISPUTE_WINDOW,
    LIQUIDITY,
    MARKET_ID,
    RESOLVER,
    T0,
    FakeClock,
    create_proposed,
)


def _resolve(container: Container, outcome: Outcome = Outcome.YES) -> None:
    container.lifecycle.resolve_market(RESOLVER, MARKET_ID, outcome, "QmResolution")


class TestCreateMarket:
    def test_creates_proposed_and_funds_escrow(self, container: Container) -> None:
        create_proposed(container)
        market = container.lifecycle.get_market(MARKET_ID)
        floor = container.settings.MARKET_RESERVE_FLOOR
        assert market.state == MarketState.PROPOSED
        assert market.created_at == T0
        assert market.current_liquidity == LIQUIDITY
        assert container.ledger.balance_of(escrow_account(MARKET_ID)) == LIQUIDITY + floor
        assert container.ledger.balance_of(CREATOR) == 0

    def test_emits_created_event(self, container: Container) -> None:
        create_proposed(container)
        events = container.bus.drain()
        assert [e.event_type for e in events] == [EventType.MARKET_CREATED]

    def test_duplicate_id(self, container: Container) -> None:
        create_proposed(container)
        with pytest.raises(MarketAlreadyExistsError):
            create_proposed(container)

    def test_invalid_id(self, container: Container) -> None:
        with pytest.raises(InvalidMarketIdError):
            container.lifecycle.create_market(CREATOR, "not-hex", B, LIQUIDITY, "Qm")

    def test_b_below_minimum(self, container: Container) -> None:
        with pytest.raises(InvalidBParameterError):
            container.lifecycle.create_market(CREATOR, MARKET_ID, PRECISION, LIQUIDITY, "Qm")

    def test_unfunded_creator_leaves_no_market(self, container: Container) -> None:
        with pytest.raises(InsufficientFundsError):
            container.lifecycle.create_market(CREATOR, MARKET_ID, B, LIQUIDITY, "Qm")
        with pytest.raises(MarketNotFoundError):
            container.lifecycle.get_market(MARKET_ID)

    def test_paused(self, container: Container) -> None:
        container.admin.emergency_pause(ADMIN)
        with pytest.raises(ProtocolPausedError):
            create_proposed(container)


class TestApproveAndActivate:
    def test_admin_approval_needs_recorded_votes(self, container: Container) -> None:
        create_proposed(container)
        with pytest.raises(NoVotesRecordedError):
            container.lifecycle.approve_proposal(ADMIN, MARKET_ID)

    def test_admin_approval_below_threshold(self, container: Container) -> None:
        create_proposed(container)
        container.voting.aggregate_proposal_votes(AGGREGATOR, MARKET_ID, 6, 4)
        with pytest.raises(InsufficientVotesError):
            container.lifecycle.approve_proposal(ADMIN, MARKET_ID)

    def test_admin_approval_after_threshold_change(self, container: Container) -> None:
        create_proposed(container)
        container.voting.aggregate_proposal_votes(AGGREGATOR, MARKET_ID, 6, 4)
        container.admin.update_global_config(ADMIN, {"proposal_approval_threshold": 6000})
        market = container.lifecycle.approve_proposal(ADMIN, MARKET_ID)
        assert market.state == MarketState.APPROVED
        assert market.approved_at == T0

    def test_approval_requires_admin(self, container: Container) -> None:
        create_proposed(container)
        with pytest.raises(UnauthorizedError):
            container.lifecycle.approve_proposal(CREATOR, MARKET_ID)

    def test_activate_by_creator(self, container: Container) -> None:
        create_proposed(container)
        container.voting.aggregate_proposal_votes(AGGREGATOR, MARKET_ID, 8, 2)
        market = container.lifecycle.activate_market(CREATOR, MARKET_ID)
        assert market.state == MarketState.ACTIVE

    def test_activate_by_stranger(self, container: Container) -> None:
        create_proposed(container)
        container.voting.aggregate_proposal_votes(AGGREGATOR, MARKET_ID, 8, 2)
        with pytest.raises(UnauthorizedError):
            container.lifecycle.activate_market("stranger", MARKET_ID)

    def test_activate_unapproved(self, container: Container) -> None:
        create_proposed(container)
        with pytest.raises(InvalidStateTransitionError):
            container.lifecycle.activate_market(CREATOR, MARKET_ID)


class TestResolve:
    def test_resolve_records_proposal(self, container: Container, active_market: str) -> None:
        market = container.lifecycle.resolve_market(
            RESOLVER, active_market, Outcome.NO, "QmResolution", resolver_reputation=9000
        )
        assert market.state == MarketState.RESOLVING
        assert market.proposed_outcome == Outcome.NO
        assert market.resolver == RESOLVER

    def test_low_reputation(self, container: Container, active_market: str) -> None:
        with pytest.raises(InsufficientReputationError):
            container.lifecycle.resolve_market(
                RESOLVER, active_market, Outcome.YES, "Qm", resolver_reputation=7999
            )

    def test_resolve_once(self, container: Container, active_market: str) -> None:
        _resolve(container)
        with pytest.raises(AlreadyResolvedError):
            _resolve(container, Outcome.NO)

    def test_resolve_before_active(self, container: Container) -> None:
        create_proposed(container)
        with pytest.raises(InvalidStateTransitionError):
            _resolve(container)


class TestFinalize:
    def test_too_early(self, container: Container, active_market: str, clock: FakeClock) -> None:
        _resolve(container)
        clock.advance(DISPUTE_WINDOW - 1)
        with pytest.raises(ResolutionPeriodNotEndedError):
            container.lifecycle.finalize_market("anyone", active_market)

    def test_after_window_any_caller(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(DISPUTE_WINDOW)
        market = container.lifecycle.finalize_market("anyone", active_market)
        assert market.state == MarketState.FINALIZED
        assert market.final_outcome == Outcome.YES
        assert market.finalized_at == T0 + DISPUTE_WINDOW

    def test_active_market_cannot_finalize(self, container: Container, active_market: str) -> None:
        with pytest.raises(NoResolutionProposedError):
            container.lifecycle.finalize_market("anyone", active_market)


class TestDispute:
    def test_same_second_rejected(self, container: Container, active_market: str) -> None:
        _resolve(container)
        with pytest.raises(InvalidTimestampError):
            container.lifecycle.initiate_dispute("challenger", active_market)

    def test_within_window(self, container: Container, active_market: str, clock: FakeClock) -> None:
        _resolve(container)
        clock.advance(10)
        market = container.lifecycle.initiate_dispute("challenger", active_market)
        assert market.state == MarketState.DISPUTED
        assert market.was_disputed is True
        assert market.dispute_initiator == "challenger"

    def test_after_window(self, container: Container, active_market: str, clock: FakeClock) -> None:
        _resolve(container)
        clock.advance(DISPUTE_WINDOW)
        with pytest.raises(DisputePeriodEndedError):
            container.lifecycle.initiate_dispute("challenger", active_market)

    def test_finalize_disputed_without_votes(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(10)
        container.lifecycle.initiate_dispute("challenger", active_market)
        with pytest.raises(NoVotesRecordedError):
            container.lifecycle.finalize_market(AGGREGATOR, active_market)

    def test_explicit_tallies_need_aggregator(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(10)
        container.lifecycle.initiate_dispute("challenger", active_market)
        with pytest.raises(UnauthorizedError):
            container.lifecycle.finalize_market("challenger", active_market, 9, 1)

    def test_successful_dispute_flips(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(10)
        container.lifecycle.initiate_dispute("challenger", active_market)
        market = container.lifecycle.finalize_market(AGGREGATOR, active_market, 7, 3)
        assert market.final_outcome == Outcome.NO
        assert market.was_disputed is True

    def test_failed_dispute_keeps_proposal(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(10)
        container.lifecycle.initiate_dispute("challenger", active_market)
        container.voting.aggregate_dispute_votes(AGGREGATOR, active_market, 5, 5)
        # recorded tallies are reused when none are passed
        market = container.lifecycle.finalize_market("anyone", active_market)
        assert market.final_outcome == Outcome.YES


class TestCancel:
    def test_admin_cancel_refunds_creator(self, container: Container) -> None:
        create_proposed(container)
        market = container.lifecycle.cancel_market(ADMIN, MARKET_ID)
        floor = container.settings.MARKET_RESERVE_FLOOR
        assert market.state == MarketState.CANCELLED
        assert market.is_cancelled is True
        assert market.current_liquidity == 0
        assert container.ledger.balance_of(CREATOR) == LIQUIDITY
        assert container.ledger.balance_of(escrow_account(MARKET_ID)) == floor

    def test_cancel_twice(self, container: Container) -> None:
        create_proposed(container)
        container.lifecycle.cancel_market(ADMIN, MARKET_ID)
        with pytest.raises(MarketAlreadyCancelledError):
            container.lifecycle.cancel_market(ADMIN, MARKET_ID)

    def test_cancel_requires_admin(self, container: Container) -> None:
        create_proposed(container)
        with pytest.raises(UnauthorizedError):
            container.lifecycle.cancel_market(CREATOR, MARKET_ID)

    def test_cancel_active_rejected(self, container: Container, active_market: str) -> None:
        with pytest.raises(InvalidStateTransitionError):
            container.lifecycle.cancel_market(ADMIN, active_market)
        assert container.ledger.balance_of(CREATOR) == 0


class TestWithdrawLiquidity:
    def test_before_finalized(self, container: Container, active_market: str) -> None:
        with pytest.raises(InvalidMarketStateError):
            container.lifecycle.withdraw_liquidity(CREATOR, active_market)

    def test_no_winners_releases_pool_above_floor(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(DISPUTE_WINDOW)
        container.lifecycle.finalize_market("anyone", active_market)

        amount = container.lifecycle.withdraw_liquidity(CREATOR, active_market)
        floor = container.settings.MARKET_RESERVE_FLOOR
        assert amount == LIQUIDITY - 10_000
        assert container.ledger.balance_of(CREATOR) == amount
        assert container.ledger.balance_of(escrow_account(active_market)) == floor + 10_000

    def test_unclaimed_winners_block_withdrawal(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        container.ledger.deposit("alice", 100 * PRECISION)
        container.trading.buy_shares("alice", active_market, ShareSide.YES, PRECISION)
        _resolve(container)
        clock.advance(DISPUTE_WINDOW)
        container.lifecycle.finalize_market("anyone", active_market)

        assert container.lifecycle.withdraw_liquidity(CREATOR, active_market) == 0

    def test_second_withdrawal_is_zero(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        _resolve(container)
        clock.advance(DISPUTE_WINDOW)
        container.lifecycle.finalize_market("anyone", active_market)
        container.lifecycle.withdraw_liquidity(CREATOR, active_market)
        assert container.lifecycle.withdraw_liquidity(CREATOR, active_market) == 0

    def test_only_creator(self, container: Container, active_market: str, clock: FakeClock) -> None:
        _resolve(container)
        clock.advance(DISPUTE_WINDOW)
        container.lifecycle.finalize_market("anyone", active_market)
        with pytest.raises(UnauthorizedError):
            container.lifecycle.withdraw_liquidity("stranger", active_market)


class TestMilestoneOrdering:
    def test_same_second_milestones_accepted(self, container: Container, active_market: str) -> None:
        market = container.lifecycle.get_market(active_market)
        assert market.created_at == market.approved_at == market.activated_at == T0

    def test_clock_moving_backwards_rejected(
        self, container: Container, active_market: str, clock: FakeClock
    ) -> None:
        clock.advance(-1)
        with pytest.raises(InvalidTimestampError):
            container.lifecycle.resolve_market(RESOLVER, active_market, Outcome.YES, "QmResolution")
        assert container.lifecycle.get_market(active_market).state == MarketState.ACTIVE
