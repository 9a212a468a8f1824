"""Domain models for pm_market: dataclasses with small derived helpers."""

from dataclasses import dataclass, field

from src.pm_common.enums import MarketState, Outcome, ShareSide, VoteKind
from src.pm_math.fixed_point import PRECISION


@dataclass
class Market:
    id: str
    creator: str
    b_parameter: int
    initial_liquidity: int
    current_liquidity: int
    reserve_floor: int
    created_at: int
    state: MarketState = MarketState.PROPOSED
    evidence_ref: str = ""
    shares_yes: int = 0
    shares_no: int = 0
    total_volume: int = 0
    # lifecycle milestones (unix seconds)
    approved_at: int | None = None
    activated_at: int | None = None
    resolution_proposed_at: int | None = None
    finalized_at: int | None = None
    cancelled_at: int | None = None
    # resolution
    resolver: str | None = None
    proposed_outcome: Outcome | None = None
    final_outcome: Outcome | None = None
    resolution_evidence: str | None = None
    dispute_initiator: str | None = None
    dispute_initiated_at: int | None = None
    was_disputed: bool = False
    is_cancelled: bool = False
    # fee accumulators
    accumulated_protocol_fees: int = 0
    accumulated_resolver_fees: int = 0
    accumulated_lp_fees: int = 0
    resolver_fees_paid: bool = False
    # vote tallies
    proposal_likes: int = 0
    proposal_dislikes: int = 0
    proposal_total_votes: int = 0
    dispute_agree: int = 0
    dispute_disagree: int = 0
    dispute_total_votes: int = 0
    is_locked: bool = False

    @property
    def unpaid_resolver_fees(self) -> int:
        return 0 if self.resolver_fees_paid else self.accumulated_resolver_fees

    @property
    def is_terminal(self) -> bool:
        return self.state in (MarketState.FINALIZED, MarketState.CANCELLED)

    def shares_of(self, side: ShareSide) -> int:
        return self.shares_yes if side == ShareSide.YES else self.shares_no

    def winning_shares_total(self) -> int:
        """Outstanding shares that pay out under final_outcome (YES+NO when INVALID)."""
        if self.final_outcome == Outcome.YES:
            return self.shares_yes
        if self.final_outcome == Outcome.NO:
            return self.shares_no
        return self.shares_yes + self.shares_no


@dataclass
class Position:
    market_id: str
    user_id: str
    shares_yes: int = 0
    shares_no: int = 0
    total_invested: int = 0
    trades_count: int = 0
    last_trade_at: int | None = None
    has_claimed: bool = False
    claimed_amount: int = 0

    def shares_of(self, side: ShareSide) -> int:
        return self.shares_yes if side == ShareSide.YES else self.shares_no

    def has_shares(self) -> bool:
        return self.shares_yes > 0 or self.shares_no > 0

    def total_shares(self) -> int:
        return self.shares_yes + self.shares_no

    def winning_shares(self, outcome: Outcome) -> int:
        if outcome == Outcome.YES:
            return self.shares_yes
        if outcome == Outcome.NO:
            return self.shares_no
        return self.shares_yes + self.shares_no

    def average_price(self) -> int:
        """Value units paid per whole share (fixed-point), 0 with no shares."""
        total = self.total_shares()
        if total == 0:
            return 0
        return self.total_invested * PRECISION // total

    def net_profit(self) -> int | None:
        if not self.has_claimed:
            return None
        return self.claimed_amount - self.total_invested


@dataclass(frozen=True)
class VoteRecord:
    market_id: str
    voter: str
    kind: VoteKind
    vote: bool
    voted_at: int


@dataclass
class VoteTally:
    """Counts derived from VoteRecords, used by the aggregator job."""

    votes_for: int = 0
    votes_against: int = 0
    voters: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.votes_for + self.votes_against
