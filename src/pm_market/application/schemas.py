"""Pydantic schemas for pm_market API requests and responses.

Share quantities, b and prices are fixed-point integers (1.0 == 10^9);
*_display fields are human-readable renderings only.
"""

from pydantic import BaseModel, Field

from src.pm_common.datetime_utils import unix_to_iso
from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market
from src.pm_math.fixed_point import to_display

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    market_id: str = Field(..., min_length=64, max_length=64, description="64 hex chars")
    b_parameter: int = Field(..., gt=0, description="LMSR liquidity depth, fixed-point")
    initial_liquidity: int = Field(..., gt=0, description="Value units")
    evidence_ref: str = Field(..., min_length=1, max_length=46)


class ResolveRequest(BaseModel):
    outcome: Outcome
    evidence_ref: str = Field(..., min_length=1, max_length=46)
    resolver_reputation: int | None = Field(None, ge=0, le=10_000)


class FinalizeRequest(BaseModel):
    dispute_agree: int | None = Field(None, ge=0)
    dispute_disagree: int | None = Field(None, ge=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class MarketDetail(BaseModel):
    id: str
    creator: str
    state: str
    b_parameter: int
    initial_liquidity: int
    current_liquidity: int
    shares_yes: int
    shares_no: int
    total_volume: int
    evidence_ref: str
    resolver: str | None
    proposed_outcome: str | None
    final_outcome: str | None
    was_disputed: bool
    is_cancelled: bool
    proposal_likes: int
    proposal_dislikes: int
    dispute_agree: int
    dispute_disagree: int
    accumulated_protocol_fees: int
    accumulated_resolver_fees: int
    accumulated_lp_fees: int
    created_at: str | None
    approved_at: str | None
    activated_at: str | None
    resolution_proposed_at: str | None
    finalized_at: str | None
    cancelled_at: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            creator=m.creator,
            state=m.state.value,
            b_parameter=m.b_parameter,
            initial_liquidity=m.initial_liquidity,
            current_liquidity=m.current_liquidity,
            shares_yes=m.shares_yes,
            shares_no=m.shares_no,
            total_volume=m.total_volume,
            evidence_ref=m.evidence_ref,
            resolver=m.resolver,
            proposed_outcome=m.proposed_outcome.value if m.proposed_outcome else None,
            final_outcome=m.final_outcome.value if m.final_outcome else None,
            was_disputed=m.was_disputed,
            is_cancelled=m.is_cancelled,
            proposal_likes=m.proposal_likes,
            proposal_dislikes=m.proposal_dislikes,
            dispute_agree=m.dispute_agree,
            dispute_disagree=m.dispute_disagree,
            accumulated_protocol_fees=m.accumulated_protocol_fees,
            accumulated_resolver_fees=m.accumulated_resolver_fees,
            accumulated_lp_fees=m.accumulated_lp_fees,
            created_at=unix_to_iso(m.created_at),
            approved_at=unix_to_iso(m.approved_at),
            activated_at=unix_to_iso(m.activated_at),
            resolution_proposed_at=unix_to_iso(m.resolution_proposed_at),
            finalized_at=unix_to_iso(m.finalized_at),
            cancelled_at=unix_to_iso(m.cancelled_at),
        )


class PricesResponse(BaseModel):
    market_id: str
    price_yes: int
    price_no: int
    price_yes_display: str
    price_no_display: str

    @classmethod
    def from_prices(cls, market_id: str, prices: dict[str, int]) -> "PricesResponse":
        return cls(
            market_id=market_id,
            price_yes=prices["price_yes"],
            price_no=prices["price_no"],
            price_yes_display=to_display(prices["price_yes"]),
            price_no_display=to_display(prices["price_no"]),
        )


class WithdrawResponse(BaseModel):
    market_id: str
    amount: int
