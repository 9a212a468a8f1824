"""Pydantic schemas for pm_trading API.

Amounts are value units; shares and prices are fixed-point (1.0 == 10^9).
"""

from pydantic import BaseModel, Field

from src.pm_common.enums import ShareSide
from src.pm_market.domain.models import Position
from src.pm_math.fixed_point import to_display
from src.pm_trading.domain.models import ClaimResult, TradeResult

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class BuyRequest(BaseModel):
    side: ShareSide
    target_cost: int = Field(..., gt=0, description="Pre-fee amount to spend")
    max_total_cost: int | None = Field(None, gt=0, description="Slippage bound incl. fees")


class SellRequest(BaseModel):
    side: ShareSide
    shares: int = Field(..., gt=0)
    min_proceeds: int = Field(0, ge=0, description="Slippage bound on net proceeds")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class FeeDetail(BaseModel):
    protocol_fee: int
    resolver_fee: int
    lp_fee: int
    total_fees: int


class TradeResponse(BaseModel):
    market_id: str
    side: str
    shares: int
    cost: int
    fees: FeeDetail
    net_amount: int
    price_yes: int
    price_no: int
    price_yes_display: str

    @classmethod
    def from_result(cls, r: TradeResult) -> "TradeResponse":
        return cls(
            market_id=r.market_id,
            side=r.side,
            shares=r.shares,
            cost=r.cost,
            fees=FeeDetail(
                protocol_fee=r.fees.protocol_fee,
                resolver_fee=r.fees.resolver_fee,
                lp_fee=r.fees.lp_fee,
                total_fees=r.fees.total_fees,
            ),
            net_amount=r.net_amount,
            price_yes=r.price_yes,
            price_no=r.price_no,
            price_yes_display=to_display(r.price_yes),
        )


class ClaimResponse(BaseModel):
    market_id: str
    outcome: str
    winning_shares: int
    payout: int

    @classmethod
    def from_result(cls, r: ClaimResult) -> "ClaimResponse":
        return cls(
            market_id=r.market_id,
            outcome=r.outcome,
            winning_shares=r.winning_shares,
            payout=r.payout,
        )


class PositionResponse(BaseModel):
    market_id: str
    user_id: str
    shares_yes: int
    shares_no: int
    total_invested: int
    average_price: int
    trades_count: int
    has_claimed: bool
    claimed_amount: int
    net_profit: int | None

    @classmethod
    def from_domain(cls, p: Position) -> "PositionResponse":
        return cls(
            market_id=p.market_id,
            user_id=p.user_id,
            shares_yes=p.shares_yes,
            shares_no=p.shares_no,
            total_invested=p.total_invested,
            average_price=p.average_price(),
            trades_count=p.trades_count,
            has_claimed=p.has_claimed,
            claimed_amount=p.claimed_amount,
            net_profit=p.net_profit(),
        )
