"""Trade and claim results returned by TradingService."""

from dataclasses import dataclass

from src.pm_clearing.domain.fee import FeeBreakdown

# Smallest pre-fee cost or proceeds accepted, in value units; below this
# every fee component would round to zero.
MIN_TRADE_AMOUNT = 10_000


@dataclass(frozen=True)
class TradeResult:
    market_id: str
    user_id: str
    side: str
    shares: int
    cost: int          # pre-fee cost (buy) or gross proceeds (sell)
    fees: FeeBreakdown
    net_amount: int    # paid by buyer incl. fees, or received by seller after fees
    price_yes: int
    price_no: int


@dataclass(frozen=True)
class ClaimResult:
    market_id: str
    user_id: str
    outcome: str
    winning_shares: int
    payout: int
    resolver_fee_paid: int
