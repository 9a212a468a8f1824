"""Fee calculation: total first, then proportional split with LP as remainder."""

from dataclasses import dataclass

from src.pm_common.errors import InvalidAmountError

BPS_DENOMINATOR = 10_000


@dataclass(frozen=True)
class FeeBreakdown:
    protocol_fee: int
    resolver_fee: int
    lp_fee: int
    total_fees: int


def split_fees(
    amount: int, protocol_fee_bps: int, resolver_fee_bps: int, lp_fee_bps: int
) -> FeeBreakdown:
    """Split fees on amount without rounding leakage.

    total_fees = amount * Σbps // 10000 is computed once; protocol and resolver
    shares are proportional floors of total_fees and the LP fee takes the
    remainder, so the three components always sum to total_fees exactly.
    """
    if amount < 0:
        raise InvalidAmountError(amount)
    total_bps = protocol_fee_bps + resolver_fee_bps + lp_fee_bps
    if total_bps == 0 or amount == 0:
        return FeeBreakdown(0, 0, 0, 0)

    total_fees = amount * total_bps // BPS_DENOMINATOR
    protocol_fee = total_fees * protocol_fee_bps // total_bps
    resolver_fee = total_fees * resolver_fee_bps // total_bps
    lp_fee = total_fees - protocol_fee - resolver_fee
    return FeeBreakdown(protocol_fee, resolver_fee, lp_fee, total_fees)
