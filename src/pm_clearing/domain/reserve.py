"""Escrow reserve-floor sizing for liquidity withdrawal."""

SAFETY_MARGIN = 10_000


def withdrawal_floor(reserve_floor: int) -> int:
    return reserve_floor + SAFETY_MARGIN


def max_transferable_amount(balance: int, floor: int) -> int:
    """Amount above floor; saturates at 0 when balance <= floor."""
    return max(0, balance - floor)
