"""LMSR pricing engine for binary markets.

    C(q_yes, q_no) = b * ln(e^(q_yes/b) + e^(q_no/b))
    P(YES)         = e^(q_yes/b) / (e^(q_yes/b) + e^(q_no/b))
    P(NO)          = 1 - P(YES)

Share quantities and b are fixed-point; costs are value units.
"""

import logging

from src.pm_common.enums import ShareSide
from src.pm_common.errors import (
    ArithmeticUnderflowError,
    InsufficientSharesError,
    InvalidBParameterError,
)
from src.pm_math.fixed_point import PRECISION, U128_MAX, checked_add, div, mul
from src.pm_math.transcendental import LN_2, exp, log_sum_exp

logger = logging.getLogger(__name__)

MIN_B = 100 * PRECISION
MAX_B = 1_000_000 * PRECISION

SOLVER_MAX_ITERATIONS = 50
SOLVER_TOLERANCE = PRECISION // 1000


def _check_b(b: int) -> None:
    if b < MIN_B:
        raise InvalidBParameterError(b)


def cost(q_yes: int, q_no: int, b: int) -> int:
    """Total cost of the current share state."""
    _check_b(b)
    return mul(b, log_sum_exp(div(q_yes, b), div(q_no, b)))


def price_yes(q_yes: int, q_no: int, b: int) -> int:
    """Stable softmax: the exponent argument is always the non-negative gap."""
    _check_b(b)
    if q_yes >= q_no:
        e = exp(div(q_yes - q_no, b))
        return div(e, e + PRECISION)
    e = exp(div(q_no - q_yes, b))
    return div(PRECISION, PRECISION + e)


def price_no(q_yes: int, q_no: int, b: int) -> int:
    return PRECISION - price_yes(q_yes, q_no, b)


def _after(q_yes: int, q_no: int, side: ShareSide, delta: int) -> tuple[int, int]:
    if side == ShareSide.YES:
        return checked_add(q_yes, delta), q_no
    return q_yes, checked_add(q_no, delta)


def _search_ceiling(q_yes: int, q_no: int, b: int, side: ShareSide) -> int:
    """Largest Δq that keeps the post-trade exponent gap within MAX_EXP."""
    ahead = q_yes - q_no if side == ShareSide.YES else q_no - q_yes
    ceiling = 20 * b
    return max(0, min(ceiling, ceiling - b // PRECISION - 1 - ahead))


def shares_for_cost(
    q_yes: int, q_no: int, b: int, side: ShareSide, target_cost: int
) -> int:
    """Binary search for the share quantity whose cost matches target_cost.

    Searches Δq in [0, 20b] (tightened so exponents stay in domain) with
    tolerance PRECISION/1000 and at most 50 iterations. Returns the lower
    bound on exit, or the exact hit if one is found.
    """
    cost_before = cost(q_yes, q_no, b)
    low = 0
    high = _search_ceiling(q_yes, q_no, b, side)

    for _ in range(SOLVER_MAX_ITERATIONS):
        if high - low <= SOLVER_TOLERANCE:
            break
        mid = low + (high - low) // 2
        new_yes, new_no = _after(q_yes, q_no, side, mid)
        spent = cost(new_yes, new_no, b) - cost_before
        if spent < target_cost:
            low = mid + 1
        elif spent > target_cost:
            high = mid
        else:
            return mid
    return low


def buy_cost(
    q_yes: int, q_no: int, b: int, side: ShareSide, target_cost: int
) -> tuple[int, int]:
    """Return (actual_cost, shares) for spending roughly target_cost on side."""
    shares = shares_for_cost(q_yes, q_no, b, side, target_cost)
    new_yes, new_no = _after(q_yes, q_no, side, shares)
    actual = cost(new_yes, new_no, b) - cost(q_yes, q_no, b)
    if shares == 0 or actual <= 0:
        raise ArithmeticUnderflowError(f"in buy_cost: {shares} shares cost {actual}")
    logger.debug(
        "buy_cost: side=%s target=%d actual=%d shares=%d", side.value, target_cost, actual, shares
    )
    return actual, shares


def sell_proceeds(q_yes: int, q_no: int, b: int, side: ShareSide, shares: int) -> int:
    """Closed form C(q) - C(q - Δq)."""
    outstanding = q_yes if side == ShareSide.YES else q_no
    if shares > outstanding:
        raise InsufficientSharesError(shares, outstanding)
    if side == ShareSide.YES:
        new_yes, new_no = q_yes - shares, q_no
    else:
        new_yes, new_no = q_yes, q_no - shares
    proceeds = cost(q_yes, q_no, b) - cost(new_yes, new_no, b)
    if proceeds <= 0:
        raise ArithmeticUnderflowError(f"in sell_proceeds: {shares} shares return {proceeds}")
    return proceeds


def b_for_max_loss(max_loss: int) -> int:
    """Smallest b whose worst-case loss b*ln(2) equals max_loss, floored at MIN_B."""
    scaled = max_loss * PRECISION
    if scaled > U128_MAX:
        return MAX_B
    return min(MAX_B, max(MIN_B, scaled // LN_2))
