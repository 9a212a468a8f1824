"""Market invariant verification: LMSR bounded loss and escrow accounting."""

import logging

from src.pm_common.errors import BoundedLossExceededError
from src.pm_market.domain.models import Market
from src.pm_math.fixed_point import PRECISION
from src.pm_math.transcendental import LN_2

logger = logging.getLogger(__name__)


def calculate_max_loss(b_parameter: int) -> int:
    """Worst-case market maker loss b * ln(2), in value units."""
    return b_parameter * LN_2 // PRECISION


def verify_bounded_loss(initial_liquidity: int, current_liquidity: int, b_parameter: int) -> None:
    """Raise BoundedLossExceededError if realized loss exceeds b * ln(2)."""
    actual_loss = max(0, initial_liquidity - current_liquidity)
    max_loss = calculate_max_loss(b_parameter)
    if actual_loss > max_loss:
        logger.error(
            "Bounded loss violated: loss=%d max=%d (initial=%d current=%d b=%d)",
            actual_loss, max_loss, initial_liquidity, current_liquidity, b_parameter,
        )
        raise BoundedLossExceededError(actual_loss, max_loss)
    logger.debug("Bounded loss OK: loss=%d max=%d", actual_loss, max_loss)


def verify_market_invariants(market: Market, escrow_balance: int) -> list[str]:
    """Check non-negativity and escrow backing. Returns list of violation strings.

    INV-1: shares_yes, shares_no, current_liquidity >= 0
    INV-2: escrow == reserve_floor + current_liquidity + unpaid resolver fees
    """
    violations: list[str] = []
    for name in ("shares_yes", "shares_no", "current_liquidity"):
        value = getattr(market, name)
        if value < 0:
            violations.append(f"INV-1 violated: {name}={value} < 0")

    expected = market.reserve_floor + market.current_liquidity + market.unpaid_resolver_fees
    if escrow_balance != expected:
        violations.append(
            f"INV-2 violated: escrow({escrow_balance}) != reserve_floor({market.reserve_floor})"
            f" + liquidity({market.current_liquidity})"
            f" + resolver_fees({market.unpaid_resolver_fees}) = {expected}"
        )

    for msg in violations:
        logger.error("market=%s %s", market.id, msg)
    if not violations:
        logger.debug("Invariants OK: market=%s escrow=%d", market.id, escrow_balance)
    return violations
