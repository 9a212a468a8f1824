"""Market lifecycle FSM: the single edge table every transition goes through.

    PROPOSED → APPROVED → ACTIVE → RESOLVING → DISPUTED → FINALIZED
                                           ╰──────────→ FINALIZED
    PROPOSED | APPROVED → CANCELLED

FINALIZED and CANCELLED are terminal.
"""

import logging

from src.pm_common.enums import MarketState
from src.pm_common.errors import InvalidStateTransitionError
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: frozenset[tuple[MarketState, MarketState]] = frozenset({
    (MarketState.PROPOSED, MarketState.APPROVED),
    (MarketState.APPROVED, MarketState.ACTIVE),
    (MarketState.ACTIVE, MarketState.RESOLVING),
    (MarketState.RESOLVING, MarketState.DISPUTED),
    (MarketState.RESOLVING, MarketState.FINALIZED),
    (MarketState.DISPUTED, MarketState.FINALIZED),
    (MarketState.PROPOSED, MarketState.CANCELLED),
    (MarketState.APPROVED, MarketState.CANCELLED),
})

TERMINAL_STATES = frozenset({MarketState.FINALIZED, MarketState.CANCELLED})


def can_transition(from_state: MarketState, to_state: MarketState) -> bool:
    return (from_state, to_state) in VALID_TRANSITIONS


def transition(market: Market, to_state: MarketState) -> MarketState:
    """Move market to to_state or raise InvalidStateTransitionError. Returns the previous state."""
    from_state = market.state
    if not can_transition(from_state, to_state):
        raise InvalidStateTransitionError(from_state.value, to_state.value)
    market.state = to_state
    logger.info("Market %s: %s -> %s", market.id, from_state.value, to_state.value)
    return from_state
