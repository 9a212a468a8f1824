"""Global enums shared across modules."""

from enum import Enum


class MarketState(str, Enum):
    PROPOSED = "PROPOSED"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    RESOLVING = "RESOLVING"
    DISPUTED = "DISPUTED"
    FINALIZED = "FINALIZED"
    CANCELLED = "CANCELLED"


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"
    INVALID = "INVALID"

    def flipped(self) -> "Outcome":
        """YES and NO swap; INVALID stays INVALID."""
        if self is Outcome.YES:
            return Outcome.NO
        if self is Outcome.NO:
            return Outcome.YES
        return Outcome.INVALID


class ShareSide(str, Enum):
    """Tradeable side of a binary market."""
    YES = "YES"
    NO = "NO"


class VoteKind(str, Enum):
    PROPOSAL = "PROPOSAL"
    DISPUTE = "DISPUTE"


class EventType(str, Enum):
    MARKET_CREATED = "MARKET_CREATED"
    MARKET_STATE_CHANGED = "MARKET_STATE_CHANGED"
    VOTE_SUBMITTED = "VOTE_SUBMITTED"
    VOTES_AGGREGATED = "VOTES_AGGREGATED"
    TRADE_EXECUTED = "TRADE_EXECUTED"
    WINNINGS_CLAIMED = "WINNINGS_CLAIMED"
    LIQUIDITY_WITHDRAWN = "LIQUIDITY_WITHDRAWN"
    CONFIG_UPDATED = "CONFIG_UPDATED"
    PAUSE_TOGGLED = "PAUSE_TOGGLED"


class LedgerEntryType(str, Enum):
    # Deposit
    DEPOSIT = "DEPOSIT"
    # Market funding / withdrawal
    MARKET_FUNDING = "MARKET_FUNDING"
    LIQUIDITY_WITHDRAWAL = "LIQUIDITY_WITHDRAWAL"
    # Trading (user + escrow paired)
    BUY_COST = "BUY_COST"
    SELL_PROCEEDS = "SELL_PROCEEDS"
    # Fees
    PROTOCOL_FEE = "PROTOCOL_FEE"
    RESOLVER_FEE = "RESOLVER_FEE"
    # Settlement
    CLAIM_PAYOUT = "CLAIM_PAYOUT"
