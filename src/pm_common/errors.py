"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Configuration
  2xxx: Market state
  3xxx: Trading
  4xxx: Resolution / voting
  5xxx: Authorization
  6xxx: Arithmetic
  7xxx: Validation
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class ConfigurationError(AppError):
    pass


class StateError(AppError):
    pass


class TradingError(AppError):
    pass


class ResolutionError(AppError):
    pass


class AuthorizationError(AppError):
    pass


class MathError(AppError):
    pass


class ValidationError(AppError):
    pass


# --- 1xxx: Configuration ---

class InvalidFeeConfigurationError(ConfigurationError):
    def __init__(self, total_bps: int) -> None:
        super().__init__(1001, f"Fee rates sum to {total_bps} bps, max 10000", 422)


class InvalidThresholdError(ConfigurationError):
    def __init__(self, name: str, value: int) -> None:
        super().__init__(1002, f"Threshold {name}={value} bps out of range [0, 10000]", 422)


class InvalidTimeLimitError(ConfigurationError):
    def __init__(self, name: str, value: int) -> None:
        super().__init__(1003, f"Time limit {name}={value} must be positive", 422)


class ImmutableConfigFieldError(ConfigurationError):
    def __init__(self, fields: list[str]) -> None:
        super().__init__(1004, f"Unknown or immutable config fields: {fields}", 422)


# --- 2xxx: Market state ---

class InvalidStateTransitionError(StateError):
    def __init__(self, from_state: str, to_state: str) -> None:
        super().__init__(2001, f"Invalid state transition: {from_state} -> {to_state}", 409)


class InvalidMarketStateError(StateError):
    def __init__(self, market_id: str, state: str) -> None:
        super().__init__(2002, f"Market {market_id} in state {state} cannot perform this action", 409)


class InvalidStateForVotingError(StateError):
    def __init__(self, market_id: str, state: str) -> None:
        super().__init__(2003, f"Market {market_id} in state {state} is not open for this vote", 409)


class ProtocolPausedError(StateError):
    def __init__(self) -> None:
        super().__init__(2004, "Protocol is paused", 423)


class MarketAlreadyCancelledError(StateError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2005, f"Market already cancelled: {market_id}", 409)


class ReentrancyDetectedError(StateError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2006, f"Re-entrant operation on locked market {market_id}", 409)


class MarketNotFoundError(StateError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2007, f"Market not found: {market_id}", 404)


class MarketAlreadyExistsError(StateError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2008, f"Market already exists: {market_id}", 409)


# --- 3xxx: Trading ---

class ZeroAmountError(TradingError):
    def __init__(self) -> None:
        super().__init__(3001, "Amount must be greater than zero", 422)


class TradeTooSmallError(TradingError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(3002, f"Trade value {amount} below minimum {minimum}", 422)


class InsufficientSharesError(TradingError):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            3003, f"Insufficient shares: requested {requested}, available {available}", 422
        )


class SlippageExceededError(TradingError):
    def __init__(self, actual: int, limit: int) -> None:
        super().__init__(3004, f"Slippage exceeded: actual {actual}, limit {limit}", 422)


class InsufficientLiquidityError(TradingError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3005, f"Insufficient liquidity: required {required}, available {available}", 422
        )


class InsufficientFundsError(TradingError):
    def __init__(self, account: str, required: int, available: int) -> None:
        super().__init__(
            3006,
            f"Insufficient funds in {account}: required {required}, available {available}",
            422,
        )


class PositionNotFoundError(TradingError):
    def __init__(self, market_id: str, user_id: str) -> None:
        super().__init__(3007, f"No position for {user_id} in market {market_id}", 404)


# --- 4xxx: Resolution / voting ---

class ResolutionPeriodNotEndedError(ResolutionError):
    def __init__(self, ends_at: int) -> None:
        super().__init__(4001, f"Resolution period not ended (ends at {ends_at})", 409)


class DisputePeriodEndedError(ResolutionError):
    def __init__(self, ended_at: int) -> None:
        super().__init__(4002, f"Dispute period ended at {ended_at}", 409)


class NoResolutionProposedError(ResolutionError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4003, f"No resolution proposed for market {market_id}", 409)


class AlreadyResolvedError(ResolutionError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4004, f"Market already has a proposed resolution: {market_id}", 409)


class AlreadyClaimedError(ResolutionError):
    def __init__(self, market_id: str, user_id: str) -> None:
        super().__init__(4005, f"Winnings already claimed by {user_id} in {market_id}", 409)


class NoWinningsError(ResolutionError):
    def __init__(self, market_id: str, user_id: str) -> None:
        super().__init__(4006, f"No winnings for {user_id} in {market_id}", 422)


class NoVotesRecordedError(ResolutionError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4007, f"No votes recorded for market {market_id}", 409)


class InsufficientVotesError(ResolutionError):
    def __init__(self, rate_bps: int, threshold_bps: int) -> None:
        super().__init__(
            4008, f"Approval rate {rate_bps} bps below threshold {threshold_bps} bps", 409
        )


class DuplicateVoteError(ResolutionError):
    def __init__(self, market_id: str, voter: str, kind: str) -> None:
        super().__init__(4009, f"{voter} already cast a {kind} vote in {market_id}", 409)


class InsufficientReputationError(ResolutionError):
    def __init__(self, reputation_bps: int, required_bps: int) -> None:
        super().__init__(
            4010, f"Resolver reputation {reputation_bps} bps below {required_bps} bps", 403
        )


# --- 5xxx: Authorization ---

class UnauthorizedError(AuthorizationError):
    def __init__(self, detail: str = "Caller not authorized") -> None:
        super().__init__(5001, detail, 403)


class InvalidCredentialsError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(5002, "Invalid or expired token", 401)


# --- 6xxx: Arithmetic ---

class ArithmeticOverflowError(MathError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(6001, f"Arithmetic overflow {detail}".strip(), 422)


class ArithmeticUnderflowError(MathError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(6002, f"Arithmetic underflow {detail}".strip(), 422)


class DivisionByZeroError(MathError):
    def __init__(self) -> None:
        super().__init__(6003, "Division by zero", 422)


class InvalidLogarithmError(MathError):
    def __init__(self, x: int) -> None:
        super().__init__(6004, f"Logarithm undefined for {x}", 422)


class ExponentTooLargeError(MathError):
    def __init__(self, x: int) -> None:
        super().__init__(6005, f"Exponent out of domain: {x}", 422)


class BoundedLossExceededError(MathError):
    def __init__(self, loss: int, max_loss: int) -> None:
        super().__init__(6006, f"Realized loss {loss} exceeds bound {max_loss}", 500)


# --- 7xxx: Validation ---

class InvalidBParameterError(ValidationError):
    def __init__(self, b: int) -> None:
        super().__init__(7001, f"Liquidity parameter b out of range: {b}", 422)


class InvalidMarketIdError(ValidationError):
    def __init__(self, market_id: str) -> None:
        super().__init__(7002, f"Market id must be 64 hex characters: {market_id!r}", 422)


class InvalidEvidenceError(ValidationError):
    def __init__(self) -> None:
        super().__init__(7003, "Evidence reference must be 1 to 46 characters", 422)


class InvalidTimestampError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(7004, f"Invalid timestamp: {detail}", 422)


class InvalidAmountError(ValidationError):
    def __init__(self, amount: int) -> None:
        super().__init__(7005, f"Invalid amount: {amount}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Internal error: {detail}", 500)
