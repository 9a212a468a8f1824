"""Deployment-wide configuration and its atomic update path."""

import logging
import threading
from dataclasses import asdict, dataclass, replace
from typing import Any

from config.settings import Settings
from src.pm_common.errors import (
    ImmutableConfigFieldError,
    InvalidFeeConfigurationError,
    InvalidThresholdError,
    InvalidTimeLimitError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

MAX_BPS = 10_000

# Fields an admin may change through update_global_config.
MUTABLE_FIELDS = frozenset({
    "protocol_fee_wallet",
    "aggregator",
    "protocol_fee_bps",
    "resolver_fee_bps",
    "lp_fee_bps",
    "proposal_approval_threshold",
    "dispute_success_threshold",
    "min_resolution_delay",
    "dispute_period",
    "min_resolver_reputation",
})


@dataclass(frozen=True)
class GlobalConfig:
    admin: str
    aggregator: str
    protocol_fee_wallet: str
    protocol_fee_bps: int = 300
    resolver_fee_bps: int = 200
    lp_fee_bps: int = 500
    proposal_approval_threshold: int = 7000
    dispute_success_threshold: int = 6000
    min_resolution_delay: int = 86_400
    dispute_period: int = 259_200
    min_resolver_reputation: int = 8000
    is_paused: bool = False

    @property
    def total_fee_bps(self) -> int:
        return self.protocol_fee_bps + self.resolver_fee_bps + self.lp_fee_bps

    def validate(self) -> None:
        """Raise a ConfigurationError subclass for the first violated invariant."""
        for name in ("protocol_fee_bps", "resolver_fee_bps", "lp_fee_bps"):
            value = getattr(self, name)
            if value < 0 or value > MAX_BPS:
                raise InvalidFeeConfigurationError(value)
        if self.total_fee_bps > MAX_BPS:
            raise InvalidFeeConfigurationError(self.total_fee_bps)
        for name in (
            "proposal_approval_threshold",
            "dispute_success_threshold",
            "min_resolver_reputation",
        ):
            value = getattr(self, name)
            if value < 0 or value > MAX_BPS:
                raise InvalidThresholdError(name, value)
        for name in ("min_resolution_delay", "dispute_period"):
            value = getattr(self, name)
            if value <= 0:
                raise InvalidTimeLimitError(name, value)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_settings(cls, s: Settings) -> "GlobalConfig":
        return cls(
            admin=s.ADMIN_ID,
            aggregator=s.AGGREGATOR_ID,
            protocol_fee_wallet=s.PROTOCOL_FEE_WALLET,
            protocol_fee_bps=s.PROTOCOL_FEE_BPS,
            resolver_fee_bps=s.RESOLVER_FEE_BPS,
            lp_fee_bps=s.LP_FEE_BPS,
            proposal_approval_threshold=s.PROPOSAL_APPROVAL_THRESHOLD_BPS,
            dispute_success_threshold=s.DISPUTE_SUCCESS_THRESHOLD_BPS,
            min_resolution_delay=s.MIN_RESOLUTION_DELAY_SECONDS,
            dispute_period=s.DISPUTE_PERIOD_SECONDS,
            min_resolver_reputation=s.MIN_RESOLVER_REPUTATION_BPS,
        )


class ConfigStore:
    """Holds the current GlobalConfig. Readers get an immutable snapshot;
    writers build a full candidate, validate it, then swap it in under the lock.
    """

    def __init__(self, config: GlobalConfig) -> None:
        config.validate()
        self._config = config
        self._lock = threading.Lock()

    @property
    def current(self) -> GlobalConfig:
        return self._config

    def require_admin(self, caller: str) -> None:
        if caller != self._config.admin:
            raise UnauthorizedError(f"{caller} is not the admin")

    def update(self, caller: str, changes: dict[str, Any]) -> GlobalConfig:
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ImmutableConfigFieldError(sorted(unknown))
        with self._lock:
            self.require_admin(caller)
            candidate = replace(self._config, **changes)
            candidate.validate()
            self._config = candidate
        logger.info("Global config updated by %s: %s", caller, sorted(changes))
        return candidate

    def toggle_pause(self, caller: str) -> GlobalConfig:
        with self._lock:
            self.require_admin(caller)
            self._config = replace(self._config, is_paused=not self._config.is_paused)
        logger.warning("Emergency pause toggled by %s: is_paused=%s", caller, self._config.is_paused)
        return self._config
