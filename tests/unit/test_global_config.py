"""Tests for GlobalConfig validation and the ConfigStore update path."""

from dataclasses import replace

import pytest

from src.pm_admin.domain.global_config import ConfigStore, GlobalConfig
from src.pm_common.errors import (
    ImmutableConfigFieldError,
    InvalidFeeConfigurationError,
    InvalidThresholdError,
    InvalidTimeLimitError,
    UnauthorizedError,
)

BASE = GlobalConfig(admin="admin", aggregator="agg", protocol_fee_wallet="wallet")


class TestValidate:
    def test_defaults_valid(self) -> None:
        BASE.validate()
        assert BASE.total_fee_bps == 1000

    def test_fee_sum_above_100_percent(self) -> None:
        with pytest.raises(InvalidFeeConfigurationError):
            replace(BASE, protocol_fee_bps=5000, resolver_fee_bps=5000, lp_fee_bps=1).validate()

    def test_fee_sum_exactly_100_percent(self) -> None:
        replace(BASE, protocol_fee_bps=5000, resolver_fee_bps=2500, lp_fee_bps=2500).validate()

    def test_threshold_out_of_range(self) -> None:
        with pytest.raises(InvalidThresholdError):
            replace(BASE, dispute_success_threshold=10_001).validate()

    def test_zero_dispute_period(self) -> None:
        with pytest.raises(InvalidTimeLimitError):
            replace(BASE, dispute_period=0).validate()


class TestConfigStore:
    def test_invalid_initial_config_rejected(self) -> None:
        with pytest.raises(InvalidTimeLimitError):
            ConfigStore(replace(BASE, min_resolution_delay=0))

    def test_admin_update(self) -> None:
        store = ConfigStore(BASE)
        updated = store.update("admin", {"lp_fee_bps": 100})
        assert updated.lp_fee_bps == 100
        assert store.current.lp_fee_bps == 100

    def test_non_admin_rejected(self) -> None:
        store = ConfigStore(BASE)
        with pytest.raises(UnauthorizedError):
            store.update("mallory", {"lp_fee_bps": 100})

    def test_invalid_update_changes_nothing(self) -> None:
        store = ConfigStore(BASE)
        with pytest.raises(InvalidFeeConfigurationError):
            store.update("admin", {"protocol_fee_bps": 9000, "lp_fee_bps": 2000})
        assert store.current == BASE

    def test_immutable_field_rejected(self) -> None:
        store = ConfigStore(BASE)
        with pytest.raises(ImmutableConfigFieldError) as exc:
            store.update("admin", {"admin": "mallory"})
        assert exc.value.code == 1004
        assert exc.value.http_status == 422
        assert store.current.admin == "admin"

    def test_unknown_field_rejected(self) -> None:
        store = ConfigStore(BASE)
        with pytest.raises(ImmutableConfigFieldError):
            store.update("admin", {"no_such_field": 1})

    def test_toggle_pause(self) -> None:
        store = ConfigStore(BASE)
        assert store.toggle_pause("admin").is_paused is True
        assert store.toggle_pause("admin").is_paused is False

    def test_toggle_pause_requires_admin(self) -> None:
        store = ConfigStore(BASE)
        with pytest.raises(UnauthorizedError):
            store.toggle_pause("agg")
