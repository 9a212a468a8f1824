"""Tests for AdminService: config updates and the emergency pause."""

import pytest

from src.container import Container
from src.pm_common.enums import EventType
from src.pm_common.errors import InvalidThresholdError, UnauthorizedError
from tests.factories import ADMIN, T0


class TestUpdateGlobalConfig:
    def test_update_publishes_event(self, container: Container) -> None:
        updated = container.admin.update_global_config(ADMIN, {"dispute_period": 3600})
        assert updated.dispute_period == 3600
        (event,) = container.bus.drain()
        assert event.event_type == EventType.CONFIG_UPDATED
        assert event.market_id is None
        assert event.timestamp == T0
        assert event.payload == {"updated_by": ADMIN, "fields": ["dispute_period"]}

    def test_rejected_update_publishes_nothing(self, container: Container) -> None:
        with pytest.raises(InvalidThresholdError):
            container.admin.update_global_config(ADMIN, {"min_resolver_reputation": 20_000})
        assert container.bus.pending() == 0

    def test_non_admin(self, container: Container) -> None:
        with pytest.raises(UnauthorizedError):
            container.admin.update_global_config("mallory", {"lp_fee_bps": 0})


class TestEmergencyPause:
    def test_toggle(self, container: Container) -> None:
        assert container.admin.emergency_pause(ADMIN) is True
        assert container.admin.get_global_config().is_paused is True
        assert container.admin.emergency_pause(ADMIN) is False
        kinds = [e.event_type for e in container.bus.drain()]
        assert kinds == [EventType.PAUSE_TOGGLED, EventType.PAUSE_TOGGLED]
