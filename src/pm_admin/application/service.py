# src/pm_admin/application/service.py
"""Admin application service: global config updates and the emergency pause."""
import logging
from collections.abc import Callable
from typing import Any

from src.pm_admin.domain.global_config import ConfigStore, GlobalConfig
from src.pm_common.enums import EventType
from src.pm_market.domain.events import DomainEvent, EventBus

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, config: ConfigStore, bus: EventBus, clock: Callable[[], int]) -> None:
        self._config = config
        self._bus = bus
        self._clock = clock

    def get_global_config(self) -> GlobalConfig:
        return self._config.current

    def update_global_config(self, caller: str, changes: dict[str, Any]) -> GlobalConfig:
        """Validate the full candidate config and swap it in, or change nothing."""
        updated = self._config.update(caller, changes)
        self._bus.publish([
            DomainEvent(
                event_type=EventType.CONFIG_UPDATED,
                market_id=None,
                timestamp=self._clock(),
                payload={"updated_by": caller, "fields": sorted(changes)},
            )
        ])
        return updated

    def emergency_pause(self, caller: str) -> bool:
        """Toggle the global trading pause. Returns the new flag."""
        updated = self._config.toggle_pause(caller)
        self._bus.publish([
            DomainEvent(
                event_type=EventType.PAUSE_TOGGLED,
                market_id=None,
                timestamp=self._clock(),
                payload={"updated_by": caller, "is_paused": updated.is_paused},
            )
        ])
        return updated.is_paused
