"""
Flashlight - ownership, on/off state and optional battery drain.

Mirrors its state into the store ("has_flashlight", "flashlight_on")
so conditions and saves can see it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from whisper_engine.core.events import EventBus, WorldEvent

if TYPE_CHECKING:
    from whisper_framework.state.store import VariableStore

logger = logging.getLogger(__name__)


class FlashlightController:
    """
    Logical flashlight.

    Args:
        events: Bus for FLASHLIGHT_CHANGED (is_on, battery)
        store: Variable store to mirror state into (optional)
        use_battery: Drain battery while on
        max_battery: Battery capacity
        drain_rate: Battery units per second while on
    """

    def __init__(
        self,
        events: Optional[EventBus] = None,
        store: Optional[VariableStore] = None,
        use_battery: bool = False,
        max_battery: float = 100.0,
        drain_rate: float = 1.0,
    ):
        self.events = events
        self.store = store
        self.use_battery = use_battery
        self.max_battery = max_battery
        self.drain_rate = drain_rate

        self.battery = max_battery
        self.has_flashlight = False
        self.is_on = False

    @property
    def battery_percent(self) -> float:
        return self.battery / self.max_battery if self.max_battery > 0 else 0.0

    def enable(self, start_on: bool = False) -> None:
        """Give the player the flashlight."""
        self.has_flashlight = True
        if self.store:
            self.store.set_bool("has_flashlight", True)
        if start_on:
            self.turn_on()
        else:
            self.turn_off()

    def disable(self) -> None:
        """Take the flashlight away."""
        self.turn_off()
        self.has_flashlight = False
        if self.store:
            self.store.set_bool("has_flashlight", False)

    def turn_on(self) -> None:
        if not self.has_flashlight or self.is_on:
            return
        if self.use_battery and self.battery <= 0:
            logger.debug("Flashlight battery empty")
            return
        self._set_on(True)

    def turn_off(self) -> None:
        if self.is_on:
            self._set_on(False)

    def toggle(self) -> None:
        if self.is_on:
            self.turn_off()
        else:
            self.turn_on()

    def recharge(self, amount: float) -> None:
        self.battery = max(0.0, min(self.max_battery, self.battery + amount))

    def refill(self) -> None:
        self.battery = self.max_battery

    def update(self, dt: float) -> None:
        """Drain the battery; switches off when it runs out."""
        if not (self.is_on and self.use_battery):
            return

        self.battery -= self.drain_rate * dt
        if self.battery <= 0:
            self.battery = 0.0
            logger.info("Flashlight battery depleted")
            self.turn_off()

    def _set_on(self, on: bool) -> None:
        self.is_on = on
        if self.store:
            self.store.set_bool("flashlight_on", on)
        if self.events:
            self.events.publish(WorldEvent.FLASHLIGHT_CHANGED, is_on=on, battery=self.battery)
