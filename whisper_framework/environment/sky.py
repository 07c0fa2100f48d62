"""
Sky mood - a single blend value between the blood-red sky (0.0) and
the dark night sky (1.0), eased over time by update(dt).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from whisper_engine.core.events import EventBus, WorldEvent

logger = logging.getLogger(__name__)

BLOOD_SKY = 0.0
NIGHT_SKY = 1.0


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class SkyController:
    """
    Holds the current mood and runs one transition at a time.

    Publishes WorldEvent.SKY_TRANSITION (start, target, duration) when
    a transition begins.
    """

    def __init__(self, events: Optional[EventBus] = None, mood: float = BLOOD_SKY):
        self.events = events
        self.mood = _clamp01(mood)

        self._start = self.mood
        self._target = self.mood
        self._duration = 0.0
        self._elapsed = 0.0
        self._on_complete: Optional[Callable[[], None]] = None
        self.is_transitioning = False

    def set_mood(self, mood: float) -> None:
        """Jump to a mood immediately, cancelling any transition."""
        self.mood = _clamp01(mood)
        self.is_transitioning = False
        self._on_complete = None

    def transition_to(
        self,
        mood: float,
        duration: float,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        """Blend from the current mood to a new one over duration seconds."""
        self._start = self.mood
        self._target = _clamp01(mood)
        self._duration = max(0.0, duration)
        self._elapsed = 0.0
        self._on_complete = on_complete
        self.is_transitioning = True

        logger.info(f"Sky transition {self._start:.2f} -> {self._target:.2f} over {self._duration}s")
        if self.events:
            self.events.publish(
                WorldEvent.SKY_TRANSITION,
                start=self._start,
                target=self._target,
                duration=self._duration,
            )

        if self._duration == 0:
            self._finish()

    def update(self, dt: float) -> None:
        if not self.is_transitioning:
            return

        self._elapsed += dt
        if self._elapsed >= self._duration:
            self._finish()
            return

        t = self._elapsed / self._duration
        t = t * t * (3.0 - 2.0 * t)
        self.mood = self._start + (self._target - self._start) * t

    def _finish(self) -> None:
        self.mood = self._target
        self.is_transitioning = False
        callback, self._on_complete = self._on_complete, None
        if callback:
            callback()
