"""
Camera focus - points of interest the camera can be pointed at.

Only the logical target is tracked; interpolation is left to the
renderer. A focus with a positive hold releases itself through the
scheduler, and every focus is released when a dialogue ends.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from whisper_engine.core.events import DialogueEvent, Event, WorldEvent
from whisper_engine.core.scheduler import TimerHandle

if TYPE_CHECKING:
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


@dataclass
class FocusPoint:
    """A named camera target."""
    point_id: str
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)


class CameraFocusController:
    """
    Tracks which focus point the camera is looking at.

    Publishes WorldEvent.CAMERA_FOCUSED (point, hold) and
    CAMERA_RELEASED.
    """

    def __init__(self, context: WorldContext, release_on_dialogue_end: bool = True):
        self.context = context
        self._points: dict[str, FocusPoint] = {}
        self._release_timer: Optional[TimerHandle] = None

        self.current: Optional[FocusPoint] = None

        if release_on_dialogue_end:
            context.events.subscribe(DialogueEvent.DIALOGUE_ENDED, self._on_dialogue_ended)

    @property
    def is_focusing(self) -> bool:
        return self.current is not None

    @staticmethod
    def _key(point_id: str) -> str:
        return point_id.strip().lower()

    def add_point(self, point: FocusPoint) -> None:
        key = self._key(point.point_id)
        if key in self._points:
            logger.warning(f"Duplicate focus point id: {key}")
            return
        self._points[key] = point

    def get_point(self, point_id: str) -> Optional[FocusPoint]:
        return self._points.get(self._key(point_id))

    def focus_on(self, point_id: str, hold: Optional[float] = None) -> bool:
        """
        Point the camera at a focus point.

        Args:
            point_id: Focus point id (case-insensitive)
            hold: Seconds before auto-release. None or negative uses
                the configured default; 0 holds until released.

        Returns:
            False if no point has that id
        """
        point = self.get_point(point_id or "")
        if point is None:
            return False

        if hold is None or hold < 0:
            hold = self.context.config.default_camera_hold

        self._cancel_release()
        self.current = point
        logger.debug(f"Camera focus: {point.point_id} (hold {hold}s)")
        self.context.events.publish(WorldEvent.CAMERA_FOCUSED, point=point, hold=hold)

        if hold > 0:
            self._release_timer = self.context.scheduler.schedule(
                hold, self.release_focus, label=f"camera release '{point.point_id}'"
            )
        return True

    def release_focus(self) -> None:
        """Return the camera to the player. No-op when not focusing."""
        self._cancel_release()
        if self.current is None:
            return

        logger.debug(f"Camera released from {self.current.point_id}")
        self.current = None
        self.context.events.publish(WorldEvent.CAMERA_RELEASED)

    def _cancel_release(self) -> None:
        if self._release_timer is not None:
            self._release_timer.cancel()
            self._release_timer = None

    def _on_dialogue_ended(self, event: Event) -> None:
        self.release_focus()
