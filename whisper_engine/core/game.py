"""
Host tick loop with a fixed timestep.

The narrative core is synchronous; the only time-based behaviour is
deferred callbacks (end-node auto close, camera holds, puzzle resets)
and per-tick collaborators (sky transitions, flashlight drain). The
HostLoop drives both:
- Fixed timestep updates (deterministic timers)
- pygame.time.Clock frame capping
- Catch-up limited by max_frame_skip
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

import pygame

from whisper_engine.core.scheduler import Scheduler

logger = logging.getLogger(__name__)


class Updatable(Protocol):
    """Anything advanced once per fixed tick."""

    def update(self, dt: float) -> None: ...


class GameConfig:
    """Configuration for the host loop."""

    def __init__(
        self,
        title: str = "Whispering Gate",
        target_fps: int = 60,
        fixed_timestep: float = 1 / 60,
        max_frame_skip: int = 5,
        log_level: str = "INFO",
        content_path: str = "game/data",
    ):
        self.title = title
        self.target_fps = target_fps
        self.fixed_timestep = fixed_timestep
        self.max_frame_skip = max_frame_skip
        self.log_level = log_level
        self.content_path = content_path


class HostLoop:
    """
    Fixed timestep tick driver for the scheduler and updatables.

    Usage:
        loop = HostLoop(GameConfig(), scheduler)
        loop.add(sky_controller)
        loop.run(until=lambda: not dialogue.is_active)

    Tests and embedding hosts call step(dt) directly.
    """

    def __init__(self, config: GameConfig | None = None, scheduler: Scheduler | None = None):
        self.config = config or GameConfig()
        self.scheduler = scheduler or Scheduler()
        self._updatables: list[Updatable] = []
        self._running = False
        self._paused = False
        self._accumulator = 0.0
        self._clock: Optional[pygame.time.Clock] = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def add(self, updatable: Updatable) -> None:
        """Register an object whose update(dt) runs every tick."""
        if updatable not in self._updatables:
            self._updatables.append(updatable)

    def remove(self, updatable: Updatable) -> None:
        if updatable in self._updatables:
            self._updatables.remove(updatable)

    def pause(self) -> None:
        """Pause the loop (stops fixed updates)."""
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def quit(self) -> None:
        """Request loop shutdown."""
        self._running = False

    def step(self, frame_time: float) -> int:
        """
        Feed elapsed real time into the fixed timestep accumulator.

        Args:
            frame_time: Seconds since the previous call

        Returns:
            Number of fixed updates performed
        """
        # Prevent spiral of death
        self._accumulator += min(frame_time, 0.25)

        updates = 0
        step = self.config.fixed_timestep
        while self._accumulator >= step:
            if not self._paused:
                self._fixed_update(step)
            self._accumulator -= step
            updates += 1

            if updates >= self.config.max_frame_skip:
                self._accumulator = 0.0
                break

        return updates

    def run(
        self,
        until: Callable[[], bool] | None = None,
        max_frames: int | None = None,
    ) -> None:
        """
        Run the loop until quit(), until() returns True, or max_frames.

        Args:
            until: Optional stop predicate checked every frame
            max_frames: Optional frame limit
        """
        self._running = True
        self._clock = pygame.time.Clock()
        frames = 0

        logger.info(f"{self.config.title}: host loop started")

        while self._running:
            frame_ms = self._clock.tick(self.config.target_fps)
            self.step(frame_ms / 1000.0)
            frames += 1

            if until is not None and until():
                break
            if max_frames is not None and frames >= max_frames:
                break

        self._running = False
        logger.info(f"{self.config.title}: host loop stopped after {frames} frames")

    def _fixed_update(self, dt: float) -> None:
        self.scheduler.update(dt)
        for updatable in list(self._updatables):
            updatable.update(dt)
        self.ticks += 1
