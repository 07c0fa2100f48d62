"""
Deferred-task scheduler driven by the host's frame clock.

Replaces coroutine/Invoke style delays: a callback is scheduled against
game time and fires from update(dt) once its delay has elapsed. Nothing
runs on another thread.

Usage:
    scheduler = Scheduler()
    handle = scheduler.schedule(3.0, end_dialogue)
    ...
    scheduler.update(dt)   # called once per tick by the host loop
    handle.cancel()        # safe even after it fired
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    """A scheduled callback."""
    due: float
    callback: Callable[[], None]
    label: str = ""
    seq: int = 0
    cancelled: bool = False
    fired: bool = False
    _scheduler: Optional[Scheduler] = field(default=None, repr=False)

    @property
    def pending(self) -> bool:
        """True until the timer fires or is cancelled."""
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        """Cancel the timer. No-op if it already fired."""
        if self.pending:
            self.cancelled = True
            if self._scheduler:
                self._scheduler._discard(self)


class Scheduler:
    """
    Schedules callbacks after a delay in game seconds.

    Timers due in the same update fire in due order, ties broken by
    scheduling order. A callback may schedule further timers; those
    are considered from the next update unless their delay is zero.
    """

    def __init__(self):
        self._time = 0.0
        self._timers: list[TimerHandle] = []
        self._counter = itertools.count()

    @property
    def time(self) -> float:
        """Game time accumulated through update()."""
        return self._time

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def schedule(
        self,
        delay: float,
        callback: Callable[[], None],
        label: str = "",
    ) -> TimerHandle:
        """
        Schedule callback to run once delay seconds of game time pass.

        Args:
            delay: Seconds to wait (negative values are treated as 0)
            callback: Zero-argument callable
            label: Optional name used in logs

        Returns:
            Handle that can cancel the timer
        """
        handle = TimerHandle(
            due=self._time + max(0.0, delay),
            callback=callback,
            label=label,
            seq=next(self._counter),
            _scheduler=self,
        )
        self._timers.append(handle)
        logger.debug(f"Scheduled '{label or callback}' in {delay:.2f}s")
        return handle

    def update(self, dt: float) -> int:
        """
        Advance game time and fire due timers.

        Returns:
            Number of callbacks fired
        """
        self._time += max(0.0, dt)
        fired = 0

        while True:
            due = [t for t in self._timers if t.due <= self._time]
            if not due:
                break

            timer = min(due, key=lambda t: (t.due, t.seq))
            self._timers.remove(timer)
            timer.fired = True
            fired += 1

            try:
                timer.callback()
            except Exception:
                logger.exception(f"Scheduled callback '{timer.label}' failed")

        return fired

    def cancel_all(self) -> None:
        """Cancel every pending timer."""
        for timer in list(self._timers):
            timer.cancel()

    def _discard(self, handle: TimerHandle) -> None:
        if handle in self._timers:
            self._timers.remove(handle)
