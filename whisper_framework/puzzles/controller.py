"""
Puzzle outcomes - the command lists run when a puzzle is solved or
failed. Puzzle mechanics (tiles, rotating elements) live in the game.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from whisper_engine.core.events import WorldEvent
from whisper_engine.core.scheduler import TimerHandle
from whisper_framework.commands.parsing import parse_command

if TYPE_CHECKING:
    from whisper_framework.camera.focus import FocusPoint
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


class PuzzleConfig(BaseModel):
    """
    Authored puzzle settings.

    Attributes:
        puzzle_id: Unique id
        on_solved_commands: Run once when solved
        on_failed_commands: Run on every wrong attempt
        solved_flag: Flag set when solved
        reset_delay: Seconds between a failure and the reset
        camera_focus_point: Focus point used while solving
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    puzzle_id: str
    on_solved_commands: tuple[str, ...] = ()
    on_failed_commands: tuple[str, ...] = ()
    solved_flag: Optional[str] = None
    reset_delay: float = Field(default=0.5, ge=0)
    camera_focus_point: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PuzzleConfig:
        return cls(
            puzzle_id=data['id'],
            on_solved_commands=tuple(data.get('on_solved', [])),
            on_failed_commands=tuple(data.get('on_failed', [])),
            solved_flag=data.get('solved_flag'),
            reset_delay=data.get('reset_delay', 0.5),
            camera_focus_point=data.get('camera_focus_point'),
        )


def has_camera_command(commands) -> bool:
    """True if any command in the list is a cam command."""
    for text in commands:
        command = parse_command(text)
        if command is not None and command.kind == "cam":
            return True
    return False


class PuzzleController:
    """
    Runs a puzzle's outcome commands.

    After solving, the camera is released once the post-solve hold
    passes, unless the solved commands steer the camera themselves.
    A failure runs the failed commands and resets after reset_delay.

    Publishes WorldEvent.PUZZLE_SOLVED / PUZZLE_FAILED (puzzle_id).
    """

    def __init__(
        self,
        context: WorldContext,
        config: PuzzleConfig,
        on_reset: Optional[Callable[[], None]] = None,
    ):
        self.context = context
        self.config = config
        self.on_reset = on_reset

        self.is_solved = False
        self.in_solve_mode = False
        self._reset_timer: Optional[TimerHandle] = None
        self._release_timer: Optional[TimerHandle] = None

    def enter_solve_mode(self) -> bool:
        """Start solving; focuses the camera when a focus point is set."""
        if self.is_solved:
            logger.debug(f"Puzzle '{self.config.puzzle_id}' already solved")
            return False

        self.in_solve_mode = True
        camera = self.context.camera
        if self.config.camera_focus_point and camera is not None:
            if not camera.focus_on(self.config.camera_focus_point):
                logger.warning(f"Focus point not found: {self.config.camera_focus_point}")
        return True

    def exit_solve_mode(self) -> None:
        if not self.in_solve_mode:
            return
        self.in_solve_mode = False
        if self.context.camera is not None:
            self.context.camera.release_focus()

    def solve(self) -> bool:
        """
        Mark the puzzle solved and run its solved commands.

        Returns:
            False if it was already solved
        """
        if self.is_solved:
            return False

        self._cancel_reset()
        self.is_solved = True
        self.in_solve_mode = False
        logger.info(f"Puzzle solved: {self.config.puzzle_id}")

        if self.config.solved_flag:
            self.context.store.set_bool(self.config.solved_flag, True)

        commands = self.config.on_solved_commands
        self.context.dispatcher.execute_all(commands)

        camera = self.context.camera
        if not has_camera_command(commands) and camera is not None:
            self._cancel_release()
            self._release_timer = self.context.scheduler.schedule(
                self.context.config.post_solve_camera_hold,
                self._make_release_callback(camera.current),
                label=f"puzzle '{self.config.puzzle_id}' camera release",
            )

        self.context.events.publish(WorldEvent.PUZZLE_SOLVED, puzzle_id=self.config.puzzle_id)
        return True

    def fail(self) -> None:
        """Run the failed commands and schedule a reset."""
        if self.is_solved:
            return

        logger.info(f"Puzzle failed: {self.config.puzzle_id}")
        self.context.events.publish(WorldEvent.PUZZLE_FAILED, puzzle_id=self.config.puzzle_id)
        self.context.dispatcher.execute_all(self.config.on_failed_commands)

        self._cancel_reset()
        self._reset_timer = self.context.scheduler.schedule(
            self.config.reset_delay,
            self.reset,
            label=f"puzzle '{self.config.puzzle_id}' reset",
        )

    def reset(self) -> None:
        """Put the mechanics back after a failure. Leaves is_solved alone."""
        self._reset_timer = None
        if self.on_reset:
            self.on_reset()

    def reset_puzzle(self) -> None:
        """Return to the unsolved starting state, dropping pending timers."""
        self._cancel_reset()
        self._cancel_release()
        self.is_solved = False
        self.in_solve_mode = False
        logger.debug(f"Puzzle reset: {self.config.puzzle_id}")
        if self.on_reset:
            self.on_reset()

    def _make_release_callback(self, focused: Optional[FocusPoint]) -> Callable[[], None]:
        def release_if_unchanged() -> None:
            self._release_timer = None
            camera = self.context.camera
            # Keep a newer focus, such as one from a cam: command
            if focused is not None and camera.current is focused:
                camera.release_focus()

        return release_if_unchanged

    def _cancel_reset(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None

    def _cancel_release(self) -> None:
        if self._release_timer is not None:
            self._release_timer.cancel()
            self._release_timer = None
