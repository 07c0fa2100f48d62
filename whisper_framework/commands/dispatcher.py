"""
Command dispatcher - the one place command strings are executed.

Dialogue start/end commands, puzzle solved/failed lists, door and
activatable on-open/on-activate lists all run through here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable

from whisper_framework.commands.parsing import Command, parse_command

if TYPE_CHECKING:
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)

# Handler signature: (context, command) -> None
CommandHandler = Callable[["WorldContext", Command], None]


class CommandDispatcher:
    """
    Routes parsed commands to registered handlers.

    Guarantees:
    - execute() never raises; failures are logged
    - Unknown kinds are logged and ignored
    - execute_all() runs commands in order, each one finishing before
      the next starts, and never stops early

    Usage:
        dispatcher = CommandDispatcher(context)
        register_builtin_handlers(dispatcher)
        dispatcher.register("shake", shake_handler)
        dispatcher.execute_all(["flag:a", "var:score+10", "cam:window"])
    """

    def __init__(self, context: WorldContext):
        self.context = context
        self._handlers: dict[str, CommandHandler] = {}

    # --- Registry ---

    def register(self, kind: str, handler: CommandHandler) -> None:
        """Register (or replace) the handler for a command kind."""
        key = kind.strip().lower()
        if not key:
            raise ValueError("Command kind must not be empty")
        if key in self._handlers:
            logger.debug(f"Replacing handler for '{key}'")
        self._handlers[key] = handler

    def unregister(self, kind: str) -> None:
        self._handlers.pop(kind.strip().lower(), None)

    def has_handler(self, kind: str) -> bool:
        return kind.strip().lower() in self._handlers

    def kinds(self) -> list[str]:
        return sorted(self._handlers)

    # --- Execution ---

    def execute(self, command: str | Command | None) -> bool:
        """
        Execute a single command.

        Returns:
            True if a handler ran to completion
        """
        parsed = command if isinstance(command, Command) else parse_command(command)
        if parsed is None:
            return False

        handler = self._handlers.get(parsed.kind)
        if handler is None:
            logger.warning(f"Unknown command: '{parsed}'")
            return False

        logger.debug(f"Executing command: {parsed.kind} | {parsed.param}")

        try:
            handler(self.context, parsed)
        except Exception:
            logger.exception(f"Command '{parsed}' failed")
            return False

        return True

    def execute_all(self, commands: Iterable[str] | None) -> int:
        """
        Execute a command list in authored order.

        Returns:
            Number of commands whose handler ran to completion
        """
        if not commands:
            return 0

        completed = 0
        for command in list(commands):
            if self.execute(command):
                completed += 1
        return completed

    def is_known(self, command: str) -> bool:
        """True if the command parses to a registered kind."""
        parsed = parse_command(command)
        return parsed is not None and parsed.kind in self._handlers
