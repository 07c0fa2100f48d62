"""
Commands module - one dispatcher for every embedded command list.

Provides:
- Command parsing ("kind:param")
- CommandDispatcher with a kind -> handler registry
- Built-in handlers for variables, inventory, journal, camera, doors,
  activatable objects, flashlight, endings, sky mood and save slots
- Collaborator interfaces those handlers call
"""

from whisper_framework.commands.parsing import Command, parse_command
from whisper_framework.commands.dispatcher import CommandDispatcher, CommandHandler
from whisper_framework.commands.handlers import (
    BUILTIN_HANDLERS,
    register_builtin_handlers,
    parse_var_expression,
    parse_mood,
)

__all__ = [
    "Command",
    "parse_command",
    "CommandDispatcher",
    "CommandHandler",
    "BUILTIN_HANDLERS",
    "register_builtin_handlers",
    "parse_var_expression",
    "parse_mood",
]
