"""
Structural checks for dialogue trees, run at load time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from whisper_engine.core.errors import DialogueValidationError
from whisper_framework.commands.parsing import parse_command
from whisper_framework.dialog.models import DialogueTree
from whisper_framework.state.conditions import ConditionSyntaxError, parse_condition

if TYPE_CHECKING:
    from whisper_framework.commands.dispatcher import CommandDispatcher


def _check_condition(expression: Optional[str], where: str, problems: list[str]) -> None:
    if not expression or not expression.strip():
        return
    try:
        parse_condition(expression)
    except ConditionSyntaxError as e:
        problems.append(f"{where}: bad condition '{expression}' ({e})")


def _check_commands(
    commands: Iterable[str],
    where: str,
    dispatcher: Optional[CommandDispatcher],
    problems: list[str],
) -> None:
    if dispatcher is None:
        return
    for text in commands:
        command = parse_command(text)
        if command is None:
            problems.append(f"{where}: empty command")
        elif not dispatcher.has_handler(command.kind):
            problems.append(f"{where}: unknown command kind '{command.kind}'")


def validate_tree(
    tree: DialogueTree,
    dispatcher: Optional[CommandDispatcher] = None,
) -> list[str]:
    """
    Find authoring mistakes in a tree.

    Args:
        tree: Tree to check
        dispatcher: If given, command kinds are checked against it

    Returns:
        Human-readable problems (empty when the tree is valid)
    """
    problems: list[str] = []

    if not tree.start_node:
        problems.append("no start node")
    elif tree.start() is None:
        problems.append(f"start node '{tree.start_node}' does not exist")

    seen: set[str] = set()
    for node in tree.nodes:
        key = node.id.lower()
        if key in seen:
            problems.append(f"duplicate node id '{node.id}'")
        seen.add(key)

    for node in tree.nodes:
        where = f"node '{node.id}'"

        if node.next_node_if_auto and tree.get_node(node.next_node_if_auto) is None:
            problems.append(f"{where}: auto target '{node.next_node_if_auto}' does not exist")

        if not node.choices and not node.next_node_if_auto and not node.is_end_node:
            problems.append(f"{where}: dead end (no choices, no auto target, not an end node)")

        _check_commands(node.start_commands, where, dispatcher, problems)
        _check_commands(node.end_commands, where, dispatcher, problems)

        for index, choice in enumerate(node.choices):
            choice_where = f"{where} choice {index}"
            if choice.next_node and tree.get_node(choice.next_node) is None:
                problems.append(f"{choice_where}: target '{choice.next_node}' does not exist")
            if choice.has_condition:
                _check_condition(choice.show_condition, choice_where, problems)
            for impact in choice.impacts:
                _check_condition(impact.apply_condition, choice_where, problems)

    return problems


def ensure_valid(
    tree: DialogueTree,
    dispatcher: Optional[CommandDispatcher] = None,
) -> DialogueTree:
    """Return the tree, or raise DialogueValidationError listing its problems."""
    problems = validate_tree(tree, dispatcher)
    if problems:
        raise DialogueValidationError(tree.id, problems)
    return tree
