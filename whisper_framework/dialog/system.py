"""
Dialogue manager - walks a dialogue tree one node at a time.

Handles:
- Starting trees (at their start node or at a named node)
- Filtering choices against the variable store
- Applying choice impacts and running node commands
- Auto-closing end nodes through the scheduler
- Publishing DialogueEvents for UI, audio and triggers

Usage:
    context = WorldContext.create()
    manager = context.dialogue
    context.events.subscribe(DialogueEvent.NODE_DISPLAYED, on_node, weak=False)

    manager.start_dialogue(tree)
    for i, choice in enumerate(manager.get_visible_choices()):
        print(i, choice.text)
    manager.select_choice(0)
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from whisper_engine.core.events import DialogueEvent
from whisper_engine.core.scheduler import TimerHandle
from whisper_framework.dialog.models import (
    ChoiceImpact,
    DialogueChoice,
    DialogueNode,
    DialogueTree,
)

if TYPE_CHECKING:
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


class DialogueState(Enum):
    """Lifecycle of the dialogue manager."""
    IDLE = auto()          # Nothing started yet
    SHOWING_NODE = auto()  # A node is on screen
    ENDED = auto()         # Last session finished


class DialogueManager:
    """
    Runs one dialogue session at a time.

    Rules:
    - Visible choices are recomputed from the store on every call
    - Starting while a session is showing ends it first
      (DIALOGUE_ENDED fires for the old session) and starts fresh
    - DIALOGUE_ENDED fires exactly once per session
    - Calls made while an operation is running (from a command or an
      event handler) are queued, return True, and run in order once
      the current operation finishes
    - No operation raises; problems are logged
    """

    def __init__(self, context: WorldContext):
        self.context = context

        self._state = DialogueState.IDLE
        self._tree: Optional[DialogueTree] = None
        self._node: Optional[DialogueNode] = None
        self._session_id = 0
        self._end_timer: Optional[TimerHandle] = None

        self._busy = False
        self._pending: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()

    # --- Properties ---

    @property
    def state(self) -> DialogueState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == DialogueState.SHOWING_NODE

    @property
    def current_node(self) -> Optional[DialogueNode]:
        return self._node

    @property
    def current_tree(self) -> Optional[DialogueTree]:
        return self._tree

    @property
    def session_id(self) -> int:
        """Increments each time a session starts (0 before the first)."""
        return self._session_id

    # --- Public API ---

    def start_dialogue(self, tree: Optional[DialogueTree]) -> bool:
        """
        Start a tree at its start node.

        Returns:
            False if the tree or its start node is missing
        """
        return self._call(self._start, tree, None)

    def start_dialogue_at_node(self, tree: Optional[DialogueTree], node_id: str) -> bool:
        """Start a tree at a named node (case-insensitive)."""
        if not node_id or not node_id.strip():
            logger.error("Tried to start dialogue with an empty node id")
            return False
        return self._call(self._start, tree, node_id)

    def get_visible_choices(self) -> list[DialogueChoice]:
        """Choices of the current node whose show condition holds now."""
        if self._node is None:
            return []

        store = self.context.store
        return [
            choice for choice in self._node.choices
            if not choice.has_condition or store.evaluate_condition(choice.show_condition)
        ]

    def select_choice(self, index: int) -> bool:
        """
        Select a visible choice by index.

        Returns:
            False if no dialogue is active or the index is out of range
        """
        return self._call(self._select, index)

    def advance_to_next_node(self) -> bool:
        """
        Continue past a node that has no visible choices.

        Returns:
            False if visible choices are waiting for the player
        """
        return self._call(self._advance)

    def force_end(self) -> bool:
        """End the running session. No-op when nothing is showing."""
        return self._call(self._end_session)

    @property
    def is_busy(self) -> bool:
        """True while an operation (and its commands) is running."""
        return self._busy

    def run_when_idle(self, callback: Callable[[], Any]) -> bool:
        """
        Run a callback now, or after the current operation and anything
        already queued when called from inside one.
        """
        return self._call(self._run_callback, callback)

    # --- Re-entrancy ---

    def _call(self, operation: Callable[..., bool], *args: Any) -> bool:
        if self._busy:
            logger.debug(f"Queued {operation.__name__}{args} until the current operation finishes")
            self._pending.append((operation, args))
            return True

        self._busy = True
        try:
            result = self._guarded(operation, args)
            while self._pending:
                queued, queued_args = self._pending.popleft()
                self._guarded(queued, queued_args)
        finally:
            self._busy = False
        return result

    @staticmethod
    def _guarded(operation: Callable[..., bool], args: tuple[Any, ...]) -> bool:
        try:
            return operation(*args)
        except Exception:
            logger.exception(f"Dialogue operation {operation.__name__} failed")
            return False

    # --- Operations ---

    def _start(self, tree: Optional[DialogueTree], node_id: Optional[str]) -> bool:
        if tree is None:
            logger.error("Tried to start a null dialogue tree")
            return False

        node = tree.get_node(node_id) if node_id else tree.start()
        if node is None:
            if node_id:
                logger.error(f"Dialogue tree '{tree.id}' has no node '{node_id}'")
            else:
                logger.error(f"Dialogue tree '{tree.id}' has no start node")
            return False

        if self.is_active:
            logger.info(f"Restarting dialogue: '{self._tree.id}' -> '{tree.id}'")
            self._end_session()

        self._tree = tree
        self._session_id += 1
        self._state = DialogueState.SHOWING_NODE
        logger.info(f"Dialogue started: '{tree.id}' at '{node.id}' (session {self._session_id})")

        self.context.events.publish(
            DialogueEvent.DIALOGUE_STARTED,
            tree=tree,
            session_id=self._session_id,
        )
        self._show_node(node)
        return True

    def _select(self, index: int) -> bool:
        if not self.is_active:
            logger.debug("select_choice ignored: no active dialogue")
            return False

        visible = self.get_visible_choices()
        if not 0 <= index < len(visible):
            logger.warning(f"Invalid choice index {index} ({len(visible)} visible)")
            return False

        node = self._node
        choice = visible[index]
        logger.debug(f"Choice selected: '{choice.text}'")

        self.context.events.publish(
            DialogueEvent.CHOICE_SELECTED,
            node=node,
            choice=choice,
            index=index,
        )
        self._apply_impacts(choice.impacts)
        self._run_commands(node.end_commands)
        self._go_to(choice.next_node)
        return True

    def _advance(self) -> bool:
        if not self.is_active:
            logger.debug("advance ignored: no active dialogue")
            return False

        visible = self.get_visible_choices()
        if visible:
            if self._tree.auto_advance_if_single_choice and len(visible) == 1:
                return self._select(0)
            logger.debug(f"Cannot advance: {len(visible)} visible choices waiting")
            return False

        node = self._node
        self._run_commands(node.end_commands)
        self._go_to(node.next_node_if_auto)
        return True

    def _end_session(self) -> bool:
        if not self.is_active:
            return False

        self._cancel_end_timer()
        tree = self._tree
        session_id = self._session_id

        self._state = DialogueState.ENDED
        self._node = None
        self._tree = None

        logger.info(f"Dialogue ended: '{tree.id}' (session {session_id})")
        self.context.events.publish(
            DialogueEvent.DIALOGUE_ENDED,
            tree=tree,
            session_id=session_id,
        )
        return True

    @staticmethod
    def _run_callback(callback: Callable[[], Any]) -> bool:
        callback()
        return True

    # --- Helpers ---

    def _go_to(self, node_id: Optional[str]) -> None:
        if node_id is None:
            self._end_session()
            return

        node = self._tree.get_node(node_id)
        if node is None:
            logger.error(f"Dialogue node not found: '{node_id}' in '{self._tree.id}'")
            self._end_session()
            return

        self._show_node(node)

    def _show_node(self, node: DialogueNode) -> None:
        self._cancel_end_timer()
        self._node = node
        logger.debug(f"Showing node: '{node.id}'")

        self._run_commands(node.start_commands)

        events = self.context.events
        events.publish(DialogueEvent.NODE_DISPLAYED, node=node, session_id=self._session_id)

        visible = self.get_visible_choices()
        events.publish(DialogueEvent.CHOICES_UPDATED, count=len(visible), choices=visible)

        if not node.is_end_node:
            return

        if visible:
            logger.debug(f"End node '{node.id}' has {len(visible)} choices; waiting for input")
            return

        grace = self.context.config.end_node_grace_seconds
        delay = node.display_duration if node.display_duration > 0 else grace
        logger.debug(f"End node '{node.id}' closes in {delay}s")
        self._end_timer = self.context.scheduler.schedule(
            delay,
            self._make_end_callback(self._session_id, node),
            label=f"dialogue end '{node.id}'",
        )

    def _make_end_callback(self, session_id: int, node: DialogueNode) -> Callable[[], None]:
        def end_after_display() -> None:
            if self._session_id == session_id and self._node is node:
                self._call(self._end_session)

        return end_after_display

    def _cancel_end_timer(self) -> None:
        if self._end_timer is not None:
            self._end_timer.cancel()
            self._end_timer = None

    def _apply_impacts(self, impacts: Iterable[ChoiceImpact]) -> None:
        store = self.context.store
        for impact in impacts:
            if impact.is_conditional and not store.evaluate_condition(impact.apply_condition):
                continue

            store.add_int(impact.variable_name, impact.value_change)
            logger.debug(f"Impact: {impact.variable_name} += {impact.value_change}")
            self.context.events.publish(
                DialogueEvent.IMPACT_APPLIED,
                variable=impact.variable_name,
                change=impact.value_change,
            )

    def _run_commands(self, commands: Iterable[str]) -> None:
        if not commands:
            return
        dispatcher = self.context.dispatcher
        if dispatcher is None:
            logger.warning("No command dispatcher; node commands skipped")
            return
        dispatcher.execute_all(commands)
