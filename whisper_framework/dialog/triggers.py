"""
Dialogue triggers - start a tree when the player interacts.

A trigger can be gated by a condition and by completed segments,
fire only once, raise a flag when it fires, and run commands or mark
its segment complete when its dialogue ends.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from whisper_engine.core.events import DialogueEvent, Event
from whisper_framework.dialog.models import DialogueTree

if TYPE_CHECKING:
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


def segment_flag(segment_id: str) -> str:
    """Store flag recording that a dialogue segment was completed."""
    return f"segment_{segment_id}_completed"


class DialogueTrigger:
    """
    Starts a dialogue tree on demand.

    Usage:
        trigger = DialogueTrigger(
            context, tree,
            single_use=True,
            required_condition="journal_found",
            segment_id="writer_intro",
        )
        trigger.fire()
    """

    def __init__(
        self,
        context: WorldContext,
        tree: DialogueTree,
        start_node: Optional[str] = None,
        single_use: bool = False,
        required_condition: Optional[str] = None,
        required_segments: Iterable[str] = (),
        segment_id: Optional[str] = None,
        set_flag_on_trigger: Optional[str] = None,
        on_end_commands: Iterable[str] = (),
    ):
        self.context = context
        self.tree = tree
        self.start_node = start_node
        self.single_use = single_use
        self.required_condition = required_condition
        self.required_segments = [s.strip() for s in required_segments if s.strip()]
        self.segment_id = segment_id
        self.set_flag_on_trigger = set_flag_on_trigger
        self.on_end_commands = list(on_end_commands)

        self.has_triggered = False
        self._waiting_for_end = False

    def can_fire(self) -> bool:
        """True if every prerequisite currently holds."""
        if self.single_use and self.has_triggered:
            return False

        store = self.context.store
        if self.required_condition and not store.evaluate_condition(self.required_condition):
            return False

        return all(store.get_bool(segment_flag(s)) for s in self.required_segments)

    def fire(self) -> bool:
        """
        Start the dialogue if the prerequisites hold.

        Returns:
            True if the dialogue was started (or queued)
        """
        if not self.can_fire():
            logger.debug(f"Trigger for '{self.tree.id}' not ready")
            return False

        manager = self.context.dialogue
        if manager is None:
            logger.error("No dialogue manager in context; trigger ignored")
            return False

        if self.start_node:
            started = manager.start_dialogue_at_node(self.tree, self.start_node)
        else:
            started = manager.start_dialogue(self.tree)

        if not started:
            return False

        self.has_triggered = True
        if self.set_flag_on_trigger:
            self.context.store.set_bool(self.set_flag_on_trigger, True)

        if not self._waiting_for_end and (self.on_end_commands or self.segment_id):
            self._waiting_for_end = True
            self.context.events.subscribe(
                DialogueEvent.DIALOGUE_ENDED, self._on_dialogue_ended, weak=False
            )
        return True

    def _on_dialogue_ended(self, event: Event) -> None:
        if event.get('tree') is not self.tree:
            return

        self._waiting_for_end = False
        self.context.events.unsubscribe(DialogueEvent.DIALOGUE_ENDED, self._on_dialogue_ended)

        if self.segment_id:
            self.context.store.set_bool(segment_flag(self.segment_id), True)
            logger.info(f"Segment completed: {self.segment_id}")

        if self.on_end_commands and self.context.dispatcher is not None:
            self.context.dispatcher.execute_all(self.on_end_commands)
