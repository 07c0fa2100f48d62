"""
Save slots - in-memory snapshots of the narrative state.

Provides:
- Numbered save slots (10 by default)
- Snapshots of the variable store, inventory and journal
- Wholesale restore on load (no merge)

Writing slots to disk is left to the host game.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from whisper_engine.core.events import WorldEvent
from whisper_framework.state.store import StoreSnapshot

if TYPE_CHECKING:
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


@dataclass
class SaveState:
    """Everything a slot holds."""
    slot: int
    name: str = ""
    timestamp: str = ""
    playtime_seconds: float = 0.0
    store: StoreSnapshot = field(default_factory=StoreSnapshot)
    items: list[str] = field(default_factory=list)
    unlocked_pages: list[str] = field(default_factory=list)
    has_journal: bool = False


class SaveManager:
    """
    Saves and loads narrative state by slot.

    Usage:
        saves = SaveManager(context)
        saves.save(1, name="Before the gate")
        saves.load(1)
    """

    MAX_SLOTS = 10

    def __init__(self, context: WorldContext, max_slots: int = MAX_SLOTS):
        self.context = context
        self.max_slots = max_slots
        self._slots: dict[int, SaveState] = {}
        self._playtime = 0.0

    def update(self, dt: float) -> None:
        """Accumulate playtime (registered with the host loop)."""
        self._playtime += dt

    def _valid_slot(self, slot: int) -> bool:
        if 0 <= slot < self.max_slots:
            return True
        logger.warning(f"Save slot {slot} out of range (0-{self.max_slots - 1})")
        return False

    def save(self, slot: int, name: str = "") -> bool:
        """
        Snapshot the current state into a slot, replacing what it held.

        Returns:
            False if the slot number is out of range
        """
        if not self._valid_slot(slot):
            return False

        state = SaveState(
            slot=slot,
            name=name or f"Slot {slot}",
            timestamp=datetime.now().isoformat(timespec='seconds'),
            playtime_seconds=self._playtime,
            store=self.context.store.snapshot(),
        )

        inventory = self.context.inventory
        if inventory is not None:
            state.items = inventory.get_all_items()

        journal = self.context.journal
        if journal is not None:
            state.unlocked_pages = [p.page_id for p in journal.get_unlocked_pages()]
            state.has_journal = journal.has_journal

        self._slots[slot] = state
        logger.info(f"Saved to slot {slot}")
        self.context.events.publish(WorldEvent.GAME_SAVED, slot=slot)
        return True

    def load(self, slot: int) -> bool:
        """
        Replace the current state with a slot's contents.

        Any running dialogue is ended first. From inside a dialogue
        command, both the end and the restore wait until the dialogue
        operation that issued the command has finished.

        Returns:
            False if the slot is empty or out of range
        """
        if not self._valid_slot(slot):
            return False

        state = self._slots.get(slot)
        if state is None:
            return False

        dialogue = self.context.dialogue
        if dialogue is None:
            self._apply(state)
            return True

        if dialogue.is_busy:
            logger.debug(f"Load of slot {slot} deferred until the dialogue operation finishes")
        dialogue.force_end()
        dialogue.run_when_idle(lambda: self._apply(state))
        return True

    def _apply(self, state: SaveState) -> None:
        slot = state.slot
        self.context.store.restore(copy.deepcopy(state.store))
        self._playtime = state.playtime_seconds

        if self.context.inventory is not None:
            self.context.inventory.restore(state.items)
        if self.context.journal is not None:
            self.context.journal.restore(state.unlocked_pages, state.has_journal)

        logger.info(f"Loaded slot {slot}")
        self.context.events.publish(WorldEvent.GAME_LOADED, slot=slot)

    def has_slot(self, slot: int) -> bool:
        return slot in self._slots

    def get_slot(self, slot: int) -> Optional[SaveState]:
        return self._slots.get(slot)

    def delete_slot(self, slot: int) -> bool:
        return self._slots.pop(slot, None) is not None

    def list_slots(self) -> list[SaveState]:
        return [self._slots[s] for s in sorted(self._slots)]
