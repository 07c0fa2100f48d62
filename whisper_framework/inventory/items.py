"""
Item system - key item definitions and the player's inventory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from whisper_engine.core.events import EventBus, WorldEvent

logger = logging.getLogger(__name__)


@dataclass
class ItemDefinition:
    """A collectible item."""
    id: str
    name: str = ""
    description: str = ""
    icon_id: str = ""


class InventoryManager:
    """
    Ordered set of item ids held by the player.

    When definitions are registered, only known ids can be added.
    Without definitions, any id is accepted.

    Publishes WorldEvent.ITEM_ADDED / ITEM_REMOVED with item_id.
    """

    def __init__(self, events: Optional[EventBus] = None):
        self.events = events
        self._definitions: dict[str, ItemDefinition] = {}
        self._items: list[str] = []

    # --- Definitions ---

    def register(self, definition: ItemDefinition) -> None:
        self._definitions[definition.id] = definition

    def get_item_data(self, item_id: str) -> Optional[ItemDefinition]:
        return self._definitions.get(item_id)

    def is_known(self, item_id: str) -> bool:
        return not self._definitions or item_id in self._definitions

    # --- Inventory ---

    def add_item(self, item_id: str) -> bool:
        """
        Add an item.

        Returns:
            False if the id is empty or has no definition.
            Adding an item already held is accepted and changes nothing.
        """
        if not item_id:
            logger.warning("Attempted to add an item with an empty id")
            return False
        if not self.is_known(item_id):
            return False

        if item_id in self._items:
            logger.debug(f"Item {item_id} already in inventory")
            return True

        self._items.append(item_id)
        logger.info(f"Added item: {item_id}")
        if self.events:
            self.events.publish(WorldEvent.ITEM_ADDED, item_id=item_id)
        return True

    def remove_item(self, item_id: str) -> bool:
        """Remove an item. Returns False if it was not held."""
        if item_id not in self._items:
            return False

        self._items.remove(item_id)
        logger.info(f"Removed item: {item_id}")
        if self.events:
            self.events.publish(WorldEvent.ITEM_REMOVED, item_id=item_id)
        return True

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def get_all_items(self) -> list[str]:
        return list(self._items)

    @property
    def item_count(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
        logger.info("Inventory cleared")

    def restore(self, item_ids: list[str]) -> None:
        """Replace the held items without publishing events."""
        self._items = list(dict.fromkeys(item_ids))
