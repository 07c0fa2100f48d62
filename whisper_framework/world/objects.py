"""
Scene objects addressed by id from commands - doors and activatables.

Both kinds can set a flag and run a command list when they change, so
a door opening or a portal lighting up can drive the narrative the
same way a dialogue node does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from whisper_engine.core.events import WorldEvent

if TYPE_CHECKING:
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


@dataclass
class Door:
    """
    A door that opens, closes and locks.

    Attributes:
        door_id: Id used by door commands
        is_open / is_locked: Current state
        can_close: False for doors that stay open once opened
        on_open_flag: Flag set each time the door opens
        on_open_commands: Commands run each time the door opens
    """
    door_id: str
    is_open: bool = False
    is_locked: bool = False
    can_close: bool = True
    on_open_flag: str = ""
    on_open_commands: list[str] = field(default_factory=list)


@dataclass
class ActivatableObject:
    """
    Something that can be switched on and off (portals, lights, shrines).

    Attributes:
        object_id: Id used by activate/deactivate/toggle commands
        is_active: Current state
        can_deactivate: False for one-way objects
        on_activate_flag: Flag set on activation
        on_activate_commands / on_deactivate_commands: Commands run on change
    """
    object_id: str
    is_active: bool = False
    can_deactivate: bool = True
    on_activate_flag: str = ""
    on_activate_commands: list[str] = field(default_factory=list)
    on_deactivate_commands: list[str] = field(default_factory=list)


T = TypeVar('T')


class _Registry(Generic[T]):
    """Case-insensitive id lookup shared by both registries."""

    def __init__(self, context: WorldContext):
        self.context = context
        self._objects: dict[str, T] = {}

    @staticmethod
    def _key(object_id: str) -> str:
        return (object_id or "").strip().lower()

    def _add(self, object_id: str, obj: T) -> None:
        key = self._key(object_id)
        if key in self._objects:
            logger.warning(f"Replacing object registered as '{key}'")
        self._objects[key] = obj

    def get(self, object_id: str) -> Optional[T]:
        return self._objects.get(self._key(object_id))

    def remove(self, object_id: str) -> None:
        self._objects.pop(self._key(object_id), None)

    def __contains__(self, object_id: str) -> bool:
        return self._key(object_id) in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def _on_changed(self, flag: str, commands: list[str]) -> None:
        if flag:
            self.context.store.set_bool(flag, True)
        if commands and self.context.dispatcher is not None:
            self.context.dispatcher.execute_all(commands)


class DoorRegistry(_Registry[Door]):
    """
    Doors by id. Every method returns False when the id is unknown.

    Publishes WorldEvent.DOOR_CHANGED (door).
    """

    def add(self, door: Door) -> Door:
        self._add(door.door_id, door)
        return door

    def open_door(self, door_id: str) -> bool:
        door = self.get(door_id)
        if door is None:
            return False
        if door.is_open:
            return True
        if door.is_locked:
            logger.info(f"Door '{door.door_id}' is locked")
            return True

        door.is_open = True
        logger.debug(f"Door opened: {door.door_id}")
        self.context.events.publish(WorldEvent.DOOR_CHANGED, door=door)
        self._on_changed(door.on_open_flag, door.on_open_commands)
        return True

    def close_door(self, door_id: str) -> bool:
        door = self.get(door_id)
        if door is None:
            return False
        if door.is_open and door.can_close:
            door.is_open = False
            logger.debug(f"Door closed: {door.door_id}")
            self.context.events.publish(WorldEvent.DOOR_CHANGED, door=door)
        return True

    def toggle_door(self, door_id: str) -> bool:
        door = self.get(door_id)
        if door is None:
            return False
        return self.close_door(door_id) if door.is_open else self.open_door(door_id)

    def lock_door(self, door_id: str) -> bool:
        return self._set_locked(door_id, True)

    def unlock_door(self, door_id: str) -> bool:
        return self._set_locked(door_id, False)

    def _set_locked(self, door_id: str, locked: bool) -> bool:
        door = self.get(door_id)
        if door is None:
            return False
        if door.is_locked != locked:
            door.is_locked = locked
            self.context.events.publish(WorldEvent.DOOR_CHANGED, door=door)
        return True


class ActivatableRegistry(_Registry[ActivatableObject]):
    """
    Activatable objects by id. Every method returns False when the id
    is unknown.

    Publishes WorldEvent.OBJECT_CHANGED (obj).
    """

    def add(self, obj: ActivatableObject) -> ActivatableObject:
        self._add(obj.object_id, obj)
        return obj

    def activate(self, object_id: str) -> bool:
        obj = self.get(object_id)
        if obj is None:
            return False
        if obj.is_active:
            return True

        obj.is_active = True
        logger.debug(f"Activated: {obj.object_id}")
        self.context.events.publish(WorldEvent.OBJECT_CHANGED, obj=obj)
        self._on_changed(obj.on_activate_flag, obj.on_activate_commands)
        return True

    def deactivate(self, object_id: str) -> bool:
        obj = self.get(object_id)
        if obj is None:
            return False
        if not obj.is_active or not obj.can_deactivate:
            return True

        obj.is_active = False
        logger.debug(f"Deactivated: {obj.object_id}")
        self.context.events.publish(WorldEvent.OBJECT_CHANGED, obj=obj)
        self._on_changed("", obj.on_deactivate_commands)
        return True

    def toggle(self, object_id: str) -> bool:
        obj = self.get(object_id)
        if obj is None:
            return False
        return self.deactivate(object_id) if obj.is_active else self.activate(object_id)
