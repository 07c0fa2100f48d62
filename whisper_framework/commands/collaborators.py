"""
Interfaces of the subsystems that commands drive.

Methods that address something by id return False when the id is
unknown, so the dispatcher can report the missing target once.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Inventory(Protocol):
    def add_item(self, item_id: str) -> bool: ...

    def remove_item(self, item_id: str) -> bool: ...

    def has_item(self, item_id: str) -> bool: ...


@runtime_checkable
class Journal(Protocol):
    def unlock_page(self, page_id: str) -> bool: ...

    def open(self, goto_page: Optional[str] = None) -> bool: ...

    def has_page(self, page_id: str) -> bool: ...

    def pick_up(self) -> None: ...


@runtime_checkable
class CameraFocus(Protocol):
    def focus_on(self, point_id: str, hold: Optional[float] = None) -> bool: ...

    def release_focus(self) -> None: ...


@runtime_checkable
class Doors(Protocol):
    def open_door(self, door_id: str) -> bool: ...

    def close_door(self, door_id: str) -> bool: ...

    def toggle_door(self, door_id: str) -> bool: ...

    def lock_door(self, door_id: str) -> bool: ...

    def unlock_door(self, door_id: str) -> bool: ...


@runtime_checkable
class Activatables(Protocol):
    def activate(self, object_id: str) -> bool: ...

    def deactivate(self, object_id: str) -> bool: ...

    def toggle(self, object_id: str) -> bool: ...


@runtime_checkable
class Flashlight(Protocol):
    def turn_on(self) -> None: ...

    def turn_off(self) -> None: ...

    def toggle(self) -> None: ...

    def recharge(self, amount: float) -> None: ...

    def refill(self) -> None: ...

    def enable(self, start_on: bool = False) -> None: ...

    def disable(self) -> None: ...


@runtime_checkable
class Environment(Protocol):
    def transition_to(self, mood: float, duration: float) -> None: ...


@runtime_checkable
class SaveSlots(Protocol):
    def save(self, slot: int) -> bool: ...

    def load(self, slot: int) -> bool: ...
