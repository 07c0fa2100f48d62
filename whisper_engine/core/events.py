"""
Typed event bus and key/value signals for decoupled communication.

Uses Enums for event types to prevent magic strings. The dialogue engine
publishes on the bus; the variable store exposes per-type Signals.

Usage:
    # Subscribe
    event_bus.subscribe(DialogueEvent.NODE_DISPLAYED, on_node_displayed)

    # Publish
    event_bus.publish(DialogueEvent.NODE_DISPLAYED, node=node)

    # Signals
    subscription = store.on_int_changed.subscribe(lambda key, value: ...)
    subscription.unsubscribe()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class DialogueEvent(Enum):
    """Events published by the dialogue graph engine."""
    DIALOGUE_STARTED = auto()
    NODE_DISPLAYED = auto()
    CHOICES_UPDATED = auto()
    CHOICE_SELECTED = auto()
    IMPACT_APPLIED = auto()
    DIALOGUE_ENDED = auto()


class WorldEvent(Enum):
    """Events published by gameplay collaborators."""
    ITEM_ADDED = auto()
    ITEM_REMOVED = auto()
    JOURNAL_PICKED_UP = auto()
    JOURNAL_OPENED = auto()
    JOURNAL_CLOSED = auto()
    PAGE_UNLOCKED = auto()
    CAMERA_FOCUSED = auto()
    CAMERA_RELEASED = auto()
    DOOR_CHANGED = auto()
    OBJECT_CHANGED = auto()
    FLASHLIGHT_CHANGED = auto()
    SKY_TRANSITION = auto()
    PUZZLE_SOLVED = auto()
    PUZZLE_FAILED = auto()
    GAME_SAVED = auto()
    GAME_LOADED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers
    - Event consumption (stops propagation)
    - Events published while dispatching are queued, never nested
    """

    def __init__(self):
        # Map of event type -> list of (priority, handler, one_shot)
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        # Queue for events published during handling
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []

        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        # Insert sorted by priority (highest first, stable for equal priority)
        handlers = self._handlers[event_type]
        entry = (priority, handler_ref, one_shot)

        insert_idx = len(handlers)
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break

        handlers.insert(insert_idx, entry)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event type
            handler: The handler to remove
        """
        if event_type not in self._handlers:
            return

        # In place, so a dispatch in progress prunes the same list
        handlers = self._handlers[event_type]
        handlers[:] = [
            (p, h, o) for p, h, o in handlers
            if self._get_handler(h) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        self.publish_event(event)
        return event

    def publish_event(self, event: Event) -> None:
        """
        Publish a pre-created event.

        Args:
            event: The event to publish
        """
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

    def handler_count(self, event_type: Enum) -> int:
        """Number of live handlers for an event type."""
        return sum(
            1 for _, h, _ in self._handlers.get(event_type, [])
            if self._get_handler(h) is not None
        )

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        if event_type is None:
            self._handlers.clear()
        elif event_type in self._handlers:
            del self._handlers[event_type]

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers."""
        self._is_publishing = True
        try:
            self._deliver(event)
            while self._event_queue:
                self._deliver(self._event_queue.pop(0))
        finally:
            self._is_publishing = False

    def _deliver(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if not handlers:
            return

        dead: list[tuple[int, Any, bool]] = []

        # Iterate a copy so handlers may (un)subscribe while being called
        for entry in list(handlers):
            priority, handler_ref, one_shot = entry
            handler = self._get_handler(handler_ref)

            if handler is None:
                dead.append(entry)
                continue

            if one_shot:
                dead.append(entry)

            try:
                handler(event)
            except Exception:
                # Log but don't crash
                logger.exception(f"Error in event handler for {event.type}")

            if event.consumed:
                break

        handlers = self._handlers.get(event.type, [])
        for entry in dead:
            if entry in handlers:
                handlers.remove(entry)

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref


class Subscription:
    """Handle returned by Signal.subscribe; detaches the callback."""

    def __init__(self, signal: Signal, callback: Callable[..., None]):
        self._signal = signal
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Detach the callback. Safe to call more than once."""
        if self.active:
            self._signal._remove(self._callback)
            self.active = False


class Signal:
    """
    Observer list for (key, value) change notifications.

    Holds strong references: every subscribe must be paired with an
    explicit Subscription.unsubscribe().
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._callbacks: list[Callable[..., None]] = []

    def subscribe(self, callback: Callable[..., None]) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def emit(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Error in '{self.name}' subscriber")

    def _remove(self, callback: Callable[..., None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def __len__(self) -> int:
        return len(self._callbacks)
