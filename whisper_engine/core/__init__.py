"""
Core engine module.

Exports:
- GameConfig, HostLoop: Host configuration and fixed timestep tick loop
- Scheduler, TimerHandle: Deferred callbacks against game time
- EventBus, Event, Signal, Subscription: Event system
- DialogueEvent, WorldEvent: Built-in event types
- WhisperError, ContentError, DialogueValidationError: Load-time errors
"""

from whisper_engine.core.events import (
    EventBus,
    Event,
    Signal,
    Subscription,
    DialogueEvent,
    WorldEvent,
)
from whisper_engine.core.scheduler import Scheduler, TimerHandle
from whisper_engine.core.game import GameConfig, HostLoop
from whisper_engine.core.errors import WhisperError, ContentError, DialogueValidationError

__all__ = [
    # Host
    "GameConfig",
    "HostLoop",
    # Timing
    "Scheduler",
    "TimerHandle",
    # Events
    "EventBus",
    "Event",
    "Signal",
    "Subscription",
    "DialogueEvent",
    "WorldEvent",
    # Errors
    "WhisperError",
    "ContentError",
    "DialogueValidationError",
]
