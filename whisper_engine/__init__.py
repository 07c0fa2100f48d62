"""
Whispering Gate Engine

Generic plumbing for the narrative core: events, deferred timers,
the host tick loop and content loading.

Quick Start:
    from whisper_engine.core import GameConfig, HostLoop, Scheduler

    scheduler = Scheduler()
    loop = HostLoop(GameConfig(title="Whispering Gate"), scheduler)
    loop.run(max_frames=600)
"""

__version__ = "0.1.0"

from whisper_engine.core import (
    GameConfig,
    HostLoop,
    Scheduler,
    TimerHandle,
    EventBus,
    Event,
    Signal,
    Subscription,
    DialogueEvent,
    WorldEvent,
)

__all__ = [
    "GameConfig",
    "HostLoop",
    "Scheduler",
    "TimerHandle",
    "EventBus",
    "Event",
    "Signal",
    "Subscription",
    "DialogueEvent",
    "WorldEvent",
]
