"""
World context - the explicit dependency set shared by the core.

Replaces global manager singletons: the variable store, event bus,
scheduler, command dispatcher, dialogue manager and every collaborator
subsystem are reachable from one object passed in at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from whisper_engine.core.events import EventBus
from whisper_engine.core.scheduler import Scheduler
from whisper_framework.config import NarrativeConfig
from whisper_framework.state.store import VariableStore

if TYPE_CHECKING:
    from whisper_framework.commands.collaborators import (
        Activatables,
        CameraFocus,
        Doors,
        Environment,
        Flashlight,
        Inventory,
        Journal,
        SaveSlots,
    )
    from whisper_framework.commands.dispatcher import CommandDispatcher
    from whisper_framework.dialog.system import DialogueManager


@dataclass
class WorldContext:
    """
    Everything the narrative core needs, wired once per session.

    Attributes:
        store: Variable store (sole mutable narrative state)
        events: Event bus for UI/audio listeners
        scheduler: Deferred callbacks driven by the host tick
        config: Core tuning values
        dispatcher: Command dispatcher bound to this context
        dialogue: Dialogue manager bound to this context
        inventory .. saves: Collaborator subsystems (None = not present)
    """
    store: VariableStore
    events: EventBus = field(default_factory=EventBus)
    scheduler: Scheduler = field(default_factory=Scheduler)
    config: NarrativeConfig = field(default_factory=NarrativeConfig)

    dispatcher: Optional[CommandDispatcher] = None
    dialogue: Optional[DialogueManager] = None

    inventory: Optional[Inventory] = None
    journal: Optional[Journal] = None
    camera: Optional[CameraFocus] = None
    doors: Optional[Doors] = None
    activatables: Optional[Activatables] = None
    flashlight: Optional[Flashlight] = None
    environment: Optional[Environment] = None
    saves: Optional[SaveSlots] = None

    @classmethod
    def create(cls, config: NarrativeConfig | None = None, **collaborators) -> WorldContext:
        """
        Build a context with a fresh store, dispatcher and dialogue manager.

        Args:
            config: Core tuning (defaults if None)
            **collaborators: Any of inventory, journal, camera, doors,
                activatables, flashlight, environment, saves
        """
        from whisper_framework.commands.dispatcher import CommandDispatcher
        from whisper_framework.commands.handlers import register_builtin_handlers
        from whisper_framework.dialog.system import DialogueManager

        config = config or NarrativeConfig()
        context = cls(store=VariableStore.from_config(config), config=config, **collaborators)

        context.dispatcher = CommandDispatcher(context)
        register_builtin_handlers(context.dispatcher)
        context.dialogue = DialogueManager(context)
        return context

    def execute(self, command: str) -> bool:
        """Shortcut for dispatcher.execute."""
        return self.dispatcher.execute(command)

    def execute_all(self, commands) -> int:
        """Shortcut for dispatcher.execute_all."""
        return self.dispatcher.execute_all(commands)


def build_world(config: NarrativeConfig | None = None) -> WorldContext:
    """
    Build a context wired to the in-memory reference subsystems.

    Returns:
        Context with inventory, journal, camera, doors, activatables,
        flashlight, sky environment and save slots attached
    """
    from whisper_framework.camera.focus import CameraFocusController
    from whisper_framework.environment.sky import SkyController
    from whisper_framework.inventory.flashlight import FlashlightController
    from whisper_framework.inventory.items import InventoryManager
    from whisper_framework.journal.manager import JournalManager
    from whisper_framework.save.manager import SaveManager
    from whisper_framework.world.objects import ActivatableRegistry, DoorRegistry

    context = WorldContext.create(config)
    context.inventory = InventoryManager(context.events)
    context.journal = JournalManager(context)
    context.camera = CameraFocusController(context)
    context.doors = DoorRegistry(context)
    context.activatables = ActivatableRegistry(context)
    context.flashlight = FlashlightController(context.events, context.store)
    context.environment = SkyController(context.events)
    context.saves = SaveManager(context)
    return context
