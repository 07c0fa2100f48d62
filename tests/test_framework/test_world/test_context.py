import pytest
from unittest.mock import MagicMock
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
from whisper_framework.config import NarrativeConfig
from whisper_framework.world.context import WorldContext, build_world

def test_create_wires_core(context):
    assert context.dispatcher is not None
    assert context.dialogue is not None
    assert context.dispatcher.context is context
    assert context.dialogue.context is context
    assert context.inventory is None

def test_create_uses_config_defaults():
    config = NarrativeConfig(int_defaults={"sanity": 100})
    context = WorldContext.create(config)

    assert context.config is config
    assert context.store.get_int("sanity") == 100

def test_create_accepts_collaborators():
    inventory = MagicMock()
    context = WorldContext.create(inventory=inventory)

    context.execute("item:key")

    inventory.add_item.assert_called_once_with("key")

def test_build_world_collaborators_match_interfaces(world):
    assert isinstance(world.inventory, Inventory)
    assert isinstance(world.journal, Journal)
    assert isinstance(world.camera, CameraFocus)
    assert isinstance(world.doors, Doors)
    assert isinstance(world.activatables, Activatables)
    assert isinstance(world.flashlight, Flashlight)
    assert isinstance(world.environment, Environment)
    assert isinstance(world.saves, SaveSlots)

def test_build_world_with_config():
    world = build_world(NarrativeConfig(quicksave_slot=2))
    world.execute("save")
    assert world.saves.has_slot(2)

def test_world_runs_dialogue_commands(world, make_tree):
    tree = make_tree([{
        "id": "a",
        "end": True,
        "on_enter": ["item:lantern", "flashlight:enable:on", "ending:listener"],
    }])

    world.dialogue.start_dialogue(tree)

    assert world.inventory.has_item("lantern")
    assert world.store.get_bool("flashlight_on")
    assert world.store.get_string("current_ending_path") == "listener"
