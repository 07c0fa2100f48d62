import os
import sys
import pytest
from unittest.mock import MagicMock, patch

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests so the host loop never touches a real clock.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)

        yield

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from whisper_engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def scheduler():
    from whisper_engine.core.scheduler import Scheduler
    return Scheduler()

@pytest.fixture
def store():
    """Store with the default narrative config (sanity clamped 0..100)."""
    from whisper_framework.config import NarrativeConfig
    from whisper_framework.state.store import VariableStore
    return VariableStore.from_config(NarrativeConfig())

@pytest.fixture
def context():
    """Context with dispatcher and dialogue manager, no collaborators."""
    from whisper_framework.world.context import WorldContext
    return WorldContext.create()

@pytest.fixture
def mock_context():
    """Context whose collaborators are MagicMocks (every target exists)."""
    from whisper_framework.world.context import WorldContext
    return WorldContext.create(
        inventory=MagicMock(),
        journal=MagicMock(),
        camera=MagicMock(),
        doors=MagicMock(),
        activatables=MagicMock(),
        flashlight=MagicMock(),
        environment=MagicMock(),
        saves=MagicMock(),
    )

@pytest.fixture
def world():
    """Context wired to the in-memory reference subsystems."""
    from whisper_framework.world.context import build_world
    return build_world()

@pytest.fixture
def recorder():
    """
    Factory that records events from a bus.

    Usage:
        events = recorder(context.events, DialogueEvent.NODE_DISPLAYED)
        ...
        assert [e.type for e in events] == [...]
    """
    def attach(bus, *event_types):
        received = []

        def record(event):
            received.append(event)

        for event_type in event_types:
            bus.subscribe(event_type, record, weak=False)
        return received

    return attach

@pytest.fixture
def make_tree():
    """
    Factory building a DialogueTree from compact node dicts.

    Usage:
        tree = make_tree([{"id": "a", "text": "Hi", "next": "b"}, ...])
    """
    from whisper_framework.dialog.models import DialogueTree

    def build(nodes, start=None, tree_id="test_tree", **settings):
        data = {
            "id": tree_id,
            "start": start if start is not None else nodes[0]["id"],
            "nodes": nodes,
        }
        data.update(settings)
        return DialogueTree.from_dict(data)

    return build
