import pytest
from whisper_engine.core.events import WorldEvent
from whisper_framework.camera.focus import FocusPoint

@pytest.fixture
def camera(world):
    world.camera.add_point(FocusPoint("writer_desk", (4.0, 1.5, -2.0)))
    world.camera.add_point(FocusPoint("window"))
    return world.camera

def test_focus_and_release(camera, world, recorder):
    events = recorder(world.events, WorldEvent.CAMERA_FOCUSED, WorldEvent.CAMERA_RELEASED)

    assert camera.focus_on("Writer_Desk")
    assert camera.is_focusing
    assert camera.current.position == (4.0, 1.5, -2.0)

    camera.release_focus()
    camera.release_focus()

    assert not camera.is_focusing
    assert [e.type for e in events] == [WorldEvent.CAMERA_FOCUSED, WorldEvent.CAMERA_RELEASED]

def test_unknown_point(camera):
    assert not camera.focus_on("nowhere")
    assert not camera.is_focusing

def test_hold_releases_through_scheduler(camera, world):
    camera.focus_on("window", 2.0)

    world.scheduler.update(1.5)
    assert camera.is_focusing

    world.scheduler.update(0.5)
    assert not camera.is_focusing

def test_zero_hold_keeps_focus(camera, world):
    camera.focus_on("window", 0)
    world.scheduler.update(100.0)
    assert camera.is_focusing

def test_refocus_cancels_previous_hold(camera, world):
    camera.focus_on("window", 1.0)
    camera.focus_on("writer_desk")
    world.scheduler.update(5.0)
    assert camera.current.point_id == "writer_desk"

def test_duplicate_point_ignored(camera, caplog):
    camera.add_point(FocusPoint("WINDOW", (9.0, 9.0, 9.0)))
    assert camera.get_point("window").position == (0.0, 0.0, 0.0)
    assert "Duplicate focus point id" in caplog.text

def test_released_when_dialogue_ends(camera, world, make_tree):
    tree = make_tree([{"id": "a", "end": True, "on_enter": ["cam:writer_desk"]}])

    world.dialogue.start_dialogue(tree)
    assert camera.is_focusing

    world.dialogue.force_end()
    assert not camera.is_focusing

def test_cam_command_with_duration(camera, world):
    world.execute("cam:window:1")
    assert camera.current.point_id == "window"
    world.scheduler.update(1.0)
    assert not camera.is_focusing
