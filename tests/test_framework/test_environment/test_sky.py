import pytest
from whisper_engine.core.events import WorldEvent
from whisper_framework.environment.sky import BLOOD_SKY, NIGHT_SKY, SkyController

def test_starts_at_blood_sky():
    sky = SkyController()
    assert sky.mood == BLOOD_SKY
    assert not sky.is_transitioning

def test_transition_eases_to_target(event_bus, recorder):
    events = recorder(event_bus, WorldEvent.SKY_TRANSITION)
    sky = SkyController(event_bus)

    sky.transition_to(NIGHT_SKY, 4.0)
    assert events[0]["target"] == NIGHT_SKY
    assert events[0]["duration"] == 4.0

    sky.update(1.0)
    assert 0.0 < sky.mood < 0.25

    sky.update(1.0)
    assert sky.mood == pytest.approx(0.5)

    sky.update(2.0)
    assert sky.mood == NIGHT_SKY
    assert not sky.is_transitioning

def test_zero_duration_is_immediate():
    done = []
    sky = SkyController()
    sky.transition_to(0.7, 0.0, on_complete=lambda: done.append(True))
    assert sky.mood == pytest.approx(0.7)
    assert done == [True]

def test_on_complete_called_once():
    done = []
    sky = SkyController()
    sky.transition_to(1.0, 1.0, on_complete=lambda: done.append(True))
    sky.update(2.0)
    sky.update(2.0)
    assert done == [True]

def test_new_transition_starts_from_current_mood():
    sky = SkyController()
    sky.transition_to(1.0, 2.0)
    sky.update(1.0)

    sky.transition_to(0.0, 2.0)
    sky.update(1.0)

    assert sky.mood == pytest.approx(0.25)

def test_set_mood_cancels_transition():
    sky = SkyController()
    sky.transition_to(1.0, 2.0)
    sky.set_mood(5.0)
    sky.update(1.0)
    assert sky.mood == 1.0
    assert not sky.is_transitioning

def test_sky_command(world):
    world.execute("sky:night:2")
    assert world.environment.is_transitioning

    world.environment.update(2.0)
    assert world.environment.mood == NIGHT_SKY
