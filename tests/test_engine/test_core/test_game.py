import pytest
from unittest.mock import MagicMock
from whisper_engine.core.game import GameConfig, HostLoop
from whisper_engine.core.scheduler import Scheduler

class Counter:
    def __init__(self):
        self.total = 0.0
        self.calls = 0

    def update(self, dt):
        self.total += dt
        self.calls += 1

def test_step_runs_fixed_updates():
    loop = HostLoop(GameConfig(fixed_timestep=0.0625))
    counter = Counter()
    loop.add(counter)

    updates = loop.step(0.2)

    assert updates == 3
    assert counter.calls == 3
    assert counter.total == pytest.approx(0.1875)
    assert loop.ticks == 3

def test_step_advances_scheduler():
    scheduler = Scheduler()
    loop = HostLoop(GameConfig(fixed_timestep=0.125), scheduler)
    fired = []
    scheduler.schedule(0.5, lambda: fired.append(True))

    loop.step(0.25)
    assert fired == []

    loop.step(0.25)
    assert fired == [True]

def test_large_frame_time_is_clamped():
    loop = HostLoop(GameConfig(fixed_timestep=0.125, max_frame_skip=10))
    counter = Counter()
    loop.add(counter)

    updates = loop.step(3.0)

    assert updates == 2

def test_max_frame_skip_limits_catch_up():
    loop = HostLoop(GameConfig(fixed_timestep=0.01, max_frame_skip=5))
    counter = Counter()
    loop.add(counter)

    updates = loop.step(0.2)

    assert updates == 5
    assert counter.calls == 5

def test_paused_loop_skips_updates():
    loop = HostLoop(GameConfig(fixed_timestep=0.125))
    counter = Counter()
    loop.add(counter)

    loop.pause()
    loop.step(0.25)
    assert counter.calls == 0

    loop.resume()
    loop.step(0.25)
    assert counter.calls == 2

def test_remove_updatable():
    loop = HostLoop(GameConfig(fixed_timestep=0.125))
    counter = Counter()
    loop.add(counter)
    loop.add(counter)
    loop.remove(counter)

    loop.step(0.125)

    assert counter.calls == 0

def test_run_uses_clock_until_predicate():
    import pygame
    clock = MagicMock()
    clock.tick.return_value = 125
    pygame.time.Clock = MagicMock(return_value=clock)

    loop = HostLoop(GameConfig(fixed_timestep=0.125, target_fps=8))
    counter = Counter()
    loop.add(counter)

    loop.run(until=lambda: counter.calls >= 3)

    clock.tick.assert_called_with(8)
    assert counter.calls == 3
    assert not loop.is_running

def test_run_stops_at_max_frames():
    import pygame
    clock = MagicMock()
    clock.tick.return_value = 16
    pygame.time.Clock = MagicMock(return_value=clock)

    loop = HostLoop(GameConfig())
    loop.run(max_frames=4)

    assert clock.tick.call_count == 4
