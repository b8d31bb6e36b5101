import dataclasses

import pytest

from frame_clock import FrameClock, FrameState


def test_first_tick_has_zero_dt():
    frame = FrameClock().tick(10.0)
    assert frame == FrameState(1, 0.0, 0.0)


def test_ticks_accumulate_time():
    clock = FrameClock()
    clock.tick(1.0)
    clock.tick(1.1)
    frame = clock.tick(1.3)
    assert frame.frame_id == 3
    assert frame.dt == pytest.approx(0.2)
    assert frame.t == pytest.approx(0.3)
    assert frame.fps == pytest.approx(5.0)


def test_negative_and_large_deltas_are_clamped():
    clock = FrameClock(max_dt=0.25)
    clock.tick(5.0)
    assert clock.tick(4.0).dt == 0.0
    assert clock.tick(14.0).dt == 0.25


def test_injected_timer_and_reset():
    times = iter([0.0, 0.05])
    clock = FrameClock(timer=lambda: next(times))
    clock.tick()
    assert clock.tick().dt == pytest.approx(0.05)
    clock.reset()
    assert clock.frame_id == 0
    assert clock.elapsed == 0.0


def test_frame_state_is_frozen():
    frame = FrameState(1, 0.016, 0.016)
    with pytest.raises(dataclasses.FrozenInstanceError):
        frame.dt = 1.0
