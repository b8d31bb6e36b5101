import numpy as np
import pytest

from arc_sampler import ArcSampler
from curve_solver import QuadraticCurve
from icon_stream import ICON_OPACITY, IconStream
from link_model import IconConfig, ParticleConfig, ParticleShape
from particle_stream import ParticleStream, edge_fade, spaced_parameters


def straight_sampler():
    return ArcSampler(QuadraticCurve((0, 0, 0), (1, 0, 0), (2, 0, 0)))


def particle_config(count=24, wave_amp=0.0, wave_freq=2.0):
    return ParticleConfig(count=count, size=0.06, opacity=1.0, wave_amp=wave_amp,
                          wave_freq=wave_freq, shape=ParticleShape.SPHERE,
                          color=(1.0, 1.0, 1.0, 1.0))


def assert_evenly_spaced(params, count):
    gaps = np.diff(np.sort(params))
    assert np.allclose(gaps, 1.0 / count)
    assert np.all((params >= 0.0) & (params < 1.0))


def test_spaced_parameters_wrap_phase():
    params = spaced_parameters(4, 0.9)
    assert np.allclose(params, [0.9, 0.15, 0.4, 0.65])


def test_edge_fade_ramps_at_both_ends():
    fade = edge_fade(np.array([0.0, 0.04, 0.5, 0.96, 1.0]))
    assert np.allclose(fade, [0.0, 0.5, 1.0, 0.5, 0.0])


@pytest.mark.parametrize("count", [1, 3, 24])
def test_cardinality_and_spacing_hold_over_time(count):
    stream = ParticleStream(straight_sampler(), count)
    config = particle_config(count=count)
    for _ in range(50):
        output = stream.update(config, speed=1.3, dt=0.037)
        assert len(output) == count
        assert output.positions.shape == (count, 3)
        assert len(output.entries) == count
        assert_evenly_spaced(output.params, count)


def test_phase_advances_by_speed_times_dt():
    stream = ParticleStream(straight_sampler(), 4)
    stream.update(particle_config(count=4), speed=2.0, dt=0.1)
    assert stream.phase == pytest.approx(0.2)
    stream.update(particle_config(count=4), speed=2.0, dt=0.45)
    assert stream.phase == pytest.approx(0.1)


def test_frozen_when_not_animating():
    stream = ParticleStream(straight_sampler(), 8)
    config = particle_config(count=8, wave_amp=0.1)
    first = stream.update(config, speed=1.0, dt=0.2).positions.copy()
    second = stream.update(config, speed=1.0, dt=0.2, animate=False).positions.copy()
    assert np.allclose(first, second)


def test_stream_rate_is_the_given_speed():
    stream = ParticleStream(straight_sampler(), 5)
    stream.update(particle_config(count=5), speed=0.0, dt=0.5)
    assert stream.phase == 0.0


def test_negative_speed_runs_backwards_and_wraps():
    stream = ParticleStream(straight_sampler(), 5)
    output = stream.update(particle_config(count=5), speed=-1.0, dt=0.1)
    assert stream.phase == pytest.approx(0.9)
    assert_evenly_spaced(output.params, 5)


def test_positions_lie_on_straight_curve_without_wave():
    stream = ParticleStream(straight_sampler(), 4)
    output = stream.update(particle_config(count=4), speed=0.0, dt=0.0)
    assert np.allclose(output.positions[:, 0], 2.0 * output.params)
    assert np.allclose(output.positions[:, 1:], 0.0)
    assert np.allclose(output.orientations, [1.0, 0.0, 0.0])


def test_wave_offsets_along_normal_within_amplitude():
    stream = ParticleStream(straight_sampler(), 16)
    output = stream.update(particle_config(count=16, wave_amp=0.2), speed=1.0, dt=0.0)
    # tangent +X, up +Y -> normal +Z
    assert np.allclose(output.positions[:, 1], 0.0)
    assert np.all(np.abs(output.positions[:, 2]) <= 0.2 + 1e-12)
    expected = np.sin(output.params * 2.0 * 2.0 * np.pi) * 0.2
    assert np.allclose(output.positions[:, 2], expected)


def test_resize_reallocates_on_count_change():
    stream = ParticleStream(straight_sampler(), 24)
    output = stream.update(particle_config(count=7), speed=1.0, dt=0.016)
    assert len(output) == 7
    assert_evenly_spaced(output.params, 7)


def test_buffers_are_reused_between_frames():
    stream = ParticleStream(straight_sampler(), 6)
    config = particle_config(count=6)
    first = stream.update(config, speed=1.0, dt=0.016)
    second = stream.update(config, speed=1.0, dt=0.016)
    assert first.positions is second.positions


def test_selected_particles_are_larger():
    stream = ParticleStream(straight_sampler(), 3)
    config = particle_config(count=3)
    assert stream.update(config, 1.0, 0.0, selected=True).size == pytest.approx(0.06 * 1.15)
    assert stream.update(config, 1.0, 0.0).size == pytest.approx(0.06)


def test_edge_fade_only_when_enabled():
    stream = ParticleStream(straight_sampler(), 10)
    config = particle_config(count=10)
    plain = stream.update(config, 0.0, 0.0)
    assert np.allclose(plain.opacities, 1.0)
    faded = stream.update(config, 0.0, 0.0, fade_edges=True)
    assert faded.opacities[0] == pytest.approx(0.0)
    assert np.all(faded.opacities <= 1.0)


def test_icon_stream_spacing_and_opacity():
    stream = IconStream(straight_sampler())
    config = IconConfig(char="*", count=5, size=0.2, color=(1.0, 0.0, 0.0, 1.0))
    for _ in range(10):
        output = stream.update(config, speed=0.7, dt=0.05)
        assert output.kind == 'icons'
        assert len(output) == 5
        assert output.orientations is None
        assert output.char == "*"
        assert np.allclose(output.opacities, ICON_OPACITY)
        assert_evenly_spaced(output.params, 5)
        assert np.allclose(output.positions[:, 1:], 0.0)


def test_icon_stream_frozen_when_not_animating():
    stream = IconStream(straight_sampler(), 3)
    config = IconConfig(count=3, color=(1.0, 1.0, 1.0, 1.0))
    stream.update(config, speed=1.0, dt=0.3)
    phase = stream.phase
    stream.update(config, speed=1.0, dt=0.3, animate=False)
    assert stream.phase == phase


def test_entries_are_snapshots_of_live_buffers():
    stream = ParticleStream(straight_sampler(), 4)
    config = particle_config(count=4)
    output = stream.update(config, speed=1.0, dt=0.1)
    kept = output.entries
    before = [entry.position.copy() for entry in kept]
    stream.update(config, speed=1.0, dt=0.1)
    assert not np.allclose(output.positions[0], before[0])
    for entry, position in zip(kept, before):
        assert np.array_equal(entry.position, position)
