import math

import numpy as np

from curve_solver import QuadraticCurve
from noise_perturber import NoisePerturber, noise_offset


def test_offset_matches_trig_formula():
    start, end = np.array([0.3, 1.0, -2.0]), np.array([4.0, 0.7, 1.0])
    t, f, amp = 2.5, 1.5, 0.2
    offset = noise_offset(start, end, t, f, amp)
    assert np.allclose(offset, [
        math.sin(t * f * 1.13 + 0.3) * amp,
        math.cos(t * f * 0.87 + 0.7) * amp,
        math.sin(t * f * 1.41 - 2.0) * amp,
    ])


def test_offset_is_deterministic():
    start, end = np.array([1.0, 2.0, 3.0]), np.array([-1.0, 0.5, 4.0])
    first = noise_offset(start, end, 7.25, 2.0, 0.3)
    for _ in range(5):
        assert np.array_equal(noise_offset(start, end, 7.25, 2.0, 0.3), first)


def test_offset_is_bounded_by_amplitude():
    start, end = np.zeros(3), np.ones(3)
    for t in np.linspace(0, 50, 200):
        assert np.all(np.abs(noise_offset(start, end, t, 3.0, 0.25)) <= 0.25 + 1e-12)


def test_different_endpoints_desynchronize():
    a = noise_offset(np.array([0.0, 0, 0]), np.array([1.0, 0, 0]), 1.0, 1.5, 0.2)
    b = noise_offset(np.array([2.0, 0, 1]), np.array([1.0, 3, 0]), 1.0, 1.5, 0.2)
    assert not np.allclose(a, b)


def test_non_positive_frequency_uses_default():
    start, end = np.zeros(3), np.ones(3)
    assert np.allclose(noise_offset(start, end, 2.0, 0.0, 0.1), noise_offset(start, end, 2.0, 1.5, 0.1))


def test_apply_moves_control_while_animating():
    curve = QuadraticCurve((0, 0, 0), (1, 0, 0), (2, 0, 0))
    base = np.array([1.0, 0.36, 0.0])
    perturber = NoisePerturber()
    perturber.apply(curve, base, 1.2, 1.5, 0.2, animate=True)
    expected = base + noise_offset(curve.start, curve.end, 1.2, 1.5, 0.2)
    assert np.allclose(curve.control, expected)


def test_zero_amplitude_keeps_base_control():
    curve = QuadraticCurve((0, 0, 0), (5, 5, 5), (2, 0, 0))
    base = np.array([1.0, 0.36, 0.0])
    NoisePerturber().apply(curve, base, 3.0, 1.5, 0.0, animate=True)
    assert np.allclose(curve.control, base)


def test_offset_freezes_when_animation_stops():
    curve = QuadraticCurve((0, 0, 0), (1, 0, 0), (2, 0, 0))
    base = np.array([1.0, 0.0, 0.0])
    perturber = NoisePerturber()
    perturber.apply(curve, base, 0.8, 1.5, 0.2, animate=True)
    frozen = curve.control.copy()
    perturber.apply(curve, base, 5.0, 1.5, 0.2, animate=False)
    assert np.allclose(curve.control, frozen)
