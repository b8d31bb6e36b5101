"""
LinkFlow 3D - Noise Perturber
Deterministic trig wiggle of a link's control point
"""

import math

import numpy as np


DEFAULT_NOISE_FREQ = 1.5


def noise_offset(start, end, elapsed, freq, amp):
    """
    Offset added to the base control point at time `elapsed`.

    Endpoint coordinates seed the phases, so links at different places wiggle
    out of step without any random state.
    """
    if freq <= 0:
        freq = DEFAULT_NOISE_FREQ
    t = elapsed * freq
    return np.array([
        math.sin(t * 1.13 + start[0]) * amp,
        math.cos(t * 0.87 + end[1]) * amp,
        math.sin(t * 1.41 + start[2]) * amp,
    ])


class NoisePerturber:
    """
    Holds the current noise offset of one link.

    The offset follows the clock while animating, freezes in place when
    animation stops, and drops to zero once the amplitude is zero.
    """

    def __init__(self):
        self.offset = np.zeros(3)

    def update(self, start, end, elapsed, freq, amp, animate=True):
        if amp <= 0:
            self.offset[:] = 0.0
        elif animate:
            self.offset[:] = noise_offset(start, end, elapsed, freq, amp)
        return self.offset

    def apply(self, curve, base_control, elapsed, freq, amp, animate=True):
        """Write base_control + offset into curve.control."""
        offset = self.update(curve.start, curve.end, elapsed, freq, amp, animate)
        curve.set_control(base_control + offset)
        return curve.control
