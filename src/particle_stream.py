"""
LinkFlow 3D - Particle Stream
Evenly spaced particles flowing along a link curve with a sideways wave
"""

import logging
import math

import numpy as np

from render_output import StreamOutput

logger = logging.getLogger(__name__)


TWO_PI = 2.0 * math.pi
SELECTED_SIZE_SCALE = 1.15
EDGE_FADE_WIDTH = 0.08


def spaced_parameters(count, phase, out=None):
    """
    Curve fractions t_i = frac(i / count + phase) for i in [0, count).

    Args:
        count: number of elements (>= 1)
        phase: stream phase, any float
        out: optional preallocated (count,) array to write into
    """
    if out is None:
        out = np.empty(count, dtype=float)
    np.divide(np.arange(count, dtype=float), float(count), out=out)
    out += phase
    np.mod(out, 1.0, out=out)
    return out


def edge_fade(params, width=EDGE_FADE_WIDTH):
    """Opacity factor ramping 0 -> 1 over `width` at both ends of the curve."""
    return np.clip(np.minimum(params, 1.0 - params) / width, 0.0, 1.0)


class PhaseStream:
    """
    Shared phase bookkeeping for particle and icon streams.

    The phase advances by speed * dt while animating and wraps at 1. Buffers
    are sized once for `count` and only reallocated when the count changes.
    """

    def __init__(self, sampler, count=1):
        self.sampler = sampler
        self.phase = 0.0
        self.count = 0
        self._allocate(max(1, int(count)))

    def _allocate(self, count):
        self.count = count
        self.params = np.zeros(count)
        self.positions = np.zeros((count, 3))
        self.opacities = np.ones(count)

    def resize(self, count):
        count = max(1, int(count))
        if count != self.count:
            logger.debug("Stream resized %d -> %d", self.count, count)
            self._allocate(count)

    def advance(self, speed, dt, animate=True):
        if animate and dt > 0:
            self.phase = (self.phase + speed * dt) % 1.0
        return self.phase

    def _place(self):
        spaced_parameters(self.count, self.phase, out=self.params)


class ParticleStream(PhaseStream):
    """
    Particles riding the curve with a sinusoidal offset along the curve normal.

    Position of particle i is point_at(t_i) + normal_at(t_i) *
    sin(t_i * wave_freq * 2pi + time_phase) * wave_amp, with time_phase driven
    by a wave clock that runs (and freezes) together with the phase.
    """

    def __init__(self, sampler, count=24):
        super().__init__(sampler, count)
        self.wave_clock = 0.0

    def _allocate(self, count):
        super()._allocate(count)
        self.orientations = np.zeros((count, 3))
        self._offsets = np.zeros(count)

    def advance(self, speed, dt, animate=True):
        if animate and dt > 0:
            self.wave_clock = (self.wave_clock + speed * dt) % 1.0
        return super().advance(speed, dt, animate)

    def update(self, config, speed, dt, animate=True, selected=False, fade_edges=False):
        """
        Advance and place the stream for this frame.

        Args:
            config: resolved ParticleConfig (count, size, opacity, wave, shape, color)
            speed: effective link speed
            dt: frame delta in seconds
            animate: global animation flag

        Returns:
            StreamOutput with exactly config.count entries
        """
        self.resize(config.count)
        self.advance(speed, dt, animate)
        self._place()

        params = self.params
        tangents = self.sampler.get_tangents_at(params)
        self.positions[:] = self.sampler.get_points_at(params)
        self.orientations[:] = tangents

        if config.wave_amp > 0:
            normals = self.sampler.get_normals_at(params, tangents=tangents)
            time_phase = TWO_PI * self.wave_clock
            np.sin(params * config.wave_freq * TWO_PI + time_phase, out=self._offsets)
            self._offsets *= config.wave_amp
            self.positions += normals * self._offsets[:, None]

        self.opacities.fill(config.opacity)
        if fade_edges:
            self.opacities *= edge_fade(params)

        size = config.size * (SELECTED_SIZE_SCALE if selected else 1.0)
        return StreamOutput(
            kind='particles',
            positions=self.positions,
            orientations=self.orientations,
            params=self.params,
            size=size,
            color=config.color,
            opacities=self.opacities,
            shape=config.shape.value,
        )
