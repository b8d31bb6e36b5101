"""
LinkFlow 3D - Icon Stream
Discrete billboarded glyphs riding the bare link curve
"""

from particle_stream import PhaseStream
from render_output import StreamOutput


ICON_OPACITY = 0.95


class IconStream(PhaseStream):
    """Same spacing as ParticleStream, no wave; icons always face the camera."""

    def __init__(self, sampler, count=4):
        super().__init__(sampler, count)

    def update(self, config, speed, dt, animate=True):
        self.resize(config.count)
        self.advance(speed, dt, animate)
        self._place()

        self.positions[:] = self.sampler.get_points_at(self.params)
        self.opacities.fill(ICON_OPACITY)

        return StreamOutput(
            kind='icons',
            positions=self.positions,
            orientations=None,
            params=self.params,
            size=config.size,
            color=config.color,
            opacities=self.opacities,
            char=config.char,
        )
