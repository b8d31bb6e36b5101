"""
LinkFlow 3D - Link Renderer
Per-link frame update: curve first, then exactly one style handler
"""

import logging

from arc_sampler import ArcSampler, DEFAULT_ARC_DIVISIONS
from curve_solver import WORLD_UP, QuadraticCurve, CurveSolver
from dash_line import DashLine
from icon_stream import IconStream
from link_model import LinkStyle
from noise_perturber import NoisePerturber
from particle_stream import ParticleStream
from render_output import LineOutput
from tube_extruder import TubeExtruder, RADIAL_SEGMENTS, TUBULAR_SEGMENTS

logger = logging.getLogger(__name__)


SOLID_OPACITY = 0.92
DASHED_OPACITY = 0.96


class LinkRenderer:
    """
    Render cycle of a single link.

    Owns the link's curve (mutated in place each frame) and the state of the
    handler for its current style. Node positions are only read.

    Args:
        link_id: id of the link this renderer belongs to
        world_up: up axis for bending and normals
        arc_divisions: arc-length table resolution
        radial_segments / tubular_segments: tube mesh resolution
        fade_edges: fade particles near both curve ends
    """

    def __init__(self, link_id, world_up=WORLD_UP, arc_divisions=DEFAULT_ARC_DIVISIONS,
                 radial_segments=RADIAL_SEGMENTS, tubular_segments=TUBULAR_SEGMENTS,
                 fade_edges=False):
        self.link_id = link_id
        self.curve = QuadraticCurve()
        self.solver = CurveSolver(world_up)
        self.perturber = NoisePerturber()
        self.sampler = ArcSampler(self.curve, arc_divisions, world_up)
        self.radial_segments = radial_segments
        self.tubular_segments = tubular_segments
        self.fade_edges = fade_edges

        self.style = None
        self.state = None

        self._handlers = {
            LinkStyle.SOLID: self._render_solid,
            LinkStyle.DASHED: self._render_dashed,
            LinkStyle.PARTICLES: self._render_particles,
            LinkStyle.WAVY: self._render_particles,
            LinkStyle.ICONS: self._render_icons,
            LinkStyle.EPIC: self._render_tube,
        }
        self._state_factories = {
            LinkStyle.SOLID: lambda: None,
            LinkStyle.DASHED: DashLine,
            LinkStyle.PARTICLES: lambda: ParticleStream(self.sampler),
            LinkStyle.WAVY: lambda: ParticleStream(self.sampler),
            LinkStyle.ICONS: lambda: IconStream(self.sampler),
            LinkStyle.EPIC: lambda: TubeExtruder(self.sampler, self.radial_segments,
                                                 self.tubular_segments),
        }

    def update_curve(self, link, start, end, elapsed, animate=True):
        """Refresh endpoints, base control point and noise for this frame."""
        curve_cfg = link.curve.clamped()
        self.curve.set_endpoints(start, end)
        base = self.solver.base_control(self.curve.start, self.curve.end,
                                        curve_cfg.mode, curve_cfg.bend)
        self.perturber.apply(self.curve, base, elapsed, curve_cfg.noise_freq,
                             curve_cfg.noise_amp, animate)
        return self.curve

    def _ensure_style(self, style):
        if style is not self.style:
            # Particles and wavy share a stream type but not state
            logger.debug("Link %s style %s -> %s", self.link_id,
                         self.style.value if self.style else None, style.value)
            self.style = style
            self.state = self._state_factories[style]()
        return self.state

    def update(self, link, start, end, frame, animate=True, selected=False):
        """
        Produce this frame's output for the link.

        Args:
            link: Link configuration
            start, end: current [x, y, z] of the from/to nodes
            frame: FrameState (dt, t)
            animate: global animation flag
            selected: whether the link is the current selection

        Returns:
            LineOutput, StreamOutput or TubeOutput; None when the link is inactive
        """
        if not link.active:
            return None

        self.update_curve(link, start, end, frame.t, animate)
        style = LinkStyle.parse(link.style)
        self._ensure_style(style)
        return self._handlers[style](link, frame, animate, selected)

    # ==================== Style handlers ====================

    def _line(self, link, opacity, selected):
        return LineOutput(
            start=self.curve.start.copy(),
            control=self.curve.control.copy(),
            end=self.curve.end.copy(),
            color=link.rgba,
            width=link.effective_width,
            opacity=1.0 if selected else opacity,
        )

    def _render_solid(self, link, frame, animate, selected):
        return self._line(link, SOLID_OPACITY, selected)

    def _render_dashed(self, link, frame, animate, selected):
        dash = link.resolved_dash()
        output = self._line(link, DASHED_OPACITY, selected)
        output.dashed = True
        output.dash_offset = self.state.update(link.effective_speed, frame.dt, animate, dash.animate)
        output.dash_scale = dash.length
        output.dash_size = dash.gap
        return output

    def _render_particles(self, link, frame, animate, selected):
        return self.state.update(link.resolved_particles(), link.effective_speed, frame.dt,
                                 animate, selected, self.fade_edges)

    def _render_icons(self, link, frame, animate, selected):
        return self.state.update(link.resolved_icon(), link.effective_speed, frame.dt, animate)

    def _render_tube(self, link, frame, animate, selected):
        return self.state.update(link.resolved_tube(), link.effective_speed, frame.t,
                                 animate, selected)
