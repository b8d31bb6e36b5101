"""
LinkFlow 3D - Link Scene
Drives every link renderer once per frame and manages their lifetimes.

LIFECYCLE:
==========
- A LinkRenderer (curve + render state) is created the first frame a link is
  active and both of its nodes exist.
- It is released as soon as the link is removed, deactivated, or one of its
  nodes disappears. Nothing from a released renderer is reused.
- A failure inside one link's update is logged, that renderer is released,
  and the remaining links still render.
"""

import logging

from arc_sampler import DEFAULT_ARC_DIVISIONS
from curve_solver import WORLD_UP
from link_renderer import LinkRenderer
from render_output import FrameOutput
from tube_extruder import RADIAL_SEGMENTS, TUBULAR_SEGMENTS

logger = logging.getLogger(__name__)


class LinkScene:
    """
    Per-frame driver over all links.

    Node and link collections belong to the caller; they are read each frame
    and never modified.
    """

    def __init__(self, world_up=WORLD_UP, arc_divisions=DEFAULT_ARC_DIVISIONS,
                 radial_segments=RADIAL_SEGMENTS, tubular_segments=TUBULAR_SEGMENTS,
                 fade_edges=False):
        self.world_up = world_up
        self.arc_divisions = arc_divisions
        self.radial_segments = radial_segments
        self.tubular_segments = tubular_segments
        self.fade_edges = fade_edges
        self.renderers = {}

    @classmethod
    def from_settings(cls, settings):
        """Build a scene using the render options of a UserSettings instance."""
        return cls(
            arc_divisions=settings.get('arc_length_divisions'),
            radial_segments=settings.get('tube_radial_segments'),
            tubular_segments=settings.get('tube_tubular_segments'),
            fade_edges=settings.get('fade_edges'),
        )

    @property
    def renderer_count(self):
        return len(self.renderers)

    def _create_renderer(self, link_id):
        logger.debug("Creating renderer for link %s", link_id)
        return LinkRenderer(
            link_id,
            world_up=self.world_up,
            arc_divisions=self.arc_divisions,
            radial_segments=self.radial_segments,
            tubular_segments=self.tubular_segments,
            fade_edges=self.fade_edges,
        )

    def release(self, link_id):
        """Drop the curve and render state of a link. Returns True if one existed."""
        if self.renderers.pop(link_id, None) is not None:
            logger.debug("Released renderer for link %s", link_id)
            return True
        return False

    def clear(self):
        self.renderers.clear()

    def update_frame(self, nodes, links, frame, animate=True, selected_id=None):
        """
        Update every active link for this frame.

        Args:
            nodes: iterable of Node, or a {node_id: Node} mapping
            links: iterable of Link
            frame: FrameState for this frame
            animate: global animation flag
            selected_id: id of the selected link, if any

        Returns:
            FrameOutput whose `links` maps link id -> renderable output. Stream
            arrays in it are reused by the next call.
        """
        node_map = nodes if isinstance(nodes, dict) else {n.id: n for n in nodes}
        result = FrameOutput(frame_id=frame.frame_id)
        seen = set()

        for link in links:
            seen.add(link.id)
            if not link.active:
                self.release(link.id)
                continue

            a = node_map.get(link.from_id)
            b = node_map.get(link.to_id)
            if a is None or b is None:
                logger.debug("Skipping link %s: missing endpoint", link.id)
                self.release(link.id)
                result.skipped.append(link.id)
                continue

            renderer = self.renderers.get(link.id)
            if renderer is None:
                renderer = self._create_renderer(link.id)
                self.renderers[link.id] = renderer

            try:
                output = renderer.update(link, a.position, b.position, frame,
                                         animate=animate, selected=(link.id == selected_id))
            except Exception:
                logger.exception("Link %s failed to render, skipping it this frame", link.id)
                self.release(link.id)
                result.skipped.append(link.id)
                continue

            if output is not None:
                result.links[link.id] = output

        for stale_id in [link_id for link_id in self.renderers if link_id not in seen]:
            self.release(stale_id)

        return result
