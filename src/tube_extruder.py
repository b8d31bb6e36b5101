"""
LinkFlow 3D - Tube Extruder
Glowing tube swept along a link curve, with a travelling head marker
"""

import logging
import math

import numpy as np

from curve_solver import WORLD_UP, FALLBACK_SIDE
from render_output import TubeMesh, TubeOutput, HeadTransform

logger = logging.getLogger(__name__)


RADIAL_SEGMENTS = 12
# Fixed regardless of curve length
TUBULAR_SEGMENTS = 240

REBUILD_TOLERANCE = 1e-3

PULSE_BASE = 0.85
PULSE_AMPLITUDE = 0.15
PULSE_RATE = 1.7
SELECTED_GLOW_SCALE = 1.2
HEAD_SPEED_SCALE = 0.12
HEAD_RADIUS_SCALE = 1.6
HEAD_HEIGHT_SCALE = 5.0
HEAD_SEGMENTS = 8
EMISSIVE_COLOR_SCALE = 0.7


def glow_pulse(elapsed, speed, animate=True):
    """Pulse factor in [0.70, 1.00]; 1.0 when not animating."""
    if not animate:
        return 1.0
    return PULSE_BASE + math.sin(elapsed * speed * PULSE_RATE) * PULSE_AMPLITUDE


def emissive_intensity(base_glow, elapsed, speed, animate=True, selected=False):
    scale = SELECTED_GLOW_SCALE if selected else 1.0
    return base_glow * glow_pulse(elapsed, speed, animate) * scale


def head_parameter(elapsed, speed, animate=True):
    """Arc-length fraction of the head marker: frac(elapsed * speed * 0.12)."""
    if not animate:
        elapsed = 0.0
    return (elapsed * speed * HEAD_SPEED_SCALE) % 1.0


def compute_parallel_frames(points):
    """
    Parallel transport frames along a polyline.
    Prevents the tube cross-section from twisting unexpectedly.

    Returns (rights, ups), each (N, 3).
    """
    n = len(points)
    rights = np.zeros((n, 3))
    ups = np.zeros((n, 3))
    if n < 2:
        return rights, ups

    # Batch tangents: forward differences, last one repeated
    tangents = np.empty((n, 3))
    tangents[:-1] = points[1:] - points[:-1]
    tangents[-1] = tangents[-2]
    lengths = np.linalg.norm(tangents, axis=1)
    degenerate = lengths < 1e-9
    lengths[degenerate] = 1.0
    tangents /= lengths[:, None]
    if np.all(degenerate):
        tangents[:] = FALLBACK_SIDE
    else:
        # Zero-length steps reuse the previous valid tangent
        for i in range(n):
            if degenerate[i]:
                tangents[i] = tangents[i - 1] if i > 0 else tangents[np.argmin(degenerate)]

    tangent = tangents[0]
    up_hint = WORLD_UP if abs(tangent[1]) < 0.9 else np.array([0.0, 0.0, 1.0])
    right = np.cross(tangent, up_hint)
    right /= np.linalg.norm(right)
    up = np.cross(right, tangent)
    up /= np.linalg.norm(up)
    rights[0] = right
    ups[0] = up

    for i in range(1, n):
        tangent_new = tangents[i]
        c = float(np.dot(tangent, tangent_new))
        if c > -0.99:
            # Reflection form of the rotation taking tangent -> tangent_new
            v = tangent_new - tangent
            right = right - (2.0 / (1.0 + c)) * np.dot(v, right) * (tangent + tangent_new) / 2.0

            right = right - np.dot(right, tangent_new) * tangent_new
            right_len = np.linalg.norm(right)
            if right_len > 1e-9:
                right = right / right_len

            up = np.cross(right, tangent_new)
            up_len = np.linalg.norm(up)
            if up_len > 1e-9:
                up = up / up_len
        tangent = tangent_new
        rights[i] = right
        ups[i] = up

    return rights, ups


def build_tube_mesh(points, radius, radial_segments=RADIAL_SEGMENTS):
    """
    Indexed circular tube around a polyline.

    Vertex (i, j) = center_i + radius * (cos(a_j) * right_i + sin(a_j) * up_i).
    Returns a TubeMesh with (N*R, 3) float32 vertices/normals and
    (2*(N-1)*R, 3) uint32 triangles.
    """
    pts = np.asarray(points, dtype=float)
    if len(pts) < 2 or radial_segments < 3:
        return TubeMesh(np.zeros((0, 3), np.float32), np.zeros((0, 3), np.float32),
                        np.zeros((0, 3), np.uint32))

    rights, ups = compute_parallel_frames(pts)
    angles = np.linspace(0.0, 2.0 * math.pi, radial_segments, endpoint=False)
    cos_a = np.cos(angles)
    sin_a = np.sin(angles)

    # Broadcast (N, 1, 3) * (1, R, 1) -> (N, R, 3)
    normals = (cos_a[None, :, None] * rights[:, None, :] +
               sin_a[None, :, None] * ups[:, None, :])
    vertices = pts[:, None, :] + radius * normals

    n_rings = len(pts)
    ring = np.arange(n_rings - 1, dtype=np.uint32)[:, None] * radial_segments   # (N-1, 1)
    j = np.arange(radial_segments, dtype=np.uint32)[None, :]                     # (1, R)
    j_next = (j + 1) % radial_segments

    a = ring + j
    b = ring + radial_segments + j
    c = ring + radial_segments + j_next
    d = ring + j_next

    # Two triangles per quad: (a, b, c) and (a, c, d)
    tris = np.empty((n_rings - 1, radial_segments, 2, 3), dtype=np.uint32)
    tris[:, :, 0, 0] = a
    tris[:, :, 0, 1] = b
    tris[:, :, 0, 2] = c
    tris[:, :, 1, 0] = a
    tris[:, :, 1, 1] = c
    tris[:, :, 1, 2] = d

    return TubeMesh(
        vertices=np.ascontiguousarray(vertices.reshape(-1, 3), dtype=np.float32),
        normals=np.ascontiguousarray(normals.reshape(-1, 3), dtype=np.float32),
        indices=np.ascontiguousarray(tris.reshape(-1, 3)),
    )


def look_along(position, direction, world_up=WORLD_UP):
    """4x4 transform whose +Z axis points along `direction`, placed at `position`."""
    z = np.asarray(direction, dtype=float)
    x = np.cross(world_up, z)
    x_len = np.linalg.norm(x)
    if x_len < 1e-9:
        x = np.cross(FALLBACK_SIDE, z)
        x_len = np.linalg.norm(x)
        if x_len < 1e-9:
            x, x_len = FALLBACK_SIDE.copy(), 1.0
    x = x / x_len
    y = np.cross(z, x)

    matrix = np.eye(4)
    matrix[:3, 0] = x
    matrix[:3, 1] = y
    matrix[:3, 2] = z
    matrix[:3, 3] = position
    return matrix


class TubeExtruder:
    """
    Owns the tube mesh of one link.

    The mesh is rebuilt only when the thickness changes or a curve point moved
    by more than REBUILD_TOLERANCE; glow and head are recomputed every frame.

    Args:
        sampler: ArcSampler over the link curve
        radial_segments: vertices around each ring
        tubular_segments: rings along the curve minus one
    """

    def __init__(self, sampler, radial_segments=RADIAL_SEGMENTS, tubular_segments=TUBULAR_SEGMENTS):
        self.sampler = sampler
        self.radial_segments = max(3, int(radial_segments))
        self.tubular_segments = max(1, int(tubular_segments))
        self.mesh = None
        self.mesh_version = 0
        self._built_thickness = None
        self._built_points = None

    def _needs_rebuild(self, thickness):
        if self.mesh is None or thickness != self._built_thickness:
            return True
        curve = self.sampler.curve
        current = np.stack([curve.start, curve.control, curve.end])
        return float(np.max(np.abs(current - self._built_points))) > REBUILD_TOLERANCE

    def rebuild(self, thickness):
        points = self.sampler.get_curve_points(self.tubular_segments)
        self.mesh = build_tube_mesh(points, thickness, self.radial_segments)
        curve = self.sampler.curve
        self._built_points = np.stack([curve.start, curve.control, curve.end])
        self._built_thickness = thickness
        self.mesh_version += 1
        logger.debug("Tube mesh rebuilt (%d triangles, version %d)",
                     self.mesh.triangle_count, self.mesh_version)
        return self.mesh

    def head_transform(self, thickness, elapsed, speed, animate=True):
        u = head_parameter(elapsed, speed, animate)
        position = self.sampler.get_point_at(u)
        direction = self.sampler.get_tangent_at(u)
        return HeadTransform(
            position=position,
            direction=direction,
            matrix=look_along(position, direction, self.sampler.world_up),
            radius=thickness * HEAD_RADIUS_SCALE,
            height=thickness * HEAD_HEIGHT_SCALE,
            segments=HEAD_SEGMENTS,
        )

    def update(self, config, speed, elapsed, animate=True, selected=False):
        """
        Args:
            config: resolved TubeConfig (thickness, glow, color, trail)
            speed: effective link speed
            elapsed: clock time in seconds
        """
        if self._needs_rebuild(config.thickness):
            self.rebuild(config.thickness)

        color = config.color
        emissive_color = tuple(ch * EMISSIVE_COLOR_SCALE for ch in color[:3]) + (color[3],)
        head = self.head_transform(config.thickness, elapsed, speed, animate) if config.trail else None

        return TubeOutput(
            mesh=self.mesh,
            mesh_version=self.mesh_version,
            color=color,
            emissive_color=emissive_color,
            emissive_intensity=emissive_intensity(config.glow, elapsed, speed, animate, selected),
            opacity=1.0 if selected else 0.98,
            head=head,
        )
