"""
LinkFlow 3D - Arc Sampler
Position, tangent and normal lookups along a quadratic link curve
"""

import numpy as np

from curve_solver import WORLD_UP, FALLBACK_SIDE


DEFAULT_ARC_DIVISIONS = 200


def _normalize_rows(vectors, fallback):
    """Normalize (N, 3) rows in place; rows with ~zero length take the fallback rows."""
    lengths = np.linalg.norm(vectors, axis=1)
    small = lengths < 1e-9
    lengths[small] = 1.0
    vectors /= lengths[:, None]
    if np.any(small):
        vectors[small] = fallback[small] if fallback.ndim == 2 else fallback
    return vectors


class ArcSampler:
    """
    Samples a QuadraticCurve by Bezier parameter t or by arc-length fraction u.

    The arc-length table is rebuilt lazily whenever the curve's version
    changes, so one sampler can follow a curve that is mutated every frame.

    Args:
        curve: QuadraticCurve to sample
        divisions: number of chords in the arc-length table
        world_up: reference axis for normals
    """

    def __init__(self, curve, divisions=DEFAULT_ARC_DIVISIONS, world_up=WORLD_UP):
        self.curve = curve
        self.divisions = max(1, int(divisions))
        self.world_up = np.array(world_up, dtype=float)
        self._table_version = None
        self._table_t = np.linspace(0.0, 1.0, self.divisions + 1)
        self._table_len = np.zeros(self.divisions + 1)

    # ==================== Parametric ====================

    def get_points(self, ts):
        """Vectorized P(t) = (1-t)^2 A + 2(1-t)t C + t^2 B. Returns (N, 3)."""
        t = np.clip(np.asarray(ts, dtype=float), 0.0, 1.0)
        mt = 1.0 - t
        c = self.curve
        return ((mt * mt)[:, None] * c.start[None, :] +
                (2.0 * mt * t)[:, None] * c.control[None, :] +
                (t * t)[:, None] * c.end[None, :])

    def get_tangents(self, ts):
        """Vectorized unit tangents from P'(t) = 2(1-t)(C-A) + 2t(B-C). Returns (N, 3)."""
        t = np.clip(np.asarray(ts, dtype=float), 0.0, 1.0)
        c = self.curve
        d = ((2.0 * (1.0 - t))[:, None] * (c.control - c.start)[None, :] +
             (2.0 * t)[:, None] * (c.end - c.control)[None, :])
        return _normalize_rows(d, self._chord_direction())

    def get_point(self, t):
        return self.get_points([t])[0]

    def get_tangent(self, t):
        return self.get_tangents([t])[0]

    def _chord_direction(self):
        chord = self.curve.end - self.curve.start
        length = np.linalg.norm(chord)
        if length > 1e-9:
            return chord / length
        return FALLBACK_SIDE.copy()

    # ==================== Arc length ====================

    def _ensure_table(self):
        if self._table_version == self.curve.version:
            return
        pts = self.get_points(self._table_t)
        seg = np.linalg.norm(pts[1:] - pts[:-1], axis=1)
        self._table_len[0] = 0.0
        np.cumsum(seg, out=self._table_len[1:])
        self._table_version = self.curve.version

    @property
    def length(self):
        self._ensure_table()
        return float(self._table_len[-1])

    def u_to_t(self, us):
        """Map arc-length fractions in [0, 1] to Bezier parameters."""
        self._ensure_table()
        u = np.clip(np.asarray(us, dtype=float), 0.0, 1.0)
        total = self._table_len[-1]
        if total <= 1e-12:
            return u
        return np.interp(u * total, self._table_len, self._table_t)

    def get_points_at(self, us):
        return self.get_points(self.u_to_t(us))

    def get_tangents_at(self, us):
        return self.get_tangents(self.u_to_t(us))

    def get_point_at(self, u):
        return self.get_points_at([u])[0]

    def get_tangent_at(self, u):
        return self.get_tangents_at([u])[0]

    def get_normals_at(self, us, tangents=None):
        """
        Unit perpendiculars used for sideways offsets: tangent x up, falling
        back to tangent x X for vertical tangents.
        """
        if tangents is None:
            tangents = self.get_tangents_at(us)
        normals = np.cross(tangents, self.world_up[None, :])
        fallback = np.cross(tangents, FALLBACK_SIDE[None, :])
        fallback = _normalize_rows(fallback, np.array([0.0, 0.0, 1.0]))
        return _normalize_rows(normals, fallback)

    def get_normal_at(self, u):
        return self.get_normals_at([u])[0]

    # ==================== Polyline ====================

    def get_curve_points(self, num_segments):
        """Evenly spaced (by t) polyline of num_segments + 1 points."""
        return self.get_points(np.linspace(0.0, 1.0, int(num_segments) + 1))
