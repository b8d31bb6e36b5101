"""
LinkFlow 3D - Curve Solver
Quadratic Bezier link curve with a control point bent away from the midpoint
"""

import numpy as np

from link_model import CurveMode


WORLD_UP = np.array([0.0, 1.0, 0.0])
FALLBACK_SIDE = np.array([1.0, 0.0, 0.0])

UP_BEND_SCALE = 0.6
SIDE_BEND_SCALE = 0.6
ARC_BEND_SCALE = 0.45


def side_vector(direction, world_up=WORLD_UP):
    """
    Unit vector perpendicular to both the link direction and the up axis.

    Falls back to the world X axis when the direction is vertical or
    zero-length, so degenerate links never produce NaN.
    """
    side = np.cross(direction, world_up)
    length = np.linalg.norm(side)
    if length > 1e-9:
        return side / length
    return FALLBACK_SIDE.copy()


def compute_control_point(start, end, mode=CurveMode.UP, bend=0.3, world_up=WORLD_UP):
    """
    Compute the quadratic control point for a link.

    Args:
        start: [x, y, z] of the source node
        end: [x, y, z] of the target node
        mode: CurveMode (or its name)
        bend: bend amount in [0, 1]
        world_up: up axis used for the 'up' and 'arc' lifts

    Returns:
        numpy array [x, y, z]
    """
    start = np.asarray(start, dtype=float)
    end = np.asarray(end, dtype=float)
    mode = CurveMode.parse(mode)
    world_up = np.asarray(world_up, dtype=float)

    mid = start + (end - start) * 0.5
    if not bend or mode is CurveMode.STRAIGHT:
        return mid

    direction = end - start
    length = np.linalg.norm(direction)

    if mode is CurveMode.UP:
        mid += world_up * length * bend * UP_BEND_SCALE
    elif mode is CurveMode.SIDE:
        mid += side_vector(direction, world_up) * length * bend * SIDE_BEND_SCALE
    elif mode is CurveMode.ARC:
        mid += world_up * length * bend * ARC_BEND_SCALE
        mid += side_vector(direction, world_up) * length * bend * ARC_BEND_SCALE
    return mid


class QuadraticCurve:
    """
    Mutable quadratic Bezier record (start, control, end).

    One instance is owned by each link renderer and updated in place every
    frame. `version` increments on every change so samplers can invalidate
    their caches.
    """

    def __init__(self, start=(0.0, 0.0, 0.0), control=(0.0, 0.0, 0.0), end=(0.0, 0.0, 0.0)):
        self.start = np.array(start, dtype=float)
        self.control = np.array(control, dtype=float)
        self.end = np.array(end, dtype=float)
        self.version = 0

    def set_endpoints(self, start, end):
        self.start[:] = start
        self.end[:] = end
        self.version += 1

    def set_control(self, control):
        self.control[:] = control
        self.version += 1

    def copy(self):
        return QuadraticCurve(self.start, self.control, self.end)

    def __repr__(self):
        return f"QuadraticCurve(start={self.start}, control={self.control}, end={self.end})"


class CurveSolver:
    """
    Caches the base control point of one link.

    The control point is recomputed only when the endpoints, the bend mode or
    the bend amount change.
    """

    def __init__(self, world_up=WORLD_UP):
        self.world_up = np.array(world_up, dtype=float)
        self._key = None
        self._base_control = None

    def base_control(self, start, end, mode, bend):
        key = (tuple(np.asarray(start, dtype=float)), tuple(np.asarray(end, dtype=float)),
               CurveMode.parse(mode), float(bend))
        if key != self._key:
            self._base_control = compute_control_point(start, end, mode, bend, self.world_up)
            self._key = key
        return self._base_control
