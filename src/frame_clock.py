"""
LinkFlow 3D - Frame Clock
Frame timing handed to the link renderers each frame
"""

import time
from dataclasses import dataclass


MAX_FRAME_DT = 0.25


@dataclass(frozen=True)
class FrameState:
    """Immutable frame information passed to every link renderer."""
    frame_id: int   # Monotonically increasing frame counter
    dt: float       # Delta time since last frame (seconds, >= 0)
    t: float        # Total elapsed time (seconds)

    @property
    def fps(self):
        """Estimated FPS from delta time."""
        return 1.0 / max(1e-6, self.dt)


class FrameClock:
    """
    Produces FrameState values from a monotonic timer.

    Negative deltas are clamped to 0 and long stalls (window drags, debugger
    pauses) to max_dt, so streams never jump.
    """

    def __init__(self, max_dt=MAX_FRAME_DT, timer=time.perf_counter):
        self.max_dt = max_dt
        self._timer = timer
        self._last = None
        self.frame_id = 0
        self.elapsed = 0.0

    def tick(self, now=None):
        if now is None:
            now = self._timer()
        if self._last is None:
            dt = 0.0
        else:
            dt = min(self.max_dt, max(0.0, now - self._last))
        self._last = now
        self.elapsed += dt
        self.frame_id += 1
        return FrameState(self.frame_id, dt, self.elapsed)

    def reset(self):
        self._last = None
        self.frame_id = 0
        self.elapsed = 0.0
