"""
LinkFlow 3D - Dash Line
Marching dash offset for dashed link strokes
"""

DASH_SPEED_SCALE = 0.8


class DashLine:
    """Scalar dash offset that decreases by speed * dt * 0.8 while animating."""

    def __init__(self):
        self.dash_offset = 0.0

    def update(self, speed, dt, animate=True, dash_animate=True):
        if animate and dash_animate is not False and dt > 0:
            self.dash_offset -= speed * dt * DASH_SPEED_SCALE
        return self.dash_offset
