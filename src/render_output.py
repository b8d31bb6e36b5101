"""
LinkFlow 3D - Render Output
Plain-data descriptions of what a link looks like this frame.
They hold numpy arrays and floats only, no GL objects, so the drawing side
can consume them however it likes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


Color = Tuple[float, float, float, float]


@dataclass
class LineOutput:
    """Solid or dashed stroke along the quadratic curve."""
    start: np.ndarray
    control: np.ndarray
    end: np.ndarray
    color: Color
    width: float
    opacity: float
    dashed: bool = False
    dash_offset: float = 0.0
    dash_scale: float = 1.0
    dash_size: float = 0.25


@dataclass
class StreamEntry:
    position: np.ndarray
    orientation: Optional[np.ndarray]
    size: float
    color: Color
    opacity: float
    shape: Optional[str] = None
    char: Optional[str] = None


@dataclass
class StreamOutput:
    """
    Particles or icons riding the curve.

    `positions` (and `orientations` for particles) are the stream's own
    preallocated arrays, mutated in place every frame.
    """
    kind: str                        # 'particles' or 'icons'
    positions: np.ndarray            # (N, 3)
    orientations: Optional[np.ndarray]
    params: np.ndarray               # (N,) curve fraction of each element
    size: float
    color: Color
    opacities: np.ndarray            # (N,)
    shape: Optional[str] = None
    char: Optional[str] = None

    def __len__(self):
        return len(self.positions)

    @property
    def entries(self) -> List[StreamEntry]:
        """Per-element snapshot; unlike the arrays, safe to keep past this frame."""
        return [
            StreamEntry(
                position=self.positions[i].copy(),
                orientation=None if self.orientations is None else self.orientations[i].copy(),
                size=self.size,
                color=self.color,
                opacity=float(self.opacities[i]),
                shape=self.shape,
                char=self.char,
            )
            for i in range(len(self.positions))
        ]


@dataclass
class TubeMesh:
    """Indexed triangle mesh. vertices/normals are (V, 3) float32, indices (T, 3) uint32."""
    vertices: np.ndarray
    normals: np.ndarray
    indices: np.ndarray

    @property
    def triangle_count(self):
        return len(self.indices)


@dataclass
class HeadTransform:
    """Cone marker travelling along the tube; its +Z axis points down the curve."""
    position: np.ndarray
    direction: np.ndarray
    matrix: np.ndarray               # 4x4, column vectors = right, up, direction, position
    radius: float
    height: float
    segments: int = 8


@dataclass
class TubeOutput:
    mesh: TubeMesh
    mesh_version: int
    color: Color
    emissive_color: Color
    emissive_intensity: float
    opacity: float
    head: Optional[HeadTransform] = None


@dataclass
class FrameOutput:
    """
    Everything rendered for one frame, keyed by link id.

    Stream outputs share their arrays with the live streams, so the next
    update_frame overwrites them. Copy them (or use StreamOutput.entries)
    to keep a frame around.
    """
    frame_id: int
    links: dict = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    def __len__(self):
        return len(self.links)
