"""
LinkFlow 3D - Link Viewport
OpenGL canvas that hosts the per-frame link render loop
"""

import logging
import math

import numpy as np
from PyQt5.QtWidgets import QOpenGLWidget
from PyQt5.QtCore import Qt, QTimer, QPoint, pyqtSignal
from PyQt5.QtGui import QMouseEvent, QWheelEvent, QKeyEvent

from OpenGL.GL import *
from OpenGL.GLU import *

from frame_clock import FrameClock
from gl_draw import draw_output, draw_node, release_glyph_textures
from link_scene import LinkScene
from render_output import TubeOutput

logger = logging.getLogger(__name__)


class LinkViewport(QOpenGLWidget):
    """3D OpenGL canvas: a QTimer repaints at target_fps, each paint is one frame."""

    # Signals
    frame_rendered = pyqtSignal(str)

    def __init__(self, settings, nodes=None, links=None, parent=None):
        super().__init__(parent)
        self.settings = settings

        # Scene data (owned by the caller, read every frame)
        self.nodes = nodes if nodes is not None else []
        self.links = links if links is not None else []
        self.selected_link_id = None
        self.animate = settings.animate

        self.scene = LinkScene.from_settings(settings)
        self.clock = FrameClock()
        self._quadric = None

        # Camera parameters
        self.camera_distance = 10.0
        self.camera_azimuth = 45.0    # Horizontal rotation (degrees)
        self.camera_elevation = 25.0   # Vertical rotation (degrees)
        self.camera_target = np.array([0.0, 0.5, 0.0])

        # Mouse tracking
        self.last_mouse_pos = QPoint()
        self.mouse_pressed = False

        self.background_color = (0.05, 0.07, 0.12, 1.0)

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.update)
        self.timer.start(int(1000 / settings.target_fps))

        self.setFocusPolicy(Qt.StrongFocus)

    def set_scene_data(self, nodes, links):
        self.nodes = nodes
        self.links = links
        self.scene.clear()

    def set_animate(self, animate):
        self.animate = bool(animate)

    def initializeGL(self):
        """Initialize OpenGL settings"""
        glClearColor(*self.background_color)
        glShadeModel(GL_SMOOTH)

        glEnable(GL_DEPTH_TEST)
        glDepthFunc(GL_LESS)

        glEnable(GL_BLEND)
        glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)

        glEnable(GL_LINE_SMOOTH)
        glHint(GL_LINE_SMOOTH_HINT, GL_NICEST)
        glEnable(GL_MULTISAMPLE)

        glEnable(GL_LIGHTING)
        glEnable(GL_LIGHT0)
        glEnable(GL_COLOR_MATERIAL)
        glColorMaterial(GL_FRONT_AND_BACK, GL_AMBIENT_AND_DIFFUSE)
        glEnable(GL_NORMALIZE)

        # Key light from above-front, directional
        glLightfv(GL_LIGHT0, GL_POSITION, [0.3, 1.0, 0.5, 0.0])
        glLightfv(GL_LIGHT0, GL_AMBIENT, [0.35, 0.35, 0.35, 1.0])
        glLightfv(GL_LIGHT0, GL_DIFFUSE, [0.8, 0.8, 0.8, 1.0])

        glMaterialfv(GL_FRONT_AND_BACK, GL_SPECULAR, [0.6, 0.6, 0.6, 1.0])
        glMaterialf(GL_FRONT_AND_BACK, GL_SHININESS, 64.0)

        self._quadric = gluNewQuadric()
        gluQuadricNormals(self._quadric, GLU_SMOOTH)

    def resizeGL(self, width, height):
        """Handle widget resize"""
        if height == 0:
            height = 1

        glViewport(0, 0, width, height)

        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(45.0, width / height, 0.1, 1000.0)
        glMatrixMode(GL_MODELVIEW)

    def paintGL(self):
        """Render one frame: tick the clock, update every link, draw outputs."""
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        glLoadIdentity()
        self._setup_camera()

        frame = self.clock.tick()
        output = self.scene.update_frame(self.nodes, self.links, frame,
                                         animate=self.animate,
                                         selected_id=self.selected_link_id)

        for node in self.nodes:
            draw_node(node, self._quadric)

        # Opaque tubes first, then translucent lines and streams
        ordered = sorted(output.links.values(), key=lambda o: not isinstance(o, TubeOutput))
        for link_output in ordered:
            draw_output(link_output, self._quadric)

        if frame.frame_id % 60 == 0:
            self.frame_rendered.emit(f"{frame.fps:.0f} fps, {len(output)} links")

    def _setup_camera(self):
        """Setup the camera view matrix"""
        azimuth_rad = math.radians(self.camera_azimuth)
        elevation_rad = math.radians(self.camera_elevation)

        camera_x = self.camera_target[0] + self.camera_distance * math.cos(elevation_rad) * math.sin(azimuth_rad)
        camera_y = self.camera_target[1] + self.camera_distance * math.sin(elevation_rad)
        camera_z = self.camera_target[2] + self.camera_distance * math.cos(elevation_rad) * math.cos(azimuth_rad)

        gluLookAt(
            camera_x, camera_y, camera_z,
            self.camera_target[0], self.camera_target[1], self.camera_target[2],
            0.0, 1.0, 0.0
        )

    def mousePressEvent(self, event: QMouseEvent):
        self.last_mouse_pos = event.pos()
        self.mouse_pressed = True

    def mouseReleaseEvent(self, event: QMouseEvent):
        self.mouse_pressed = False

    def mouseMoveEvent(self, event: QMouseEvent):
        if not self.mouse_pressed:
            return
        dx = event.x() - self.last_mouse_pos.x()
        dy = event.y() - self.last_mouse_pos.y()
        self.last_mouse_pos = event.pos()

        # Orbit camera around target
        self.camera_azimuth -= dx * 0.5
        self.camera_elevation += dy * 0.5
        self.camera_elevation = max(-89, min(89, self.camera_elevation))

    def wheelEvent(self, event: QWheelEvent):
        """Handle mouse wheel for zoom"""
        zoom_factor = 1.1 if event.angleDelta().y() < 0 else 0.9
        self.camera_distance = max(1.0, min(100.0, self.camera_distance * zoom_factor))

    def keyPressEvent(self, event: QKeyEvent):
        key = event.key()
        if key == Qt.Key_Space:
            self.set_animate(not self.animate)
            self.settings.set_and_save('animate', self.animate)
            logger.info("Animation %s", "on" if self.animate else "off")
        elif key == Qt.Key_S and self.links:
            # Cycle the highlighted link
            ids = [link.id for link in self.links]
            if self.selected_link_id in ids:
                index = (ids.index(self.selected_link_id) + 1) % len(ids)
            else:
                index = 0
            self.selected_link_id = ids[index]
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        self.timer.stop()
        self.makeCurrent()
        release_glyph_textures()
        if self._quadric is not None:
            gluDeleteQuadric(self._quadric)
            self._quadric = None
        self.doneCurrent()
        super().closeEvent(event)
