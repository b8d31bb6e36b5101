"""
LinkFlow 3D - GL Drawing
Immediate-mode OpenGL drawing of link render outputs
"""

import numpy as np
from OpenGL.GL import *
from OpenGL.GLU import *
from PyQt5.QtCore import Qt, QRect
from PyQt5.QtGui import QColor, QFont, QImage, QPainter

from link_model import parse_color
from render_output import LineOutput, StreamOutput, TubeOutput


LINE_SEGMENTS = 64
NO_EMISSION = [0.0, 0.0, 0.0, 1.0]

# Unit octahedron faces (outward winding)
_OCTA_VERTICES = np.array([
    [1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1], [0, 0, -1],
], dtype=float)
_OCTA_FACES = [
    (0, 2, 4), (2, 1, 4), (1, 3, 4), (3, 0, 4),
    (2, 0, 5), (1, 2, 5), (3, 1, 5), (0, 3, 5),
]

# Unit cube faces: (normal, 4 corners)
_CUBE_FACES = [
    ((1, 0, 0), [(1, -1, -1), (1, 1, -1), (1, 1, 1), (1, -1, 1)]),
    ((-1, 0, 0), [(-1, -1, 1), (-1, 1, 1), (-1, 1, -1), (-1, -1, -1)]),
    ((0, 1, 0), [(-1, 1, -1), (-1, 1, 1), (1, 1, 1), (1, 1, -1)]),
    ((0, -1, 0), [(-1, -1, 1), (-1, -1, -1), (1, -1, -1), (1, -1, 1)]),
    ((0, 0, 1), [(-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1)]),
    ((0, 0, -1), [(1, -1, -1), (-1, -1, -1), (-1, 1, -1), (1, 1, -1)]),
]


def sample_quadratic(start, control, end, segments=LINE_SEGMENTS):
    """(segments + 1, 3) points along the quadratic curve."""
    t = np.linspace(0.0, 1.0, segments + 1)
    mt = 1.0 - t
    return ((mt * mt)[:, None] * start[None, :] +
            (2.0 * mt * t)[:, None] * control[None, :] +
            (t * t)[:, None] * end[None, :])


def dash_mask(points, dash_offset, dash_scale, dash_size):
    """
    Which polyline segments are drawn for a dashed stroke.

    A segment is visible when its arc-length midpoint falls in the first half
    of a dash period (dash_size on, dash_size off), shifted by dash_offset.
    """
    seg = np.linalg.norm(points[1:] - points[:-1], axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(seg)])
    mids = (cumulative[:-1] + cumulative[1:]) * 0.5
    period = 2.0 * max(dash_size, 1e-6)
    phase = np.mod(mids * dash_scale - dash_offset, period)
    return phase < period * 0.5


def draw_line(output):
    points = sample_quadratic(output.start, output.control, output.end)
    r, g, b, a = output.color

    glDisable(GL_LIGHTING)
    glLineWidth(max(1.0, output.width))
    glColor4f(r, g, b, a * output.opacity)

    if output.dashed:
        mask = dash_mask(points, output.dash_offset, output.dash_scale, output.dash_size)
        glBegin(GL_LINES)
        for i in np.nonzero(mask)[0]:
            glVertex3f(*points[i])
            glVertex3f(*points[i + 1])
        glEnd()
    else:
        glBegin(GL_LINE_STRIP)
        for p in points:
            glVertex3f(*p)
        glEnd()

    glLineWidth(1.0)
    glEnable(GL_LIGHTING)


def _draw_cube():
    glBegin(GL_QUADS)
    for normal, corners in _CUBE_FACES:
        glNormal3f(*normal)
        for corner in corners:
            glVertex3f(*corner)
    glEnd()


def _draw_octahedron():
    glBegin(GL_TRIANGLES)
    for face in _OCTA_FACES:
        a, b, c = (_OCTA_VERTICES[i] for i in face)
        normal = np.cross(b - a, c - a)
        normal /= np.linalg.norm(normal)
        glNormal3f(*normal)
        for v in (a, b, c):
            glVertex3f(*v)
    glEnd()


def _billboard_axes():
    """Camera right/up vectors taken from the current modelview matrix."""
    modelview = np.array(glGetFloatv(GL_MODELVIEW_MATRIX)).reshape(4, 4)
    right = modelview[:3, 0]
    up = modelview[:3, 1]
    return right, up


# ==================== Icon glyphs ====================

GLYPH_TEXTURE_SIZE = 64

# char -> GL texture id, valid for the context that created it
_glyph_textures = {}


def _rasterize_glyph(char, size=GLYPH_TEXTURE_SIZE):
    """White glyph on a transparent square; tinted with glColor when drawn."""
    image = QImage(size, size, QImage.Format_RGBA8888)
    image.fill(Qt.transparent)

    painter = QPainter(image)
    painter.setRenderHint(QPainter.TextAntialiasing)
    font = QFont()
    font.setPixelSize(int(size * 0.8))
    painter.setFont(font)
    painter.setPen(QColor(255, 255, 255))
    painter.drawText(QRect(0, 0, size, size), Qt.AlignCenter, char)
    painter.end()

    bits = image.constBits()
    bits.setsize(image.sizeInBytes())
    return bytes(bits)


def glyph_texture(char):
    texture = _glyph_textures.get(char)
    if texture is not None:
        return texture

    size = GLYPH_TEXTURE_SIZE
    data = _rasterize_glyph(char, size)
    texture = glGenTextures(1)
    glBindTexture(GL_TEXTURE_2D, texture)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_LINEAR)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_LINEAR)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_S, GL_CLAMP_TO_EDGE)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_T, GL_CLAMP_TO_EDGE)
    glTexImage2D(GL_TEXTURE_2D, 0, GL_RGBA, size, size, 0, GL_RGBA, GL_UNSIGNED_BYTE, data)
    glBindTexture(GL_TEXTURE_2D, 0)

    _glyph_textures[char] = texture
    return texture


def release_glyph_textures():
    """Delete cached glyph textures. Call with the owning context current."""
    if _glyph_textures:
        glDeleteTextures(list(_glyph_textures.values()))
        _glyph_textures.clear()


def draw_icons(output):
    """Camera-facing textured quads showing output.char."""
    r, g, b, _ = output.color
    half = output.size * 0.5
    right, up = _billboard_axes()

    glDisable(GL_LIGHTING)
    # Transparent glyph corners must not hide what is behind them
    glDepthMask(GL_FALSE)
    glEnable(GL_TEXTURE_2D)
    glTexEnvi(GL_TEXTURE_ENV, GL_TEXTURE_ENV_MODE, GL_MODULATE)
    glBindTexture(GL_TEXTURE_2D, glyph_texture(output.char or "▶"))
    # Texture rows start at the image top
    glBegin(GL_QUADS)
    for position, opacity in zip(output.positions, output.opacities):
        glColor4f(r, g, b, float(opacity))
        glTexCoord2f(0.0, 1.0)
        glVertex3f(*(position - right * half - up * half))
        glTexCoord2f(1.0, 1.0)
        glVertex3f(*(position + right * half - up * half))
        glTexCoord2f(1.0, 0.0)
        glVertex3f(*(position + right * half + up * half))
        glTexCoord2f(0.0, 0.0)
        glVertex3f(*(position - right * half + up * half))
    glEnd()
    glBindTexture(GL_TEXTURE_2D, 0)
    glDisable(GL_TEXTURE_2D)
    glDepthMask(GL_TRUE)
    glEnable(GL_LIGHTING)


def draw_stream(output, quadric):
    r, g, b, _ = output.color
    half = output.size * 0.5

    if output.kind == 'icons':
        draw_icons(output)
        return

    for position, opacity in zip(output.positions, output.opacities):
        glColor4f(r, g, b, float(opacity))
        glPushMatrix()
        glTranslatef(*position)
        if output.shape == 'box':
            glScalef(half, half, half)
            _draw_cube()
        elif output.shape == 'octa':
            glScalef(half, half, half)
            _draw_octahedron()
        else:
            gluSphere(quadric, half, 12, 8)
        glPopMatrix()


def draw_tube(output, quadric):
    mesh = output.mesh
    r, g, b, _ = output.color
    er, eg, eb, _ = output.emissive_color
    k = output.emissive_intensity
    emission = [min(1.0, er * k), min(1.0, eg * k), min(1.0, eb * k), 1.0]

    glMaterialfv(GL_FRONT_AND_BACK, GL_EMISSION, emission)
    glColor4f(r, g, b, output.opacity)

    if mesh is not None and mesh.triangle_count:
        glEnableClientState(GL_VERTEX_ARRAY)
        glEnableClientState(GL_NORMAL_ARRAY)
        glVertexPointer(3, GL_FLOAT, 0, mesh.vertices)
        glNormalPointer(GL_FLOAT, 0, mesh.normals)
        glDrawElements(GL_TRIANGLES, mesh.indices.size, GL_UNSIGNED_INT, mesh.indices)
        glDisableClientState(GL_NORMAL_ARRAY)
        glDisableClientState(GL_VERTEX_ARRAY)

    glMaterialfv(GL_FRONT_AND_BACK, GL_EMISSION, NO_EMISSION)

    head = output.head
    if head is not None:
        glDisable(GL_LIGHTING)
        glColor4f(r, g, b, 0.95)
        glPushMatrix()
        # numpy is row-major; GL wants column-major
        glMultMatrixf(np.ascontiguousarray(head.matrix.T, dtype=np.float32))
        # Cone base centred on the head position, tip pointing down the curve
        glTranslatef(0.0, 0.0, -head.height * 0.5)
        gluCylinder(quadric, head.radius, 0.0, head.height, head.segments, 1)
        glPopMatrix()
        glEnable(GL_LIGHTING)


def draw_output(output, quadric):
    """Draw any link output produced by LinkRenderer."""
    if isinstance(output, LineOutput):
        draw_line(output)
    elif isinstance(output, StreamOutput):
        draw_stream(output, quadric)
    elif isinstance(output, TubeOutput):
        draw_tube(output, quadric)


def draw_node(node, quadric, radius=0.12):
    r, g, b, a = parse_color(node.color, fallback="#ffffff")
    glColor4f(r, g, b, a)
    glPushMatrix()
    glTranslatef(*node.position)
    gluSphere(quadric, radius, 16, 16)
    glPopMatrix()
