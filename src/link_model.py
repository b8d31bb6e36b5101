"""
LinkFlow 3D - Link Model
Nodes, links and per-style configuration, with clamping and serialization
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


DEFAULT_LINK_COLOR = "#7cf"

# Stream count caps
MAX_PARTICLE_COUNT = 2000
MAX_ICON_COUNT = 500

MIN_SIZE = 0.001
MIN_THICKNESS = 0.001
MIN_WIDTH = 0.1


class LinkStyle(Enum):
    """Visual representation of a link. EPIC is the glowing tube."""
    SOLID = "solid"
    DASHED = "dashed"
    PARTICLES = "particles"
    WAVY = "wavy"
    ICONS = "icons"
    EPIC = "epic"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.debug("Unknown link style %r, using particles", value)
            return cls.PARTICLES


class CurveMode(Enum):
    """How the control point is pushed away from the midpoint."""
    STRAIGHT = "straight"
    UP = "up"
    SIDE = "side"
    ARC = "arc"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.debug("Unknown curve mode %r, using up", value)
            return cls.UP


class ParticleShape(Enum):
    SPHERE = "sphere"
    BOX = "box"
    OCTA = "octa"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.SPHERE


# ==================== Clamping ====================

def clamp(value, low, high=None, default=None):
    """Clamp a live-edited number into range; non-numbers become default (or low)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = low if default is None else default
    if number != number:  # NaN
        number = low if default is None else default
    if number < low:
        number = low
    if high is not None and number > high:
        number = high
    return number


def clamp_count(value, maximum, default=1):
    """Clamp a count to [1, maximum]."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        count = default
    if count < 1:
        logger.debug("Count %r clamped to 1", value)
        return 1
    if count > maximum:
        logger.debug("Count %r clamped to %d", value, maximum)
        return maximum
    return count


def nonzero_or(value, default):
    """Number as float; zero, NaN and non-numbers give default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number or number == 0.0:
        return default
    return number


# ==================== Colors ====================

def parse_color(value, fallback=DEFAULT_LINK_COLOR):
    """
    Normalize a color to an RGBA float tuple.

    Accepts '#rgb', '#rrggbb', '#rrggbbaa' strings and 3/4 element sequences
    in the 0-1 range. Anything else resolves the fallback instead.
    """
    if isinstance(value, str):
        text = value.strip().lstrip('#')
        if len(text) in (3, 4):
            text = ''.join(ch * 2 for ch in text)
        if len(text) in (6, 8):
            try:
                channels = [int(text[i:i + 2], 16) / 255.0 for i in range(0, len(text), 2)]
            except ValueError:
                channels = None
            if channels is not None:
                if len(channels) == 3:
                    channels.append(1.0)
                return tuple(channels)
    elif isinstance(value, (tuple, list, np.ndarray)) and len(value) in (3, 4):
        try:
            channels = [min(1.0, max(0.0, float(c))) for c in value]
        except (TypeError, ValueError):
            channels = None
        if channels is not None:
            if len(channels) == 3:
                channels.append(1.0)
            return tuple(channels)

    if fallback is None or value is fallback:
        return (0.467, 0.8, 1.0, 1.0)
    return parse_color(fallback, fallback=None)


# ==================== Style configuration ====================

@dataclass
class CurveConfig:
    mode: CurveMode = CurveMode.UP
    bend: float = 0.3
    noise_amp: float = 0.0
    noise_freq: float = 1.5

    def clamped(self):
        return CurveConfig(
            mode=CurveMode.parse(self.mode),
            bend=clamp(self.bend, 0.0, 1.0, default=0.3),
            noise_amp=clamp(self.noise_amp, 0.0, default=0.0),
            noise_freq=clamp(self.noise_freq, 0.0, default=1.5),
        )


@dataclass
class ParticleConfig:
    count: int = 24
    size: float = 0.06
    opacity: float = 1.0
    wave_amp: float = None   # None -> style default (0.06 particles, 0.18 wavy)
    wave_freq: float = 2.0
    shape: ParticleShape = ParticleShape.SPHERE
    color: object = None     # None -> link color


@dataclass
class IconConfig:
    char: str = "▶"
    count: int = 4
    size: float = 0.14
    color: object = None


@dataclass
class DashConfig:
    length: float = 1.0
    gap: float = 0.25
    animate: bool = True


@dataclass
class TubeConfig:
    thickness: float = 0.07
    glow: float = 1.4
    color: object = None
    trail: bool = True


# ==================== Entities ====================

class Node:
    """A positioned entity owned by the external store. Read-only to the renderer."""

    def __init__(self, node_id, position, color=None):
        self.id = node_id
        self.position = np.array(position, dtype=float)
        self.color = color if color is not None else "#ffffff"

    def to_dict(self):
        return {
            'id': self.id,
            'position': self.position.tolist(),
            'color': self.color,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['id'], data.get('position', (0.0, 0.0, 0.0)), data.get('color'))

    def __repr__(self):
        return f"Node(id='{self.id}', position={self.position})"


class Link:
    """
    A directed relationship between two nodes with an animated flow.

    Args:
        link_id: link identifier
        from_id: id of the source node
        to_id: id of the target node
        style: LinkStyle or its serialized name
        active: inactive links render nothing
        color: any color accepted by parse_color
        speed: flow speed multiplier
        width: stroke width for line styles
    """

    def __init__(self, link_id, from_id, to_id, style=LinkStyle.PARTICLES, active=True,
                 color=DEFAULT_LINK_COLOR, speed=1.0, width=2.0, curve=None,
                 particles=None, icon=None, dash=None, tube=None):
        self.id = link_id
        self.from_id = from_id
        self.to_id = to_id
        self.style = LinkStyle.parse(style)
        self.active = active
        self.color = color
        self.speed = speed
        self.width = width
        self.curve = curve if curve is not None else CurveConfig()
        self.particles = particles if particles is not None else ParticleConfig()
        self.icon = icon if icon is not None else IconConfig()
        self.dash = dash if dash is not None else DashConfig()
        self.tube = tube if tube is not None else TubeConfig()

    # ==================== Resolved values ====================

    @property
    def style(self):
        return self._style

    @style.setter
    def style(self, value):
        # Live edits may assign the serialized name
        self._style = LinkStyle.parse(value)

    @property
    def rgba(self):
        return parse_color(self.color)

    @property
    def effective_speed(self):
        """
        Flow rate handed to every style. Zero or non-numeric speed falls back
        to 1 and negative speed reverses the flow. Wavy streams run 10% faster.
        """
        speed = nonzero_or(self.speed, 1.0)
        if self.style is LinkStyle.WAVY:
            speed *= 1.1
        return speed

    @property
    def effective_width(self):
        return clamp(self.width, MIN_WIDTH, default=2.0)

    def resolved_particles(self):
        """Particle settings with defaults filled in and invalid values clamped."""
        p = self.particles
        wave_amp = p.wave_amp
        if wave_amp is None:
            wave_amp = 0.18 if self.style is LinkStyle.WAVY else 0.06
        return ParticleConfig(
            count=clamp_count(p.count, MAX_PARTICLE_COUNT, default=24),
            size=clamp(p.size, MIN_SIZE, default=0.06),
            opacity=clamp(p.opacity, 0.0, 1.0, default=1.0),
            wave_amp=clamp(wave_amp, 0.0, default=0.06),
            wave_freq=clamp(p.wave_freq, 0.0, default=2.0),
            shape=ParticleShape.parse(p.shape),
            color=parse_color(p.color if p.color is not None else self.color),
        )

    def resolved_icon(self):
        i = self.icon
        char = str(i.char) if i.char not in (None, "") else "▶"
        return IconConfig(
            char=char,
            count=clamp_count(i.count, MAX_ICON_COUNT, default=4),
            size=clamp(i.size, MIN_SIZE, default=0.14),
            color=parse_color(i.color if i.color is not None else self.color),
        )

    def resolved_dash(self):
        d = self.dash
        return DashConfig(
            length=clamp(d.length, MIN_SIZE, default=1.0),
            gap=clamp(d.gap, MIN_SIZE, default=0.25),
            animate=d.animate is not False,
        )

    def resolved_tube(self):
        t = self.tube
        return TubeConfig(
            thickness=clamp(t.thickness, MIN_THICKNESS, default=0.07),
            glow=nonzero_or(clamp(t.glow, 0.0, default=1.4), 1.4),
            color=parse_color(t.color if t.color is not None else self.color),
            trail=t.trail is not False,
        )

    # ==================== Serialization ====================

    def to_dict(self):
        """Convert link to dictionary for saving"""
        p, i, d, t, c = self.particles, self.icon, self.dash, self.tube, self.curve
        data = {
            'id': self.id,
            'from': self.from_id,
            'to': self.to_id,
            'style': self.style.value,
            'active': bool(self.active),
            'color': _color_to_json(self.color),
            'speed': self.speed,
            'width': self.width,
            'curve': {
                'mode': CurveMode.parse(c.mode).value,
                'bend': c.bend,
                'noiseAmp': c.noise_amp,
                'noiseFreq': c.noise_freq,
            },
            'particles': {
                'count': p.count,
                'size': p.size,
                'opacity': p.opacity,
                'waveFreq': p.wave_freq,
                'shape': ParticleShape.parse(p.shape).value,
            },
            'icon': {
                'char': i.char,
                'count': i.count,
                'size': i.size,
            },
            'dash': {
                'length': d.length,
                'gap': d.gap,
                'animate': d.animate,
            },
            'tube': {
                'thickness': t.thickness,
                'glow': t.glow,
                'trail': t.trail,
            },
        }
        # Unset optionals stay unset so style defaults keep applying after reload
        if p.wave_amp is not None:
            data['particles']['waveAmp'] = p.wave_amp
        if p.color is not None:
            data['particles']['color'] = _color_to_json(p.color)
        if i.color is not None:
            data['icon']['color'] = _color_to_json(i.color)
        if t.color is not None:
            data['tube']['color'] = _color_to_json(t.color)
        return data

    @classmethod
    def from_dict(cls, data):
        """Create link from dictionary. Missing keys take the editor defaults."""
        curve = data.get('curve') or {}
        particles = data.get('particles') or {}
        icon = data.get('icon') or {}
        dash = data.get('dash') or {}
        tube = data.get('tube') or {}

        return cls(
            link_id=data['id'],
            from_id=data.get('from'),
            to_id=data.get('to'),
            style=data.get('style') or LinkStyle.PARTICLES,
            active=data.get('active', True) is not False,
            color=data.get('color') or DEFAULT_LINK_COLOR,
            speed=data.get('speed', 1.0),
            width=data.get('width', 2.0),
            curve=CurveConfig(
                mode=CurveMode.parse(curve.get('mode', 'up')),
                bend=curve.get('bend', 0.3),
                noise_amp=curve.get('noiseAmp', 0.0),
                noise_freq=curve.get('noiseFreq', 1.5),
            ),
            particles=ParticleConfig(
                count=particles.get('count', 24),
                size=particles.get('size', 0.06),
                opacity=particles.get('opacity', 1.0),
                wave_amp=particles.get('waveAmp'),
                wave_freq=particles.get('waveFreq', 2.0),
                shape=ParticleShape.parse(particles.get('shape', 'sphere')),
                color=particles.get('color'),
            ),
            icon=IconConfig(
                char=icon.get('char', "▶"),
                count=icon.get('count', 4),
                size=icon.get('size', 0.14),
                color=icon.get('color'),
            ),
            dash=DashConfig(
                length=dash.get('length', 1.0),
                gap=dash.get('gap', 0.25),
                animate=dash.get('animate', True) is not False,
            ),
            tube=TubeConfig(
                thickness=tube.get('thickness', 0.07),
                glow=tube.get('glow', 1.4),
                color=tube.get('color'),
                trail=tube.get('trail', True) is not False,
            ),
        )

    def __repr__(self):
        return f"Link(id='{self.id}', {self.from_id} -> {self.to_id}, style={self.style.value})"


def _color_to_json(color):
    if isinstance(color, np.ndarray):
        return color.tolist()
    if isinstance(color, tuple):
        return list(color)
    return color
