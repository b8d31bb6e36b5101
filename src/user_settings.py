"""
LinkFlow 3D - User Settings Manager
Handles saving and loading render options and link defaults
"""

import copy
import json
import logging
import sys
from pathlib import Path

from link_model import Link

logger = logging.getLogger(__name__)


class UserSettings:
    """Manages user settings persistence"""

    # Default settings file location (in user's home directory)
    SETTINGS_FILENAME = ".linkflow3d_settings.json"

    # Default values
    DEFAULTS = {
        # Playback
        'animate': True,
        'target_fps': 60,

        # Geometry resolution
        'tube_radial_segments': 12,
        'tube_tubular_segments': 240,
        'arc_length_divisions': 200,

        # Particle opacity ramp near both curve ends
        'fade_edges': False,

        # Template for newly created links (Link.to_dict format, no ids)
        'link_defaults': {
            'style': 'particles',
            'speed': 0.9,
            'width': 2,
            'color': '#7cf',
            'active': True,
            'particles': {'count': 12, 'size': 0.06, 'opacity': 1, 'waveAmp': 0.0,
                          'waveFreq': 1.5, 'shape': 'sphere'},
            'tube': {'thickness': 0.07, 'glow': 1.4, 'color': '#9bf', 'trail': True},
            'icon': {'char': '▶', 'size': 0.12, 'count': 4, 'color': '#fff'},
            'curve': {'mode': 'up', 'bend': 0.3},
        },
    }

    def __init__(self, path=None):
        self._settings = copy.deepcopy(self.DEFAULTS)
        self._settings_path = Path(path) if path else self._get_settings_path()
        self.load()

    @property
    def path(self):
        return self._settings_path

    def _get_settings_path(self):
        """Get the path to the settings file"""
        # When running as a PyInstaller bundle, always use home directory
        if getattr(sys, 'frozen', False):
            return Path.home() / self.SETTINGS_FILENAME

        # In development, try app directory first, fall back to home
        app_dir = Path(__file__).parent
        app_settings = app_dir / self.SETTINGS_FILENAME

        try:
            test_file = app_dir / ".write_test"
            test_file.touch()
            test_file.unlink()
            return app_settings
        except (PermissionError, OSError):
            return Path.home() / self.SETTINGS_FILENAME

    def load(self):
        """Load settings from file"""
        if not self._settings_path.exists():
            return

        try:
            with open(self._settings_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Could not load settings: %s", e)
            return

        # Merge loaded settings with defaults (to handle new settings)
        for key, value in loaded.items():
            if key not in self.DEFAULTS:
                logger.debug("Ignoring unknown setting %r", key)
            elif key == 'link_defaults' and isinstance(value, dict):
                self._settings[key] = _merge_link_defaults(self.DEFAULTS[key], value)
            else:
                self._settings[key] = value

        logger.info("Settings loaded from %s", self._settings_path)

    def save(self):
        """Save settings to file"""
        try:
            with open(self._settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=2, ensure_ascii=False)
        except IOError as e:
            logger.warning("Could not save settings: %s", e)
            return False

        logger.info("Settings saved to %s", self._settings_path)
        return True

    def get(self, key, default=None):
        """Get a setting value"""
        if default is None:
            default = self.DEFAULTS.get(key)
        return self._settings.get(key, default)

    def set(self, key, value):
        """Set a setting value"""
        self._settings[key] = value

    def set_and_save(self, key, value):
        """Set a setting value and immediately save"""
        self.set(key, value)
        self.save()

    # Convenience properties

    @property
    def animate(self):
        return bool(self.get('animate'))

    @animate.setter
    def animate(self, value):
        self.set('animate', bool(value))

    @property
    def target_fps(self):
        fps = self.get('target_fps')
        try:
            return max(1, int(fps))
        except (TypeError, ValueError):
            return self.DEFAULTS['target_fps']

    @property
    def link_defaults(self):
        return copy.deepcopy(self.get('link_defaults'))

    def new_link(self, link_id, from_id, to_id):
        """Create a Link from the stored defaults."""
        data = self.link_defaults
        data.update({'id': link_id, 'from': from_id, 'to': to_id})
        return Link.from_dict(data)


# Global settings instance
_settings_instance = None


def get_settings():
    """Get the global settings instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = UserSettings()
    return _settings_instance


def _merge_link_defaults(defaults, loaded):
    """Overlay a saved link template on the built-in one, one level deep."""
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged
