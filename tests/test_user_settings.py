import json

from link_model import LinkStyle
from user_settings import UserSettings


def test_defaults_when_file_missing(tmp_path):
    settings = UserSettings(path=str(tmp_path / "missing.json"))
    assert settings.animate is True
    assert settings.target_fps == 60
    assert settings.get('tube_tubular_segments') == 240


def test_save_and_reload(tmp_path):
    path = tmp_path / "settings.json"
    settings = UserSettings(path=str(path))
    settings.set('target_fps', 30)
    settings.animate = False
    assert settings.save() is True

    reloaded = UserSettings(path=str(path))
    assert reloaded.target_fps == 30
    assert reloaded.animate is False


def test_unknown_keys_ignored_and_missing_keys_defaulted(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({'fade_edges': True, 'mystery': 1}), encoding='utf-8')
    settings = UserSettings(path=str(path))
    assert settings.get('fade_edges') is True
    assert settings.get('mystery') is None
    assert settings.get('arc_length_divisions') == 200


def test_corrupt_file_keeps_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding='utf-8')
    settings = UserSettings(path=str(path))
    assert settings.target_fps == 60
    assert any("Could not load settings" in r.getMessage() for r in caplog.records)


def test_invalid_fps_falls_back(tmp_path):
    settings = UserSettings(path=str(tmp_path / "s.json"))
    settings.set('target_fps', "fast")
    assert settings.target_fps == 60
    settings.set('target_fps', 0)
    assert settings.target_fps == 1


def test_new_link_uses_link_defaults(tmp_path):
    settings = UserSettings(path=str(tmp_path / "s.json"))
    link = settings.new_link("L9", "A", "B")
    assert (link.id, link.from_id, link.to_id) == ("L9", "A", "B")
    assert link.style is LinkStyle.PARTICLES
    assert link.speed == 0.9
    assert link.particles.count == 12
    assert link.tube.color == "#9bf"


def test_link_defaults_are_copied(tmp_path):
    settings = UserSettings(path=str(tmp_path / "s.json"))
    defaults = settings.link_defaults
    defaults['style'] = 'epic'
    assert settings.link_defaults['style'] == 'particles'
    assert UserSettings.DEFAULTS['link_defaults']['style'] == 'particles'


def test_partial_link_defaults_merge_over_builtin(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({'link_defaults': {'style': 'epic', 'tube': {'glow': 3.0}}}),
                    encoding='utf-8')
    settings = UserSettings(path=str(path))
    defaults = settings.link_defaults
    assert defaults['style'] == 'epic'
    assert defaults['tube']['glow'] == 3.0
    assert defaults['tube']['thickness'] == 0.07
    assert defaults['particles']['count'] == 12
    link = settings.new_link("L", "A", "B")
    assert link.style is LinkStyle.EPIC
    assert link.resolved_tube().glow == 3.0


def test_set_and_save_persists(tmp_path):
    path = tmp_path / "settings.json"
    UserSettings(path=str(path)).set_and_save('fade_edges', True)
    assert json.loads(path.read_text(encoding='utf-8'))['fade_edges'] is True
