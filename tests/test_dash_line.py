import pytest

from dash_line import DashLine


def test_offset_decreases_at_speed_rate():
    dash = DashLine()
    dash.update(1.5, 0.1)
    assert dash.dash_offset == pytest.approx(-1.5 * 0.1 * 0.8)
    dash.update(1.5, 0.1)
    assert dash.dash_offset == pytest.approx(-2 * 1.5 * 0.1 * 0.8)


def test_frozen_when_global_animation_off():
    dash = DashLine()
    dash.update(1.0, 0.2)
    before = dash.dash_offset
    dash.update(1.0, 0.2, animate=False)
    assert dash.dash_offset == before


def test_frozen_when_dash_animation_off():
    dash = DashLine()
    assert dash.update(1.0, 0.2, dash_animate=False) == 0.0


def test_zero_dt_keeps_offset():
    dash = DashLine()
    assert dash.update(3.0, 0.0) == 0.0
