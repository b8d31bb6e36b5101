import logging

import pytest

from frame_clock import FrameClock, FrameState
from link_model import Link, Node
from link_renderer import LinkRenderer
from link_scene import LinkScene
from render_output import StreamOutput, TubeOutput
from user_settings import UserSettings


def make_nodes():
    return [
        Node("A", (0, 0, 0)),
        Node("B", (2, 0, 0)),
        Node("C", (0, 2, 1)),
    ]


def make_scene():
    return LinkScene(radial_segments=6, tubular_segments=16)


FRAME = FrameState(frame_id=1, dt=0.016, t=0.5)


def test_renders_every_active_link():
    links = [Link("L1", "A", "B"), Link("L2", "B", "C", style="epic")]
    result = make_scene().update_frame(make_nodes(), links, FRAME)
    assert set(result.links) == {"L1", "L2"}
    assert isinstance(result.links["L1"], StreamOutput)
    assert isinstance(result.links["L2"], TubeOutput)
    assert result.frame_id == 1


def test_missing_endpoint_skips_only_that_link():
    scene = make_scene()
    links = [Link("L1", "A", "B"), Link("L2", "A", "ghost")]
    result = scene.update_frame(make_nodes(), links, FRAME)
    assert list(result.links) == ["L1"]
    assert result.skipped == ["L2"]
    assert "L2" not in scene.renderers


def test_accepts_node_mapping():
    nodes = {n.id: n for n in make_nodes()}
    result = make_scene().update_frame(nodes, [Link("L1", "A", "C")], FRAME)
    assert "L1" in result.links


def test_inactive_link_releases_renderer():
    scene = make_scene()
    link = Link("L1", "A", "B")
    scene.update_frame(make_nodes(), [link], FRAME)
    assert scene.renderer_count == 1
    link.active = False
    result = scene.update_frame(make_nodes(), [link], FRAME)
    assert len(result) == 0
    assert scene.renderer_count == 0


def test_removed_link_and_node_release_renderers():
    scene = make_scene()
    nodes = make_nodes()
    links = [Link("L1", "A", "B"), Link("L2", "B", "C")]
    scene.update_frame(nodes, links, FRAME)
    assert scene.renderer_count == 2

    scene.update_frame(nodes, links[:1], FRAME)
    assert set(scene.renderers) == {"L1"}

    scene.update_frame(nodes[:1], links[:1], FRAME)
    assert scene.renderer_count == 0


def test_recreated_link_starts_fresh():
    scene = make_scene()
    nodes = make_nodes()
    link = Link("L1", "A", "B")
    scene.update_frame(nodes, [link], FrameState(1, 0.2, 0.2))
    first = scene.renderers["L1"]
    scene.update_frame(nodes, [], FrameState(2, 0.2, 0.4))
    scene.update_frame(nodes, [link], FrameState(3, 0.0, 0.4))
    assert scene.renderers["L1"] is not first
    assert scene.renderers["L1"].state.phase == 0.0


def test_failing_link_is_isolated(monkeypatch, caplog):
    real_update = LinkRenderer.update

    def flaky_update(self, link, *args, **kwargs):
        if link.id == "bad":
            raise RuntimeError("boom")
        return real_update(self, link, *args, **kwargs)

    monkeypatch.setattr(LinkRenderer, "update", flaky_update)
    scene = make_scene()
    links = [Link("bad", "A", "B"), Link("good", "B", "C")]
    with caplog.at_level(logging.ERROR):
        result = scene.update_frame(make_nodes(), links, FRAME)

    assert list(result.links) == ["good"]
    assert result.skipped == ["bad"]
    assert "bad" not in scene.renderers
    assert any("bad" in record.getMessage() for record in caplog.records)


def test_selected_link_is_flagged():
    scene = make_scene()
    links = [Link("L1", "A", "B", style="solid"), Link("L2", "B", "C", style="solid")]
    result = scene.update_frame(make_nodes(), links, FRAME, selected_id="L2")
    assert result.links["L2"].opacity == 1.0
    assert result.links["L1"].opacity == pytest.approx(0.92)


def test_nodes_are_not_modified():
    nodes = make_nodes()
    before = [n.position.copy() for n in nodes]
    make_scene().update_frame(nodes, [Link("L1", "A", "B", style="epic")], FRAME)
    for node, position in zip(nodes, before):
        assert (node.position == position).all()


def test_from_settings_uses_render_options(tmp_path):
    settings = UserSettings(path=str(tmp_path / "settings.json"))
    settings.set('tube_tubular_segments', 32)
    settings.set('fade_edges', True)
    scene = LinkScene.from_settings(settings)
    assert scene.tubular_segments == 32
    assert scene.fade_edges is True


def test_clock_driven_frames():
    scene = make_scene()
    clock = FrameClock()
    links = [Link("L1", "A", "B")]
    for now in (0.0, 0.016, 0.032):
        result = scene.update_frame(make_nodes(), links, clock.tick(now))
    assert result.frame_id == 3
    assert scene.renderers["L1"].state.phase == pytest.approx(0.032)


def test_live_style_edit_keeps_link_rendering():
    scene = make_scene()
    link = Link("L1", "A", "B", style="particles")
    scene.update_frame(make_nodes(), [link], FRAME)
    link.style = "dashed"
    result = scene.update_frame(make_nodes(), [link], FrameState(2, 0.016, 0.516))
    assert result.skipped == []
    assert result.links["L1"].dashed
    assert scene.renderer_count == 1
