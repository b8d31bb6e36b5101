"""
LinkFlow 3D - Main Entry Point
Opens an OpenGL window that animates every link of a scene
"""

import argparse
import json
import logging
import sys

from PyQt5.QtWidgets import QApplication, QMainWindow
from PyQt5.QtGui import QSurfaceFormat

from link_model import Node, Link, LinkStyle
from link_viewport import LinkViewport
from logging_config import setup_logging
from user_settings import get_settings

logger = logging.getLogger(__name__)


def build_demo_scene():
    """Six nodes in a ring with one link per style between neighbours."""
    positions = [
        (-3.0, 0.0, -1.5), (0.0, 0.0, -2.5), (3.0, 0.0, -1.5),
        (3.0, 0.0, 1.5), (0.0, 0.0, 2.5), (-3.0, 0.0, 1.5),
    ]
    colors = ["#ff8a65", "#ffd54f", "#81c784", "#4fc3f7", "#9575cd", "#f06292"]
    nodes = [Node(f"n{i}", pos, colors[i]) for i, pos in enumerate(positions)]

    settings = get_settings()
    links = []
    styles = [LinkStyle.PARTICLES, LinkStyle.WAVY, LinkStyle.ICONS,
              LinkStyle.DASHED, LinkStyle.SOLID, LinkStyle.EPIC]
    for i, style in enumerate(styles):
        link = settings.new_link(f"l{i}", f"n{i}", f"n{(i + 1) % len(nodes)}")
        link.style = style
        links.append(link)

    # Show off the curve modes and noise on a few of them
    links[1].curve.mode = "side"
    links[3].curve.noise_amp = 0.15
    links[5].curve.mode = "arc"
    links[5].curve.bend = 0.5
    return nodes, links


def load_scene_file(path):
    """Read {"nodes": [...], "links": [...]} written with the model's to_dict()."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    nodes = [Node.from_dict(item) for item in data.get('nodes', [])]
    links = [Link.from_dict(item) for item in data.get('links', [])]
    logger.info("Loaded %d nodes and %d links from %s", len(nodes), len(links), path)
    return nodes, links


def main():
    parser = argparse.ArgumentParser(description="Animate link flows between 3D nodes.")
    parser.add_argument("scene", nargs="?", help="Optional scene JSON file.")
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file)

    if args.scene:
        try:
            nodes, links = load_scene_file(args.scene)
        except (OSError, ValueError, KeyError) as e:
            logger.error("Could not load scene %s: %s", args.scene, e)
            sys.exit(1)
    else:
        nodes, links = build_demo_scene()

    # Request a multisampled surface with depth buffer
    fmt = QSurfaceFormat()
    fmt.setDepthBufferSize(24)
    fmt.setSamples(8)
    fmt.setSwapInterval(1)
    QSurfaceFormat.setDefaultFormat(fmt)

    app = QApplication(sys.argv)
    app.setApplicationName("LinkFlow 3D")
    app.setApplicationVersion("1.0.0")

    window = QMainWindow()
    window.setWindowTitle("LinkFlow 3D")
    viewport = LinkViewport(get_settings(), nodes, links)
    viewport.frame_rendered.connect(lambda text: window.statusBar().showMessage(text))
    window.setCentralWidget(viewport)
    window.resize(1280, 800)
    window.show()

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
