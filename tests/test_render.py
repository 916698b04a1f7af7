"""
Tests for canvas rendering.

Tests cover:
    - Label rectangle geometry
    - Creation-order arrow segments
    - SVG document structure and draw order
    - The file renderer and the text tree
"""

import xml.etree.ElementTree as ET

import pytest

from mindmap_canvas.models import Node
from mindmap_canvas.render import (
    SVG_NS, SvgFileRenderer, arrow_segments, format_tree, label_rect, render_svg,
)
from mindmap_canvas.session import MapSession

NS = {"svg": SVG_NS}


def parse(svg_text):
    return ET.fromstring(svg_text)


# ============================================================
# GEOMETRY
# ============================================================

class TestLabelRect:
    """Label box above each circle."""

    def test_sized_by_label_length(self):
        rect = label_rect(Node(1, "abc", 100, 100, 40))
        assert rect.width == 44
        assert rect.height == 20
        assert (rect.x, rect.y) == (78, 35)
        assert rect.center == (100, 45)

    def test_follows_radius(self):
        small = label_rect(Node(1, "a", 0, 0, 10))
        large = label_rect(Node(2, "a", 0, 0, 50))
        assert small.y - large.y == 40


class TestArrowSegments:
    """Creation-chain arrows."""

    def test_one_arrow_per_predecessor(self, chain):
        session, a, b, c = chain
        segments = arrow_segments(session.store)
        assert [(s[0], s[1]) for s in segments] == [(a.id, b.id), (b.id, c.id)]

    def test_runs_between_label_centers(self, chain):
        session, a, b, c = chain
        _, _, start, end = arrow_segments(session.store)[0]
        assert start == label_rect(a).center
        assert end == label_rect(b).center

    def test_skips_deleted_predecessor(self, session):
        a = session.add_root("A")
        b = session.add_root("B")
        session.delete_subtree(a.id)
        assert b.predecessor == a.id
        assert arrow_segments(session.store) == []


# ============================================================
# SVG
# ============================================================

class TestRenderSvg:
    """SVG document output."""

    def test_empty_map(self):
        root = parse(render_svg(MapSession().store))
        assert root.get("id") == "canvas"
        assert root.get("viewBox") is None
        assert root.findall("svg:g", NS) == []

    def test_one_group_per_node(self, chain):
        session, a, b, c = chain
        root = parse(render_svg(session.store))
        groups = root.findall("svg:g", NS)
        assert [g.get("data-node-id") for g in groups] == ["1", "2", "3"]
        texts = [g.find("svg:text", NS).text for g in groups]
        assert texts == ["A", "B", "C"]

    def test_circle_geometry(self, chain):
        session, a, b, c = chain
        root = parse(render_svg(session.store))
        circle = root.find("svg:g[@data-node-id='1']/svg:circle", NS)
        assert float(circle.get("cx")) == pytest.approx(a.x)
        assert float(circle.get("r")) == pytest.approx(a.radius, abs=1e-3)

    def test_arrows_drawn_before_nodes(self, chain):
        session, *_ = chain
        root = parse(render_svg(session.store))
        tags = [child.tag.split("}")[1] for child in root]
        assert tags == ["defs", "line", "line", "g", "g", "g"]
        assert root.find("svg:defs/svg:marker", NS).get("id") == "arrowhead"
        assert root.find("svg:line", NS).get("marker-end") == "url(#arrowhead)"

    def test_selected_node_marked(self, chain):
        session, a, b, c = chain
        root = parse(render_svg(session.store, b.id))
        classes = {g.get("data-node-id"): g.find("svg:circle", NS).get("class")
                   for g in root.findall("svg:g", NS)}
        assert classes == {"1": "node-circle", "2": "node-circle selected", "3": "node-circle"}

    def test_view_box_covers_labels(self, session):
        session.add_root("A")
        x, y, width, height = (float(v) for v in parse(render_svg(session.store)).get("viewBox").split())
        assert y <= 150 - 40 - 20 - 5
        assert x + width >= 190
        assert y + height >= 190

    def test_labels_are_escaped(self, session):
        session.add_root("<b>&")
        root = parse(render_svg(session.store))
        assert root.find("svg:g/svg:text", NS).text == "<b>&"


class TestSvgFileRenderer:
    """Renderer that rewrites a file after each change."""

    def test_redraws_on_each_commit(self, tmp_path):
        path = tmp_path / "out" / "canvas.svg"
        session = MapSession(renderer=SvgFileRenderer(str(path)))
        a = session.add_root("A")
        assert len(parse(path.read_text()).findall("svg:g", NS)) == 1
        session.add_child("B", a.id)
        assert len(parse(path.read_text()).findall("svg:g", NS)) == 2

    def test_selection_is_drawn(self, tmp_path):
        path = tmp_path / "canvas.svg"
        session = MapSession(renderer=SvgFileRenderer(str(path)))
        a = session.add_root("A")
        session.select_toggle(a.id)
        assert "node-circle selected" in path.read_text()


# ============================================================
# TEXT TREE
# ============================================================

class TestFormatTree:
    """Text rendition used by the shells."""

    def test_empty(self):
        assert format_tree(MapSession().store) == []

    def test_connectors(self, session):
        a = session.add_root("A")
        b = session.add_child("B", a.id)
        session.add_child("C", b.id)
        session.add_child("D", a.id)
        session.add_root("E")
        lines = format_tree(session.store)
        assert [line.split(" (ID")[0] for line in lines] == [
            "A",
            "├── B",
            "│   └── C",
            "└── D",
            "E",
        ]

    def test_line_contents(self, session):
        session.add_root("A")
        assert format_tree(session.store) == ["A (ID: 1) @ (150.0, 150.0) r=40.0"]

    def test_cycle_below_a_root_is_listed_once(self, session):
        a = session.add_root("A")
        b = session.add_child("B", a.id)
        b.children.append(a.id)
        lines = format_tree(session.store)
        assert [line.split(" (ID")[0] for line in lines] == ["A", "└── B"]
