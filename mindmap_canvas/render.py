# mindmap_canvas/render.py
"""
SVG rendering of the canvas.

Creation-order arrows are drawn first, between the centers of the label
rectangles, then every node on top in store order. Arrows are independent
of the tree, so they can cross parent circles freely.
"""
import logging
import os
import xml.etree.ElementTree as ET
from typing import List, NamedTuple, Optional, Tuple
from .config import CHAR_WIDTH, LABEL_GAP, LABEL_HEIGHT, LABEL_PADDING
from .models import Node
from .store import NodeStore

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
Point = Tuple[float, float]

class LabelRect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)


def label_rect(node: Node) -> LabelRect:
    """The label box sits centered above the circle."""
    width = len(node.label) * CHAR_WIDTH + LABEL_PADDING
    height = LABEL_HEIGHT
    return LabelRect(
        x=node.x - width / 2,
        y=node.y - node.radius - height - LABEL_GAP,
        width=width,
        height=height,
    )


def arrow_segments(store: NodeStore) -> List[Tuple[int, int, Point, Point]]:
    """(from_id, to_id, start, end) for every node whose predecessor still exists."""
    segments = []
    for node in store.nodes():
        predecessor = store.get(node.predecessor)
        if predecessor is None:
            continue
        segments.append((predecessor.id, node.id,
                         label_rect(predecessor).center, label_rect(node).center))
    return segments


def _fmt(value: float) -> str:
    return f"{value:g}"


def _add_arrowhead_marker(svg: ET.Element):
    defs = ET.SubElement(svg, "defs")
    marker = ET.SubElement(defs, "marker", {
        "id": "arrowhead", "markerWidth": "10", "markerHeight": "7",
        "refX": "10", "refY": "3.5", "orient": "auto", "markerUnits": "strokeWidth",
    })
    ET.SubElement(marker, "path", {"d": "M0,0 L10,3.5 L0,7 Z", "class": "arrow-marker"})


def _view_box(store: NodeStore, margin: float = 40.0) -> Optional[str]:
    nodes = list(store.nodes())
    if not nodes:
        return None
    min_x = min(min(n.x - n.radius, label_rect(n).x) for n in nodes) - margin
    max_x = max(max(n.x + n.radius, label_rect(n).x + label_rect(n).width) for n in nodes) + margin
    min_y = min(label_rect(n).y for n in nodes) - margin
    max_y = max(n.y + n.radius for n in nodes) + margin
    return " ".join(_fmt(v) for v in (min_x, min_y, max_x - min_x, max_y - min_y))


def _draw_node(svg: ET.Element, node: Node, selected: bool):
    group = ET.SubElement(svg, "g", {"data-node-id": str(node.id)})
    circle_class = "node-circle selected" if selected else "node-circle"
    ET.SubElement(group, "circle", {
        "cx": _fmt(node.x), "cy": _fmt(node.y), "r": _fmt(node.radius), "class": circle_class,
    })
    rect = label_rect(node)
    ET.SubElement(group, "rect", {
        "x": _fmt(rect.x), "y": _fmt(rect.y),
        "width": _fmt(rect.width), "height": _fmt(rect.height),
        "class": "node-label-rect",
    })
    text = ET.SubElement(group, "text", {
        "x": _fmt(node.x), "y": _fmt(rect.y + rect.height / 2),
        "text-anchor": "middle", "dominant-baseline": "middle",
        "class": "node-label-text",
    })
    text.text = node.label


def render_svg(store: NodeStore, selected_node_id: Optional[int] = None) -> str:
    """Returns the whole canvas as an SVG document string."""
    svg = ET.Element("svg", {"xmlns": SVG_NS, "id": "canvas"})
    view_box = _view_box(store)
    if view_box:
        svg.set("viewBox", view_box)
    _add_arrowhead_marker(svg)

    for _, _, (x1, y1), (x2, y2) in arrow_segments(store):
        ET.SubElement(svg, "line", {
            "x1": _fmt(x1), "y1": _fmt(y1), "x2": _fmt(x2), "y2": _fmt(y2),
            "class": "arrow-line", "marker-end": "url(#arrowhead)",
        })

    for node in store.nodes():
        _draw_node(svg, node, node.id == selected_node_id)

    return ET.tostring(svg, encoding="unicode")


class SvgFileRenderer:
    """Renderer collaborator that rewrites an SVG file on every redraw."""
    def __init__(self, filepath: str):
        self.filepath = os.path.abspath(filepath)

    def __call__(self, store: NodeStore, selected_node_id: Optional[int]):
        dir_name = os.path.dirname(self.filepath)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)
        with open(self.filepath, 'w', encoding='utf-8') as f:
            f.write(render_svg(store, selected_node_id))
        logger.debug("Rendered %d node(s) to %s", len(store), self.filepath)


def format_tree(store: NodeStore) -> List[str]:
    """Text tree of the map, one line per node, roots in creation order."""
    lines: List[str] = []

    def describe(node: Node) -> str:
        return f"{node.label} (ID: {node.id}) @ ({node.x:.1f}, {node.y:.1f}) r={node.radius:.1f}"

    seen = set()

    def pending(node: Node, indent: str):
        children = [c for c in store.children_of(node.id) if c.id not in seen]
        return [(child, indent, i == len(children) - 1) for i, child in enumerate(children)][::-1]

    # Explicit stack so deep maps cannot hit the recursion limit
    for root in store.roots():
        seen.add(root.id)
        lines.append(describe(root))
        stack = pending(root, "")
        while stack:
            node, indent, is_last = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            connector = "└── " if is_last else "├── "
            lines.append(f"{indent}{connector}{describe(node)}")
            stack.extend(pending(node, indent + ("    " if is_last else "│   ")))
    return lines
