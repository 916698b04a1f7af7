# mindmap_canvas/containment.py
"""
Keeps parent circles wrapped around their children.

The enclosing radius is the half-extent of the children's axis-aligned
bounding box plus PARENT_PADDING, not a minimum enclosing circle.
"""
import logging
from typing import List, NamedTuple, Optional, Tuple
from .config import PARENT_PADDING
from .models import Node
from .store import NodeStore

logger = logging.getLogger(__name__)

class Bounds(NamedTuple):
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def half_width(self) -> float:
        return (self.max_x - self.min_x) / 2

    @property
    def half_height(self) -> float:
        return (self.max_y - self.min_y) / 2


def children_bounds(store: NodeStore, node: Node) -> Optional[Bounds]:
    """Union of each child's (center +- radius) box, or None if there are no children."""
    children = store.children_of(node.id)
    if not children:
        return None
    return Bounds(
        min_x=min(c.x - c.radius for c in children),
        max_x=max(c.x + c.radius for c in children),
        min_y=min(c.y - c.radius for c in children),
        max_y=max(c.y + c.radius for c in children),
    )


def required_radius(bounds: Bounds) -> float:
    return max(bounds.half_width, bounds.half_height) + PARENT_PADDING


def fit_to_children(store: NodeStore, node_id: int) -> bool:
    """Re-centers a node on its children's bounding box and sizes it to enclose them.

    Returns False (and changes nothing) for missing nodes and leaves.
    """
    node = store.get(node_id)
    if node is None:
        return False
    bounds = children_bounds(store, node)
    if bounds is None:
        return False
    node.x, node.y = bounds.center
    node.radius = required_radius(bounds)
    return True


def propagate_up(store: NodeStore, from_node_id: int) -> List[int]:
    """Re-fits every ancestor of from_node_id, closest first, and returns the ids visited.

    Each step reads the geometry the previous step just wrote, so the order
    cannot change. A missing id ends the walk quietly.
    """
    visited: List[int] = []
    start = store.get(from_node_id)
    if start is None:
        logger.debug("propagate_up: node %s is gone, nothing to do", from_node_id)
        return visited

    current_id = start.parent
    seen = {start.id}
    while current_id is not None:
        current = store.get(current_id)
        if current is None or current_id in seen:
            break
        seen.add(current_id)
        fit_to_children(store, current_id)
        visited.append(current_id)
        current_id = current.parent
    return visited
