"""
Pytest configuration and fixtures for MindMap Canvas testing.

This module provides:
- In-memory storage and sessions
- A render recorder standing in for the renderer
- Small prebuilt maps used across test modules
- A containment checker
"""

import pytest

from mindmap_canvas.config import PARENT_PADDING
from mindmap_canvas.session import MapSession
from mindmap_canvas.storage import MemoryStorage


class RenderRecorder:
    """Renderer stand-in that remembers every redraw."""

    def __init__(self):
        self.calls = []

    def __call__(self, store, selected_node_id):
        self.calls.append((len(store), selected_node_id))


# ============================================================
# SESSION FIXTURES
# ============================================================

@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def renders():
    return RenderRecorder()


@pytest.fixture
def session(storage, renders):
    """Empty session backed by memory storage."""
    return MapSession(storage, renders)


@pytest.fixture
def chain(session):
    """
    A (root) > B > C, all stacked on (150, 150).

    Radii after construction: C 33.33, B 53.33, A 73.33.
    Returns (session, a, b, c).
    """
    a = session.add_root("A")
    b = session.add_child("B", a.id)
    c = session.add_child("C", b.id)
    return session, a, b, c


# ============================================================
# HELPERS
# ============================================================

def assert_containment(store):
    """Every parent encloses its children's bounding box plus padding and sits on its center."""
    for node in store.nodes():
        children = store.children_of(node.id)
        if not children:
            continue
        min_x = min(c.x - c.radius for c in children)
        max_x = max(c.x + c.radius for c in children)
        min_y = min(c.y - c.radius for c in children)
        max_y = max(c.y + c.radius for c in children)
        required = max(max_x - min_x, max_y - min_y) / 2 + PARENT_PADDING
        assert node.radius >= required - 1e-9, f"{node!r} too small"
        assert node.x == pytest.approx((min_x + max_x) / 2)
        assert node.y == pytest.approx((min_y + max_y) / 2)


def assert_tree_shape(store):
    """b in a.children  <=>  b.parent == a."""
    for node in store.nodes():
        for child_id in node.children:
            assert store.get(child_id).parent == node.id
        if node.parent is not None:
            assert node.id in store.get(node.parent).children
