"""
Tests for the containment engine.

Tests cover:
    - Bounding box and radius formula
    - fit_to_children on leaves, parents and stale ids
    - Idempotence
    - propagate_up visiting order and use of freshly updated geometry
"""

import pytest

from mindmap_canvas.containment import (
    Bounds, children_bounds, fit_to_children, propagate_up, required_radius,
)
from mindmap_canvas.store import NodeStore


def link(store, parent, child):
    parent.children.append(child.id)
    child.parent = parent.id


@pytest.fixture
def family():
    """Parent P with two children of different sizes."""
    s = NodeStore()
    p = s.create("P", 0, 0, 10)
    a = s.create("a", 0, 0, 10)
    b = s.create("b", 40, 10, 5)
    link(s, p, a)
    link(s, p, b)
    return s, p


@pytest.fixture
def deep_chain():
    """R > M > L > X, every ancestor deliberately wrong (radius 1, off-center)."""
    s = NodeStore()
    r = s.create("R", 500, 500, 1)
    m = s.create("M", -500, 0, 1)
    l = s.create("L", 0, -500, 1)
    x = s.create("X", 0, 0, 10)
    link(s, r, m)
    link(s, m, l)
    link(s, l, x)
    return s, r, m, l, x


# ============================================================
# BOUNDS
# ============================================================

class TestBounds:
    """Bounding box of child circles."""

    def test_union_of_child_boxes(self, family):
        s, p = family
        bounds = children_bounds(s, p)
        assert bounds == Bounds(min_x=-10, max_x=45, min_y=-10, max_y=15)
        assert bounds.center == (17.5, 2.5)
        assert bounds.half_width == 27.5
        assert bounds.half_height == 12.5

    def test_required_radius_uses_larger_half_extent(self):
        assert required_radius(Bounds(0, 100, 0, 40)) == 70
        assert required_radius(Bounds(0, 40, 0, 100)) == 70

    def test_leaf_has_no_bounds(self):
        s = NodeStore()
        leaf = s.create("leaf", 0, 0, 10)
        assert children_bounds(s, leaf) is None

    def test_missing_children_are_ignored(self, family):
        s, p = family
        s.delete(3)
        assert children_bounds(s, p) == Bounds(-10, 10, -10, 10)


# ============================================================
# FIT TO CHILDREN
# ============================================================

class TestFitToChildren:
    """Single-node re-fit."""

    def test_fits_and_recenters(self, family):
        s, p = family
        assert fit_to_children(s, p.id) is True
        assert (p.x, p.y) == (17.5, 2.5)
        assert p.radius == 47.5

    def test_radius_is_half_the_bounding_square(self):
        s = NodeStore()
        p = s.create("P", 0, 0, 10)
        link(s, p, s.create("a", 0, 0, 10))
        link(s, p, s.create("b", 30, 30, 10))
        fit_to_children(s, p.id)
        assert p.radius == 25 + 20
        assert (p.x, p.y) == (15, 15)

    def test_idempotent(self, family):
        s, p = family
        fit_to_children(s, p.id)
        first = (p.x, p.y, p.radius)
        fit_to_children(s, p.id)
        assert (p.x, p.y, p.radius) == first

    def test_leaf_untouched(self):
        s = NodeStore()
        leaf = s.create("leaf", 3, 4, 12)
        assert fit_to_children(s, leaf.id) is False
        assert (leaf.x, leaf.y, leaf.radius) == (3, 4, 12)

    def test_missing_node_is_noop(self):
        assert fit_to_children(NodeStore(), 42) is False

    def test_may_shrink_an_oversized_parent(self, family):
        s, p = family
        p.radius = 500
        fit_to_children(s, p.id)
        assert p.radius == 47.5


# ============================================================
# PROPAGATION
# ============================================================

class TestPropagateUp:
    """Root-ward walk."""

    def test_visits_ancestors_child_to_root(self, deep_chain):
        s, r, m, l, x = deep_chain
        assert propagate_up(s, x.id) == [l.id, m.id, r.id]

    def test_does_not_fit_the_starting_node(self, deep_chain):
        s, r, m, l, x = deep_chain
        propagate_up(s, l.id)
        assert (l.x, l.y, l.radius) == (0, -500, 1)

    def test_each_step_reads_updated_child(self, deep_chain):
        s, r, m, l, x = deep_chain
        propagate_up(s, x.id)
        assert l.radius == 30
        assert m.radius == 50
        assert r.radius == 70
        assert (r.x, r.y) == (0, 0)

    def test_root_has_nothing_to_visit(self, deep_chain):
        s, r, *_ = deep_chain
        assert propagate_up(s, r.id) == []

    def test_missing_start_is_noop(self, deep_chain):
        s, *_ = deep_chain
        assert propagate_up(s, 99) == []

    def test_missing_ancestor_ends_walk(self, deep_chain):
        s, r, m, l, x = deep_chain
        s.delete(m.id)
        assert propagate_up(s, x.id) == [l.id]
        assert r.radius == 1

    def test_cycle_does_not_loop_forever(self):
        s = NodeStore()
        a = s.create("a", 0, 0, 10)
        b = s.create("b", 0, 0, 10)
        link(s, a, b)
        a.parent = b.id
        assert propagate_up(s, b.id) == [a.id]
