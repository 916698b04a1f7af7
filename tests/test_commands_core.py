"""
Tests for the command layer shared by the shells and the web API.

Tests cover:
    - Status mapping of selection and lookup failures
    - Label validation
    - Messages returned for successful actions
    - Drag replay and SVG output
    - Help text
"""

import pytest

from mindmap_canvas import commands_core
from mindmap_canvas.commands_core import CommandStatus


class TestAddActions:
    """root / child / parent."""

    def test_add_root(self, session):
        status, node, msg = commands_core.add_root_action(session, "  Idea  ")
        assert status == CommandStatus.SUCCESS
        assert node.label == "Idea"
        assert msg == "Added node 'Idea' (ID: 1)."

    @pytest.mark.parametrize("label", [None, "", "   "])
    def test_empty_label_adds_nothing(self, session, label):
        status, node, msg = commands_core.add_root_action(session, label)
        assert status == CommandStatus.INVALID_OPERATION
        assert node is None
        assert "Nothing was added" in msg
        assert len(session.store) == 0

    def test_child_without_selection(self, session):
        session.add_root("A")
        status, node, msg = commands_core.add_child_action(session, "B")
        assert status == CommandStatus.NO_SELECTION
        assert node is None
        assert msg.startswith("Please select a node first")

    def test_child_of_missing_parent(self, session):
        status, _, msg = commands_core.add_child_action(session, "B", 7)
        assert status == CommandStatus.NOT_FOUND
        assert "'7'" in msg

    def test_child_message_names_parent(self, session):
        a = session.add_root("A")
        session.select_toggle(a.id)
        status, node, msg = commands_core.add_child_action(session, "B")
        assert status == CommandStatus.SUCCESS
        assert msg == "Added child 'B' (ID: 2) under 'A' (ID: 1)."

    def test_parent_message_names_child(self, chain):
        session, a, b, c = chain
        status, node, msg = commands_core.insert_parent_action(session, "X", c.id)
        assert status == CommandStatus.SUCCESS
        assert msg == "Added parent 'X' (ID: 4) around 'C' (ID: 3)."

    def test_empty_parent_label_checked_before_selection(self, session):
        status, _, _ = commands_core.insert_parent_action(session, "")
        assert status == CommandStatus.INVALID_OPERATION


class TestEditActions:
    """delete / resize / move / drag / select."""

    def test_delete_counts_descendants(self, chain):
        session, a, b, c = chain
        session.select_toggle(b.id)
        status, deleted, msg = commands_core.delete_subtree_action(session)
        assert status == CommandStatus.SUCCESS
        assert deleted == {b.id, c.id}
        assert msg == "Deleted node 'B' (ID: 2) and 1 descendant(s)."

    def test_delete_leaf_message(self, chain):
        session, a, b, c = chain
        _, _, msg = commands_core.delete_subtree_action(session, c.id)
        assert msg == "Deleted node 'C' (ID: 3)."

    def test_delete_without_selection(self, chain):
        session, *_ = chain
        status, _, _ = commands_core.delete_subtree_action(session)
        assert status == CommandStatus.NO_SELECTION

    def test_zero_resize_rejected(self, chain):
        session, a, *_ = chain
        status, _, _ = commands_core.resize_action(session, 0, a.id)
        assert status == CommandStatus.INVALID_OPERATION
        assert a.radius == pytest.approx(40 / 1.2 + 40)

    @pytest.mark.parametrize("delta", [float("nan"), float("inf")])
    def test_non_finite_resize_rejected(self, chain, delta):
        session, a, b, c = chain
        status, node, msg = commands_core.resize_action(session, delta, c.id)
        assert status == CommandStatus.INVALID_OPERATION
        assert node is None
        assert msg.startswith("Invalid value")
        assert c.radius == pytest.approx(40 / 1.2)

    def test_non_finite_move_rejected(self, chain):
        session, a, b, c = chain
        status, _, _ = commands_core.move_action(session, c.id, float("nan"), 0)
        assert status == CommandStatus.INVALID_OPERATION
        assert (c.x, c.y) == (150, 150)

    def test_non_finite_drag_rejected(self, chain, storage):
        session, a, b, c = chain
        saves = storage.save_count
        status, _, _ = commands_core.drag_action(session, c.id, [(160, 150), (float("inf"), 0)])
        assert status == CommandStatus.INVALID_OPERATION
        assert (c.x, c.y) == (150, 150)
        assert session.dragging_node_id is None
        assert storage.save_count == saves

    def test_grow_and_shrink(self, session):
        a = session.add_root("A")
        status, _, msg = commands_core.grow_action(session, a.id)
        assert status == CommandStatus.SUCCESS
        assert msg == "Grew node 'A' (ID: 1) to radius 50.0."
        _, _, msg = commands_core.shrink_action(session, a.id)
        assert msg == "Shrank node 'A' (ID: 1) to radius 40.0."

    def test_move_missing(self, session):
        status, _, _ = commands_core.move_action(session, 3, 0, 0)
        assert status == CommandStatus.NOT_FOUND

    def test_drag_replays_path_and_saves_once(self, chain, storage):
        session, a, b, c = chain
        saves = storage.save_count
        status, node, _ = commands_core.drag_action(session, c.id, [(160, 150), (200, 190)])
        assert status == CommandStatus.SUCCESS
        assert (node.x, node.y) == (200, 190)
        assert (b.x, b.y) == (200, 190)
        assert storage.save_count == saves + 1
        assert session.dragging_node_id is None

    def test_drag_missing(self, session):
        status, _, _ = commands_core.drag_action(session, 9, [(0, 0)])
        assert status == CommandStatus.NOT_FOUND

    def test_select_and_deselect(self, chain):
        session, a, *_ = chain
        status, selected, msg = commands_core.select_action(session, a.id)
        assert (status, selected) == (CommandStatus.SUCCESS, a.id)
        assert msg == "Selected node 'A' (ID: 1)."
        status, selected, msg = commands_core.select_action(session, a.id)
        assert selected is None
        assert "deselected" in msg

    def test_clear_all(self, chain):
        session, *_ = chain
        status, _, msg = commands_core.clear_all_action(session)
        assert status == CommandStatus.SUCCESS
        assert msg == "Erased the map (3 node(s))."
        assert len(session.store) == 0


class TestRenderAction:
    """SVG to screen or file."""

    def test_returns_svg_without_path(self, chain):
        session, *_ = chain
        status, svg, _ = commands_core.render_action(session)
        assert status == CommandStatus.SUCCESS
        assert svg.startswith("<svg")

    def test_writes_file(self, chain, tmp_path):
        session, *_ = chain
        target = tmp_path / "map.svg"
        status, data, msg = commands_core.render_action(session, str(target))
        assert status == CommandStatus.SUCCESS
        assert data is None
        assert "data-node-id" in target.read_text()

    def test_unwritable_path(self, chain, tmp_path):
        session, *_ = chain
        status, _, msg = commands_core.render_action(session, str(tmp_path))
        assert status == CommandStatus.ERROR
        assert msg.startswith("Error writing SVG file")


class TestHelp:
    """Help text."""

    def test_general_help_lists_commands(self):
        text = commands_core.get_general_help_text()
        for name in ("root", "child", "parent", "delete", "grow", "shrink", "drag"):
            assert name in text
        assert "Aliases: del, rm" in text

    def test_alias_resolves(self):
        text = commands_core.get_specific_help_text("RM")
        assert text.startswith("Usage: delete")
        assert "(Aliases: del, rm)" in text

    def test_unknown_command(self):
        assert commands_core.get_specific_help_text("fly").startswith("Unknown command 'fly'")
