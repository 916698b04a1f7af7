# mindmap_canvas/session.py
"""
MapSession: the explicit context every map operation runs against.

A session owns the node store, the current selection and the state of an
in-progress drag. Each public operation validates its target first, then
mutates the store, restores containment for the affected ancestors,
persists and finally asks the renderer to redraw.
"""
import logging
import math
from typing import Callable, List, Optional, Set, Tuple
from . import config
from .containment import children_bounds, fit_to_children, propagate_up, required_radius
from .errors import NoSelectionError
from .models import Node
from .store import NodeStore

logger = logging.getLogger(__name__)

# renderer(store, selected_node_id)
Renderer = Callable[[NodeStore, Optional[int]], None]

def _check_finite(*values: float):
    if not all(math.isfinite(v) for v in values):
        raise ValueError(f"coordinates must be finite numbers, got {values}")

class MapSession:
    def __init__(self, storage=None, renderer: Optional[Renderer] = None):
        self.storage = storage
        self.renderer = renderer
        self.selected_node_id: Optional[int] = None
        self._drag: Optional[Tuple[int, float, float]] = None # (node_id, offset_x, offset_y)
        self.load_message: str = ""
        self.load_error: Optional[str] = None # Set when a saved map exists but could not be read
        self.store = self._load_store()

    def _load_store(self) -> NodeStore:
        if self.storage is None:
            return NodeStore()
        state, msg = self.storage.load()
        self.load_message = msg
        if state is None:
            if msg.startswith("Error"):
                self.load_error = msg
                logger.error("%s", msg)
            else:
                logger.info("%s", msg)
            return NodeStore()
        logger.debug("Loaded %d node(s): %s", len(state.nodes), msg)
        return NodeStore.from_state(state)

    # --- collaborators ---

    def persist(self) -> bool:
        if self.storage is None:
            return True
        success, msg = self.storage.save(self.store.snapshot())
        if not success:
            logger.warning("Could not persist map: %s", msg)
        return success

    def render(self):
        if self.renderer is not None:
            self.renderer(self.store, self.selected_node_id)

    def _commit(self):
        self.persist()
        self.render()

    def _target(self, node_id: Optional[int], operation: str) -> Node:
        """Resolves an explicit id, falling back to the selection."""
        if node_id is None:
            node_id = self.selected_node_id
        if node_id is None:
            raise NoSelectionError(operation)
        return self.store.require(node_id)

    # --- selection ---

    def select_toggle(self, node_id: int) -> Optional[int]:
        """Selects node_id, or clears the selection if it is already selected."""
        self.store.require(node_id)
        self.selected_node_id = None if self.selected_node_id == node_id else node_id
        self.render()
        return self.selected_node_id

    # --- structural edits ---

    def add_root(self, label: str) -> Node:
        """Adds an unattached node, stepped down-right from the latest-created one."""
        previous = self.store.get(self.store.latest_created_id)
        if previous is not None:
            x, y = previous.x + config.OFFSET_STEP, previous.y + config.OFFSET_STEP
        else:
            x, y = config.ORIGIN_X, config.ORIGIN_Y

        node = self.store.create(label, x, y, config.DEFAULT_RADIUS,
                                 predecessor=self.store.latest_created_id)
        self.store.latest_created_id = node.id
        logger.debug("add_root: %r", node)
        self._commit()
        return node

    def add_child(self, label: str, parent_id: Optional[int] = None) -> Node:
        parent = self._target(parent_id, "add child")
        node = self.store.create(label, parent.x, parent.y,
                                 config.DEFAULT_RADIUS / config.CHILD_RADIUS_FACTOR,
                                 parent=parent.id, predecessor=self.store.latest_created_id)
        parent.children.append(node.id)
        self.store.latest_created_id = node.id
        propagate_up(self.store, node.id)
        logger.debug("add_child: %r under %s", node, parent.id)
        self._commit()
        return node

    def insert_parent(self, label: str, child_id: Optional[int] = None) -> Node:
        """Wraps a node in a new parent that takes its place under the old parent."""
        child = self._target(child_id, "add parent")
        old_parent = self.store.get(child.parent)

        node = self.store.create(label, child.x, child.y, config.DEFAULT_RADIUS,
                                 parent=old_parent.id if old_parent else None,
                                 children=[child.id],
                                 predecessor=self.store.latest_created_id)
        child.parent = node.id
        if old_parent is not None and child.id in old_parent.children:
            # Same slot, so sibling order downstream stays stable
            index = old_parent.children.index(child.id)
            old_parent.children[index] = node.id

        fit_to_children(self.store, node.id)
        self.store.latest_created_id = node.id
        propagate_up(self.store, node.id)
        logger.debug("insert_parent: %r above %s", node, child.id)
        self._commit()
        return node

    def collect_subtree(self, node_id: int) -> List[int]:
        """Returns node_id and all its descendants in pre-order."""
        result = []
        seen = set()
        stack = [node_id]
        while stack:
            current_id = stack.pop()
            current = self.store.get(current_id)
            if current is None or current_id in seen:
                continue
            seen.add(current_id)
            result.append(current_id)
            stack.extend(reversed(current.children))
        return result

    def delete_subtree(self, node_id: Optional[int] = None) -> Set[int]:
        """Deletes a node and every descendant.

        Ancestors are not re-fitted afterwards and keep their old size.
        """
        node = self._target(node_id, "delete")
        doomed = self.collect_subtree(node.id)

        parent = self.store.get(node.parent)
        if parent is not None and node.id in parent.children:
            parent.children.remove(node.id)

        for doomed_id in doomed:
            self.store.delete(doomed_id)

        deleted = set(doomed)
        if self.store.latest_created_id in deleted:
            self.store.latest_created_id = None
        self.selected_node_id = None
        if self._drag is not None and self._drag[0] in deleted:
            self._drag = None
        logger.debug("delete_subtree: removed %s", sorted(deleted))
        self._commit()
        return deleted

    # --- geometry edits ---

    def resize(self, delta: float, node_id: Optional[int] = None) -> Node:
        """Grows by delta (delta > 0) or shrinks by -delta without uncovering children.

        Shrinking always re-centers a parent on its children; growing never does.
        """
        if delta == 0:
            raise ValueError("resize delta must be non-zero")
        if not math.isfinite(delta):
            raise ValueError(f"resize delta must be a finite number, got {delta}")
        node = self._target(node_id, "resize")

        if delta > 0:
            node.radius += delta
        else:
            new_radius = max(node.radius + delta, config.MIN_RADIUS)
            bounds = children_bounds(self.store, node)
            if bounds is not None:
                new_radius = max(new_radius, required_radius(bounds))
                node.x, node.y = bounds.center
            node.radius = new_radius

        propagate_up(self.store, node.id)
        logger.debug("resize(%+.1f): %r", delta, node)
        self._commit()
        return node

    def grow(self, node_id: Optional[int] = None) -> Node:
        return self.resize(config.SIZE_STEP, node_id)

    def shrink(self, node_id: Optional[int] = None) -> Node:
        return self.resize(-config.SIZE_STEP, node_id)

    def _move(self, node: Node, x: float, y: float):
        _check_finite(x, y)
        # Children keep their absolute positions; only ancestors re-fit
        node.x = float(x)
        node.y = float(y)
        propagate_up(self.store, node.id)

    def move(self, node_id: int, x: float, y: float) -> Node:
        node = self.store.require(node_id)
        self._move(node, x, y)
        logger.debug("move: %r", node)
        self._commit()
        return node

    # --- drag sub-protocol: press, any number of moves, release ---

    @property
    def dragging_node_id(self) -> Optional[int]:
        return self._drag[0] if self._drag else None

    def begin_drag(self, node_id: int, pointer_x: float, pointer_y: float):
        node = self.store.require(node_id)
        _check_finite(pointer_x, pointer_y)
        self._drag = (node.id, pointer_x - node.x, pointer_y - node.y)

    def drag_to(self, pointer_x: float, pointer_y: float) -> Optional[Node]:
        """Moves the dragged node under the pointer. Redraws but does not persist."""
        if self._drag is None:
            return None
        node_id, offset_x, offset_y = self._drag
        node = self.store.get(node_id)
        if node is None:
            self._drag = None
            return None
        self._move(node, pointer_x - offset_x, pointer_y - offset_y)
        self.render()
        return node

    def end_drag(self) -> bool:
        """Finishes the drag wherever the pointer is and persists once."""
        if self._drag is None:
            return False
        self._drag = None
        self.persist()
        return True

    # --- whole map ---

    def clear_all(self):
        if self.storage is not None:
            success, msg = self.storage.clear()
            if not success:
                logger.warning("Could not clear saved map: %s", msg)
        self.store.reset()
        self.selected_node_id = None
        self._drag = None
        self.render()
