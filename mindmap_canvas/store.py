# mindmap_canvas/store.py
import logging
from typing import Dict, Optional, List, Iterator, Any, NamedTuple
from .models import Node
from .errors import NodeNotFoundError

logger = logging.getLogger(__name__)

class MapState(NamedTuple):
    """What the persistence layer stores: the node table plus the two counters."""
    nodes: Dict[int, Node]
    latest_created_id: Optional[int]
    next_id: int


class NodeStore:
    """Flat id -> Node table. Owns id allocation and the latest-created pointer."""

    def __init__(self):
        self._nodes: Dict[int, Node] = {} # dicts keep insertion order, which all_ids relies on
        self.latest_created_id: Optional[int] = None
        self.next_id: int = 1

    def create(self, label: str, x: float, y: float, radius: float,
               parent: Optional[int] = None, children: Optional[List[int]] = None,
               predecessor: Optional[int] = None) -> Node:
        """Allocates a fresh id and inserts a node built from the given fields."""
        node_id = self.next_id
        self.next_id += 1
        node = Node(node_id, label, x, y, radius, parent=parent,
                    children=children, predecessor=predecessor)
        self._nodes[node_id] = node
        return node

    def get(self, node_id: Optional[int]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def require(self, node_id: Optional[int]) -> Node:
        node = self.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def delete(self, node_id: int):
        """Removes a single record. Relations must already be detached by the caller."""
        self._nodes.pop(node_id, None)

    def all_ids(self) -> List[int]:
        return list(self._nodes.keys())

    def nodes(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def roots(self) -> List[Node]:
        return [node for node in self._nodes.values() if node.parent is None]

    def children_of(self, node_id: int) -> List[Node]:
        """Returns the child Node objects of a node, skipping ids that no longer resolve."""
        parent_node = self.get(node_id)
        if not parent_node:
            return []
        children = []
        for child_id in parent_node.children:
            child = self.get(child_id)
            if child:
                children.append(child)
        return children

    def path_to(self, node_id: int) -> Optional[List[Node]]:
        """Returns the nodes from the root down to node_id, or None if the chain is broken."""
        node = self.get(node_id)
        if not node:
            return None

        path = []
        current: Optional[Node] = node
        visited = set() # Guards against cycles in hand-edited files
        while current:
            if current.id in visited:
                logger.warning("Circular parent chain detected at node %s", current.id)
                return None
            visited.add(current.id)
            path.append(current)
            if current.parent is None:
                break
            parent = self.get(current.parent)
            if parent is None:
                logger.warning("Parent %s of node %s is missing", current.parent, current.id)
                return None
            current = parent
        return path[::-1]

    def reset(self):
        self._nodes.clear()
        self.latest_created_id = None
        self.next_id = 1

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # --- state exchange with persistence ---

    def snapshot(self) -> MapState:
        return MapState(dict(self._nodes), self.latest_created_id, self.next_id)

    @classmethod
    def from_state(cls, state: MapState) -> 'NodeStore':
        store = cls()
        store._nodes = dict(state.nodes)
        store.latest_created_id = state.latest_created_id
        # Never hand out an id that is already taken, even if the saved counter lags
        highest = max(store._nodes, default=0)
        store.next_id = max(int(state.next_id), highest + 1)
        return store

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": {str(node_id): node.to_dict() for node_id, node in self._nodes.items()},
            "latest_created_id": self.latest_created_id,
            "next_id": self.next_id,
        }

    def __repr__(self) -> str:
        return f"NodeStore(nodes={len(self._nodes)}, next_id={self.next_id}, latest={self.latest_created_id})"
