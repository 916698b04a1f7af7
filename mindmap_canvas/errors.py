# mindmap_canvas/errors.py
from typing import Optional

class MindMapError(Exception):
    """Base class for recoverable errors raised by map operations."""


class NoSelectionError(MindMapError):
    """An operation that works on the selected node was invoked with nothing selected."""
    def __init__(self, operation: str = "this operation"):
        self.operation = operation
        super().__init__(f"Please select a node first ({operation} needs a selected node).")


class NodeNotFoundError(MindMapError):
    """An operation referenced a node id that is no longer in the map."""
    def __init__(self, node_id: Optional[int]):
        self.node_id = node_id
        super().__init__(f"Node with ID '{node_id}' not found.")
