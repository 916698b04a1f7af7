# mindmap_canvas/__init__.py
from .errors import MindMapError, NoSelectionError, NodeNotFoundError
from .models import Node
from .session import MapSession
from .store import MapState, NodeStore

__version__ = "0.1.0"

__all__ = [
    "MapSession", "MapState", "MindMapError", "Node", "NodeNotFoundError",
    "NodeStore", "NoSelectionError",
]
