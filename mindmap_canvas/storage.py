# mindmap_canvas/storage.py
import json
import math
import os
import sys
from typing import Any, Dict, Optional, Tuple
from .config import (
    DEFAULT_DATA_SUBDIR_NAME, DEFAULT_FILENAME, FILEPATH_ENV_VAR,
    NODES_KEY, LAST_ADDED_KEY, NEXT_ID_KEY,
)
from .models import Node
from .store import MapState

def get_default_filepath() -> str:
    """
    Returns the map file path: $MINDMAP_CANVAS_FILE if set, otherwise
    DEFAULT_FILENAME in a DEFAULT_DATA_SUBDIR_NAME directory next to the
    executed script. The directory is created by save_map_to_file if needed.
    """
    env_path = os.environ.get(FILEPATH_ENV_VAR)
    if env_path:
        return os.path.abspath(env_path)
    try:
        script_dir = os.path.dirname(os.path.abspath(sys.argv[0]))
    except (IndexError, TypeError):
        script_dir = os.getcwd()
    return os.path.join(script_dir, DEFAULT_DATA_SUBDIR_NAME, DEFAULT_FILENAME)

def state_to_blob(state: MapState) -> Dict[str, Any]:
    return {
        NODES_KEY: {str(node_id): node.to_dict() for node_id, node in state.nodes.items()},
        LAST_ADDED_KEY: state.latest_created_id,
        NEXT_ID_KEY: state.next_id,
    }

def state_from_blob(blob: Dict[str, Any]) -> MapState:
    """Rebuilds a MapState; raises ValueError on malformed data."""
    nodes: Dict[int, Node] = {}
    for key, node_data in blob.get(NODES_KEY, {}).items():
        try:
            node = Node.from_dict(node_data)
        except KeyError as e:
            raise ValueError(f"Invalid node data: missing key {e} in node '{key}'") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"Error reconstructing node '{key}': {e}") from e
        node.id = int(key) # The key wins over the embedded id
        if not all(math.isfinite(v) for v in (node.x, node.y, node.radius)):
            raise ValueError(f"Node '{key}' has non-finite geometry")
        nodes[node.id] = node

    check_tree_shape(nodes)
    latest = blob.get(LAST_ADDED_KEY)
    latest = int(latest) if latest is not None else None
    next_id = int(blob.get(NEXT_ID_KEY) or 1)
    return MapState(nodes, latest, next_id)

def check_tree_shape(nodes: Dict[int, Node]):
    """Raises ValueError unless parent and children links agree and no parent chain loops."""
    for node in nodes.values():
        if len(set(node.children)) != len(node.children):
            raise ValueError(f"Node '{node.id}' lists a child more than once")
        for child_id in node.children:
            child = nodes.get(child_id)
            if child is None:
                raise ValueError(f"Node '{node.id}' lists missing child '{child_id}'")
            if child.parent != node.id:
                raise ValueError(f"Node '{child_id}' is a child of '{node.id}' but names parent '{child.parent}'")
        if node.parent is not None:
            parent = nodes.get(node.parent)
            if parent is None or node.id not in parent.children:
                raise ValueError(f"Node '{node.id}' names parent '{node.parent}', which does not list it")

    reaches_root = set()
    for node in nodes.values():
        chain = set()
        current = node
        while current is not None and current.id not in reaches_root:
            if current.id in chain:
                raise ValueError(f"Circular parent chain through node '{current.id}'")
            chain.add(current.id)
            current = nodes.get(current.parent) if current.parent is not None else None
        reaches_root.update(chain)

def save_map_to_file(state: MapState, filepath: str) -> Tuple[bool, str]:
    """Saves the map state to a JSON file. Returns (success_status, message)."""
    try:
        blob = state_to_blob(state)
        dir_name = os.path.dirname(filepath)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(blob, f, indent=4, ensure_ascii=False)
        return True, f"Mind map saved successfully to '{filepath}'"
    except OSError as e:
        return False, f"Error: Could not write to file '{filepath}'. {e}"
    except TypeError as e: # Data json.dump cannot serialize
        return False, f"Error: Could not serialize mind map data. {e}"

def load_map_from_file(filepath: str) -> Tuple[Optional[MapState], str]:
    """Loads map state from a JSON file. Returns (state_or_None, message)."""
    if not os.path.exists(filepath):
        return None, f"Info: File '{filepath}' not found. Starting with an empty map."
    if not os.path.isfile(filepath):
        return None, f"Error: Path '{filepath}' is not a file."

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            if os.fstat(f.fileno()).st_size == 0:
                return MapState({}, None, 1), f"Info: File '{filepath}' is empty. Loaded an empty mind map."
            blob = json.load(f)
        return state_from_blob(blob), f"Mind map loaded successfully from '{filepath}'."
    except json.JSONDecodeError as e:
        return None, f"Error: Could not decode JSON from '{filepath}'. Invalid format? {e}"
    except (ValueError, KeyError, AttributeError) as e:
        return None, f"Error: Invalid map data format in '{filepath}'. {e}"
    except OSError as e:
        return None, f"Error: Could not read file '{filepath}'. {e}"

def clear_map_file(filepath: str) -> Tuple[bool, str]:
    try:
        if os.path.exists(filepath):
            os.remove(filepath)
        return True, f"Removed saved map '{filepath}'."
    except OSError as e:
        return False, f"Error: Could not remove '{filepath}'. {e}"


class JsonFileStorage:
    """Persistence backed by one JSON file on disk."""
    def __init__(self, filepath: Optional[str] = None):
        self.filepath = os.path.abspath(filepath) if filepath else get_default_filepath()

    def load(self) -> Tuple[Optional[MapState], str]:
        return load_map_from_file(self.filepath)

    def save(self, state: MapState) -> Tuple[bool, str]:
        return save_map_to_file(state, self.filepath)

    def clear(self) -> Tuple[bool, str]:
        return clear_map_file(self.filepath)

    def __repr__(self) -> str:
        return f"JsonFileStorage('{self.filepath}')"


class MemoryStorage:
    """Key-value blob store kept in memory; values are JSON strings like on disk."""
    def __init__(self):
        self.blobs: Dict[str, str] = {}
        self.save_count = 0

    def load(self) -> Tuple[Optional[MapState], str]:
        if NODES_KEY not in self.blobs:
            return None, "Info: Nothing saved yet."
        blob = {key: json.loads(value) for key, value in self.blobs.items()}
        try:
            return state_from_blob(blob), "Mind map loaded from memory."
        except ValueError as e:
            return None, f"Error: Invalid map data in memory. {e}"

    def save(self, state: MapState) -> Tuple[bool, str]:
        for key, value in state_to_blob(state).items():
            self.blobs[key] = json.dumps(value)
        self.save_count += 1
        return True, "Mind map saved to memory."

    def clear(self) -> Tuple[bool, str]:
        self.blobs.clear()
        return True, "Cleared saved map."
