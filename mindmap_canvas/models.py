# mindmap_canvas/models.py
from typing import List, Dict, Any, Optional

class Node:
    """A single circle on the canvas, linked into the tree and the creation chain."""
    def __init__(self, node_id: int, label: str, x: float, y: float, radius: float,
                 parent: Optional[int] = None, children: Optional[List[int]] = None,
                 predecessor: Optional[int] = None):
        self.id: int = node_id
        self.label: str = label
        self.x: float = float(x)
        self.y: float = float(y)
        self.radius: float = float(radius)
        self.parent: Optional[int] = parent
        self.children: List[int] = children if children is not None else [] # Order matters, see insert_parent
        self.predecessor: Optional[int] = predecessor # Creation-order link, unrelated to parent

    @property
    def center(self):
        return (self.x, self.y)

    def is_leaf(self) -> bool:
        return not self.children

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the node to a dictionary."""
        return {
            "id": self.id,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "parent": self.parent,
            "children": list(self.children),
            "predecessor": self.predecessor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Node':
        """Deserializes a node from a dictionary."""
        # JSON keeps ints as ints, but ids typed in by hand may arrive as strings
        def _opt_id(value) -> Optional[int]:
            return int(value) if value is not None else None

        return cls(
            node_id=int(data['id']),
            label=data['label'],
            x=data['x'],
            y=data['y'],
            radius=data['radius'],
            parent=_opt_id(data.get('parent')),
            children=[int(c) for c in data.get('children', [])],
            predecessor=_opt_id(data.get('predecessor')),
        )

    def __repr__(self) -> str:
        return (f"Node(id={self.id}, label='{self.label}', center=({self.x:.1f}, {self.y:.1f}), "
                f"r={self.radius:.1f}, children={len(self.children)})")
