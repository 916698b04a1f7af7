# mindmap_canvas/commands_core.py
import math
from typing import Optional, Tuple, Any
from . import config
from .errors import NoSelectionError, NodeNotFoundError
from .models import Node
from .render import render_svg
from .session import MapSession


class CommandStatus:
    SUCCESS = "success"
    ERROR = "error"
    NOT_FOUND = "not_found"
    NO_SELECTION = "no_selection"
    INVALID_OPERATION = "invalid_operation" # Empty label, zero resize, ...

# Result tuple structure: (status: CommandStatus, data: Any, message: str)
# 'data' is a Node, a set of ids, an svg string, etc., depending on the command.
Result = Tuple[str, Any, str]

def _describe(node: Node) -> str:
    return f"'{node.label}' (ID: {node.id})"

def _clean_label(label: Optional[str]) -> Optional[str]:
    if label is None:
        return None
    label = label.strip()
    return label or None

def _run(operation, *args, **kwargs) -> Tuple[str, Any, str]:
    """Calls a session operation, turning its recoverable errors into statuses."""
    try:
        return CommandStatus.SUCCESS, operation(*args, **kwargs), ""
    except NoSelectionError as e:
        return CommandStatus.NO_SELECTION, None, str(e)
    except NodeNotFoundError as e:
        return CommandStatus.NOT_FOUND, None, str(e)
    except ValueError as e: # Zero or non-finite geometry, rejected before any change
        return CommandStatus.INVALID_OPERATION, None, f"Invalid value: {e}."

def add_root_action(session: MapSession, label: Optional[str]) -> Result:
    """Action to add a new unattached node."""
    label = _clean_label(label)
    if not label:
        return CommandStatus.INVALID_OPERATION, None, "Label cannot be empty. Nothing was added."
    node = session.add_root(label)
    return CommandStatus.SUCCESS, node, f"Added node {_describe(node)}."

def add_child_action(session: MapSession, label: Optional[str], parent_id: Optional[int] = None) -> Result:
    """Action to add a child under parent_id, or under the selection."""
    label = _clean_label(label)
    if not label:
        return CommandStatus.INVALID_OPERATION, None, "Label cannot be empty. Nothing was added."
    status, node, msg = _run(session.add_child, label, parent_id)
    if status != CommandStatus.SUCCESS:
        return status, None, msg
    parent = session.store.get(node.parent)
    return status, node, f"Added child {_describe(node)} under {_describe(parent)}."

def insert_parent_action(session: MapSession, label: Optional[str], child_id: Optional[int] = None) -> Result:
    """Action to wrap child_id (or the selection) in a new parent."""
    label = _clean_label(label)
    if not label:
        return CommandStatus.INVALID_OPERATION, None, "Label cannot be empty. Nothing was added."
    status, node, msg = _run(session.insert_parent, label, child_id)
    if status != CommandStatus.SUCCESS:
        return status, None, msg
    child = session.store.get(node.children[0])
    return status, node, f"Added parent {_describe(node)} around {_describe(child)}."

def delete_subtree_action(session: MapSession, node_id: Optional[int] = None) -> Result:
    """Action to delete a node and everything below it."""
    target = node_id if node_id is not None else session.selected_node_id
    target_node = session.store.get(target)
    status, deleted, msg = _run(session.delete_subtree, node_id)
    if status != CommandStatus.SUCCESS:
        return status, None, msg
    others = len(deleted) - 1
    suffix = f" and {others} descendant(s)" if others else ""
    return status, deleted, f"Deleted node {_describe(target_node)}{suffix}."

def resize_action(session: MapSession, delta: float, node_id: Optional[int] = None) -> Result:
    """Action to grow (delta > 0) or shrink (delta < 0) a node."""
    if not delta:
        return CommandStatus.INVALID_OPERATION, None, "Resize step must be non-zero."
    status, node, msg = _run(session.resize, delta, node_id)
    if status != CommandStatus.SUCCESS:
        return status, None, msg
    verb = "Grew" if delta > 0 else "Shrank"
    return status, node, f"{verb} node {_describe(node)} to radius {node.radius:.1f}."

def grow_action(session: MapSession, node_id: Optional[int] = None) -> Result:
    return resize_action(session, config.SIZE_STEP, node_id)

def shrink_action(session: MapSession, node_id: Optional[int] = None) -> Result:
    return resize_action(session, -config.SIZE_STEP, node_id)

def move_action(session: MapSession, node_id: int, x: float, y: float) -> Result:
    """Action to place a node's center at (x, y)."""
    status, node, msg = _run(session.move, node_id, x, y)
    if status != CommandStatus.SUCCESS:
        return status, None, msg
    return status, node, f"Moved node {_describe(node)} to ({node.x:.1f}, {node.y:.1f})."

def drag_action(session: MapSession, node_id: int, path) -> Result:
    """Action to replay a whole drag: press on the node, follow path, release.

    path is a sequence of pointer (x, y) positions; the pointer is pressed
    on the node's center.
    """
    node = session.store.get(node_id)
    if node is None:
        return CommandStatus.NOT_FOUND, None, f"Node with ID '{node_id}' not found."
    if not all(math.isfinite(v) for point in path for v in point):
        return CommandStatus.INVALID_OPERATION, None, "Drag coordinates must be finite numbers."
    session.begin_drag(node.id, node.x, node.y)
    for x, y in path:
        session.drag_to(x, y)
    session.end_drag()
    return CommandStatus.SUCCESS, node, f"Dragged node {_describe(node)} to ({node.x:.1f}, {node.y:.1f})."

def select_action(session: MapSession, node_id: int) -> Result:
    """Action to toggle the selection of a node."""
    status, selected, msg = _run(session.select_toggle, node_id)
    if status != CommandStatus.SUCCESS:
        return status, None, msg
    if selected is None:
        return status, None, f"Node ID '{node_id}' deselected."
    return status, selected, f"Selected node {_describe(session.store.get(selected))}."

def clear_all_action(session: MapSession) -> Result:
    """Action to erase the whole map, saved copy included."""
    count = len(session.store)
    session.clear_all()
    return CommandStatus.SUCCESS, None, f"Erased the map ({count} node(s))."

def render_action(session: MapSession, output_filepath: Optional[str] = None) -> Result:
    """Action to render the map as SVG. Returns (status, svg_or_None, message)."""
    svg = render_svg(session.store, session.selected_node_id)
    if not output_filepath:
        return CommandStatus.SUCCESS, svg, "SVG generated."
    try:
        with open(output_filepath, 'w', encoding='utf-8') as f:
            f.write(svg)
        return CommandStatus.SUCCESS, None, f"Map rendered to: {output_filepath}"
    except OSError as e:
        return CommandStatus.ERROR, None, f"Error writing SVG file '{output_filepath}': {e}"

# --- Help Messages ---
detailed_help_messages = {
    "root": """Usage: root ["Label"]\nAdds a new top-level node, stepped away from the last one created.""",
    "child": """Usage: child ["Label"]\nAdds a child inside the selected node. The selected node and its ancestors grow to enclose it.""",
    "parent": """Usage: parent ["Label"]\nWraps the selected node in a new parent, taking its place under its old parent.""",
    "select": """Usage: select <NODE_ID>\nSelects a node. Selecting the selected node clears the selection.""",
    "delete": """Usage: delete\nDeletes the selected node and all its descendants.""",
    "grow": """Usage: grow\nIncreases the selected node's radius by one step.""",
    "shrink": """Usage: shrink\nDecreases the selected node's radius by one step, never below what its children need.""",
    "move": """Usage: move <NODE_ID> <X> <Y>\nMoves a node's center. Its children stay where they are.""",
    "drag": """Usage: drag <NODE_ID> <X> <Y> [<X> <Y> ...]\nDrags a node through the given pointer positions and saves once on release.""",
    "tree": """Usage: tree\nDisplays all nodes as a tree with their position and radius.""",
    "info": """Usage: info [<NODE_ID>]\nShows details of a node (default: the selected node).""",
    "render": """Usage: render [<file.svg>]\nRenders the map as SVG, to a file or to the screen.""",
    "reset": """Usage: reset\nErases the entire map after confirmation.""",
    "help": """Usage: help [<command>]\nDisplays help.""",
    "exit": """Usage: exit\nExits the application. Alias: quit""",
    "quit": """Usage: quit\nExits the application. Alias: exit""",
}

help_aliases = {
    "add": "root",
    "sel": "select",
    "del": "delete",
    "rm": "delete",
    "ls": "tree",
    "mv": "move",
    "h": "help",
}

def get_general_help_text() -> str:
    lines = ["\nMindMap Canvas - Available Commands", "Type 'help <command>' for more details."]
    main_commands = sorted(detailed_help_messages.keys())
    all_command_names = list(detailed_help_messages.keys()) + list(help_aliases.keys())
    max_len = max(len(cmd) for cmd in all_command_names)

    for cmd_name in main_commands:
        summary = detailed_help_messages[cmd_name].split('\n')[0]
        aliases_for_this_cmd = sorted([alias for alias, target in help_aliases.items() if target == cmd_name])
        alias_info = f" (Aliases: {', '.join(aliases_for_this_cmd)})" if aliases_for_this_cmd else ""
        lines.append(f"  {cmd_name:<{max_len + 2}} {summary.replace('Usage: ', '')}{alias_info}")

    lines.append("\nNode IDs are integers. Most edits act on the selected node; use 'select <id>' first.")
    lines.append(f"Parents always enclose their children plus {config.PARENT_PADDING:g}px of padding.")
    return "\n".join(lines)

def get_specific_help_text(command_name: str) -> str:
    command_name = command_name.lower()
    main_command_name = help_aliases.get(command_name, command_name)
    if main_command_name in detailed_help_messages:
        help_text = detailed_help_messages[main_command_name].strip()
        aliases_for_this_cmd = sorted([alias for alias, target in help_aliases.items() if target == main_command_name])
        if aliases_for_this_cmd:
            help_text += f"\n(Aliases: {', '.join(aliases_for_this_cmd)})"
        return help_text
    return f"Unknown command '{command_name}'. Type 'help' for a list."
