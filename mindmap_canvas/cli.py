# mindmap_canvas/cli.py
import argparse
import functools
import logging
import sys
from typing import Callable, Optional
from .commands_core import (
    add_root_action, add_child_action, insert_parent_action, delete_subtree_action,
    grow_action, shrink_action, move_action, clear_all_action, render_action,
    get_general_help_text, get_specific_help_text, CommandStatus,
)
from .display_utils import formatted_print
from .render import SvgFileRenderer, format_tree
from .session import MapSession
from .storage import JsonFileStorage

def build_session(filepath: Optional[str], svg_path: Optional[str] = None) -> MapSession:
    storage = JsonFileStorage(filepath)
    renderer = SvgFileRenderer(svg_path) if svg_path else None
    return MapSession(storage, renderer)

def report(status: str, msg: str) -> bool:
    """Prints an action result. Returns True on success."""
    if status == CommandStatus.SUCCESS:
        formatted_print(msg, level="SUCCESS")
        return True
    formatted_print(msg, level="ERROR")
    return False

# Decorator for commands that operate on a map
def mindmap_command(func: Callable[[MapSession, argparse.Namespace], bool]):
    """
    Decorator to set up a session for a one-shot command.
    - Opens the map file from args.file or the default path.
    - A missing file means an empty map; an unreadable one aborts.
    - Calls the decorated function with the session and args. The session
      saves after every edit, so nothing is saved here.
    - Exits with status 1 if the command reports failure.
    """
    @functools.wraps(func)
    def wrapper(args: argparse.Namespace) -> None:
        session = build_session(getattr(args, 'file', None), getattr(args, 'svg', None))
        formatted_print(f"Operating on '{session.storage.filepath}'", level="INFO")
        if session.load_error:
            formatted_print(session.load_error, level="ERROR")
            sys.exit(1)

        if not func(session, args):
            sys.exit(1)
    return wrapper

@mindmap_command
def handle_add_root(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = add_root_action(session, args.label)
    return report(status, msg)

@mindmap_command
def handle_add_child(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = add_child_action(session, args.label, args.parent_id)
    return report(status, msg)

@mindmap_command
def handle_add_parent(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = insert_parent_action(session, args.label, args.child_id)
    return report(status, msg)

@mindmap_command
def handle_delete(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = delete_subtree_action(session, args.node_id)
    return report(status, msg)

@mindmap_command
def handle_grow(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = grow_action(session, args.node_id)
    return report(status, msg)

@mindmap_command
def handle_shrink(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = shrink_action(session, args.node_id)
    return report(status, msg)

@mindmap_command
def handle_move(session: MapSession, args: argparse.Namespace) -> bool:
    status, _, msg = move_action(session, args.node_id, args.x, args.y)
    return report(status, msg)

@mindmap_command
def handle_list(session: MapSession, args: argparse.Namespace) -> bool:
    if not len(session.store):
        formatted_print("Mind map is empty.", level="INFO")
        return True
    for line in format_tree(session.store):
        formatted_print(line, level="NONE", use_prefix=False)
    return True

@mindmap_command
def handle_render(session: MapSession, args: argparse.Namespace) -> bool:
    status, svg, msg = render_action(session, args.output_file)
    if status == CommandStatus.SUCCESS and svg:
        formatted_print(svg, level="NONE", use_prefix=False)
        return True
    return report(status, msg)

@mindmap_command
def handle_reset(session: MapSession, args: argparse.Namespace) -> bool:
    if not args.yes:
        formatted_print("Erasing the map requires --yes confirmation for one-shot command.", level="ERROR")
        return False
    status, _, msg = clear_all_action(session)
    return report(status, msg)

def handle_help(args):
    if args.command_name:
        help_text = get_specific_help_text(args.command_name[0])
        if "Unknown command" in help_text:
            formatted_print(help_text, level="ERROR")
            return
        for line_content in help_text.strip().split('\n'):
            if line_content.lower().startswith("usage:"):
                formatted_print(line_content, level="USAGE", use_prefix=True)
            else:
                formatted_print(line_content, level="NONE", use_prefix=False, indent=1)
    else:
        formatted_print(get_general_help_text(), level="NONE", use_prefix=False)
        formatted_print("\nOne-shot commands take the target node id instead of a selection; see --help.", level="INFO", indent=1)

def _add_global_options(parser: argparse.ArgumentParser, suppress_defaults: bool = False):
    defaults = {"default": argparse.SUPPRESS} if suppress_defaults else {}
    parser.add_argument("-f", "--file", **defaults, help="Path to the map file (JSON).")
    parser.add_argument("--svg", **defaults, help="Re-render the map to this SVG file after every edit.")
    parser.add_argument("-v", "--verbose", action="store_true", **defaults, help="Enable debug logging.")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mindmap-canvas", description="MindMap Canvas (one-shot)")
    _add_global_options(parser)

    # Same options after the command; SUPPRESS keeps an earlier value from being reset
    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress_defaults=True)

    subparsers = parser.add_subparsers(dest="command", title="Available commands")
    subparsers.required = True
    add_command = functools.partial(subparsers.add_parser, parents=[common])

    p = add_command("add-root", help="Add a new top-level node.")
    p.add_argument("label", help="Node label.")
    p.set_defaults(func=handle_add_root)

    p = add_command("add-child", help="Add a child inside a node.")
    p.add_argument("parent_id", type=int, help="ID of the parent node.")
    p.add_argument("label", help="Node label.")
    p.set_defaults(func=handle_add_child)

    p = add_command("add-parent", help="Wrap a node in a new parent.")
    p.add_argument("child_id", type=int, help="ID of the node to wrap.")
    p.add_argument("label", help="Label of the new parent.")
    p.set_defaults(func=handle_add_parent)

    p = add_command("delete", help="Delete a node and its descendants.")
    p.add_argument("node_id", type=int, help="ID of node to delete.")
    p.set_defaults(func=handle_delete)

    p = add_command("grow", help="Increase a node's radius by one step.")
    p.add_argument("node_id", type=int)
    p.set_defaults(func=handle_grow)

    p = add_command("shrink", help="Decrease a node's radius by one step.")
    p.add_argument("node_id", type=int)
    p.set_defaults(func=handle_shrink)

    p = add_command("move", help="Move a node's center.")
    p.add_argument("node_id", type=int)
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)
    p.set_defaults(func=handle_move)

    p = add_command("list", help="Show the map as a text tree.")
    p.set_defaults(func=handle_list)

    p = add_command("render", help="Render the map as SVG.")
    p.add_argument("output_file", nargs="?", help="Optional .svg file to write.")
    p.set_defaults(func=handle_render)

    p = add_command("reset", help="Erase the entire map.")
    p.add_argument("--yes", action="store_true", help="Confirm erasing the map.")
    p.set_defaults(func=handle_reset)

    p = add_command("help", help="Show help.", add_help=False)
    p.add_argument('command_name', nargs='*', help="Command to get help for.")
    p.set_defaults(func=handle_help)
    return parser

def main_cli(argv=None):
    parser = build_parser()
    parsed_args = parser.parse_args(argv)
    if parsed_args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    parsed_args.func(parsed_args)
