# mindmap_canvas/interactive_cli.py
import shlex
import sys
from typing import Callable, Dict, List, Optional
from .commands_core import (
    add_root_action, add_child_action, insert_parent_action, delete_subtree_action,
    grow_action, shrink_action, move_action, drag_action, select_action,
    clear_all_action, render_action, get_general_help_text, get_specific_help_text,
    CommandStatus,
)
from .display_utils import Colors, formatted_print, USE_COLORS
from .render import format_tree
from .session import MapSession

try:
    import readline
except ImportError:
    readline = None # Tab completion is disabled without readline

class InteractiveShell:
    """Command loop around one MapSession. Labels are prompted for when not given."""

    def __init__(self, session: MapSession, input_func: Callable[[str], str] = input):
        self.session = session
        self.input_func = input_func
        self._rl_completion_matches: List[str] = []
        self.commands: Dict[str, Callable[[List[str]], None]] = {
            "root": self.cmd_root, "add": self.cmd_root,
            "child": self.cmd_child,
            "parent": self.cmd_parent,
            "select": self.cmd_select, "sel": self.cmd_select,
            "delete": self.cmd_delete, "del": self.cmd_delete, "rm": self.cmd_delete,
            "grow": self.cmd_grow,
            "shrink": self.cmd_shrink,
            "move": self.cmd_move, "mv": self.cmd_move,
            "drag": self.cmd_drag,
            "tree": self.cmd_tree, "ls": self.cmd_tree,
            "info": self.cmd_info,
            "render": self.cmd_render,
            "reset": self.cmd_reset,
            "help": self.cmd_help, "h": self.cmd_help,
        }

    # --- helpers ---

    def _report(self, status: str, msg: str):
        formatted_print(msg, level="SUCCESS" if status == CommandStatus.SUCCESS else "ERROR")

    def _label_from(self, args_list: List[str], prompt: str) -> Optional[str]:
        """Joins the args into a label, or prompts. None means the user cancelled."""
        if args_list:
            return " ".join(args_list)
        try:
            label = self.input_func(prompt).strip()
        except EOFError:
            return None
        return label or None

    def _parse_id(self, value: str) -> Optional[int]:
        try:
            return int(value)
        except ValueError:
            formatted_print(f"'{value}' is not a node ID.", level="ERROR")
            return None

    def _add(self, action, args_list: List[str], prompt: str):
        label = self._label_from(args_list, prompt)
        if label is None:
            formatted_print("Cancelled. Nothing was added.", level="INFO")
            return
        status, _, msg = action(self.session, label)
        self._report(status, msg)

    # --- commands ---

    def cmd_root(self, args_list: List[str]):
        self._add(add_root_action, args_list, "Enter a label for this new node: ")

    def cmd_child(self, args_list: List[str]):
        if self.session.selected_node_id is None:
            # Checked before prompting for a label
            formatted_print("Please select an existing node first ('select <id>').", level="ERROR")
            return
        self._add(add_child_action, args_list, "Enter a label for the new child node: ")

    def cmd_parent(self, args_list: List[str]):
        if self.session.selected_node_id is None:
            formatted_print("Please select an existing node first ('select <id>').", level="ERROR")
            return
        self._add(insert_parent_action, args_list, "Enter a label for the new parent node: ")

    def cmd_select(self, args_list: List[str]):
        if len(args_list) != 1:
            formatted_print(get_specific_help_text("select"), level="NONE", use_prefix=False)
            return
        node_id = self._parse_id(args_list[0])
        if node_id is None:
            return
        status, _, msg = select_action(self.session, node_id)
        formatted_print(msg, level="INFO" if status == CommandStatus.SUCCESS else "ERROR")

    def cmd_delete(self, args_list: List[str]):
        status, _, msg = delete_subtree_action(self.session)
        self._report(status, msg)

    def cmd_grow(self, args_list: List[str]):
        status, _, msg = grow_action(self.session)
        self._report(status, msg)

    def cmd_shrink(self, args_list: List[str]):
        status, _, msg = shrink_action(self.session)
        self._report(status, msg)

    def cmd_move(self, args_list: List[str]):
        if len(args_list) != 3:
            formatted_print(get_specific_help_text("move"), level="NONE", use_prefix=False)
            return
        node_id = self._parse_id(args_list[0])
        if node_id is None:
            return
        try:
            x, y = float(args_list[1]), float(args_list[2])
        except ValueError:
            formatted_print("Coordinates must be numbers.", level="ERROR")
            return
        status, _, msg = move_action(self.session, node_id, x, y)
        self._report(status, msg)

    def cmd_drag(self, args_list: List[str]):
        if len(args_list) < 3 or len(args_list) % 2 == 0:
            formatted_print(get_specific_help_text("drag"), level="NONE", use_prefix=False)
            return
        node_id = self._parse_id(args_list[0])
        if node_id is None:
            return
        try:
            coords = [float(v) for v in args_list[1:]]
        except ValueError:
            formatted_print("Coordinates must be numbers.", level="ERROR")
            return
        path = list(zip(coords[0::2], coords[1::2]))
        status, _, msg = drag_action(self.session, node_id, path)
        self._report(status, msg)

    def cmd_tree(self, args_list: List[str]):
        if not len(self.session.store):
            formatted_print("Mind map is empty. Use 'root \"Label\"' to add a node.", level="INFO")
            return
        for line in format_tree(self.session.store):
            formatted_print(line, level="NONE", use_prefix=False)

    def cmd_info(self, args_list: List[str]):
        store = self.session.store
        if args_list:
            node_id = self._parse_id(args_list[0])
            if node_id is None:
                return
        else:
            node_id = self.session.selected_node_id
            if node_id is None:
                formatted_print("No node selected.", level="INFO")
                return
        node = store.get(node_id)
        if node is None:
            formatted_print(f"Node with ID '{node_id}' not found.", level="ERROR")
            return
        path = store.path_to(node.id)
        path_str = " -> ".join(n.label for n in path) if path else "N/A"
        formatted_print(f"Node: '{node.label}' (ID: {node.id})", level="INFO")
        formatted_print(f"Path: {path_str}", level="DETAIL", use_prefix=False, indent=1)
        formatted_print(f"Center: ({node.x:.1f}, {node.y:.1f})  Radius: {node.radius:.1f}", level="DETAIL", use_prefix=False, indent=1)
        formatted_print(f"Children: {node.children or 'none'}", level="DETAIL", use_prefix=False, indent=1)
        formatted_print(f"Created after: {node.predecessor if node.predecessor is not None else 'none'}", level="DETAIL", use_prefix=False, indent=1)

    def cmd_render(self, args_list: List[str]):
        status, svg, msg = render_action(self.session, args_list[0] if args_list else None)
        if svg:
            formatted_print(svg, level="NONE", use_prefix=False)
        else:
            self._report(status, msg)

    def cmd_reset(self, args_list: List[str]):
        formatted_print("This will erase your entire map. Continue? (yes/no): ", level="ACTION", use_prefix=False)
        try:
            answer = self.input_func("> ").strip().lower()
        except EOFError:
            answer = ""
        if answer not in ("y", "yes"):
            formatted_print("Reset cancelled.", level="INFO")
            return
        status, _, msg = clear_all_action(self.session)
        self._report(status, msg)

    def cmd_help(self, args_list: List[str]):
        if not args_list:
            lines = get_general_help_text().strip().split('\n')
            formatted_print(lines[0], level="HEADER", use_prefix=False)
            for line_content in lines[1:]:
                if line_content.startswith("  "):
                    formatted_print(line_content, level="COMMAND_NAME", use_prefix=False)
                elif line_content.strip():
                    formatted_print(line_content.strip(), level="INFO", use_prefix=False, indent=1)
            return
        help_text = get_specific_help_text(args_list[0])
        if "Unknown command" in help_text:
            formatted_print(help_text, level="ERROR")
            return
        for line_content in help_text.strip().split('\n'):
            if line_content.lower().startswith("usage:"):
                formatted_print(line_content, level="USAGE", use_prefix=True)
            else:
                formatted_print(line_content, level="NONE", use_prefix=False, indent=1)

    # --- loop ---

    def execute(self, line: str) -> bool:
        """Runs one command line. Returns False when the user asked to exit."""
        if not line.strip():
            return True
        parts = shlex.split(line)
        command_name, command_args = parts[0].lower(), parts[1:]
        if command_name in ("exit", "quit"):
            return False
        if command_name in self.commands:
            self.commands[command_name](command_args)
        else:
            formatted_print(f"Unknown command: '{command_name}'. Type 'help'.", level="ERROR")
        return True

    def prompt_string(self) -> str:
        store = self.session.store
        selected = store.get(self.session.selected_node_id)
        selected_part = f":{selected.label}" if selected else ""
        if USE_COLORS and sys.stdout.isatty():
            return (f"{Colors.OKGREEN}mindmap{Colors.ENDC} [{Colors.OKCYAN}{len(store)} node(s)"
                    f"{Colors.ENDC}{Colors.HEADER}{selected_part}{Colors.ENDC}]> ")
        return f"mindmap [{len(store)} node(s){selected_part}]> "

    def _command_completer(self, text: str, state: int) -> Optional[str]:
        """Readline completer for command names."""
        if state == 0:
            names = list(self.commands.keys()) + ["exit", "quit"]
            self._rl_completion_matches = [cmd for cmd in names if cmd.startswith(text)] if text else names
        try:
            return self._rl_completion_matches[state]
        except IndexError:
            return None

    def setup_readline_completion(self):
        if readline:
            readline.set_completer(self._command_completer)
            readline.parse_and_bind("tab: complete")
            readline.set_completer_delims(" \t\n;")

    def run(self):
        self.setup_readline_completion()
        formatted_print("\nWelcome to MindMap Canvas Interactive Mode!", level="HEADER", use_prefix=False)
        formatted_print(f"Currently: {len(self.session.store)} node(s). Type 'help' for commands.", level="INFO")
        while True:
            try:
                line = self.input_func(self.prompt_string())
                if not self.execute(line):
                    formatted_print("Exiting...", level="INFO")
                    break
            except EOFError:
                formatted_print("\nExiting...", level="INFO")
                break
            except KeyboardInterrupt:
                formatted_print("\nInterrupted. Type 'exit' or 'quit'.", level="WARNING")
                continue
            except ValueError as e: # shlex on unbalanced quotes
                formatted_print(f"Could not parse command: {e}", level="ERROR")


def interactive_session(session: MapSession):
    if session.load_error:
        formatted_print(session.load_error, level="ERROR")
        formatted_print("Starting with an empty map; saving will overwrite the unreadable file.", level="WARNING")
    InteractiveShell(session).run()
