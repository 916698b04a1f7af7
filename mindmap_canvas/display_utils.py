# mindmap_canvas/display_utils.py
import os
import sys

class Colors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

# NO_COLOR is the de-facto opt-out convention for ANSI output
USE_COLORS = os.environ.get("NO_COLOR") is None

# level -> (prefix, color)
_LEVEL_STYLES = {
    "INFO": ("[INFO]", Colors.OKBLUE),
    "SUCCESS": ("[OK]", Colors.OKGREEN),
    "WARNING": ("[WARN]", Colors.WARNING),
    "ERROR": ("[ERROR]", Colors.FAIL),
    "ACTION": (">>", Colors.BOLD),
    "USAGE": ("Usage:", Colors.OKCYAN),
    "HEADER": ("", Colors.HEADER + Colors.BOLD),
    "COMMAND_NAME": ("", Colors.OKCYAN),
    "RESULT": ("", Colors.OKGREEN),
    "DETAIL": ("", Colors.DIM),
    "NONE": ("", ""),
}

def _colors_enabled(stream) -> bool:
    return USE_COLORS and hasattr(stream, "isatty") and stream.isatty()

def formatted_print(message: str, level: str = "INFO", use_prefix: bool = True, indent: int = 0):
    """Prints a message with an optional level prefix, indentation and color."""
    prefix, color = _LEVEL_STYLES.get(level, _LEVEL_STYLES["NONE"])
    stream = sys.stderr if level == "ERROR" else sys.stdout

    text = message
    if level == "USAGE" and message.lower().startswith("usage:"):
        text = message[len("usage:"):].lstrip() # Prefix already says it
    if use_prefix and prefix:
        text = f"{prefix} {text}"
    if indent:
        text = "  " * indent + text

    if color and _colors_enabled(stream):
        text = f"{color}{text}{Colors.ENDC}"
    print(text, file=stream)
