# mindmap_canvas/config.py
"""Geometry constants and storage defaults shared by the core and the shells."""

# --- Node geometry ---
DEFAULT_RADIUS = 40.0          # Radius of a new root / inserted parent
CHILD_RADIUS_FACTOR = 1.2      # Children start at DEFAULT_RADIUS / this
MIN_RADIUS = 10.0              # Absolute floor, leaves included
PARENT_PADDING = 20.0          # Extra space a parent keeps around its children
SIZE_STEP = 10.0               # Grow / shrink increment
OFFSET_STEP = 60.0             # Successive roots step down-right by this much
ORIGIN_X = 150.0               # First node on a blank map
ORIGIN_Y = 150.0

# --- Label geometry (renderer) ---
CHAR_WIDTH = 8                 # Approx. px per character
LABEL_PADDING = 20             # Horizontal padding inside the label rectangle
LABEL_HEIGHT = 20
LABEL_GAP = 5                  # Gap between circle top and label

# --- Storage ---
DEFAULT_DATA_SUBDIR_NAME = "data"
DEFAULT_FILENAME = "my_canvas.json"
FILEPATH_ENV_VAR = "MINDMAP_CANVAS_FILE"

# Blob keys; a saved map is one JSON object holding all three.
NODES_KEY = "mindmap-nodes"
LAST_ADDED_KEY = "mindmap-lastAddedId"
NEXT_ID_KEY = "mindmap-nextNodeId"
