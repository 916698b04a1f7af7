# mindmap_canvas/web/api.py
import logging
from typing import Optional
from flask import Flask, Response, request, jsonify
from flask_cors import CORS # For Cross-Origin Resource Sharing

from ..commands_core import (
    CommandStatus,
    add_root_action,
    add_child_action,
    insert_parent_action,
    delete_subtree_action,
    resize_action,
    move_action,
    select_action,
    clear_all_action,
)
from ..render import render_svg
from ..session import MapSession
from ..storage import JsonFileStorage

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app) # This will enable CORS for all routes

# One session per process; each request runs to completion before the next.
api_session: Optional[MapSession] = None

HTTP_STATUS = {
    CommandStatus.SUCCESS: 200,
    CommandStatus.NOT_FOUND: 404,
    CommandStatus.NO_SELECTION: 409,
    CommandStatus.INVALID_OPERATION: 400,
    CommandStatus.ERROR: 500,
}

def get_session() -> MapSession:
    global api_session
    if api_session is None:
        api_session = MapSession(JsonFileStorage())
        logger.info("API session opened on %s", api_session.storage.filepath)
    return api_session

def map_snapshot(session: MapSession) -> dict:
    """Whole map for the client: nodes in draw order, counters and selection."""
    data = session.store.to_dict()
    data["order"] = session.store.all_ids()
    data["selected_node_id"] = session.selected_node_id
    return data

def respond(status: str, msg: str, created: bool = False, **extra):
    session = get_session()
    http_status = HTTP_STATUS.get(status, 400)
    if status == CommandStatus.SUCCESS and created:
        http_status = 201
    body = {"status": status, "message": msg, **extra}
    if status == CommandStatus.SUCCESS:
        body["map"] = map_snapshot(session)
    return jsonify(body), http_status

def _json_body() -> dict:
    return request.get_json(silent=True) or {}

def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None

# --- API Endpoints ---

@app.route('/map', methods=['GET'])
def api_get_map():
    session = get_session()
    return jsonify({"status": CommandStatus.SUCCESS, "message": "Current map data.", "map": map_snapshot(session)}), 200

@app.route('/map.svg', methods=['GET'])
def api_get_svg():
    session = get_session()
    return Response(render_svg(session.store, session.selected_node_id), mimetype="image/svg+xml")

@app.route('/map/reset', methods=['POST'])
def api_reset_map():
    if not _json_body().get('confirm'):
        return jsonify({"status": CommandStatus.INVALID_OPERATION, "message": "Send {\"confirm\": true} to erase the map."}), 400
    status, _, msg = clear_all_action(get_session())
    return respond(status, msg)

@app.route('/node/root', methods=['POST'])
def api_add_root():
    data = _json_body()
    status, node, msg = add_root_action(get_session(), data.get('label'))
    return respond(status, msg, created=True, node_id=node.id if node else None)

@app.route('/node/child', methods=['POST'])
def api_add_child():
    data = _json_body()
    try:
        parent_id = _optional_int(data.get('parent_id'))
    except (TypeError, ValueError):
        return jsonify({"status": CommandStatus.INVALID_OPERATION, "message": "'parent_id' must be an integer."}), 400
    status, node, msg = add_child_action(get_session(), data.get('label'), parent_id)
    return respond(status, msg, created=True, node_id=node.id if node else None)

@app.route('/node/parent', methods=['POST'])
def api_insert_parent():
    data = _json_body()
    try:
        child_id = _optional_int(data.get('child_id'))
    except (TypeError, ValueError):
        return jsonify({"status": CommandStatus.INVALID_OPERATION, "message": "'child_id' must be an integer."}), 400
    status, node, msg = insert_parent_action(get_session(), data.get('label'), child_id)
    return respond(status, msg, created=True, node_id=node.id if node else None)

@app.route('/node/delete', methods=['POST'])
def api_delete_selected():
    status, deleted, msg = delete_subtree_action(get_session())
    return respond(status, msg, deleted=sorted(deleted) if deleted else [])

@app.route('/node/<int:node_id>', methods=['DELETE'])
def api_delete_node(node_id: int):
    status, deleted, msg = delete_subtree_action(get_session(), node_id)
    return respond(status, msg, deleted=sorted(deleted) if deleted else [])

@app.route('/node/<int:node_id>/select', methods=['POST'])
def api_select_node(node_id: int):
    status, selected, msg = select_action(get_session(), node_id)
    return respond(status, msg, selected_node_id=selected)

@app.route('/node/resize', methods=['POST'])
def api_resize_node():
    data = _json_body()
    try:
        delta = float(data.get('delta', 0))
        node_id = _optional_int(data.get('node_id'))
    except (TypeError, ValueError):
        return jsonify({"status": CommandStatus.INVALID_OPERATION, "message": "'delta' must be a number and 'node_id' an integer."}), 400
    status, _, msg = resize_action(get_session(), delta, node_id)
    return respond(status, msg)

@app.route('/node/<int:node_id>/move', methods=['POST'])
def api_move_node(node_id: int):
    data = _json_body()
    try:
        x, y = float(data['x']), float(data['y'])
    except (KeyError, TypeError, ValueError):
        return jsonify({"status": CommandStatus.INVALID_OPERATION, "message": "Missing or invalid 'x'/'y' in request body"}), 400
    status, _, msg = move_action(get_session(), node_id, x, y)
    return respond(status, msg)

@app.route('/status', methods=['GET'])
def api_status_check():
    """A simple endpoint to check if the API is running."""
    return jsonify({"status": "ok", "message": "MindMap Canvas API is running."}), 200


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    get_session()
    app.run(debug=True, host='0.0.0.0', port=5001)
