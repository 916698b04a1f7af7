# mindmap_canvas/web/drag_server.py
"""
Live dragging over a websocket.

One connection carries any number of drag gestures. Each gesture is a
"press" on a node, zero or more "move" messages (one per pointer move, each
answered with the updated map so the client can redraw), and a "release",
which is the only point where the map is saved. Releasing over empty canvas
is a normal release. Coordinates are already in canvas space.
"""
import logging
from typing import Any, Dict, Optional
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import Response

from ..errors import NodeNotFoundError
from ..render import render_svg
from ..session import MapSession
from ..storage import JsonFileStorage

logger = logging.getLogger(__name__)

app = FastAPI(title="MindMap Canvas drag server")

ws_session: Optional[MapSession] = None

def get_session() -> MapSession:
    global ws_session
    if ws_session is None:
        ws_session = MapSession(JsonFileStorage())
        logger.info("Drag session opened on %s", ws_session.storage.filepath)
    return ws_session

def _snapshot(session: MapSession) -> Dict[str, Any]:
    data = session.store.to_dict()
    data["selected_node_id"] = session.selected_node_id
    data["dragging_node_id"] = session.dragging_node_id
    return data

def handle_drag_message(session: MapSession, message: Dict[str, Any]) -> Dict[str, Any]:
    """Applies one protocol message and returns the reply to send back."""
    if not isinstance(message, dict):
        return {"status": "error", "message": "Messages must be JSON objects."}
    action = message.get("action")
    try:
        if action == "press":
            session.begin_drag(int(message["node_id"]), float(message["x"]), float(message["y"]))
        elif action == "move":
            if session.drag_to(float(message["x"]), float(message["y"])) is None:
                return {"status": "ignored", "message": "No drag in progress."}
        elif action == "release":
            saved = session.end_drag()
            return {"status": "ok", "saved": saved, "map": _snapshot(session)}
        else:
            return {"status": "error", "message": f"Unknown action '{action}'."}
    except NodeNotFoundError as e:
        return {"status": "not_found", "message": str(e)}
    except (KeyError, TypeError, ValueError) as e:
        return {"status": "error", "message": f"Malformed '{action}' message: {e}"}
    return {"status": "ok", "map": _snapshot(session)}

@app.websocket("/ws/drag")
async def websocket_drag_endpoint(websocket: WebSocket):
    await websocket.accept()
    logger.info("WebSocket connection accepted from: %s", websocket.client)
    session = get_session()
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError as e: # Text frame that is not JSON
                await websocket.send_json({"status": "error", "message": f"Invalid JSON: {e}"})
                continue
            await websocket.send_json(handle_drag_message(session, message))
    except WebSocketDisconnect:
        logger.info("Client %s disconnected.", websocket.client)
    finally:
        # A dropped connection still ends the gesture where it was
        if session.end_drag():
            logger.info("Committed unfinished drag for %s", websocket.client)

@app.get("/map")
async def get_map():
    return _snapshot(get_session())

@app.get("/map.svg")
async def get_map_svg():
    session = get_session()
    return Response(render_svg(session.store, session.selected_node_id), media_type="image/svg+xml")


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "mindmap_canvas.web.drag_server:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
