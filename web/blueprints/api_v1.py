"""
API v1 Blueprint.

JSON endpoints under /api/v1/* that let a front end drive and observe the
capture session:
- GET /api/v1/state - Current session state snapshot
- POST /api/v1/capture - Start a new capture cycle
- GET /api/v1/image - Processed image of a Ready session
- POST /api/v1/map/open - Open the map for a Ready session

The session controller is attached as ``api_v1.controller`` by
create_web_interface().
"""

from flask import Blueprint, Response, jsonify

from core.session_states import Ready
from logging_config import get_logger

logger = get_logger(__name__)

# Create Blueprint
api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")
api_v1.controller = None


def _controller():
    if api_v1.controller is None:
        raise RuntimeError("api_v1.controller is not set")
    return api_v1.controller


@api_v1.route("/state", methods=["GET"])
def get_state():
    return jsonify(_controller().state.to_dict())


@api_v1.route("/capture", methods=["POST"])
def start_capture():
    controller = _controller()
    generation = controller.start_capture()
    logger.info(f"Capture requested via API (session {generation})")
    return jsonify({"generation": generation, "state": controller.state.name}), 202


@api_v1.route("/image", methods=["GET"])
def get_image():
    state = _controller().state
    if not isinstance(state, Ready) or state.processed_image is None:
        return jsonify({"error": "No processed image available", "state": state.name}), 404
    image = state.processed_image
    return Response(
        image.data,
        mimetype=image.content_type or "application/octet-stream",
        headers={"Cache-Control": "no-store"},
    )


@api_v1.route("/map/open", methods=["POST"])
def open_map():
    result = _controller().open_map()
    payload = {"ok": result.ok, "target": result.target, "message": result.message}
    if result.ok:
        return jsonify(payload)
    return jsonify(payload), 409 if result.invalid_usage else 502
