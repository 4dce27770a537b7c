# ------------------------------------------------------------------------------
# Web Interface for the Capture Session
# web/web_interface.py
# ------------------------------------------------------------------------------
from flask import Flask, redirect, render_template_string, url_for

from core.session_states import Ready
from logging_config import get_logger
from web.blueprints.api_v1 import api_v1

logger = get_logger(__name__)

INDEX_TEMPLATE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Pothole Detection</title>
  {% if state.busy %}<meta http-equiv="refresh" content="1">{% endif %}
</head>
<body>
  <h1>Pothole Detection</h1>
  <p class="state state-{{ state.name }}">{{ state.message }}</p>
  {% if is_ready %}
    <img src="{{ url_for('api_v1.get_image', g=state.generation) }}" width="300" alt="Processed image">
    {% if embedded %}
    <p><a href="{{ url_for('map_page') }}">Go to Location</a></p>
    {% else %}
    <form method="post" action="{{ url_for('api_v1.open_map') }}"><button type="submit">Go to Location</button></form>
    {% endif %}
  {% endif %}
  <form method="post" action="{{ url_for('capture') }}">
    <button type="submit" {% if state.busy %}disabled{% endif %}>Open Camera</button>
  </form>
</body>
</html>
"""


def create_web_interface(controller, embedded_map=None):
    """
    Creates the Flask server that renders the controller's session state.

    Args:
        controller: DetectionSessionController driving the session.
        embedded_map: Optional EmbeddedMapLauncher used to render /map.

    Returns:
        dict with the Flask "server" and a "run" function.
    """
    server = Flask(__name__)
    api_v1.controller = controller
    server.register_blueprint(api_v1)

    @server.route("/")
    def index():
        state = controller.state
        return render_template_string(
            INDEX_TEMPLATE,
            state=state,
            is_ready=isinstance(state, Ready),
            embedded=embedded_map is not None,
        )

    @server.route("/capture", methods=["POST"])
    def capture():
        controller.start_capture()
        return redirect(url_for("index"))

    @server.route("/map")
    def map_page():
        state = controller.state
        if not isinstance(state, Ready) or state.coordinate is None:
            return "Location not available", 409
        if embedded_map is None:
            return "Embedded map is not configured", 404
        return embedded_map.render_html(state.coordinate)

    def run(debug=False, host="0.0.0.0", port=8050):
        logger.info(f"Starting web interface on http://{host}:{port}")
        server.run(host=host, port=port, debug=debug, use_reloader=False)

    return {"server": server, "run": run}
