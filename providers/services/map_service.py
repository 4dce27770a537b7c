"""
Map Service - Showing the Detection Location.

Implements MapLauncher either by handing a map search URL to the system
browser or by rendering an embedded folium map with a single marker.
"""

import webbrowser
from collections.abc import Callable
from pathlib import Path

import folium

from core.models import Coordinate
from logging_config import get_logger
from providers.interfaces.map import LaunchResult, MapLauncher
from utils.geo import build_map_url

logger = get_logger(__name__)

NO_COORDINATE_MESSAGE = "Location not available"
MARKER_TITLE = "Pothole Detected Here"
MARKER_SNIPPET = "Current Location"


def _missing_coordinate() -> LaunchResult:
    logger.warning("Map launch requested without a resolved coordinate")
    return LaunchResult.failure(NO_COORDINATE_MESSAGE, invalid_usage=True)


def _open_target(opener: Callable[[str], bool], target: str) -> LaunchResult:
    try:
        opened = opener(target)
    except webbrowser.Error as e:
        logger.warning(f"Could not open map {target}: {e}")
        return LaunchResult.failure(f"Could not open map: {e}")
    if opened is False:
        logger.warning(f"No application accepted map target {target}")
        return LaunchResult.failure("No application available to show the map")
    logger.info(f"Opened map: {target}")
    return LaunchResult.success(target)


class ExternalMapLauncher(MapLauncher):
    """Opens the coordinate in an external map application via a search URL."""

    def __init__(self, url_template: str | None = None, opener: Callable[[str], bool] | None = None):
        self._url_template = url_template
        self._opener = opener or webbrowser.open

    def build_url(self, coord: Coordinate) -> str:
        return build_map_url(coord.latitude, coord.longitude, self._url_template)

    def open(self, coord: Coordinate | None) -> LaunchResult:
        if coord is None:
            return _missing_coordinate()
        return _open_target(self._opener, self.build_url(coord))


class EmbeddedMapLauncher(MapLauncher):
    """
    Renders a folium map centered on the coordinate and opens it locally.

    The same HTML is served by the web interface's /map page.
    """

    def __init__(
        self,
        output_dir: str | Path,
        zoom: int = 16,
        opener: Callable[[str], bool] | None = None,
        filename: str = "pothole_map.html",
    ):
        self._output_path = Path(output_dir) / filename
        self._zoom = zoom
        self._opener = opener or webbrowser.open

    def build_map(self, coord: Coordinate) -> folium.Map:
        location = [coord.latitude, coord.longitude]
        fmap = folium.Map(location=location, zoom_start=self._zoom)
        folium.Marker(
            location,
            popup=folium.Popup(f"<b>{MARKER_TITLE}</b><br>{MARKER_SNIPPET}"),
            tooltip=MARKER_TITLE,
        ).add_to(fmap)
        return fmap

    def render_html(self, coord: Coordinate) -> str:
        return self.build_map(coord).get_root().render()

    def open(self, coord: Coordinate | None) -> LaunchResult:
        if coord is None:
            return _missing_coordinate()
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            self._output_path.write_text(self.render_html(coord), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write map file {self._output_path}: {e}")
            return LaunchResult.failure(f"Could not write map file: {e}")
        return _open_target(self._opener, self._output_path.resolve().as_uri())
