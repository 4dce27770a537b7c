# ------------------------------------------------------------------------------
# Main Script for Pothole Capture, Location and Detection Upload
# main.py
# ------------------------------------------------------------------------------
import json

from config import get_config
from logging_config import get_logger

logger = get_logger(__name__)

from camera.still_capture import StillCamera
from core.session_controller import DetectionSessionController
from providers.services import (
    CameraCaptureProvider,
    DetectionClient,
    EmbeddedMapLauncher,
    ExternalMapLauncher,
    FileCaptureProvider,
    LocationProvider,
)
from utils.geolocation import FixedLocationPlatform, GeoIPLocationPlatform


def build_location_platform(config):
    common = {
        "service_enabled": config["LOCATION_SERVICE_ENABLED"],
        "permission": config["LOCATION_PERMISSION"],
    }
    if config["LOCATION_SOURCE"] == "geoip":
        return GeoIPLocationPlatform(config["GEOIP_URL"], **common)
    if config["LOCATION_SOURCE"] != "fixed":
        logger.warning(f"Unknown LOCATION_SOURCE '{config['LOCATION_SOURCE']}', using fixed")
    return FixedLocationPlatform(config["LOCATION_DATA"], **common)


def build_capture_provider(config):
    if config["CAPTURE_SOURCE"] == "file":
        capture_file = config["CAPTURE_FILE"]
        return FileCaptureProvider(lambda: capture_file or None)
    return CameraCaptureProvider(
        StillCamera(config["VIDEO_SOURCE"]), jpeg_quality=config["JPEG_QUALITY"]
    )


def build_map_launcher(config):
    if config["MAP_MODE"] == "embedded":
        return EmbeddedMapLauncher(config["OUTPUT_DIR"], zoom=config["MAP_ZOOM"])
    return ExternalMapLauncher(config["MAP_URL_TEMPLATE"])


def build_controller(config, map_launcher=None):
    """Wires the session controller with the collaborators selected in config."""
    return DetectionSessionController(
        capture_provider=build_capture_provider(config),
        location_provider=LocationProvider(
            build_location_platform(config), timeout=config["LOCATION_TIMEOUT"]
        ),
        detection_client=DetectionClient(
            config["DETECTION_SERVER_URL"],
            timeout=config["UPLOAD_TIMEOUT"],
            embed_gps_exif=config["EMBED_GPS_EXIF"],
        ),
        map_launcher=map_launcher or build_map_launcher(config),
    )


def create_app():
    """WSGI factory, e.g. ``waitress-serve --call main:create_app``."""
    return _create_interface(get_config())["server"]


def _create_interface(config):
    from web.web_interface import create_web_interface

    map_launcher = build_map_launcher(config)
    controller = build_controller(config, map_launcher=map_launcher)
    embedded_map = map_launcher if isinstance(map_launcher, EmbeddedMapLauncher) else None
    return create_web_interface(controller, embedded_map=embedded_map)


if __name__ == "__main__":
    config = get_config()
    _debug = config["DEBUG_MODE"]
    logger.info(f"Debug mode is {'enabled' if _debug else 'disabled'}.")
    logger.info(f"Configuration: {json.dumps(config, indent=2)}")

    interface = _create_interface(config)
    try:
        interface["run"](debug=_debug, host=config["WEB_HOST"], port=config["WEB_PORT"])
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received. Shutting down...")
