# config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env file.
load_dotenv()

DEFAULT_LOCATION = {"latitude": 52.516, "longitude": 13.377}

_config_cache = None


def _env_bool(name, default):
    return os.getenv(name, str(default)).strip().lower() == "true"


def _env_float(name, default):
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return float(default)


def _env_int(name, default):
    try:
        return int(float(os.getenv(name, default)))
    except (TypeError, ValueError):
        return int(default)


def parse_location(location_str):
    """
    Parses a "lat, lon" string into a location dict.

    Falls back to DEFAULT_LOCATION when the string cannot be parsed.
    """
    try:
        lat_str, lon_str = location_str.split(",")
        return {"latitude": float(lat_str), "longitude": float(lon_str)}
    except (AttributeError, ValueError):
        return dict(DEFAULT_LOCATION)


def load_config():
    """
    Loads configuration from environment variables and returns a dictionary.
    """
    config = {
        # General Settings
        "DEBUG_MODE": _env_bool("DEBUG_MODE", False),
        "OUTPUT_DIR": os.getenv("OUTPUT_DIR", "output"),

        # Detection Server
        "DETECTION_SERVER_URL": os.getenv(
            "DETECTION_SERVER_URL", "http://192.168.1.15:5000"
        ).rstrip("/"),
        "UPLOAD_TIMEOUT": _env_float("UPLOAD_TIMEOUT", 30),
        "EMBED_GPS_EXIF": _env_bool("EMBED_GPS_EXIF", False),

        # GPS Location
        "LOCATION_SOURCE": os.getenv("LOCATION_SOURCE", "fixed").strip().lower(),
        "LOCATION_DATA": parse_location(os.getenv("LOCATION_DATA", "52.516, 13.377")),
        "LOCATION_SERVICE_ENABLED": _env_bool("LOCATION_SERVICE_ENABLED", True),
        "LOCATION_PERMISSION": os.getenv("LOCATION_PERMISSION", "granted").strip().lower(),
        "LOCATION_TIMEOUT": _env_float("LOCATION_TIMEOUT", 10),
        "GEOIP_URL": os.getenv("GEOIP_URL", "https://ipapi.co/json/"),

        # Capture Settings
        "CAPTURE_SOURCE": os.getenv("CAPTURE_SOURCE", "camera").strip().lower(),
        "VIDEO_SOURCE": os.getenv("VIDEO_SOURCE", "0"),
        "CAPTURE_FILE": os.getenv("CAPTURE_FILE", ""),
        "JPEG_QUALITY": _env_int("JPEG_QUALITY", 92),

        # Map Settings
        "MAP_MODE": os.getenv("MAP_MODE", "external").strip().lower(),
        "MAP_URL_TEMPLATE": os.getenv(
            "MAP_URL_TEMPLATE",
            "https://www.google.com/maps/search/?api=1&query={latitude},{longitude}",
        ),
        "MAP_ZOOM": _env_int("MAP_ZOOM", 16),

        # Web Interface
        "WEB_HOST": os.getenv("WEB_HOST", "0.0.0.0"),
        "WEB_PORT": _env_int("WEB_PORT", 8050),
    }
    return config


def get_config():
    """Returns the process-wide configuration, loading it on first use."""
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache


def reset_config():
    """Drops the cached configuration so the next get_config() reloads it."""
    global _config_cache
    _config_cache = None


if __name__ == "__main__":
    # For testing purposes, print the configuration
    config = load_config()
    from pprint import pprint

    pprint(config)
