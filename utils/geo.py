"""Coordinate formatting and map URL helpers."""

from urllib.parse import quote

import numpy as np

DEFAULT_MAP_URL_TEMPLATE = (
    "https://www.google.com/maps/search/?api=1&query={latitude},{longitude}"
)


def format_degrees(value: float) -> str:
    """
    Format a coordinate component as a plain decimal string.

    Locale independent and never truncated: the shortest digit string
    that round-trips to the same float, without exponent notation.
    """
    return np.format_float_positional(float(value), unique=True, trim="-")


def build_map_url(latitude: float, longitude: float, template: str | None = None) -> str:
    """
    Build a map search URL for a coordinate.

    The template receives ``latitude`` and ``longitude`` as formatted,
    URL-safe decimal strings.
    """
    template = template or DEFAULT_MAP_URL_TEMPLATE
    return template.format(
        latitude=quote(format_degrees(latitude), safe="-."),
        longitude=quote(format_degrees(longitude), safe="-."),
    )
