"""
Session Data Model.

Value objects passed between the capture, location, upload and map
collaborators. All of them are frozen: once a coordinate or an image
exists it is never mutated, only replaced.
"""

import math
from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Client-observable failure kinds."""

    SERVICE_DISABLED = "service_disabled"
    PERMISSION_DENIED = "permission_denied"
    PERMISSION_PERMANENTLY_DENIED = "permission_permanently_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"
    MALFORMED_RESPONSE = "malformed_response"
    CAPTURE_CANCELLED = "capture_cancelled"
    CAPTURE_FAILED = "capture_failed"
    LAUNCH_FAILURE = "launch_failure"
    UNEXPECTED = "unexpected"


ERROR_MESSAGES = {
    ErrorKind.SERVICE_DISABLED: "Location services are disabled.",
    ErrorKind.PERMISSION_DENIED: "Location permissions are denied.",
    ErrorKind.PERMISSION_PERMANENTLY_DENIED: (
        "Location permissions are permanently denied. "
        "Please enable them in settings."
    ),
    ErrorKind.POSITION_UNAVAILABLE: "Failed to get location.",
    ErrorKind.NETWORK_ERROR: (
        "Could not reach the detection server. Check your connection and try again."
    ),
    ErrorKind.SERVER_ERROR: "The detection server rejected the image.",
    ErrorKind.MALFORMED_RESPONSE: "The detection server returned an unreadable image.",
    ErrorKind.CAPTURE_CANCELLED: "Capture cancelled.",
    ErrorKind.CAPTURE_FAILED: "The camera could not take a picture.",
    ErrorKind.LAUNCH_FAILURE: "Location not available.",
    ErrorKind.UNEXPECTED: "Something went wrong. Please try again.",
}


def describe_error(kind: ErrorKind, status_code: int | None = None) -> str:
    """Returns the human-readable message shown for a failure kind."""
    message = ERROR_MESSAGES.get(kind, ERROR_MESSAGES[ErrorKind.UNEXPECTED])
    if kind == ErrorKind.SERVER_ERROR and status_code is not None:
        message = f"{message} (HTTP {status_code})"
    return message


@dataclass(frozen=True)
class Coordinate:
    """
    A single resolved geolocation reading (a "fix").

    Attributes:
        latitude: Decimal degrees, -90..90.
        longitude: Decimal degrees, -180..180.
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        lat = float(self.latitude)
        lon = float(self.longitude)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"Coordinate must be finite: {lat}, {lon}")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude out of range: {lat}")
        if not -180.0 <= lon <= 180.0:
            raise ValueError(f"Longitude out of range: {lon}")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)

    def as_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class CapturedImage:
    """
    Raw bytes of a captured photo, owned by one session.

    Attributes:
        data: Encoded image bytes exactly as captured.
        content_type: MIME type, e.g. "image/jpeg".
        filename: Original file name sent with the upload.
    """

    data: bytes
    content_type: str
    filename: str

    def __repr__(self):
        return (
            f"CapturedImage(filename={self.filename!r}, "
            f"content_type={self.content_type!r}, size={len(self.data)})"
        )


@dataclass(frozen=True)
class ProcessedImage:
    """Annotated image bytes returned by the detection server, rendered as-is."""

    data: bytes
    content_type: str | None = None

    def __repr__(self):
        return f"ProcessedImage(content_type={self.content_type!r}, size={len(self.data)})"
