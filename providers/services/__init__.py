"""
Session Collaborator Services.

This package contains concrete implementations of the collaborator interfaces.
Each service encapsulates one external subsystem and can be tested independently.

ARCHITECTURE:
- Services implement interfaces from providers/interfaces/
- Services may use utils/ and camera/ for low-level operations
- DetectionSessionController orchestrates these services
"""

from providers.services.capture_service import CameraCaptureProvider, FileCaptureProvider
from providers.services.detection_client import DetectionClient
from providers.services.location_service import LocationProvider
from providers.services.map_service import EmbeddedMapLauncher, ExternalMapLauncher

__all__ = [
    "CameraCaptureProvider",
    "DetectionClient",
    "EmbeddedMapLauncher",
    "ExternalMapLauncher",
    "FileCaptureProvider",
    "LocationProvider",
]
