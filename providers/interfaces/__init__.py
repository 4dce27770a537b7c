"""
Session Collaborator Interfaces.

This package defines the abstract interfaces for the external, fallible
subsystems a capture session coordinates. These interfaces enable:
- Dependency injection into the session controller
- Deterministic testing with fake implementations
- Swapping platform backends through configuration

ARCHITECTURE:
- DetectionSessionController only coordinates these interfaces
- Concrete implementations live in providers/services/
- No direct dependencies between implementations
"""

from providers.interfaces.capture import CaptureProvider
from providers.interfaces.detection import DetectionClientInterface
from providers.interfaces.location import (
    LocationAccuracy,
    LocationPlatform,
    LocationProviderInterface,
    PermissionStatus,
)
from providers.interfaces.map import LaunchResult, MapLauncher

__all__ = [
    # Interfaces
    "CaptureProvider",
    "DetectionClientInterface",
    "LocationPlatform",
    "LocationProviderInterface",
    "MapLauncher",
    # Data Classes / Enums
    "LaunchResult",
    "LocationAccuracy",
    "PermissionStatus",
]
