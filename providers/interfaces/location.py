"""
Location Interface - Device Geolocation.

Defines the platform contract (service state, permission, raw position)
and the provider contract the session controller consumes.
"""

from abc import ABC, abstractmethod
from enum import Enum

from core.models import Coordinate


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DENIED_FOREVER = "denied_forever"

    @classmethod
    def parse(cls, value: str | None) -> "PermissionStatus":
        """Parses a config string, treating unknown values as DENIED."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.DENIED


class LocationAccuracy(str, Enum):
    LOW = "low"
    HIGH = "high"


class LocationPlatform(ABC):
    """
    Interface for the platform's location services.

    Implementations wrap whatever actually produces a position
    (GPS daemon, GeoIP lookup, fixed config value).
    """

    @abstractmethod
    def is_service_enabled(self) -> bool:
        """Returns True if location services are switched on."""
        pass

    @abstractmethod
    def check_permission(self) -> PermissionStatus:
        """Returns the current permission state without prompting."""
        pass

    @abstractmethod
    def request_permission(self) -> PermissionStatus:
        """
        Asks the user for location permission.

        May show a system dialog. Returns the resulting permission state.
        """
        pass

    @abstractmethod
    def get_current_position(
        self, accuracy: LocationAccuracy, timeout: float
    ) -> Coordinate:
        """
        Requests a single fix.

        Args:
            accuracy: Desired accuracy.
            timeout: Upper bound in seconds for the fix.

        Raises:
            PositionError: No fix could be obtained (timeout, hardware).
        """
        pass


class LocationProviderInterface(ABC):
    """Resolves permission state and yields one coordinate per call."""

    @abstractmethod
    def get_current_coordinate(self) -> Coordinate:
        """
        Returns the device's current coordinate.

        Raises:
            LocationFailure: with the kind of the first failed check.
        """
        pass
