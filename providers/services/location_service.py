"""
Location Service - Coordinate Resolution.

Implements LocationProviderInterface: walks the service/permission checks
of a LocationPlatform and turns the first failed check into a typed
LocationFailure. One attempt per call, no retries.
"""

from core.errors import LocationFailure, PositionError
from core.models import Coordinate, ErrorKind
from logging_config import get_logger
from providers.interfaces.location import (
    LocationAccuracy,
    LocationPlatform,
    LocationProviderInterface,
    PermissionStatus,
)

logger = get_logger(__name__)


class LocationProvider(LocationProviderInterface):
    def __init__(self, platform: LocationPlatform, timeout: float = 10.0):
        self._platform = platform
        self._timeout = timeout

    def get_current_coordinate(self) -> Coordinate:
        if not self._platform.is_service_enabled():
            raise LocationFailure(ErrorKind.SERVICE_DISABLED)

        permission = self._platform.check_permission()
        if permission == PermissionStatus.DENIED:
            # At most one prompt per call.
            permission = self._platform.request_permission()
            if permission == PermissionStatus.DENIED:
                raise LocationFailure(ErrorKind.PERMISSION_DENIED)

        if permission == PermissionStatus.DENIED_FOREVER:
            raise LocationFailure(ErrorKind.PERMISSION_PERMANENTLY_DENIED)

        try:
            coord = self._platform.get_current_position(
                LocationAccuracy.HIGH, self._timeout
            )
        except PositionError as e:
            logger.warning(f"Position unavailable: {e}")
            raise LocationFailure(ErrorKind.POSITION_UNAVAILABLE, detail=str(e)) from e
        except Exception as e:
            logger.warning(f"Position fix failed: {e}", exc_info=True)
            raise LocationFailure(ErrorKind.POSITION_UNAVAILABLE, detail=str(e)) from e

        if not isinstance(coord, Coordinate):
            raise LocationFailure(
                ErrorKind.POSITION_UNAVAILABLE,
                detail=f"Platform returned {type(coord).__name__}, not a Coordinate",
            )
        logger.debug(f"Resolved coordinate {coord.latitude}, {coord.longitude}")
        return coord
