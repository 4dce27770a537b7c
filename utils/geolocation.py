"""
Location Platforms.

Concrete LocationPlatform backends for machines without a mobile OS
location service. Service state and permission come from configuration;
a prompt callable stands in for the system permission dialog.
"""

from collections.abc import Callable

import requests

from core.errors import PositionError
from core.models import Coordinate
from logging_config import get_logger
from providers.interfaces.location import (
    LocationAccuracy,
    LocationPlatform,
    PermissionStatus,
)

logger = get_logger(__name__)

# Prompt answers: True/False or an explicit PermissionStatus.
PermissionPrompt = Callable[[], "bool | PermissionStatus"]


class ConfiguredLocationPlatform(LocationPlatform):
    """Shared service/permission handling for the configured platforms."""

    def __init__(
        self,
        service_enabled: bool = True,
        permission: PermissionStatus | str = PermissionStatus.GRANTED,
        prompt: PermissionPrompt | None = None,
    ):
        self._service_enabled = service_enabled
        self._permission = (
            permission
            if isinstance(permission, PermissionStatus)
            else PermissionStatus.parse(permission)
        )
        self._prompt = prompt

    def is_service_enabled(self) -> bool:
        return self._service_enabled

    def check_permission(self) -> PermissionStatus:
        return self._permission

    def request_permission(self) -> PermissionStatus:
        if self._permission != PermissionStatus.DENIED:
            return self._permission
        if self._prompt is None:
            logger.debug("No permission prompt configured; permission stays denied")
            return self._permission

        answer = self._prompt()
        if isinstance(answer, PermissionStatus):
            self._permission = answer
        else:
            self._permission = (
                PermissionStatus.GRANTED if answer else PermissionStatus.DENIED
            )
        logger.info(f"Location permission after prompt: {self._permission.value}")
        return self._permission


class FixedLocationPlatform(ConfiguredLocationPlatform):
    """Reports a position taken from configuration (LOCATION_DATA)."""

    def __init__(self, location: dict, **kwargs):
        super().__init__(**kwargs)
        self._location = location

    def get_current_position(
        self, accuracy: LocationAccuracy, timeout: float
    ) -> Coordinate:
        try:
            return Coordinate(self._location["latitude"], self._location["longitude"])
        except (KeyError, TypeError, ValueError) as e:
            raise PositionError(f"Configured location is invalid: {e}") from e


class GeoIPLocationPlatform(ConfiguredLocationPlatform):
    """
    Resolves the position through an HTTP GeoIP lookup.

    Accepts both ``latitude``/``longitude`` and ``lat``/``lon`` response keys.
    Accuracy is city level regardless of the requested accuracy.
    """

    def __init__(self, url: str, session: requests.Session | None = None, **kwargs):
        super().__init__(**kwargs)
        self._url = url
        self._session = session or requests.Session()
        self._session.headers.update(
            {"User-Agent": "PotholeSpotter/1.0 (pothole reporting client)"}
        )

    def get_current_position(
        self, accuracy: LocationAccuracy, timeout: float
    ) -> Coordinate:
        if accuracy == LocationAccuracy.HIGH:
            logger.debug("GeoIP lookup cannot honor high accuracy; using city-level fix")
        try:
            resp = self._session.get(self._url, timeout=timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise PositionError(f"GeoIP lookup failed: {e}") from e
        if not isinstance(data, dict):
            raise PositionError("GeoIP response is not a JSON object")

        lat = data.get("latitude", data.get("lat"))
        lon = data.get("longitude", data.get("lon"))
        if lat is None or lon is None:
            raise PositionError(f"GeoIP response has no coordinates: {sorted(data)}")
        try:
            return Coordinate(float(lat), float(lon))
        except (TypeError, ValueError) as e:
            raise PositionError(f"GeoIP response has invalid coordinates: {e}") from e
