"""
Map Interface - Showing a Detection Location.

Defines the contract for opening a map centered on a coordinate.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from core.models import Coordinate, ErrorKind


@dataclass(frozen=True)
class LaunchResult:
    """
    Outcome of a map launch.

    Attributes:
        ok: Whether the map was opened.
        target: URL or file path that was opened.
        error_kind: LAUNCH_FAILURE when ok is False.
        message: Human-readable reason for a failure.
        invalid_usage: True when the launch was refused because no
            coordinate was resolved.
    """

    ok: bool
    target: str | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None
    invalid_usage: bool = False

    @classmethod
    def success(cls, target: str) -> "LaunchResult":
        return cls(ok=True, target=target)

    @classmethod
    def failure(cls, message: str, invalid_usage: bool = False) -> "LaunchResult":
        return cls(
            ok=False,
            error_kind=ErrorKind.LAUNCH_FAILURE,
            message=message,
            invalid_usage=invalid_usage,
        )


class MapLauncher(ABC):
    """
    Interface for map views.

    Implementations either hand the coordinate to an external map
    application or render an embedded map.
    """

    @abstractmethod
    def open(self, coord: Coordinate | None) -> LaunchResult:
        """
        Opens a map centered on coord.

        A missing coordinate is a precondition violation and must be
        reported as a failed LaunchResult, never silently ignored.
        """
        pass
