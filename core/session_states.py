"""
Session States.

Each state is an immutable snapshot of what the user currently sees.
The controller replaces its state object on every transition; states are
never updated in place. ``generation`` identifies the capture cycle that
produced the state.
"""

from dataclasses import dataclass
from typing import ClassVar

from core.models import Coordinate, ErrorKind, ProcessedImage, describe_error


@dataclass(frozen=True)
class SessionState:
    generation: int = 0

    name: ClassVar[str] = "base"
    busy: ClassVar[bool] = False
    status_message: ClassVar[str] = ""

    @property
    def message(self) -> str:
        return self.status_message

    @property
    def coordinate(self) -> Coordinate | None:
        return None

    def to_dict(self) -> dict:
        coord = self.coordinate
        return {
            "state": self.name,
            "generation": self.generation,
            "busy": self.busy,
            "message": self.message,
            "latitude": coord.latitude if coord else None,
            "longitude": coord.longitude if coord else None,
            "error_kind": None,
            "status_code": None,
            "has_image": False,
        }


@dataclass(frozen=True)
class Idle(SessionState):
    name: ClassVar[str] = "idle"
    status_message: ClassVar[str] = "Capture an image to detect potholes"


@dataclass(frozen=True)
class Capturing(SessionState):
    name: ClassVar[str] = "capturing"
    busy: ClassVar[bool] = True
    status_message: ClassVar[str] = "Waiting for the camera..."


@dataclass(frozen=True)
class Locating(SessionState):
    name: ClassVar[str] = "locating"
    busy: ClassVar[bool] = True
    status_message: ClassVar[str] = "Getting your location..."


@dataclass(frozen=True)
class Uploading(SessionState):
    resolved_coordinate: Coordinate | None = None

    name: ClassVar[str] = "uploading"
    busy: ClassVar[bool] = True
    status_message: ClassVar[str] = "Detecting potholes..."

    @property
    def coordinate(self) -> Coordinate | None:
        return self.resolved_coordinate


@dataclass(frozen=True)
class Ready(SessionState):
    processed_image: ProcessedImage | None = None
    resolved_coordinate: Coordinate | None = None

    name: ClassVar[str] = "ready"
    status_message: ClassVar[str] = "Detection complete"

    @property
    def coordinate(self) -> Coordinate | None:
        return self.resolved_coordinate

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["has_image"] = self.processed_image is not None
        return data


@dataclass(frozen=True)
class Failed(SessionState):
    error_kind: ErrorKind = ErrorKind.UNEXPECTED
    status_code: int | None = None
    detail: str | None = None

    name: ClassVar[str] = "failed"

    @property
    def message(self) -> str:
        return describe_error(self.error_kind, self.status_code)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["error_kind"] = self.error_kind.value
        data["status_code"] = self.status_code
        return data
