"""Typed failures raised by the session collaborators."""

from core.models import ErrorKind, describe_error


class PotholeSpotterError(Exception):
    """Base class for failures that map onto an ErrorKind."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, kind: ErrorKind | None = None, detail: str | None = None):
        if kind is not None:
            self.kind = kind
        self.detail = detail
        super().__init__(detail or describe_error(self.kind))

    @property
    def message(self) -> str:
        return describe_error(self.kind)


class LocationFailure(PotholeSpotterError):
    """The device position could not be resolved."""

    kind = ErrorKind.POSITION_UNAVAILABLE


class CaptureError(PotholeSpotterError):
    """The camera failed to deliver a picture (cancellation is not an error)."""

    kind = ErrorKind.CAPTURE_FAILED


class DetectionError(PotholeSpotterError):
    """An upload to the detection server did not yield an image."""

    kind = ErrorKind.NETWORK_ERROR

    def __init__(
        self,
        kind: ErrorKind | None = None,
        detail: str | None = None,
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(kind, detail)

    @property
    def message(self) -> str:
        return describe_error(self.kind, self.status_code)


class PositionError(Exception):
    """Raised by location platforms when a fix cannot be obtained."""
