"""
Capture Service - Still Photo Acquisition.

Implements CaptureProvider on top of the OpenCV still camera or a file
chooser. Provides the session controller with encoded, upload-ready bytes.
"""

import mimetypes
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from camera.still_capture import StillCamera
from core.errors import CaptureError
from core.models import CapturedImage
from logging_config import get_logger
from providers.interfaces.capture import CaptureProvider
from utils.image_ops import encode_jpeg

logger = get_logger(__name__)


class CameraCaptureProvider(CaptureProvider):
    """
    Takes a photo with a camera.

    Features:
    - Optional confirm callback that sees the frame (False = user cancelled)
    - JPEG encoding with configurable quality
    - Timestamped file names
    """

    def __init__(
        self,
        camera: StillCamera,
        jpeg_quality: int = 92,
        confirm: Callable[[object], bool] | None = None,
    ):
        """
        Initialize the capture provider.

        Args:
            camera: StillCamera used for each capture.
            jpeg_quality: JPEG quality 1..100.
            confirm: Optional callback receiving the frame; returning False
                discards it as a cancellation.
        """
        self._camera = camera
        self._jpeg_quality = jpeg_quality
        self._confirm = confirm

    def capture_image(self) -> CapturedImage | None:
        frame = self._camera.grab_frame()

        if self._confirm is not None and not self._confirm(frame):
            logger.info("Capture discarded by user")
            return None

        try:
            data = encode_jpeg(frame, self._jpeg_quality)
        except ValueError as e:
            raise CaptureError(detail=str(e)) from e

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        return CapturedImage(
            data=data, content_type="image/jpeg", filename=f"capture_{timestamp}.jpg"
        )


class FileCaptureProvider(CaptureProvider):
    """Uses an existing image file picked by a chooser callable."""

    def __init__(self, chooser: Callable[[], str | Path | None]):
        self._chooser = chooser

    def capture_image(self) -> CapturedImage | None:
        chosen = self._chooser()
        if not chosen:
            logger.info("No file chosen")
            return None

        path = Path(chosen)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise CaptureError(detail=f"Cannot read {path}: {e}") from e
        if not data:
            raise CaptureError(detail=f"Image file is empty: {path}")

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        logger.debug(f"Picked {path.name} ({content_type}, {len(data)} bytes)")
        return CapturedImage(data=data, content_type=content_type, filename=path.name)
