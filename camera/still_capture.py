# ------------------------------------------------------------------------------
# Still Capture Class for Single Photos
# camera/still_capture.py
# ------------------------------------------------------------------------------
import time

import cv2

from core.errors import CaptureError
from logging_config import get_logger

logger = get_logger(__name__)


def parse_video_source(source):
    """Converts numeric source strings ("0") to webcam indices."""
    if isinstance(source, str) and source.strip().isdigit():
        return int(source.strip())
    return source


class StillCamera:
    """
    Grabs one frame from a webcam, HTTP or RTSP source per call.

    The device is opened and released on every grab so the camera is not
    held between captures.
    """

    RTSP = "rtsp"
    HTTP = "http"
    WEBCAM = "webcam"

    def __init__(self, source, warmup_frames=5, read_timeout_ms=5000, capture_factory=None):
        self.source = parse_video_source(source)
        self.warmup_frames = max(0, int(warmup_frames))
        self.read_timeout_ms = read_timeout_ms
        self._capture_factory = capture_factory or cv2.VideoCapture
        self.stream_type = self._detect_stream_type()
        logger.debug(
            f"Initialized StillCamera with source: {self.source}, stream_type: {self.stream_type}"
        )

    def _detect_stream_type(self):
        """Determines the stream type based on the source."""
        if isinstance(self.source, str):
            if self.source.startswith("rtsp://"):
                return self.RTSP
            elif self.source.startswith(("http://", "https://")):
                return self.HTTP
        elif isinstance(self.source, int):
            return self.WEBCAM
        raise ValueError(f"Unable to determine stream type for source: {self.source}")

    def _open(self):
        try:
            if self.stream_type == self.RTSP:
                cap = self._capture_factory(self.source, cv2.CAP_FFMPEG)
            else:
                cap = self._capture_factory(self.source)
        except cv2.error as e:
            raise CaptureError(detail=f"Failed to open {self.stream_type} source: {e}") from e
        if not cap.isOpened():
            cap.release()
            raise CaptureError(detail=f"Failed to open {self.stream_type} source: {self.source}")
        if self.stream_type != self.WEBCAM:
            cap.set(cv2.CAP_PROP_OPEN_TIMEOUT_MSEC, self.read_timeout_ms)
            cap.set(cv2.CAP_PROP_READ_TIMEOUT_MSEC, self.read_timeout_ms)
        return cap

    def grab_frame(self):
        """
        Opens the source, discards warm-up frames and returns one BGR frame.

        Raises:
            CaptureError: If the source cannot be opened or read.
        """
        started = time.time()
        cap = self._open()
        try:
            # Auto exposure on webcams needs a few frames to settle.
            for _ in range(self.warmup_frames):
                cap.read()
            ret, frame = cap.read()
        except cv2.error as e:
            raise CaptureError(detail=f"Read failed on source {self.source}: {e}") from e
        finally:
            cap.release()

        if not ret or frame is None:
            raise CaptureError(detail=f"No frame received from source: {self.source}")
        logger.info(
            f"Captured still frame {frame.shape[1]}x{frame.shape[0]} "
            f"in {(time.time() - started) * 1000:.0f} ms"
        )
        return frame
