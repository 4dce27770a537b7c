"""
Detection Client - Upload to the Pothole Detection Server.

Implements DetectionClientInterface with requests. Each submit() sends
exactly one multipart POST to ``<base_url>/detect`` and maps the outcome
to a ProcessedImage or a typed DetectionError.
"""

import requests

from core.errors import DetectionError
from core.models import CapturedImage, Coordinate, ErrorKind, ProcessedImage
from logging_config import get_logger
from providers.interfaces.detection import DetectionClientInterface
from utils.geo import format_degrees
from utils.image_ops import embed_gps_exif, sniff_image_type

logger = get_logger(__name__)

DETECT_PATH = "/detect"


class DetectionClient(DetectionClientInterface):
    """
    Client for the remote detection server.

    Features:
    - Multipart body: file part "image", text fields "latitude"/"longitude"
    - Bounded wait via the configured timeout
    - Optional GPS EXIF stamping of JPEG uploads
    - No automatic retries
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
        embed_gps_exif: bool = False,
    ):
        """
        Initialize the detection client.

        Args:
            base_url: Server address, e.g. "http://192.168.1.15:5000".
            timeout: Connect/read timeout in seconds.
            session: Optional requests.Session (tests mount fake adapters).
            embed_gps_exif: Stamp the coordinate into JPEG EXIF before upload.
        """
        self.url = base_url.rstrip("/") + DETECT_PATH
        self.timeout = timeout
        self._session = session or requests.Session()
        self._embed_gps_exif = embed_gps_exif

    @staticmethod
    def build_fields(coord: Coordinate) -> dict[str, str]:
        """Text form fields for a coordinate."""
        return {
            "latitude": format_degrees(coord.latitude),
            "longitude": format_degrees(coord.longitude),
        }

    def _payload_bytes(self, image: CapturedImage, coord: Coordinate) -> bytes:
        if not (self._embed_gps_exif and image.content_type == "image/jpeg"):
            return image.data
        try:
            return embed_gps_exif(image.data, coord.latitude, coord.longitude)
        except ValueError as e:
            logger.warning(f"Skipping GPS EXIF for {image.filename}: {e}")
            return image.data

    def submit(self, image: CapturedImage, coord: Coordinate) -> ProcessedImage:
        files = {
            "image": (image.filename, self._payload_bytes(image, coord), image.content_type)
        }
        data = self.build_fields(coord)
        logger.info(
            f"Uploading {image.filename} ({len(image.data)} bytes) to {self.url} "
            f"at {data['latitude']},{data['longitude']}"
        )

        try:
            response = self._session.post(
                self.url, files=files, data=data, timeout=self.timeout
            )
            body = response.content
        except requests.RequestException as e:
            logger.warning(f"Detection request failed: {e}")
            raise DetectionError(ErrorKind.NETWORK_ERROR, detail=str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.warning(f"Detection server returned HTTP {response.status_code}")
            raise DetectionError(
                ErrorKind.SERVER_ERROR,
                detail=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        content_type = sniff_image_type(body)
        if content_type is None:
            raise DetectionError(
                ErrorKind.MALFORMED_RESPONSE,
                detail=f"Response body ({len(body or b'')} bytes) is not an image",
            )

        logger.info(f"Received processed image ({content_type}, {len(body)} bytes)")
        return ProcessedImage(data=body, content_type=content_type)
