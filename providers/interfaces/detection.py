"""
Detection Interface - Remote Pothole Detection.

Defines the contract for submitting a photo and its coordinate to the
detection server.
"""

from abc import ABC, abstractmethod

from core.models import CapturedImage, Coordinate, ProcessedImage


class DetectionClientInterface(ABC):
    """
    Interface for the detection server client.

    Implementations must send exactly one request per submit() and must
    not retry on their own.
    """

    @abstractmethod
    def submit(self, image: CapturedImage, coord: Coordinate) -> ProcessedImage:
        """
        Uploads an image with its coordinate.

        Returns:
            ProcessedImage holding the annotated bytes from the server.

        Raises:
            DetectionError: NETWORK_ERROR, SERVER_ERROR (with status code)
                or MALFORMED_RESPONSE.
        """
        pass
