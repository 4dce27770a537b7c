"""
Capture Interface - Still Image Acquisition.

Defines the contract for taking one photo per capture session
(camera, file picker, ...).
"""

from abc import ABC, abstractmethod

from core.models import CapturedImage


class CaptureProvider(ABC):
    """
    Interface for still image acquisition.

    Implementations should handle:
    - Opening and releasing the underlying device per call
    - Encoding the picture into transferable bytes
    - Distinguishing user cancellation from device failure
    """

    @abstractmethod
    def capture_image(self) -> CapturedImage | None:
        """
        Takes a single picture.

        Returns:
            CapturedImage, or None when the user cancelled. Cancellation
            is not an error.

        Raises:
            CaptureError: The device could not deliver a picture.
        """
        pass
