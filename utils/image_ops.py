import io
import struct

import cv2
import piexif
from PIL import Image, UnidentifiedImageError


def sniff_image_type(data: bytes) -> str | None:
    """
    Returns the MIME type of encoded image bytes, or None if Pillow cannot
    identify them as an image.
    """
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, struct.error):
        return None
    return Image.MIME.get(image_format, f"image/{(image_format or 'unknown').lower()}")


def encode_jpeg(frame, quality: int = 92) -> bytes:
    """
    Encodes a BGR frame as JPEG.

    Args:
        frame (np.ndarray): The source frame.
        quality (int): JPEG quality 1..100.

    Returns:
        bytes: The encoded image.

    Raises:
        ValueError: If OpenCV cannot encode the frame.
    """
    quality = max(1, min(100, int(quality)))
    ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not ok:
        raise ValueError("cv2.imencode failed to encode frame as JPEG")
    return buffer.tobytes()


def degrees_to_dms_rational(degrees_float):
    """
    Converts decimal degrees to DMS rational format for EXIF.

    Args:
        degrees_float (float): Decimal degree value.

    Returns:
        list: DMS rational format [(deg,1),(min,1),(sec*1000,1000)].
    """
    degrees_float = abs(degrees_float)
    degrees = int(degrees_float)
    minutes_float = (degrees_float - degrees) * 60
    minutes = int(minutes_float)
    seconds_float = (minutes_float - minutes) * 60
    seconds_int = max(0, int(seconds_float * 1000))
    return [(degrees, 1), (minutes, 1), (seconds_int, 1000)]


def embed_gps_exif(jpeg_bytes: bytes, latitude: float, longitude: float) -> bytes:
    """
    Returns a copy of jpeg_bytes with GPS latitude/longitude EXIF tags.

    Raises:
        ValueError: If the bytes are not a JPEG.
    """
    if not jpeg_bytes.startswith(b"\xff\xd8"):
        raise ValueError("GPS EXIF can only be embedded into JPEG data")
    exif_dict = {"0th": {}, "Exif": {}, "GPS": {}}
    exif_dict["GPS"][piexif.GPSIFD.GPSLatitudeRef] = "N" if latitude >= 0 else "S"
    exif_dict["GPS"][piexif.GPSIFD.GPSLatitude] = degrees_to_dms_rational(latitude)
    exif_dict["GPS"][piexif.GPSIFD.GPSLongitudeRef] = "E" if longitude >= 0 else "W"
    exif_dict["GPS"][piexif.GPSIFD.GPSLongitude] = degrees_to_dms_rational(longitude)
    output = io.BytesIO()
    piexif.insert(piexif.dump(exif_dict), jpeg_bytes, output)
    return output.getvalue()
