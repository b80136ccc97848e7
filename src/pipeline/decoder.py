"""
Frame decoding: compressed camera bytes to RGBA and luminance buffers
"""
import cv2
import numpy as np

from src.pipeline.errors import FrameDecodeError


class FrameDecoder:
    """Decode compressed frames (MJPEG/JPEG/PNG) into pixel buffers"""

    def decode(self, data):
        """
        Decode compressed bytes into an RGBA buffer

        Args:
            data: Compressed frame bytes

        Returns:
            numpy array of shape (height, width, 4), dtype uint8
        """
        if data is None or len(data) == 0:
            raise FrameDecodeError("Empty frame buffer")

        encoded = np.frombuffer(data, dtype=np.uint8)
        try:
            image = cv2.imdecode(encoded, cv2.IMREAD_COLOR)
        except cv2.error as e:
            raise FrameDecodeError(f"Failed to decode frame: {e}") from e

        if image is None:
            raise FrameDecodeError(f"Failed to decode frame ({len(data)} bytes)")

        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)

    @staticmethod
    def luminance(color):
        """Single-channel luminance buffer derived from an RGBA buffer"""
        return cv2.cvtColor(color, cv2.COLOR_RGBA2GRAY)


def encode_frame(rgba, ext='.jpg', quality=90):
    """
    Compress an RGBA buffer, the inverse of FrameDecoder.decode

    Returns:
        bytes
    """
    bgr = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
    params = [cv2.IMWRITE_JPEG_QUALITY, quality] if ext in ('.jpg', '.jpeg') else []
    ok, buffer = cv2.imencode(ext, bgr, params)
    if not ok:
        raise FrameDecodeError(f"Failed to encode frame as {ext}")
    return buffer.tobytes()
