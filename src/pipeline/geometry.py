"""
Resolutions and bounding boxes, and mapping boxes between coordinate spaces
"""
import math
import re
from collections import namedtuple

from src.pipeline.errors import ConfigurationError

_RESOLUTION_PATTERN = re.compile(r'^\s*(\d+)\s*[xX×]\s*(\d+)\s*$')


class Resolution(namedtuple('Resolution', ['width', 'height'])):
    """Immutable width/height pair; equal resolutions compare equal"""

    __slots__ = ()

    def __new__(cls, width, height):
        if isinstance(width, bool) or isinstance(height, bool):
            raise ConfigurationError(f"Invalid resolution: {width}x{height}")
        try:
            w, h = int(width), int(height)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid resolution: {width}x{height}") from None
        if w != width or h != height or w <= 0 or h <= 0:
            raise ConfigurationError(
                f"Resolution must be positive integers, got {width}x{height}"
            )
        return super().__new__(cls, w, h)

    @classmethod
    def parse(cls, text):
        """Parse a 'WIDTHxHEIGHT' string such as '640x480'"""
        match = _RESOLUTION_PATTERN.match(str(text))
        if not match:
            raise ConfigurationError(f"Expected WIDTHxHEIGHT, got {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, buffer):
        """Resolution of a numpy pixel buffer"""
        height, width = buffer.shape[:2]
        return cls(width, height)

    @property
    def shape(self):
        """(height, width), the numpy row/column order"""
        return (self.height, self.width)

    def fits_within(self, other):
        return self.width <= other.width and self.height <= other.height

    def __str__(self):
        return f"{self.width}x{self.height}"


class BoundingBox(namedtuple('BoundingBox', ['x', 'y', 'width', 'height'])):
    """
    Axis-aligned box in the pixel space of the buffer it was found on.

    Boxes come straight from the detector and may reach outside the
    buffer; call clamp() before using one to index pixels.
    """

    __slots__ = ()

    @property
    def right(self):
        return self.x + self.width

    @property
    def bottom(self):
        return self.y + self.height

    def clamp(self, resolution):
        """
        Intersect the box with a buffer of the given resolution

        Returns:
            BoundingBox inside the buffer, or None if nothing is left
        """
        x1 = min(max(int(self.x), 0), resolution.width)
        y1 = min(max(int(self.y), 0), resolution.height)
        x2 = min(max(int(self.right), 0), resolution.width)
        y2 = min(max(int(self.bottom), 0), resolution.height)

        if x2 <= x1 or y2 <= y1:
            return None
        return BoundingBox(x1, y1, x2 - x1, y2 - y1)

    def scale(self, source, target):
        """
        Map the box from one resolution's pixel space to another's.

        The result covers every target pixel whose sample point falls
        inside the box, so it may be a pixel larger than the exact image
        of the box.
        """
        sx = target.width / source.width
        sy = target.height / source.height
        x1 = math.floor(self.x * sx)
        y1 = math.floor(self.y * sy)
        x2 = math.ceil(self.right * sx)
        y2 = math.ceil(self.bottom * sy)
        return BoundingBox(x1, y1, x2 - x1, y2 - y1)

    def slices(self):
        """Row and column slices for numpy indexing"""
        return (slice(self.y, self.bottom), slice(self.x, self.right))
