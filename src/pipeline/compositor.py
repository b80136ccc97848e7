"""
Resolution-adaptive face blurring

Detection can run on a smaller copy of the frame. Boxes found there are
blurred on the small copy and painted onto a transparent sentinel buffer
with a mask of the pixels written. Both are scaled back up and the masked
pixels are merged over the untouched source.
When detection and capture resolutions match, boxes are blurred straight
into a copy of the source instead.
"""
import cv2
import numpy as np

from src.pipeline.decoder import FrameDecoder
from src.pipeline.errors import GeometryError
from src.pipeline.geometry import Resolution
from utils.logger import get_logger
from utils.privacy import blur_box, blur_region

logger = get_logger(__name__)

def resize_nearest(buffer, resolution):
    """Nearest-neighbor resize to resolution"""
    if Resolution.of(buffer) == resolution:
        return buffer.copy()
    return cv2.resize(buffer, (resolution.width, resolution.height),
                      interpolation=cv2.INTER_NEAREST)


def new_sentinel(resolution):
    """
    Fully transparent RGBA buffer and an empty mask of written pixels

    Returns:
        (sentinel, touched)
    """
    sentinel = np.zeros((resolution.height, resolution.width, 4), dtype=np.uint8)
    touched = np.zeros((resolution.height, resolution.width), dtype=np.uint8)
    return sentinel, touched


def merge_sentinel(output, sentinel, touched):
    """
    Copy every sentinel pixel marked in touched over output, in place

    The mask is kept apart from the pixels so a blurred pixel with zero
    alpha is still written.

    Args:
        output: RGBA buffer to modify
        sentinel: RGBA buffer of the same shape
        touched: (H, W) mask, non-zero where the sentinel was written

    Returns:
        int: Number of pixels written
    """
    touched = touched != 0
    output[touched] = sentinel[touched]
    return int(np.count_nonzero(touched))


class Compositor:
    """Blur detected faces in full-resolution RGBA frames"""

    def __init__(self, settings, detector):
        """
        Args:
            settings: PipelineSettings
            detector: Object with detect(luma) -> list of BoundingBox
        """
        self.settings = settings
        self.detector = detector
        self.fast_path = settings.fast_path
        self._process = self._process_fast if self.fast_path else self._process_scaled
        self.last_stats = {'path': None, 'detected': 0, 'blurred': 0}

        logger.debug(
            f"Compositor ready: {settings} "
            f"({'fast path' if self.fast_path else 'scaled path'})"
        )

    def process(self, source):
        """
        Blur every detected face in source

        Args:
            source: RGBA buffer at the capture resolution, left unmodified

        Returns:
            output: New RGBA buffer at the capture resolution
        """
        if source.ndim != 3 or source.shape[2] != 4:
            raise GeometryError(f"Expected an RGBA buffer, got shape {source.shape}")
        if source.dtype != np.uint8:
            raise GeometryError(f"Expected 8-bit pixels, got {source.dtype}")
        resolution = Resolution.of(source)
        if resolution != self.settings.capture:
            raise GeometryError(
                f"Frame is {resolution}, expected capture resolution {self.settings.capture}"
            )
        return self._process(source)

    def _process_fast(self, source):
        output = source.copy()
        resolution = self.settings.capture
        boxes = self.detector.detect(FrameDecoder.luminance(source))

        blurred = 0
        for box in boxes:
            clamped = box.clamp(resolution)
            if clamped is None:
                continue
            blur_box(output, clamped, self.settings.blur_intensity)
            blurred += 1

        self._record('fast', boxes, blurred)
        return output

    def _process_scaled(self, source):
        detection = self.settings.detection
        small = resize_nearest(source, detection)
        boxes = self.detector.detect(FrameDecoder.luminance(small))

        sentinel = touched = None
        blurred = 0
        for box in boxes:
            clamped = box.clamp(detection)
            if clamped is None:
                continue
            if sentinel is None:
                sentinel, touched = new_sentinel(detection)
            rows, cols = clamped.slices()
            sentinel[rows, cols] = blur_region(small[rows, cols], self.settings.blur_intensity)
            touched[rows, cols] = 1
            blurred += 1

        output = source.copy()
        if sentinel is not None:
            capture = self.settings.capture
            merge_sentinel(output, resize_nearest(sentinel, capture),
                           resize_nearest(touched, capture))

        self._record('scaled', boxes, blurred)
        return output

    def _record(self, path, boxes, blurred):
        self.last_stats = {'path': path, 'detected': len(boxes), 'blurred': blurred}
        if len(boxes) != blurred:
            logger.debug(f"Skipped {len(boxes) - blurred} box(es) outside the frame")


def process(settings, detector, source):
    """One-shot form of Compositor(settings, detector).process(source)"""
    return Compositor(settings, detector).process(source)
