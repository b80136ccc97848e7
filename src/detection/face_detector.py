"""
Face detection on luminance buffers using an OpenCV cascade classifier
"""
from collections import namedtuple
from pathlib import Path

import cv2
import numpy as np

from config.settings import DETECTION_SETTINGS
from src.pipeline.errors import ConfigurationError, StartupError
from src.pipeline.geometry import BoundingBox
from utils.logger import get_logger

logger = get_logger(__name__)


class DetectorConfig(namedtuple('DetectorConfig', [
        'model_path', 'min_face_size', 'score_threshold',
        'pyramid_scale_factor', 'min_neighbors'])):
    """
    Immutable detector thresholds, fixed at startup

    Args:
        model_path: Cascade XML file (None = configured default)
        min_face_size: Smallest face side in pixels
        score_threshold: Minimum cascade level weight, 0 disables the filter
        pyramid_scale_factor: Shrink factor between pyramid levels, in (0, 1)
        min_neighbors: Overlapping candidates needed to keep a detection
    """

    __slots__ = ()

    def __new__(cls, model_path=None, min_face_size=None, score_threshold=None,
                pyramid_scale_factor=None, min_neighbors=None):
        if min_face_size is None:
            min_face_size = DETECTION_SETTINGS['min_face_size']
        if score_threshold is None:
            score_threshold = DETECTION_SETTINGS['score_threshold']
        if pyramid_scale_factor is None:
            pyramid_scale_factor = DETECTION_SETTINGS['pyramid_scale_factor']
        if min_neighbors is None:
            min_neighbors = DETECTION_SETTINGS['min_neighbors']

        if int(min_face_size) <= 0:
            raise ConfigurationError(f"Minimum face size must be positive, got {min_face_size}")
        if not 0.0 < float(pyramid_scale_factor) < 1.0:
            raise ConfigurationError(
                f"Pyramid scale factor must be between 0 and 1, got {pyramid_scale_factor}"
            )
        if float(score_threshold) < 0:
            raise ConfigurationError(f"Score threshold must not be negative, got {score_threshold}")
        if int(min_neighbors) < 0:
            raise ConfigurationError(f"Minimum neighbors must not be negative, got {min_neighbors}")

        return super().__new__(
            cls,
            str(model_path) if model_path is not None else None,
            int(min_face_size),
            float(score_threshold),
            float(pyramid_scale_factor),
            int(min_neighbors),
        )

    @property
    def cascade_scale_factor(self):
        """Growth factor between detection windows, as OpenCV expects it"""
        return 1.0 / self.pyramid_scale_factor

    def resolve_model_path(self):
        """Explicit model path, or the installed model, or the one shipped with OpenCV"""
        if self.model_path is not None:
            return Path(self.model_path)
        installed = Path(DETECTION_SETTINGS['model_path'])
        if installed.exists():
            return installed
        return Path(DETECTION_SETTINGS['fallback_model_path'])


class FaceDetector:
    """Find face bounding boxes in a luminance buffer"""

    def __init__(self, config=None):
        """
        Load the cascade model

        Args:
            config: DetectorConfig (defaults from config.settings)
        """
        self.config = config or DetectorConfig()
        self.model_path = self.config.resolve_model_path()

        if not self.model_path.is_file():
            raise StartupError(f"Face detection model not found: {self.model_path}")

        try:
            self.cascade = cv2.CascadeClassifier(str(self.model_path))
        except cv2.error as e:
            raise StartupError(f"Failed to load face detection model: {self.model_path}: {e}") from e
        if self.cascade.empty():
            raise StartupError(f"Failed to load face detection model: {self.model_path}")

        logger.info(
            f"Face detector loaded: {self.model_path} "
            f"(min size {self.config.min_face_size}, "
            f"scale {self.config.pyramid_scale_factor}, "
            f"score >= {self.config.score_threshold})"
        )

    def detect(self, luma):
        """
        Detect faces

        Args:
            luma: Grayscale buffer (H, W), uint8

        Returns:
            list: BoundingBox values in luma's pixel space, in detector
                order, not clipped to the buffer
        """
        if luma.ndim != 2:
            raise ValueError(f"Expected a single-channel buffer, got shape {luma.shape}")

        min_size = (self.config.min_face_size, self.config.min_face_size)
        if luma.shape[0] < min_size[1] or luma.shape[1] < min_size[0]:
            return []

        if self.config.score_threshold > 0:
            rects, _, weights = self.cascade.detectMultiScale3(
                luma,
                scaleFactor=self.config.cascade_scale_factor,
                minNeighbors=self.config.min_neighbors,
                minSize=min_size,
                outputRejectLevels=True
            )
            weights = np.asarray(weights, dtype=np.float64).ravel()
            rects = [
                rect for rect, weight in zip(rects, weights)
                if weight >= self.config.score_threshold
            ]
        else:
            rects = self.cascade.detectMultiScale(
                luma,
                scaleFactor=self.config.cascade_scale_factor,
                minNeighbors=self.config.min_neighbors,
                minSize=min_size
            )

        boxes = [BoundingBox(int(x), int(y), int(w), int(h)) for (x, y, w, h) in rects]

        if boxes:
            logger.debug(f"Detected {len(boxes)} face(s)")

        return boxes
