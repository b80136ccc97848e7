"""
Process-wide pipeline settings
"""
import math
from collections import namedtuple

from config.settings import CAMERA_SETTINGS, DETECTION_SETTINGS, PRIVACY_SETTINGS
from src.pipeline.errors import ConfigurationError
from src.pipeline.geometry import Resolution


class PipelineSettings(namedtuple('PipelineSettings',
                                  ['capture', 'detection', 'frame_rate', 'blur_intensity'])):
    """
    Immutable settings fixed for the lifetime of the process.

    Args:
        capture: Resolution frames arrive and are displayed at
        detection: Resolution face detection runs at, never larger than capture
        frame_rate: Camera frames per second
        blur_intensity: Gaussian sigma used to blur face regions
    """

    __slots__ = ()

    def __new__(cls, capture, detection, frame_rate, blur_intensity):
        capture = _as_resolution(capture, 'capture')
        detection = _as_resolution(detection, 'detection')

        if not detection.fits_within(capture):
            raise ConfigurationError(
                f"Detection resolution {detection} exceeds capture resolution {capture}"
            )

        if isinstance(frame_rate, bool) or not isinstance(frame_rate, int) or frame_rate <= 0:
            raise ConfigurationError(f"Frame rate must be a positive integer, got {frame_rate!r}")

        try:
            blur_intensity = float(blur_intensity)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Blur intensity must be a number, got {blur_intensity!r}") from None
        if not math.isfinite(blur_intensity) or blur_intensity <= 0:
            raise ConfigurationError(f"Blur intensity must be greater than zero, got {blur_intensity}")

        return super().__new__(cls, capture, detection, frame_rate, blur_intensity)

    @property
    def fast_path(self):
        """True when detection runs at capture resolution and nothing is resized"""
        return self.detection == self.capture

    @property
    def frame_interval(self):
        """Seconds between render ticks"""
        return 1.0 / self.frame_rate

    def __str__(self):
        return (f"capture={self.capture} detection={self.detection} "
                f"fps={self.frame_rate} blur={self.blur_intensity:g}")


def _as_resolution(value, name):
    if isinstance(value, Resolution):
        return value
    if isinstance(value, str):
        return Resolution.parse(value)
    try:
        width, height = value
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {name} resolution: {value!r}") from None
    return Resolution(width, height)


def load_settings(capture=None, detection=None, frame_rate=None, blur_intensity=None):
    """
    Build PipelineSettings from config.settings, with optional overrides

    Args:
        capture: Capture resolution override
        detection: Detection resolution override
        frame_rate: Frame rate override
        blur_intensity: Blur intensity override

    Returns:
        PipelineSettings
    """
    return PipelineSettings(
        capture=capture if capture is not None else CAMERA_SETTINGS['resolution'],
        detection=detection if detection is not None else DETECTION_SETTINGS['resolution'],
        frame_rate=frame_rate if frame_rate is not None else CAMERA_SETTINGS['fps'],
        blur_intensity=(blur_intensity if blur_intensity is not None
                        else PRIVACY_SETTINGS['blur_intensity']),
    )
