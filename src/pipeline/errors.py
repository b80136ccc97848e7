"""
Error types raised by the face blur pipeline
"""


class PipelineError(Exception):
    """Base class for all pipeline errors"""


class ConfigurationError(PipelineError, ValueError):
    """Settings rejected before the pipeline starts"""


class StartupError(PipelineError):
    """Detector, camera or display could not be brought up"""


class CameraReadError(PipelineError):
    """The camera did not deliver a frame"""


class FrameDecodeError(PipelineError):
    """Compressed frame bytes could not be decoded"""


class GeometryError(PipelineError):
    """A frame does not have the shape the pipeline was configured for"""
