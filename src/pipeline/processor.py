"""
Per-frame processing: decode, blur faces, hand back the display buffer
"""
import time

from src.pipeline.compositor import Compositor
from src.pipeline.decoder import FrameDecoder
from src.pipeline.errors import FrameDecodeError, GeometryError
from utils.logger import get_logger

logger = get_logger(__name__)


class FrameProcessor:
    """Turn compressed camera frames into blurred RGBA frames"""

    def __init__(self, settings, detector, decoder=None):
        """
        Args:
            settings: PipelineSettings
            detector: Face detector
            decoder: FrameDecoder (a default one if None)
        """
        self.compositor = Compositor(settings, detector)
        self.decoder = decoder or FrameDecoder()
        logger.info(
            f"Frame processor ready: {settings} "
            f"({'fast path' if self.compositor.fast_path else 'scaled path'})"
        )

        self.stats = {
            'processed': 0,
            'skipped': 0,
            'faces': 0,
            'last_ms': 0.0,
            'total_ms': 0.0,
        }

    def process(self, data):
        """
        Process one compressed frame

        Args:
            data: Compressed frame bytes

        Returns:
            RGBA buffer at capture resolution, or None if the frame was skipped
        """
        start = time.perf_counter()

        try:
            color = self.decoder.decode(data)
            output = self.compositor.process(color)
        except (FrameDecodeError, GeometryError) as e:
            self.stats['skipped'] += 1
            logger.warning(f"Skipping frame: {e}")
            return None

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        self.stats['processed'] += 1
        self.stats['faces'] += self.compositor.last_stats['blurred']
        self.stats['last_ms'] = elapsed_ms
        self.stats['total_ms'] += elapsed_ms

        logger.debug(
            f"Time {elapsed_ms:.1f} ms "
            f"({self.compositor.last_stats['blurred']} face(s), "
            f"{self.compositor.last_stats['path']} path)"
        )
        return output

    @property
    def average_ms(self):
        if self.stats['processed'] == 0:
            return 0.0
        return self.stats['total_ms'] / self.stats['processed']
