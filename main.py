"""
Main Application - Live Face Blur
Capture, detect and blur faces, display
"""
import argparse
import sys
import time

from config.settings import (
    CAMERA_SETTINGS, DISPLAY_SETTINGS, LOGGING_SETTINGS, PIPELINE_SETTINGS,
)
from src.detection.face_detector import DetectorConfig, FaceDetector
from src.pipeline.errors import CameraReadError, PipelineError
from src.pipeline.geometry import Resolution
from src.pipeline.pipeline_config import load_settings
from src.pipeline.processor import FrameProcessor
from utils.logger import SystemLogger, get_logger, set_level
from utils.video_utils import (
    AcquisitionThread, CameraStream, FpsCounter, FrameSink, FrameSlot, NullSink,
)

logger = get_logger(__name__)

MODES = ('lockstep', 'decoupled')


class FaceBlurApp:
    """Main application class"""

    def __init__(self, settings, camera, detector, sink, mode=None, max_frames=None):
        """
        Args:
            settings: PipelineSettings
            camera: Opened camera with next_frame() -> bytes
            detector: Face detector
            sink: Opened sink with show(rgba, wait_ms) -> bool
            mode: 'lockstep' or 'decoupled'
            max_frames: Stop after this many displayed frames (None = run forever)
        """
        self.settings = settings
        self.camera = camera
        self.sink = sink
        self.mode = mode or PIPELINE_SETTINGS['mode']
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}")
        self.max_frames = max_frames

        self.processor = FrameProcessor(settings, detector)
        self.fps = FpsCounter()
        self.running = False
        self.frame_count = 0
        self.start_time = None

    def run(self):
        """Run until the user quits, max_frames is reached or the camera fails"""
        logger.info(f"Starting face blur pipeline ({self.mode})...")
        self.running = True
        self.start_time = time.time()
        try:
            if self.mode == 'decoupled':
                self._decoupled_loop()
            else:
                self._lockstep_loop()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self.running = False
            self._print_stats()
        logger.info("Main loop ended")

    def _lockstep_loop(self):
        """Read, process and display one frame at a time"""
        failures = 0
        max_failures = PIPELINE_SETTINGS['max_read_failures']

        while self.running:
            tick_start = time.time()

            try:
                data = self.camera.next_frame()
            except CameraReadError as e:
                failures += 1
                logger.warning(f"{e} ({failures}/{max_failures})")
                if failures >= max_failures:
                    raise
                continue
            failures = 0

            if not self._handle(data, tick_start):
                break

    def _decoupled_loop(self):
        """Process the newest frame the acquisition thread has delivered"""
        acquisition = AcquisitionThread(self.camera, FrameSlot())
        acquisition.start()
        last_sequence = 0

        try:
            while self.running:
                item = acquisition.slot.get(
                    after=last_sequence, timeout=PIPELINE_SETTINGS['slot_timeout']
                )
                if item is None:
                    if acquisition.error is not None:
                        raise acquisition.error
                    if acquisition.slot.closed:
                        break
                    continue

                tick_start = time.time()
                last_sequence, data = item
                if not self._handle(data, tick_start):
                    break
        finally:
            acquisition.stop()
            if acquisition.slot.dropped:
                logger.info(f"Dropped {acquisition.slot.dropped} stale frame(s)")

    def _handle(self, data, tick_start):
        """
        Process and display one frame

        Returns:
            bool: False when the loop should end
        """
        output = self.processor.process(data)
        if output is None:
            return True

        elapsed = time.time() - tick_start
        wait_ms = max(1, int((self.settings.frame_interval - elapsed) * 1000))
        if not self.sink.show(output, wait_ms):
            return False

        self.frame_count += 1
        self.fps.tick()

        if self.frame_count % PIPELINE_SETTINGS['stats_interval'] == 0:
            self._print_stats()

        if self.max_frames is not None and self.frame_count >= self.max_frames:
            logger.info(f"Reached {self.max_frames} frame(s)")
            return False
        return True

    def _print_stats(self):
        """Log pipeline statistics"""
        uptime = time.time() - self.start_time if self.start_time else 0
        stats = self.processor.stats
        logger.info(
            f"Stats - FPS: {self.fps.fps}, "
            f"Frames: {self.frame_count}, "
            f"Skipped: {stats['skipped']}, "
            f"Faces: {stats['faces']}, "
            f"Avg: {self.processor.average_ms:.1f} ms, "
            f"Uptime: {uptime:.1f}s"
        )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Blur faces in a live camera feed")
    parser.add_argument("--source", default=str(CAMERA_SETTINGS['default_source']),
                        help="Camera index, device path or stream URL")
    parser.add_argument("--capture", type=Resolution.parse, default=None,
                        help="Capture resolution, e.g. 1280x720")
    parser.add_argument("--detection", type=Resolution.parse, default=None,
                        help="Detection resolution, e.g. 320x180 (defaults to capture)")
    parser.add_argument("--fps", type=int, default=None, help="Camera frame rate")
    parser.add_argument("--blur", type=float, default=None, help="Blur intensity (Gaussian sigma)")
    parser.add_argument("--model", default=None, help="Face detection cascade model file")
    parser.add_argument("--mode", choices=MODES, default=PIPELINE_SETTINGS['mode'],
                        help="Run capture and processing in lock-step or decoupled")
    parser.add_argument("--no-window", action="store_true", help="Process without displaying")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after N frames")
    parser.add_argument("--log-level", default=LOGGING_SETTINGS['level'],
                        choices=('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'))
    parser.add_argument("--log-file", default=LOGGING_SETTINGS['file'],
                        help="Rotating log file ('' to disable)")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    set_level(args.log_level)
    if args.log_file:
        SystemLogger().add_file(args.log_file)

    source = int(args.source) if args.source.isdigit() else args.source

    camera = None
    sink = None
    try:
        # A capture override without a detection override keeps the fast path
        detection = args.detection
        if detection is None and args.capture is not None:
            detection = args.capture

        settings = load_settings(
            capture=args.capture,
            detection=detection,
            frame_rate=args.fps,
            blur_intensity=args.blur,
        )
        logger.info(f"Settings: {settings}")

        detector = FaceDetector(DetectorConfig(model_path=args.model))

        camera = CameraStream(source, settings.capture, settings.frame_rate).open()

        if args.no_window or not DISPLAY_SETTINGS['show_window']:
            sink = NullSink().open()
        else:
            sink = FrameSink(resolution=settings.capture).open()

        app = FaceBlurApp(settings, camera, detector, sink,
                          mode=args.mode, max_frames=args.max_frames)
        app.run()
    except PipelineError as e:
        logger.error(f"Fatal error: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        print("Please check the logs for more details.", file=sys.stderr)
        return 1
    finally:
        if sink is not None:
            sink.close()
        if camera is not None:
            camera.release()

    return 0


if __name__ == "__main__":
    sys.exit(main())
