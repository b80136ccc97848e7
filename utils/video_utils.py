"""
Video utilities: camera acquisition, frame hand-off and display
"""
import time
from threading import Condition, Lock, Thread

import cv2

from config.settings import CAMERA_SETTINGS, DISPLAY_SETTINGS, PIPELINE_SETTINGS
from src.pipeline.errors import CameraReadError, StartupError
from src.pipeline.geometry import Resolution
from utils.logger import get_logger

logger = get_logger(__name__)


class CameraStream:
    """Camera that hands out compressed (MJPEG/JPEG) frame bytes"""

    def __init__(self, source=0, resolution=None, frame_rate=None, fourcc=None):
        """
        Initialize camera stream

        Args:
            source: Video source (0 for webcam, device path or stream URL)
            resolution: Requested Resolution
            frame_rate: Requested frames per second
            fourcc: Requested pixel format
        """
        self.source = source
        self.resolution = resolution or Resolution(*CAMERA_SETTINGS['resolution'])
        self.frame_rate = frame_rate or CAMERA_SETTINGS['fps']
        self.fourcc = fourcc or CAMERA_SETTINGS['fourcc']
        self.jpeg_quality = CAMERA_SETTINGS['jpeg_quality']
        self.cap = None
        self.raw = False

    def open(self):
        """
        Open the device and check it delivers the requested format

        Raises:
            StartupError: Device missing or resolution not supported
        """
        self.cap = cv2.VideoCapture(self.source)
        if not self.cap.isOpened():
            self.cap = None
            raise StartupError(f"Unable to open video source: {self.source}")

        self.cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*self.fourcc))
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.frame_rate)

        # Backends that support it return the undecoded MJPEG payload
        self.raw = bool(self.cap.set(cv2.CAP_PROP_CONVERT_RGB, 0))

        actual = Resolution(
            int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or self.resolution.width,
            int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or self.resolution.height,
        )
        if actual != self.resolution:
            self.release()
            raise StartupError(
                f"Video source {self.source} delivers {actual}, requested {self.resolution}"
            )

        fps = self.cap.get(cv2.CAP_PROP_FPS) or self.frame_rate
        logger.info(
            f"Video source initialized: {self.source} "
            f"({actual} @ {fps:g}fps, {self.fourcc}{', raw' if self.raw else ''})"
        )
        return self

    def next_frame(self):
        """
        Block until the next frame arrives

        Returns:
            bytes: Compressed frame
        """
        if self.cap is None:
            raise CameraReadError("Camera is not open")

        ret, frame = self.cap.read()
        if not ret or frame is None or frame.size == 0:
            raise CameraReadError(f"Failed to read frame from {self.source}")

        # Undecoded payload arrives as a single row of bytes
        if frame.ndim == 1 or (frame.ndim == 2 and frame.shape[0] == 1):
            return frame.tobytes()

        if frame.ndim == 3 and frame.shape[2] == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_YUV2BGR_YUYV)

        ok, buffer = cv2.imencode('.jpg', frame, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality])
        if not ok:
            raise CameraReadError("Failed to compress camera frame")
        return buffer.tobytes()

    def release(self):
        """Release the capture device"""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("Video source released")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.release()


class FrameSlot:
    """
    Single-slot hand-off between acquisition and processing.

    A new frame overwrites one that was never taken. Every frame gets a
    sequence number so the reader can skip frames but never go back.
    """

    def __init__(self):
        self._frame = None
        self._sequence = 0
        self._closed = False
        self._dropped = 0
        self._taken = True
        self._condition = Condition(Lock())

    def put(self, frame):
        """Store frame, replacing any frame still waiting"""
        with self._condition:
            if not self._taken:
                self._dropped += 1
            self._frame = frame
            self._sequence += 1
            self._taken = False
            self._condition.notify_all()
            return self._sequence

    def get(self, after=0, timeout=None):
        """
        Wait for a frame newer than sequence number `after`

        Returns:
            (sequence, frame), or None on timeout or once closed and empty
        """
        with self._condition:
            ready = self._condition.wait_for(
                lambda: self._sequence > after or self._closed, timeout=timeout
            )
            if not ready or self._sequence <= after:
                return None
            self._taken = True
            return self._sequence, self._frame

    def close(self):
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    @property
    def closed(self):
        with self._condition:
            return self._closed

    @property
    def dropped(self):
        with self._condition:
            return self._dropped


class AcquisitionThread:
    """Read camera frames in a background thread into a FrameSlot"""

    def __init__(self, camera, slot=None, max_failures=None):
        """
        Args:
            camera: Object with next_frame() -> bytes
            slot: FrameSlot to fill
            max_failures: Consecutive read failures before giving up
        """
        self.camera = camera
        self.slot = slot or FrameSlot()
        self.max_failures = max_failures or PIPELINE_SETTINGS['max_read_failures']
        self.error = None
        self.thread = None
        self.stopped = False

    def start(self):
        """Start the acquisition thread"""
        if self.thread is None or not self.thread.is_alive():
            self.stopped = False
            self.thread = Thread(target=self._update, name='acquisition', daemon=True)
            self.thread.start()
            logger.info("Acquisition thread started")
        return self

    def _update(self):
        """Continuously read frames until stopped"""
        failures = 0
        while not self.stopped:
            try:
                data = self.camera.next_frame()
            except CameraReadError as e:
                failures += 1
                logger.warning(f"{e} ({failures}/{self.max_failures})")
                if failures >= self.max_failures:
                    self.error = e
                    break
                time.sleep(0.01)
                continue
            failures = 0
            self.slot.put(data)
        self.slot.close()

    def stop(self):
        """Stop acquisition and wait for the thread"""
        self.stopped = True
        if self.thread is not None:
            self.thread.join(timeout=2.0)
        self.slot.close()
        logger.info("Acquisition thread stopped")


class FrameSink:
    """OpenCV window that displays RGBA frames"""

    def __init__(self, title=None, resolution=None, quit_keys=None):
        self.title = title or DISPLAY_SETTINGS['window_title']
        self.resolution = resolution
        self.quit_keys = quit_keys or DISPLAY_SETTINGS['quit_keys']
        self.opened = False

    def open(self):
        """
        Create the window

        Raises:
            StartupError: No display available
        """
        try:
            cv2.namedWindow(self.title, cv2.WINDOW_NORMAL)
            if self.resolution is not None:
                cv2.resizeWindow(self.title, self.resolution.width, self.resolution.height)
        except cv2.error as e:
            raise StartupError(f"Unable to create display window: {e}") from e
        self.opened = True
        return self

    def show(self, rgba, wait_ms=1):
        """
        Present a frame and poll the keyboard

        Returns:
            bool: False once the user asked to quit
        """
        cv2.imshow(self.title, cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR))
        key = cv2.waitKey(max(1, int(wait_ms))) & 0xFF
        if key in self.quit_keys:
            logger.info("Quit requested")
            return False
        if cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE) < 1:
            logger.info("Window closed")
            return False
        return True

    def close(self):
        if self.opened:
            cv2.destroyWindow(self.title)
            self.opened = False


class NullSink:
    """Sink that discards frames, for headless runs"""

    def open(self):
        return self

    def show(self, rgba, wait_ms=1):
        if wait_ms > 1:
            time.sleep(wait_ms / 1000.0)
        return True

    def close(self):
        pass


class FpsCounter:
    """Frames per second over one-second windows"""

    def __init__(self):
        self.fps = 0
        self._count = 0
        self._window_start = time.time()

    def tick(self):
        self._count += 1
        now = time.time()
        if now - self._window_start >= 1.0:
            self.fps = self._count
            self._count = 0
            self._window_start = now
        return self.fps
