from __future__ import annotations

import numpy as np

from src.pipeline.geometry import BoundingBox, Resolution


class StubDetector:
    """Returns fixed boxes and remembers the buffers it was given."""

    def __init__(self, boxes=()):
        self.boxes = [BoundingBox(*box) for box in boxes]
        self.calls = []

    def detect(self, luma):
        self.calls.append(luma.shape)
        return list(self.boxes)


def noise_frame(resolution: Resolution, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    frame = rng.integers(0, 256, size=(resolution.height, resolution.width, 4), dtype=np.uint8)
    frame[..., 3] = 255
    return frame


def solid_frame(resolution: Resolution, value: int) -> np.ndarray:
    frame = np.full((resolution.height, resolution.width, 4), value, dtype=np.uint8)
    frame[..., 3] = 255
    return frame
