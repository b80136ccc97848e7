from __future__ import annotations

import numpy as np

from conftest import StubDetector, noise_frame
from src.pipeline.decoder import encode_frame
from src.pipeline.geometry import Resolution
from src.pipeline.pipeline_config import PipelineSettings
from src.pipeline.processor import FrameProcessor
from utils.privacy import blur_region

VGA = Resolution(640, 480)


def _processor(boxes=(), detection="640x480") -> FrameProcessor:
    settings = PipelineSettings("640x480", detection, 30, 5.0)
    return FrameProcessor(settings, StubDetector(boxes))


def test_processes_compressed_frame() -> None:
    source = noise_frame(VGA, seed=1)
    processor = _processor([(100, 100, 50, 50)])

    output = processor.process(encode_frame(source, ext='.png'))

    expected = source.copy()
    expected[100:150, 100:150] = blur_region(source[100:150, 100:150], 5.0)
    assert np.array_equal(output, expected)
    assert processor.stats['processed'] == 1
    assert processor.stats['faces'] == 1
    assert processor.average_ms > 0


def test_malformed_frame_is_skipped_and_processing_continues() -> None:
    processor = _processor()

    assert processor.process(b"garbage") is None
    assert processor.process(encode_frame(noise_frame(VGA), ext='.png')) is not None
    assert processor.stats['skipped'] == 1
    assert processor.stats['processed'] == 1


def test_frame_at_wrong_resolution_is_skipped() -> None:
    processor = _processor()
    wrong = encode_frame(noise_frame(Resolution(320, 240)), ext='.png')

    assert processor.process(wrong) is None
    assert processor.stats['skipped'] == 1


def test_average_is_zero_before_any_frame() -> None:
    assert _processor().average_ms == 0.0
