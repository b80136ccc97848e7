from __future__ import annotations

import numpy as np
import pytest

from src.pipeline.errors import ConfigurationError
from src.pipeline.geometry import BoundingBox, Resolution


def test_resolutions_compare_structurally() -> None:
    assert Resolution(640, 480) == Resolution(640, 480)
    assert Resolution(640, 480) != Resolution(480, 640)
    assert hash(Resolution(1280, 720)) == hash(Resolution(1280, 720))


@pytest.mark.parametrize("text, expected", [
    ("640x480", Resolution(640, 480)),
    (" 1280 X 720 ", Resolution(1280, 720)),
])
def test_parse_resolution(text: str, expected: Resolution) -> None:
    assert Resolution.parse(text) == expected


@pytest.mark.parametrize("text", ["640", "640x", "x480", "0x480", "-640x480", "abc"])
def test_parse_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ConfigurationError):
        Resolution.parse(text)


@pytest.mark.parametrize("width, height", [(0, 480), (640, -1), (640.5, 480), (True, 480), ("640", 480)])
def test_resolution_must_be_positive_integers(width, height) -> None:
    with pytest.raises(ConfigurationError):
        Resolution(width, height)


def test_resolution_of_buffer_and_shape() -> None:
    buffer = np.zeros((180, 340, 4), dtype=np.uint8)
    resolution = Resolution.of(buffer)

    assert resolution == Resolution(340, 180)
    assert resolution.shape == (180, 340)
    assert str(resolution) == "340x180"


def test_fits_within() -> None:
    assert Resolution(340, 180).fits_within(Resolution(1280, 720))
    assert Resolution(640, 480).fits_within(Resolution(640, 480))
    assert not Resolution(641, 480).fits_within(Resolution(640, 480))
    assert not Resolution(640, 481).fits_within(Resolution(640, 480))


def test_clamp_keeps_box_inside_buffer() -> None:
    box = BoundingBox(10, 20, 30, 40)
    assert box.clamp(Resolution(640, 480)) == box


@pytest.mark.parametrize("box, expected", [
    (BoundingBox(600, 450, 100, 100), BoundingBox(600, 450, 40, 30)),
    (BoundingBox(-10, -5, 30, 30), BoundingBox(0, 0, 20, 25)),
    (BoundingBox(-10, -10, 1000, 1000), BoundingBox(0, 0, 640, 480)),
])
def test_clamp_trims_overhanging_boxes(box: BoundingBox, expected: BoundingBox) -> None:
    assert box.clamp(Resolution(640, 480)) == expected


@pytest.mark.parametrize("box", [
    BoundingBox(640, 0, 10, 10),
    BoundingBox(0, 480, 10, 10),
    BoundingBox(-20, 0, 20, 10),
    BoundingBox(5, 5, 0, 10),
    BoundingBox(5, 5, 10, -3),
])
def test_clamp_returns_none_when_nothing_is_left(box: BoundingBox) -> None:
    assert box.clamp(Resolution(640, 480)) is None


def test_scale_between_resolutions() -> None:
    box = BoundingBox(10, 10, 20, 20)
    scaled = box.scale(Resolution(340, 180), Resolution(1280, 720))

    assert scaled == BoundingBox(37, 40, 76, 80)
    assert box.scale(Resolution(320, 240), Resolution(640, 480)) == BoundingBox(20, 20, 40, 40)


def test_box_edges_and_slices() -> None:
    box = BoundingBox(3, 4, 5, 6)
    assert (box.right, box.bottom) == (8, 10)
    assert box.slices() == (slice(4, 10), slice(3, 8))
