"""Tests for services/bounds_service: detection, padding, trim."""

import numpy as np
import pytest
from PIL import Image

from brandkit.core.errors import NoContentError
from brandkit.models.image_model import BoundingBox
from brandkit.services.bounds_service import BoundsService


def test_detect_rectangle(mark_image):
    box = BoundsService().detect_content_bounds(mark_image)
    assert box == BoundingBox(40, 30, 159, 89)


def test_near_white_and_transparent_pixels_are_background():
    img = Image.new("RGBA", (20, 20), (255, 255, 255, 255))
    img.putpixel((3, 3), (0, 0, 0, 0))
    img.putpixel((4, 4), (221, 230, 255, 255))
    assert BoundsService().detect_content_bounds(img) is None


def test_threshold_is_configurable():
    img = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    img.putpixel((7, 2), (230, 230, 230, 255))
    service = BoundsService()
    assert service.detect_content_bounds(img, threshold=220) is None
    assert service.detect_content_bounds(img, threshold=240) == BoundingBox(7, 2, 7, 2)


def test_single_pixel_gives_zero_extent_box():
    img = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    img.putpixel((5, 6), (10, 10, 10, 255))
    box = BoundsService().detect_content_bounds(img)
    assert (box.width, box.height) == (0, 0)
    padded = box.padded(0.5, 10, 10)
    assert padded == box


def test_padding_is_clamped_to_image():
    box = BoundingBox(0, 2, 9, 9)
    padded = BoundsService().pad_bounds(box, 0.5, 10, 10)
    assert padded == BoundingBox(0, 0, 9, 9)


def test_padding_expands_by_ratio():
    box = BoundingBox(100, 100, 199, 149)
    padded = box.padded(0.1, 400, 400)
    assert padded == BoundingBox(90, 95, 209, 154)


def test_padding_rounds_half_up():
    box = BoundingBox(100, 100, 150, 150)
    assert box.padded(0.01, 400, 400) == BoundingBox(99, 99, 151, 151)
    assert BoundingBox(0, 0, 250, 250).padded(0.01, 400, 400) == BoundingBox(0, 0, 253, 253)


def test_trim_crops_to_padded_box(mark_image):
    trimmed = BoundsService().trim(mark_image, padding_ratio=0.0)
    assert trimmed.size == (120, 60)
    assert trimmed.mode == "RGBA"


def test_trim_without_content_raises():
    blank = Image.new("RGBA", (32, 32), (255, 255, 255, 0))
    with pytest.raises(NoContentError):
        BoundsService().trim(blank)


def test_random_buffers_box_encloses_every_foreground_pixel():
    rng = np.random.default_rng(7)
    service = BoundsService()
    for _ in range(20):
        arr = np.zeros((24, 31, 4), dtype=np.uint8)
        arr[:, :, :3] = 255
        arr[:, :, 3] = 255
        for _ in range(rng.integers(1, 6)):
            y, x = rng.integers(0, 24), rng.integers(0, 31)
            arr[y, x] = (rng.integers(0, 200), 40, 40, 255)
        img = Image.fromarray(arr)
        box = service.detect_content_bounds(img)
        ys, xs = np.nonzero(service.foreground_mask(img))
        assert box is not None
        assert box.min_x == xs.min() and box.max_x == xs.max()
        assert box.min_y == ys.min() and box.max_y == ys.max()
        padded = box.padded(0.3, img.width, img.height)
        assert padded.min_x >= 0 and padded.min_y >= 0
        assert padded.max_x < img.width and padded.max_y < img.height


def test_bounding_box_rejects_inverted_coordinates():
    with pytest.raises(ValueError):
        BoundingBox(5, 0, 4, 0)
