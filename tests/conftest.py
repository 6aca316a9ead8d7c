"""Pytest fixtures: clean BRANDKIT_* environment and synthetic marks."""

from dataclasses import replace

import pytest
from PIL import Image, ImageDraw

from brandkit.models.asset_config import REVISIONS

MARK_COLOR = (90, 40, 200, 255)


@pytest.fixture(autouse=True)
def env_cleanup(monkeypatch):
    """Avoid picking up a developer's BRANDKIT_* overrides."""
    for name in (
        "BRANDKIT_REVISION",
        "BRANDKIT_PUBLIC_DIR",
        "BRANDKIT_CONTENT_SCALE",
        "BRANDKIT_TEXT_STRATEGY",
        "BRANDKIT_FONT_REGULAR",
        "BRANDKIT_FONT_BOLD",
        "BRANDKIT_LOG_LEVEL",
        "BRANDKIT_LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


def make_mark(size=(200, 120), box=(40, 30, 159, 89), color=MARK_COLOR):
    """Transparent canvas with one filled rectangle (inclusive box) and a near-white smudge."""
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle(box, fill=color)
    draw.rectangle((0, 0, 5, 5), fill=(250, 250, 250, 255))
    return img


@pytest.fixture
def mark_image():
    return make_mark()


@pytest.fixture
def public_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture
def raster_config(public_dir, mark_image):
    """v5 revision reading a PNG mark, so the suite never needs Cairo."""
    mark_image.save(public_dir / "ai-mark.png")
    return replace(REVISIONS["v5"], source_name="ai-mark.png", public_dir=public_dir)
