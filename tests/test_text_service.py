"""Tests for services/text_service: width heuristic, wrapping, fonts."""

import pytest

from brandkit.core.errors import AssetNotFoundError
from brandkit.services import text_service
from brandkit.services.text_service import (
    estimate_width,
    fit_font_size,
    load_truetype,
    require_fonts,
    wrap_heuristic,
    wrap_lines,
)

SUBTITLE = "Bespoke hosted AI systems"


def test_estimate_width():
    assert estimate_width("abcd", 10) == pytest.approx(22.0)
    assert estimate_width("", 52) == 0


def test_wrap_subtitle_at_52px():
    block = wrap_heuristic(SUBTITLE, 52, 560)
    assert block.lines == ("Bespoke hosted AI", "systems")
    assert " ".join(block.lines) == SUBTITLE
    for line in block.lines:
        assert estimate_width(line, 52) <= 560 or " " not in line


def test_wrap_never_drops_words_and_lets_long_word_overflow():
    text = "a Supercalifragilisticexpialidocious word"
    lines = wrap_lines(text, 100, lambda s: estimate_width(s, 20))
    assert lines == ["a", "Supercalifragilisticexpialidocious", "word"]
    assert " ".join(lines).split() == text.split()


def test_wrap_single_line_when_it_fits():
    assert wrap_heuristic("Kalyan AI", 72, 1000).lines == ("Kalyan AI",)


def test_wrap_empty_text():
    assert wrap_heuristic("", 52, 560).lines == ()


def test_fit_font_size_steps_down_when_too_wide():
    measure = lambda s: estimate_width(s, 52)  # noqa: E731
    assert fit_font_size(SUBTITLE, 52, 560, 44, measure) == 44
    assert fit_font_size("Short", 52, 560, 44, measure) == 52


def test_require_fonts_missing(tmp_path):
    with pytest.raises(AssetNotFoundError):
        require_fonts([tmp_path / "missing.ttf"])


def test_load_truetype_explicit_missing_path(tmp_path):
    with pytest.raises(AssetNotFoundError):
        load_truetype(20, str(tmp_path / "nope.ttf"))


def test_load_truetype_without_candidates(monkeypatch):
    monkeypatch.setattr(text_service, "REGULAR_FONT_CANDIDATES", ())
    assert load_truetype(20) is None


def test_drawing_font_falls_back_to_default(monkeypatch):
    monkeypatch.setattr(text_service, "BOLD_FONT_CANDIDATES", ())
    font = text_service.drawing_font(24, bold=True)
    assert font.getlength("abc") > 0
