"""Раскладка текста для соц-карточки.

Две стратегии измерения ширины строки:
- font-metrics: точная ширина по метрикам TrueType-шрифта (`getlength`);
- heuristic: грубая оценка `len(text) * font_size * 0.55`, деградированный
  запасной вариант, допускающий переполнение.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from PIL import ImageFont

from brandkit.core.errors import AssetNotFoundError
from brandkit.models.image_model import TextBlock

log = logging.getLogger(__name__)

CHAR_WIDTH_RATIO = 0.55

REGULAR_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/Library/Fonts/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
)
BOLD_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
)

Measure = Callable[[str], float]


def estimate_width(text: str, font_size: float) -> float:
    return len(text) * font_size * CHAR_WIDTH_RATIO


def wrap_lines(text: str, max_width: float, measure: Measure) -> List[str]:
    """Жадный перенос по словам.

    Слово добавляется к текущей строке, пока ширина не превышает `max_width`;
    одиночное слово шире лимита остаётся на своей строке. Слова не теряются.
    """
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if not current or measure(candidate) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def wrap_heuristic(text: str, font_size: int, max_width: float) -> TextBlock:
    lines = wrap_lines(text, max_width, lambda s: estimate_width(s, font_size))
    return TextBlock(text=text, font_size=font_size, max_width=max_width, lines=tuple(lines))


def fit_font_size(text: str, font_size: int, max_width: float, reduced_size: int, measure: Measure) -> int:
    """Если вся строка не влезает в `max_width`, переходит на `reduced_size`."""
    return reduced_size if measure(text) > max_width else font_size


def require_fonts(paths: Sequence[Path]) -> None:
    for path in paths:
        if not path.is_file():
            raise AssetNotFoundError(f"Шрифт не найден: {path}")


def load_truetype(
    size: int, path: Optional[str] = None, bold: bool = False
) -> Optional[ImageFont.FreeTypeFont]:
    """TrueType-шрифт из явного пути или системных кандидатов; None, если нет ни одного."""
    if path:
        require_fonts([Path(path)])
        return ImageFont.truetype(path, size)
    for candidate in BOLD_FONT_CANDIDATES if bold else REGULAR_FONT_CANDIDATES:
        if Path(candidate).is_file():
            try:
                return ImageFont.truetype(candidate, size)
            except OSError as exc:
                log.debug("Font %s failed: %s", candidate, exc)
    return None


def drawing_font(size: int, path: Optional[str] = None, bold: bool = False):
    """Шрифт для отрисовки: TrueType, иначе встроенный шрифт Pillow."""
    font = load_truetype(size, path, bold)
    if font is not None:
        return font
    log.warning("No TrueType font found, using Pillow default font (size=%d)", size)
    return ImageFont.load_default(size=size)
