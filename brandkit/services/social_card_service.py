"""Соц-карточка (OG image) 1200×630.

Слои снизу вверх: линейный градиент, обрезанная марка слева по центру,
заголовок и перенесённый подзаголовок справа.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from brandkit.models.asset_config import AssetConfig
from brandkit.models.image_model import RGB, round_half_up
from brandkit.services import text_service

log = logging.getLogger(__name__)

WIDTH, HEIGHT = 1200, 630
MARK_HEIGHT = 360
MARK_X = 110
TEXT_X = 560
MAX_TEXT_WIDTH = 560
TITLE_SIZE = 72
SUBTITLE_SIZE = 52
SUBTITLE_REDUCED_SIZE = 44
TITLE_GAP = 18
SUBTITLE_LINE_GAP = 12
BASELINE_TOP = 200
TEXT_COLOR: RGB = (0xF5, 0xF8, 0xFF)


@dataclass(frozen=True)
class LinearGradient:
    """Двухточечный линейный градиент в долях холста (как objectBoundingBox в SVG)."""
    start: RGB
    end: RGB
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 1.0
    y2: float = 1.0


BRAND_GRADIENT = LinearGradient(start=(0x0F, 0x1F, 0x3A), end=(0xAB, 0x71, 0xF7))


@dataclass(frozen=True)
class TextLayout:
    strategy: str
    title_size: int
    subtitle_size: int
    subtitle_lines: Tuple[str, ...]
    title_top: int

    @property
    def subtitle_top(self) -> int:
        return self.title_top + self.title_size + TITLE_GAP

    @property
    def block_height(self) -> int:
        n = len(self.subtitle_lines)
        subtitle_block = n * self.subtitle_size + SUBTITLE_LINE_GAP * max(0, n - 1)
        return self.title_size + TITLE_GAP + subtitle_block

    def line_top(self, index: int) -> int:
        return self.subtitle_top + index * (self.subtitle_size + SUBTITLE_LINE_GAP)


def render_gradient(gradient: LinearGradient, width: int, height: int) -> Image.Image:
    """Растеризует градиент: проекция центра пикселя на вектор (x1,y1)->(x2,y2)."""
    u = (np.arange(width, dtype=np.float64) + 0.5) / width
    v = (np.arange(height, dtype=np.float64) + 0.5) / height
    dx, dy = gradient.x2 - gradient.x1, gradient.y2 - gradient.y1
    length2 = dx * dx + dy * dy
    if length2 == 0:
        t = np.zeros((height, width))
    else:
        t = ((u[None, :] - gradient.x1) * dx + (v[:, None] - gradient.y1) * dy) / length2
    t = np.clip(t, 0.0, 1.0)[:, :, None]
    start = np.array(gradient.start, dtype=np.float64)
    end = np.array(gradient.end, dtype=np.float64)
    rgb = np.rint(start + (end - start) * t).astype(np.uint8)
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return Image.fromarray(np.concatenate([rgb, alpha], axis=2))


class SocialCardService:
    def fit_height(self, mark: Image.Image, height: int) -> Image.Image:
        width = max(1, round_half_up(mark.width * height / mark.height))
        return mark.resize((width, height), Image.LANCZOS)

    def layout_text(self, cfg: AssetConfig) -> Tuple[TextLayout, Any, Any]:
        """Считает строки и вертикальные позиции; возвращает раскладку и шрифты отрисовки."""
        strategy = cfg.text_strategy
        title_font: Optional[Any] = None
        if strategy == "font-metrics":
            title_font = text_service.load_truetype(TITLE_SIZE, cfg.font_bold, bold=True)
            metrics_font = text_service.load_truetype(SUBTITLE_SIZE, cfg.font_regular)
            if title_font is None or metrics_font is None:
                log.warning("Font metrics unavailable, falling back to heuristic text layout")
                strategy = "heuristic"

        if strategy == "font-metrics":
            subtitle_size = text_service.fit_font_size(
                cfg.subtitle, SUBTITLE_SIZE, MAX_TEXT_WIDTH, SUBTITLE_REDUCED_SIZE, metrics_font.getlength
            )
            subtitle_font = (
                metrics_font if subtitle_size == SUBTITLE_SIZE else text_service.load_truetype(subtitle_size, cfg.font_regular)
            )
            lines: List[str] = text_service.wrap_lines(cfg.subtitle, MAX_TEXT_WIDTH, subtitle_font.getlength)
        else:
            subtitle_size = text_service.fit_font_size(
                cfg.subtitle,
                SUBTITLE_SIZE,
                MAX_TEXT_WIDTH,
                SUBTITLE_REDUCED_SIZE,
                lambda s: text_service.estimate_width(s, SUBTITLE_SIZE),
            )
            lines = list(text_service.wrap_heuristic(cfg.subtitle, subtitle_size, MAX_TEXT_WIDTH).lines)
            title_font = text_service.drawing_font(TITLE_SIZE, cfg.font_bold, bold=True)
            subtitle_font = text_service.drawing_font(subtitle_size, cfg.font_regular)

        layout = TextLayout(
            strategy=strategy,
            title_size=TITLE_SIZE,
            subtitle_size=subtitle_size,
            subtitle_lines=tuple(lines),
            title_top=BASELINE_TOP,
        )
        if cfg.text_layout != "baseline":
            layout = replace(layout, title_top=round_half_up((HEIGHT - layout.block_height) / 2))
        return layout, title_font, subtitle_font

    def compose(self, mark: Image.Image, cfg: AssetConfig) -> Image.Image:
        """Собирает карточку из уже обрезанной марки."""
        card = render_gradient(BRAND_GRADIENT, WIDTH, HEIGHT)

        mark_img = self.fit_height(mark.convert("RGBA"), MARK_HEIGHT)
        mark_y = round_half_up((HEIGHT - mark_img.height) / 2)
        card.alpha_composite(mark_img, (MARK_X, mark_y))

        layout, title_font, subtitle_font = self.layout_text(cfg)
        draw = ImageDraw.Draw(card)
        draw.text((TEXT_X, layout.title_top), cfg.title, font=title_font, fill=TEXT_COLOR)
        for i, line in enumerate(layout.subtitle_lines):
            draw.text((TEXT_X, layout.line_top(i)), line, font=subtitle_font, fill=TEXT_COLOR)
        log.debug("Social card text layout: %s", layout)
        return card
