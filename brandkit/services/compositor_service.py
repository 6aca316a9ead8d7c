"""Компоновка иконки: вписывание марки и центрирование на холсте.

Без дискового ввода-вывода: на вход и выход — только изображения PIL.
"""
from __future__ import annotations

from typing import Tuple

from PIL import Image

from brandkit.models.image_model import CanvasSpec, round_half_up

__all__ = ["CompositorService", "round_half_up"]


class CompositorService:
    def fit_contain(self, image: Image.Image, target: int) -> Image.Image:
        """Масштабирует так, чтобы большая сторона стала `target`; пропорции сохраняются."""
        if target < 1:
            raise ValueError(f"Размер содержимого должен быть >= 1: {target}")
        scale = target / max(image.width, image.height)
        new_w = max(1, min(target, round_half_up(image.width * scale)))
        new_h = max(1, min(target, round_half_up(image.height * scale)))
        if (new_w, new_h) == image.size:
            return image.copy()
        return image.resize((new_w, new_h), Image.LANCZOS)

    def center_offset(self, canvas_size: int, content: Tuple[int, int]) -> Tuple[int, int]:
        content_w, content_h = content
        return (
            round_half_up((canvas_size - content_w) / 2),
            round_half_up((canvas_size - content_h) / 2),
        )

    def compose_icon(self, mark: Image.Image, content_size: int, canvas: CanvasSpec) -> Image.Image:
        """Вписывает марку в `content_size` и центрирует на холсте `canvas.size`×`canvas.size`."""
        rgba = mark if mark.mode == "RGBA" else mark.convert("RGBA")
        resized = self.fit_contain(rgba, min(content_size, canvas.size))
        out = canvas.new_canvas()
        left, top = self.center_offset(canvas.size, resized.size)
        out.alpha_composite(resized, (left, top))
        return out
