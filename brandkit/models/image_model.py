"""Модели данных пайплайна брендовых ассетов.

Принципы:
- SRP: только структуры данных и простая геометрия, без обработки пикселей.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image

RGB = Tuple[int, int, int]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель исходного изображения и его метаданные.

    Fields:
        path: Путь к исходному файлу.
        pil_image: Загруженное изображение PIL (всегда RGBA).
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL, например "RGBA".
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    size_bytes: Optional[int]


@dataclass(frozen=True)
class BoundingBox:
    """Прямоугольник содержимого, границы включительно.

    Инвариант: min_x <= max_x и min_y <= max_y. «Пустой» результат
    детектора представлен как `None`, а не вырожденным боксом.
    """
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    def __post_init__(self) -> None:
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(f"Некорректный бокс: {self}")

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def as_crop_box(self) -> Tuple[int, int, int, int]:
        """Кортеж для `Image.crop` (правая/нижняя граница исключительно)."""
        return self.min_x, self.min_y, self.max_x + 1, self.max_y + 1

    def padded(self, ratio: float, image_width: int, image_height: int) -> "BoundingBox":
        """Расширяет бокс на долю собственных размеров и обрезает по границам изображения."""
        pad_x = round_half_up(self.width * ratio)
        pad_y = round_half_up(self.height * ratio)
        return BoundingBox(
            min_x=max(0, self.min_x - pad_x),
            min_y=max(0, self.min_y - pad_y),
            max_x=min(image_width - 1, self.max_x + pad_x),
            max_y=min(image_height - 1, self.max_y + pad_y),
        )


@dataclass(frozen=True)
class CanvasSpec:
    """Квадратный холст: размер и фон (`None` — полностью прозрачный)."""
    size: int
    background: Optional[RGB] = None

    @property
    def fill(self) -> Tuple[int, int, int, int]:
        if self.background is None:
            return 0, 0, 0, 0
        r, g, b = self.background
        return r, g, b, 255

    def new_canvas(self) -> Image.Image:
        return Image.new("RGBA", (self.size, self.size), self.fill)


@dataclass
class IconSet:
    """Набор иконок одного запуска сборки: размер -> изображение и путь файла."""
    images: Dict[int, Image.Image] = field(default_factory=dict)
    paths: Dict[int, Path] = field(default_factory=dict)

    def add(self, size: int, image: Image.Image, path: Path) -> None:
        self.images[size] = image
        self.paths[size] = path

    def image_for(self, size: int) -> Image.Image:
        return self.images[size]

    @property
    def sizes(self) -> List[int]:
        return sorted(self.images)


@dataclass(frozen=True)
class TextBlock:
    """Строка, разбитая на линии не шире `max_width` (по эвристике ширины)."""
    text: str
    font_size: int
    max_width: float
    lines: Tuple[str, ...]
