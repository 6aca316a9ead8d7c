"""Загрузка исходных марок с диска и запись PNG.

Принципы:
- SRP: класс отвечает только за ввод-вывод изображений и приведение к RGBA.
- OCP: SVG и растровые источники разведены по отдельным методам.
"""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from brandkit.core.errors import AssetNotFoundError
from brandkit.models.image_model import ImageData

log = logging.getLogger(__name__)

SVG_SUFFIXES = (".svg", ".svgz")


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает растровое изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами, режимом и размером файла.

        Raises:
            AssetNotFoundError: если путь не существует или не указывает на файл.
            ValueError: если файл не распознан как изображение.
        """
        path = self.require_file(file_path)

        try:
            with Image.open(path) as opened:
                pil_image = opened.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise ValueError(f"Файл не является изображением: {path}") from exc

        return self._wrap(path, pil_image)

    def load_mark(self, file_path: str | Path, render_size: int) -> ImageData:
        """Загружает марку и вписывает её в прозрачный квадрат `render_size`.

        SVG растеризуется через CairoSVG, растровые форматы читает Pillow.
        Соотношение сторон сохраняется («contain»), поля прозрачные.
        """
        path = self.require_file(file_path)
        if path.suffix.lower() in SVG_SUFFIXES:
            image = self._render_svg(path, render_size)
        else:
            image = ImageOps.contain(self.load_image(path).pil_image, (render_size, render_size), Image.LANCZOS)
        squared = self.pad_to_square(image, render_size)
        log.debug("Loaded mark %s as %dx%d", path, squared.width, squared.height)
        return self._wrap(path, squared)

    @staticmethod
    def require_file(file_path: str | Path) -> Path:
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise AssetNotFoundError(f"Файл не найден: {path}")
        return path

    @staticmethod
    def pad_to_square(image: Image.Image, size: int) -> Image.Image:
        """Центрирует изображение на прозрачном квадрате `size`×`size`."""
        if image.size == (size, size):
            return image
        canvas = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        canvas.paste(image, ((size - image.width) // 2, (size - image.height) // 2), image)
        return canvas

    @staticmethod
    def to_png_bytes(image: Image.Image) -> bytes:
        buf = BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()

    def save_png(self, image: Image.Image, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_png_bytes(image))
        log.info("Wrote %s (%dx%d)", path, image.width, image.height)
        return path

    def read_png_bytes(self, path: Path) -> bytes:
        return self.require_file(path).read_bytes()

    # ---------- Вспомогательные функции ----------
    def _render_svg(self, path: Path, size: int) -> Image.Image:
        import cairosvg

        png = cairosvg.svg2png(url=str(path), output_width=size)
        image = Image.open(BytesIO(png)).convert("RGBA")
        if image.height > size:
            # tall mark: fit by height instead
            png = cairosvg.svg2png(url=str(path), output_height=size)
            image = Image.open(BytesIO(png)).convert("RGBA")
        return image

    @staticmethod
    def _wrap(path: Path, pil_image: Image.Image) -> ImageData:
        width, height = pil_image.size
        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        return ImageData(
            path=path,
            pil_image=pil_image,
            width=width,
            height=height,
            mode=pil_image.mode,
            size_bytes=size_bytes,
        )
