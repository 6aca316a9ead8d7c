from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from brandkit.core.errors import NoContentError
from brandkit.models.image_model import BoundingBox

log = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 220
DEFAULT_PADDING_RATIO = 0.01


class BoundsService:
    # ---------- Вспомогательные функции ----------
    def _image_to_rgba_np(self, image: Image.Image) -> np.ndarray:
        """
        Возвращает numpy-массив uint8 формы (H, W, 4).
        """
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return np.asarray(rgba, dtype=np.uint8)

    def foreground_mask(self, image: Image.Image, threshold: int = DEFAULT_THRESHOLD) -> np.ndarray:
        """
        Булева маска «содержимого»: альфа > 0 и хотя бы один канал ниже порога T.
        Пиксели с R>=T, G>=T, B>=T считаются почти белым фоном.
        """
        arr = self._image_to_rgba_np(image)
        opaque = arr[:, :, 3] > 0
        near_white = np.all(arr[:, :, :3] >= threshold, axis=2)
        return opaque & ~near_white

    # ---------- Детектор границ ----------
    def detect_content_bounds(
        self, image: Image.Image, threshold: int = DEFAULT_THRESHOLD
    ) -> Optional[BoundingBox]:
        """
        Минимальный бокс (включительно), содержащий все пиксели содержимого.
        Возвращает None, если таких пикселей нет.
        """
        mask = self.foreground_mask(image, threshold)
        rows = np.flatnonzero(mask.any(axis=1))
        if rows.size == 0:
            return None
        cols = np.flatnonzero(mask.any(axis=0))
        return BoundingBox(
            min_x=int(cols[0]),
            min_y=int(rows[0]),
            max_x=int(cols[-1]),
            max_y=int(rows[-1]),
        )

    def pad_bounds(self, box: BoundingBox, ratio: float, width: int, height: int) -> BoundingBox:
        return box.padded(ratio, width, height)

    def trim(
        self,
        image: Image.Image,
        threshold: int = DEFAULT_THRESHOLD,
        padding_ratio: float = DEFAULT_PADDING_RATIO,
    ) -> Image.Image:
        """
        Обрезка по содержимому с отступом `padding_ratio` от размеров бокса.

        Raises:
            NoContentError: в изображении нет ни одного пикселя содержимого.
        """
        box = self.detect_content_bounds(image, threshold)
        if box is None:
            raise NoContentError("В исходном изображении не найдено содержимого")
        padded = self.pad_bounds(box, padding_ratio, image.width, image.height)
        log.debug("Trim %dx%d -> %s", image.width, image.height, padded)
        return image.crop(padded.as_crop_box())
