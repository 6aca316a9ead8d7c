"""Упаковка нескольких PNG в один многоразмерный ICO.

Кодировщики пробуются по порядку, побеждает первый успешный; если упали все,
поднимается `EncoderError`.
"""
from __future__ import annotations

import logging
import struct
from io import BytesIO
from typing import List, Optional, Protocol, Sequence, Tuple

from PIL import Image

from brandkit.core.errors import EncoderError

log = logging.getLogger(__name__)


class IcoEncoder(Protocol):
    name: str

    def encode(self, pngs: Sequence[bytes]) -> bytes:
        ...


def _decode_frames(pngs: Sequence[bytes]) -> List[Image.Image]:
    frames = []
    for data in pngs:
        with Image.open(BytesIO(data)) as im:
            frames.append(im.convert("RGBA"))
    return frames


class PillowIcoEncoder:
    """Штатный ICO-писатель Pillow; кадры передаются через append_images."""

    name = "pillow"

    def encode(self, pngs: Sequence[bytes]) -> bytes:
        frames = sorted(_decode_frames(pngs), key=lambda im: im.width, reverse=True)
        if not frames:
            raise ValueError("Нет кадров для ICO")
        buf = BytesIO()
        frames[0].save(
            buf,
            format="ICO",
            sizes=[im.size for im in frames],
            append_images=frames[1:],
        )
        return buf.getvalue()


class PngIcoEncoder:
    """Прямая запись ICONDIR + ICONDIRENTRY с PNG-кадрами без перекодирования."""

    name = "png-direct"

    def encode(self, pngs: Sequence[bytes]) -> bytes:
        if not pngs:
            raise ValueError("Нет кадров для ICO")
        images: List[Tuple[Tuple[int, int], bytes]] = []
        for data in pngs:
            with Image.open(BytesIO(data)) as im:
                if im.format != "PNG":
                    raise ValueError(f"Ожидался PNG, получен {im.format}")
                images.append((im.size, data))
        images.sort(key=lambda item: item[0][0])

        header = struct.pack("<HHH", 0, 1, len(images))
        entries = []
        payload = []
        offset = 6 + 16 * len(images)
        for (w, h), png in images:
            entry = struct.pack(
                "<BBBBHHII",
                0 if w >= 256 else w,
                0 if h >= 256 else h,
                0,
                0,
                1,
                32,
                len(png),
                offset,
            )
            entries.append(entry)
            payload.append(png)
            offset += len(png)
        return header + b"".join(entries) + b"".join(payload)


DEFAULT_ENCODERS: Tuple[IcoEncoder, ...] = (PillowIcoEncoder(), PngIcoEncoder())


class IcoService:
    def __init__(self, encoders: Optional[Sequence[IcoEncoder]] = None) -> None:
        self.encoders: Tuple[IcoEncoder, ...] = tuple(encoders) if encoders is not None else DEFAULT_ENCODERS

    def pack(self, pngs: Sequence[bytes]) -> bytes:
        """Пробует кодировщики по порядку и возвращает первый непустой результат.

        Raises:
            EncoderError: если все кодировщики завершились ошибкой.
        """
        errors: List[str] = []
        for encoder in self.encoders:
            try:
                data = encoder.encode(pngs)
            except Exception as exc:  # noqa: BLE001
                log.warning("ICO encoder %s failed: %s", encoder.name, exc)
                errors.append(f"{encoder.name}: {exc}")
                continue
            if not data:
                log.warning("ICO encoder %s returned empty output", encoder.name)
                errors.append(f"{encoder.name}: пустой результат")
                continue
            log.debug("ICO packed by %s (%d bytes)", encoder.name, len(data))
            return data
        raise EncoderError("Не удалось собрать ICO: " + "; ".join(errors or ["нет кодировщиков"]))
