"""Контроллер сборки: оркестрация сервисов пайплайна ассетов.

SOLID:
- SRP: класс связывает сервисы и файловую раскладку, сам пиксели не обрабатывает.
- DIP: сервисы и цепочка кодировщиков ICO подставляются через поля.
Clean Code:
- Предусловия (исходник, шрифты) проверяются до записи любого файла.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image

from brandkit.core.errors import AssetNotFoundError
from brandkit.models.asset_config import AssetConfig
from brandkit.models.image_model import CanvasSpec, IconSet
from brandkit.services.bounds_service import BoundsService
from brandkit.services.compositor_service import CompositorService, round_half_up
from brandkit.services.ico_service import IcoService
from brandkit.services.image_service import ImageService
from brandkit.services.social_card_service import SocialCardService
from brandkit.services.text_service import require_fonts

log = logging.getLogger(__name__)


@dataclass
class BuildReport:
    revision: str
    icon_paths: Dict[int, Path] = field(default_factory=dict)
    ico_path: Optional[Path] = None
    og_path: Optional[Path] = None

    @property
    def written(self) -> List[Path]:
        paths = [self.icon_paths[s] for s in sorted(self.icon_paths)]
        paths.extend(p for p in (self.ico_path, self.og_path) if p is not None)
        return paths


@dataclass
class BuildController:
    """Собирает набор фавиконок, ICO и соц-карточку для одной ревизии.

    Ответственности:
    - Проверка предусловий и подготовка обрезанной марки.
    - Параллельная генерация иконок по размерам с барьером перед упаковкой ICO.
    - Запись соц-карточки.
    """
    config: AssetConfig

    image_service: ImageService = field(default_factory=ImageService)
    bounds_service: BoundsService = field(default_factory=BoundsService)
    compositor: CompositorService = field(default_factory=CompositorService)
    ico_service: IcoService = field(default_factory=IcoService)
    social_card_service: SocialCardService = field(default_factory=SocialCardService)
    max_workers: int = 4

    def check_preconditions(self) -> None:
        """Raises AssetNotFoundError, если нет исходной марки или заданных шрифтов."""
        source = self.config.source_path
        if not source.is_file():
            raise AssetNotFoundError(f"Исходная марка не найдена: {source}")
        require_fonts(self.config.font_paths())

    def trimmed_mark(self) -> Image.Image:
        mark = self.image_service.load_mark(self.config.source_path, self.config.mark_render_size)
        return self.bounds_service.trim(
            mark.pil_image,
            threshold=self.config.trim_threshold,
            padding_ratio=self.config.padding_ratio,
        )

    # ---- Icons ----
    def canvas_for(self, size: int) -> CanvasSpec:
        return CanvasSpec(size=size, background=self.config.background)

    def content_size(self, size: int) -> int:
        return max(1, round_half_up(size * self.config.content_scale))

    def compose_icon(self, mark: Image.Image, size: int) -> Image.Image:
        return self.compositor.compose_icon(mark, self.content_size(size), self.canvas_for(size))

    def _write_icon(self, mark: Image.Image, size: int) -> Tuple[int, Image.Image, Path]:
        image = self.compose_icon(mark, size)
        path = self.image_service.save_png(image, self.config.output_path(self.config.icon_name(size)))
        return size, image, path

    def build_icon_set(self, mark: Image.Image) -> IconSet:
        """Генерирует иконки всех размеров параллельно и ждёт завершения каждой."""
        icon_set = IconSet()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._write_icon, mark, size) for size in self.config.icon_sizes]
            # barrier: result() re-raises the first failure
            for future in futures:
                size, image, path = future.result()
                icon_set.add(size, image, path)
        return icon_set

    def build_ico(self, icon_set: IconSet) -> Path:
        pngs = [self.image_service.read_png_bytes(icon_set.paths[size]) for size in self.config.ico_sizes]
        data = self.ico_service.pack(pngs)
        path = self.config.output_path(self.config.ico_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        log.info("Wrote %s (%d bytes, sizes=%s)", path, len(data), list(self.config.ico_sizes))
        return path

    # ---- Social card ----
    def build_social_card(self, mark: Image.Image) -> Optional[Path]:
        if not self.config.og_name:
            return None
        card = self.social_card_service.compose(mark, self.config)
        return self.image_service.save_png(card, self.config.output_path(self.config.og_name))

    def run(self, include_social_card: bool = True) -> BuildReport:
        self.check_preconditions()
        mark = self.trimmed_mark()
        report = BuildReport(revision=self.config.revision)
        if include_social_card:
            report.og_path = self.build_social_card(mark)
        icon_set = self.build_icon_set(mark)
        report.icon_paths = dict(icon_set.paths)
        report.ico_path = self.build_ico(icon_set)
        log.info(
            "Generated revision %s assets from %s",
            self.config.revision,
            self.config.source_path,
            extra={"files": [str(p) for p in report.written]},
        )
        return report
