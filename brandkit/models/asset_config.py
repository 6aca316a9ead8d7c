"""Конфигурация ревизий пайплайна ассетов.

Ревизии (v5, v6, v7, legacy) отличаются только константами: масштабом марки,
фоном, стратегией текста. Вместо копий скриптов каждая ревизия — запись
`AssetConfig`; переменные окружения `BRANDKIT_*` переопределяют поля.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

from brandkit.core.errors import ConfigError
from brandkit.models.image_model import RGB

TEXT_STRATEGIES = ("font-metrics", "heuristic")
TEXT_LAYOUTS = ("centered", "baseline")

ICON_SIZES: Tuple[int, ...] = (16, 32, 48, 180)
ICO_SIZES: Tuple[int, ...] = (16, 32, 48)

DEFAULT_REVISION = "v5"
DEFAULT_PUBLIC_DIR = Path("public")


@dataclass(frozen=True)
class AssetConfig:
    revision: str
    source_name: str
    content_scale: float
    background: Optional[RGB] = None
    text_strategy: str = "heuristic"
    text_layout: str = "centered"
    trim_threshold: int = 220
    padding_ratio: float = 0.01
    mark_render_size: int = 1024
    icon_sizes: Tuple[int, ...] = ICON_SIZES
    ico_sizes: Tuple[int, ...] = ICO_SIZES
    title: str = "Kalyan AI"
    subtitle: str = "Bespoke hosted AI systems"
    font_regular: Optional[str] = None
    font_bold: Optional[str] = None
    suffix: str = ""
    apple_touch_name: str = "apple-touch-icon.png"
    ico_name: str = "favicon.ico"
    og_name: Optional[str] = None
    public_dir: Path = DEFAULT_PUBLIC_DIR

    @property
    def source_path(self) -> Path:
        return self.public_dir / self.source_name

    def icon_name(self, size: int) -> str:
        if size == 180:
            return self.apple_touch_name
        return f"favicon-{size}x{size}{self.suffix}.png"

    def output_path(self, name: str) -> Path:
        return self.public_dir / name

    def font_paths(self) -> Tuple[Path, ...]:
        return tuple(Path(p) for p in (self.font_regular, self.font_bold) if p)


def _revision(name: str, **kwargs) -> AssetConfig:
    suffix = f"-{name}"
    defaults = dict(
        revision=name,
        source_name="ai-mark.svg",
        suffix=suffix,
        apple_touch_name=f"apple-touch-icon{suffix}.png",
        ico_name=f"favicon{suffix}.ico",
        og_name=f"og{suffix}.png",
    )
    defaults.update(kwargs)
    return AssetConfig(**defaults)


REVISIONS: Dict[str, AssetConfig] = {
    "v5": _revision("v5", content_scale=0.83),
    "v6": _revision("v6", content_scale=0.90, text_strategy="font-metrics"),
    "v7": _revision("v7", content_scale=0.94, text_strategy="font-metrics", text_layout="baseline"),
    # white-background rescale of the raster wordmark, favicons only
    "legacy": AssetConfig(
        revision="legacy",
        source_name="ai-text.png",
        content_scale=0.97,
        background=(255, 255, 255),
        apple_touch_name="apple-touch-icon-180x180.png",
    ),
}


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def get_asset_config(revision: Optional[str] = None) -> AssetConfig:
    """Возвращает запись ревизии с учётом переопределений из окружения.

    Raises:
        ConfigError: неизвестная ревизия или некорректное значение переменной.
    """
    name = revision or _env("BRANDKIT_REVISION") or DEFAULT_REVISION
    try:
        cfg = REVISIONS[name]
    except KeyError as exc:
        raise ConfigError(f"Неизвестная ревизия: {name!r}; доступны {sorted(REVISIONS)}") from exc

    updates: Dict[str, object] = {}
    public_dir = _env("BRANDKIT_PUBLIC_DIR")
    if public_dir:
        updates["public_dir"] = Path(public_dir)

    scale = _env("BRANDKIT_CONTENT_SCALE")
    if scale:
        try:
            value = float(scale)
        except ValueError as exc:
            raise ConfigError(f"BRANDKIT_CONTENT_SCALE не число: {scale!r}") from exc
        if not 0.0 < value <= 1.0:
            raise ConfigError(f"BRANDKIT_CONTENT_SCALE вне (0, 1]: {value}")
        updates["content_scale"] = value

    strategy = _env("BRANDKIT_TEXT_STRATEGY")
    if strategy:
        if strategy not in TEXT_STRATEGIES:
            raise ConfigError(f"BRANDKIT_TEXT_STRATEGY должен быть одним из {TEXT_STRATEGIES}")
        updates["text_strategy"] = strategy

    for key, env_name in (("font_regular", "BRANDKIT_FONT_REGULAR"), ("font_bold", "BRANDKIT_FONT_BOLD")):
        value = _env(env_name)
        if value:
            updates[key] = value

    return replace(cfg, **updates) if updates else cfg
