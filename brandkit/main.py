"""Точки входа сборки ассетов (без флагов; настройка через BRANDKIT_*)."""
from __future__ import annotations

import logging
import sys
from typing import Callable

from brandkit.controllers.build_controller import BuildController
from brandkit.core.logging_config import setup_logging
from brandkit.models.asset_config import get_asset_config

log = logging.getLogger(__name__)


def _run(build: Callable[[], None]) -> int:
    setup_logging()
    try:
        build()
    except Exception as exc:  # noqa: BLE001
        log.error("Asset build failed: %s", exc, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def generate_brand_assets() -> int:
    """Соц-карточка и фавиконки текущей ревизии (BRANDKIT_REVISION, по умолчанию v5)."""

    def build() -> None:
        BuildController(config=get_asset_config()).run(include_social_card=True)

    return _run(build)


def scale_favicons() -> int:
    """Пересборка фавиконок из растрового `ai-text.png` на белом фоне."""

    def build() -> None:
        BuildController(config=get_asset_config("legacy")).run(include_social_card=False)

    return _run(build)


def main() -> None:
    sys.exit(generate_brand_assets())


def scale_main() -> None:
    sys.exit(scale_favicons())


if __name__ == "__main__":
    main()
