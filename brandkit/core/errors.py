"""Иерархия ошибок сборки ассетов."""
from __future__ import annotations


class BrandkitError(Exception):
    """Базовая ошибка пайплайна."""


class AssetNotFoundError(BrandkitError, FileNotFoundError):
    """Нет исходного файла (марка, шрифт). Проверяется до любой записи."""


class NoContentError(BrandkitError, ValueError):
    """В исходном изображении не найдено ни одного пикселя содержимого."""


class EncoderError(BrandkitError):
    """Все кодировщики ICO завершились ошибкой."""


class ConfigError(BrandkitError, ValueError):
    """Некорректная конфигурация ревизии."""
