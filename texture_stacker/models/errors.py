"""Иерархия ошибок движка склейки текстур.

Принципы:
- Каждая фатальная ситуация описывается своим типом с путём к файлу и деталями несовпадения,
  чтобы фронтенд сам решал, как показать ошибку и с каким кодом завершиться.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

PathLike = Union[str, Path]


class TextureStackerError(Exception):
    """Базовая ошибка: прерывает текущий запуск."""


class ConfigError(TextureStackerError):
    """Некорректная конфигурация запуска или файла настроек."""


class InputDirectoryError(TextureStackerError):
    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(f"Входная папка не найдена или не является папкой: {self.path}")


class OutputDirectoryError(TextureStackerError):
    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(f"Не удалось создать выходную папку: {self.path}")


class CodecError(TextureStackerError):
    """Ошибка чтения или записи файла изображения."""

    def __init__(self, path: PathLike, detail: str) -> None:
        self.path = Path(path)
        self.detail = detail
        super().__init__(f"{detail}: {self.path}")


class PixelFormatError(TextureStackerError):
    """Неподдерживаемый формат пикселей (глубина, каналы, анимация)."""

    def __init__(self, detail: str, path: Optional[PathLike] = None) -> None:
        self.path = Path(path) if path is not None else None
        self.detail = detail
        message = detail if self.path is None else f"{detail}: '{self.path}'"
        super().__init__(message)


class ZeroSizedImageError(TextureStackerError):
    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(f"Изображение '{self.path}' имеет нулевой размер")


class ResolutionMismatchError(TextureStackerError):
    """Разрешение слоя не совпадает с разрешением предыдущих изображений."""

    def __init__(self, path: Optional[PathLike], actual: Tuple[int, int], expected: Tuple[int, int]) -> None:
        self.path = Path(path) if path is not None else None
        self.actual = tuple(actual)
        self.expected = tuple(expected)
        super().__init__(
            f"Изображение '{self.path}' имеет разрешение {self.actual[0]}x{self.actual[1]}, "
            f"а предыдущие изображения: {self.expected[0]}x{self.expected[1]}"
        )


class BitDepthMismatchError(TextureStackerError):
    def __init__(self, path: PathLike, actual: int, expected: int) -> None:
        self.path = Path(path)
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"Изображение '{self.path}' имеет глубину {actual} бит, "
            f"а предыдущие изображения: {expected} бит"
        )
