"""Граница кодека: чтение и запись файлов изображений через PIL.

Принципы:
- SRP: класс отвечает только за преобразование файл <-> `RawImage`.
- ISP: интерфейс узкий (`decode` / `encode`), движок получает кодек извне и может
  работать с любой реализацией с теми же двумя методами.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Union

from PIL import Image, UnidentifiedImageError

from texture_stacker.models.errors import CodecError, PixelFormatError
from texture_stacker.models.image_model import ChannelLayout, PixelFormat, RawImage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ImageCodec(Protocol):
    def decode(self, file_path: PathLike) -> RawImage: ...

    def encode(self, file_path: PathLike, image: RawImage) -> None: ...


def _source_bit_depth(pil_image: Image.Image) -> int:
    """Определяет глубину канала по raw-режиму декодера (до загрузки пикселей).

    PIL молча сводит 16-битные RGB(A) PNG к 8 битам; raw-режим тайла
    ("RGB;16B", "RGBA;16B") сохраняет исходную глубину.
    """
    tile = getattr(pil_image, "tile", None) or []
    if not tile:
        return 8
    args = tile[0][3]
    rawmode = args if isinstance(args, str) else (args[0] if args and isinstance(args[0], str) else "")
    return 16 if ";16" in rawmode else 8


class ImageService:
    def decode(self, file_path: PathLike) -> RawImage:
        """Загружает изображение с диска в плоский буфер байтов.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `RawImage` с пикселями построчно и форматом 8 бит RGB/RGBA.

        Raises:
            CodecError: если файл не существует, не распознан или не читается.
            PixelFormatError: если формат не RGB/RGBA 8 бит или изображение анимированное.
        """
        path = Path(file_path)
        if not path.is_file():
            raise CodecError(path, "Файл не найден")

        try:
            with Image.open(path) as pil_image:
                if getattr(pil_image, "is_animated", False):
                    raise PixelFormatError("Анимированные изображения не поддерживаются", path)
                if pil_image.mode not in (ChannelLayout.RGB.value, ChannelLayout.RGBA.value):
                    raise PixelFormatError(
                        f"Неподдерживаемый режим изображения {pil_image.mode!r} (нужен RGB или RGBA)", path
                    )
                bit_depth = _source_bit_depth(pil_image)
                if bit_depth != 8:
                    raise PixelFormatError(
                        f"Поддерживается только 8 бит на канал (получено {bit_depth})", path
                    )
                pil_image.load()
                width, height = pil_image.size
                channels = ChannelLayout(pil_image.mode)
                data = pil_image.tobytes()
        except UnidentifiedImageError as exc:
            raise CodecError(path, "Файл не является изображением") from exc
        except OSError as exc:
            raise CodecError(path, f"Не удалось прочитать изображение ({exc})") from exc

        logger.debug("Прочитано %s: %dx%d %s", path, width, height, channels.value)
        return RawImage(data, PixelFormat(width, height, channels, 8), path=path)

    def encode(self, file_path: PathLike, image: RawImage) -> None:
        """Сохраняет `RawImage` в PNG.

        Raises:
            PixelFormatError: для форматов, отличных от 8 бит на канал.
            CodecError: при ошибке записи.
        """
        path = Path(file_path)
        fmt = image.format
        if fmt.bit_depth != 8:
            raise PixelFormatError(f"Запись поддерживается только для 8 бит на канал (получено {fmt.bit_depth})", path)

        mode = fmt.channels.value
        pil_image = Image.frombuffer(mode, fmt.size, bytes(image.data), "raw", mode, 0, 1)
        try:
            pil_image.save(path, format="PNG")
        except OSError as exc:
            raise CodecError(path, f"Не удалось записать изображение ({exc})") from exc
