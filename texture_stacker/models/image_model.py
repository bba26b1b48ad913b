"""Модели данных для изображений: формат пикселей и «сырое» изображение.

Принципы:
- SRP: только структура данных и арифметика формата, без чтения файлов.
- `PixelFormat` неизменяем (`frozen=True`) и является единственным источником истины
  о раскладке байтов; остальные компоненты сверяются с ним перед работой с буфером.
- Попиксельное чтение/запись поддерживается только для 8 бит на канал; 16 бит
  используются только для вычисления шага (stride), доступ к их пикселям запрещён.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from texture_stacker.models.errors import PixelFormatError

Pixel = Tuple[int, int, int, int]


class ChannelLayout(Enum):
    """Раскладка каналов; значения совпадают с режимами PIL."""
    RGB = "RGB"
    RGBA = "RGBA"

    @property
    def count(self) -> int:
        return 4 if self is ChannelLayout.RGBA else 3

    @property
    def has_alpha(self) -> bool:
        return self is ChannelLayout.RGBA


SUPPORTED_BIT_DEPTHS = (8, 16)

_STRIDES = {
    (8, ChannelLayout.RGB): 3,
    (8, ChannelLayout.RGBA): 4,
    (16, ChannelLayout.RGB): 6,
    (16, ChannelLayout.RGBA): 8,
}


@dataclass(frozen=True)
class PixelFormat:
    """Неизменяемое описание формата изображения.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        channels: Раскладка каналов (RGB или RGBA).
        bit_depth: Бит на канал (8 или 16).
    """
    width: int
    height: int
    channels: ChannelLayout
    bit_depth: int = 8

    def __post_init__(self) -> None:
        if (self.bit_depth, self.channels) not in _STRIDES:
            raise PixelFormatError(
                f"Неподдерживаемый формат пикселей: {self.bit_depth} бит, каналы {self.channels!r}"
            )
        if self.width < 0 or self.height < 0:
            raise PixelFormatError(f"Некорректный размер изображения: {self.width}x{self.height}")

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def num_pixels(self) -> int:
        return self.width * self.height

    @property
    def stride(self) -> int:
        return stride_bytes(self)

    @property
    def buffer_size(self) -> int:
        return self.num_pixels * self.stride

    def with_channels(self, channels: ChannelLayout) -> "PixelFormat":
        return PixelFormat(self.width, self.height, channels, self.bit_depth)


def stride_bytes(fmt: PixelFormat) -> int:
    """Количество байт на пиксель для заданного формата."""
    try:
        return _STRIDES[(fmt.bit_depth, fmt.channels)]
    except KeyError:
        raise PixelFormatError(
            f"Неподдерживаемый формат пикселей: {fmt.bit_depth} бит, каналы {fmt.channels!r}"
        ) from None


def _require_pixel_access(fmt: PixelFormat) -> None:
    stride_bytes(fmt)
    if fmt.bit_depth != 8:
        raise PixelFormatError(
            f"Попиксельная обработка поддерживается только для 8 бит на канал (получено {fmt.bit_depth})"
        )


def decode_pixel(data: bytes, fmt: PixelFormat, offset: int = 0) -> Pixel:
    """Читает один пиксель из буфера как (r, g, b, a).

    Для RGB альфа-канал достраивается как 255 (непрозрачный).
    """
    _require_pixel_access(fmt)
    r, g, b = data[offset], data[offset + 1], data[offset + 2]
    a = data[offset + 3] if fmt.channels.has_alpha else 255
    return r, g, b, a


def encode_pixel(pixel: Pixel, fmt: PixelFormat, dest: bytearray, offset: int = 0) -> None:
    """Записывает пиксель в буфер согласно формату; для RGB альфа отбрасывается."""
    _require_pixel_access(fmt)
    dest[offset:offset + 3] = bytes(pixel[:3])
    if fmt.channels.has_alpha:
        dest[offset + 3] = pixel[3]


def decode_pixels(view: np.ndarray, fmt: PixelFormat) -> np.ndarray:
    """Векторный аналог `decode_pixel`: (N, stride) -> (N, 4)."""
    _require_pixel_access(fmt)
    if fmt.channels.has_alpha:
        return view
    rgba = np.empty((view.shape[0], 4), dtype=np.uint8)
    rgba[:, :3] = view
    rgba[:, 3] = 255
    return rgba


def encode_pixels(rgba: np.ndarray, fmt: PixelFormat) -> np.ndarray:
    """Векторный аналог `encode_pixel`: (N, 4) -> (N, stride)."""
    _require_pixel_access(fmt)
    return rgba[:, :fmt.channels.count]


def convert_pixels(view: np.ndarray, source: PixelFormat, dest: PixelFormat) -> np.ndarray:
    """Перепаковывает пиксели из формата `source` в формат `dest`."""
    return encode_pixels(decode_pixels(view, source), dest)


@dataclass
class RawImage:
    """Буфер байтов вместе с форматом.

    Инвариант: `len(data) == width * height * stride(format)` проверяется при создании.

    Fields:
        data: Пиксели построчно, без выравнивания строк.
        format: Формат пикселей.
        path: Файл, из которого изображение прочитано (для сообщений об ошибках).
    """
    data: bytearray
    format: PixelFormat
    path: Optional[Path] = None

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        expected = self.format.buffer_size
        if len(self.data) != expected:
            raise PixelFormatError(
                f"Размер буфера ({len(self.data)} байт) не соответствует формату "
                f"{self.format.width}x{self.format.height} ({expected} байт)",
                self.path,
            )

    @classmethod
    def blank(cls, fmt: PixelFormat) -> "RawImage":
        """Создаёт изображение, заполненное нулями."""
        return cls(bytearray(fmt.buffer_size), fmt)

    @property
    def size(self) -> Tuple[int, int]:
        return self.format.size

    @property
    def num_pixels(self) -> int:
        return self.format.num_pixels

    def pixel_view(self) -> np.ndarray:
        """Изменяемое представление буфера формы (num_pixels, stride), uint8."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.num_pixels, self.format.stride)
