from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from texture_stacker.models.errors import (
    PixelFormatError,
    ResolutionMismatchError,
    TextureStackerError,
    ZeroSizedImageError,
)
from texture_stacker.models.image_model import ChannelLayout, PixelFormat, RawImage, decode_pixels
from texture_stacker.models.texture_set import MaskSet, PixelMask, RunConfig, TextureSet
from texture_stacker.services.image_service import ImageCodec

logger = logging.getLogger(__name__)


def mask_from_alpha(image: RawImage) -> PixelMask:
    """Маска включения: True там, где альфа пикселя не равна нулю."""
    if not image.format.channels.has_alpha:
        raise PixelFormatError("Для вычисления маски нужен альфа-канал", image.path)
    rgba = decode_pixels(image.pixel_view(), image.format)
    return rgba[:, 3] != 0


def render_mask(mask: PixelMask, resolution: Tuple[int, int]) -> RawImage:
    """Преобразует маску в RGBA: белый непрозрачный / чёрный непрозрачный."""
    fmt = PixelFormat(resolution[0], resolution[1], ChannelLayout.RGBA, 8)
    if mask.shape[0] != fmt.num_pixels:
        raise PixelFormatError(
            f"Размер маски ({mask.shape[0]}) не соответствует разрешению {resolution[0]}x{resolution[1]}"
        )
    image = RawImage.blank(fmt)
    view = image.pixel_view()
    view[:, :3] = np.where(mask, 255, 0).astype(np.uint8)[:, None]
    view[:, 3] = 255
    return image


class MaskService:
    def __init__(self, codec: ImageCodec) -> None:
        self._codec = codec

    def build_masks(self, texture_sets: Sequence[TextureSet]) -> MaskSet:
        """Строит маски для валидных наборов в порядке группировки.

        Все источники маски обязаны иметь альфа-канал, ненулевой размер и общее
        разрешение; иначе запуск прерывается.
        """
        masks: List[PixelMask] = []
        working_resolution: Optional[Tuple[int, int]] = None

        for texture_set in texture_sets:
            file_path = texture_set.layer(0)
            if file_path is None:
                raise PixelFormatError(f"У набора '{texture_set.name}' нет слоя-источника маски")

            image = self._codec.decode(file_path)
            fmt = image.format

            if not fmt.channels.has_alpha:
                raise PixelFormatError("Для вычисления маски нужен альфа-канал", file_path)
            if fmt.width == 0 or fmt.height == 0:
                raise ZeroSizedImageError(file_path)

            if working_resolution is None:
                working_resolution = fmt.size
            elif fmt.size != working_resolution:
                raise ResolutionMismatchError(file_path, fmt.size, working_resolution)

            masks.append(mask_from_alpha(image))

        return MaskSet(masks=masks, resolution=working_resolution or (0, 0))

    def write_mask_images(self, mask_set: MaskSet, config: RunConfig) -> List[Path]:
        """Пишет маски в `mask<N>.png` для отладки.

        Ошибки только логируются: отладочный вывод не должен прерывать запуск.
        """
        written: List[Path] = []
        for index, mask in enumerate(mask_set.masks):
            path = config.mask_path(index)
            try:
                self._codec.encode(path, render_mask(mask, mask_set.resolution))
            except (TextureStackerError, OSError):
                logger.exception("Не удалось записать маску в файл '%s'", path)
                continue
            written.append(path)
        return written
