"""Склейка слоёв наборов в одну текстуру на каждый суффикс.

Принципы:
- Первый слой суффикса копируется целиком, без маски: он задаёт фон
  (цвета первого набора в областях, не покрытых ни одной маской).
- Каждый следующий слой копируется только там, где маска его набора истинна;
  при пересечении масок побеждает более поздний набор (порядок группировки).
- Первый слой при совпадении форматов копируется байтами напрямую. Наложение
  по маске допускает только 8 бит на канал; разные форматы перепаковываются
  через `convert_pixels`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from texture_stacker.models.errors import BitDepthMismatchError, PixelFormatError, ResolutionMismatchError
from texture_stacker.models.image_model import ChannelLayout, PixelFormat, RawImage, convert_pixels
from texture_stacker.models.texture_set import MaskSet, PixelMask, RunConfig, TextureSet
from texture_stacker.services.image_service import ImageCodec

logger = logging.getLogger(__name__)


def copy_image(source: RawImage, dest: RawImage) -> None:
    """Копирует изображение целиком, перепаковывая каналы при необходимости."""
    if source.size != dest.size:
        raise ResolutionMismatchError(source.path, source.size, dest.size)

    if source.format == dest.format:
        dest.data[:] = source.data
    else:
        dest.pixel_view()[:] = convert_pixels(source.pixel_view(), source.format, dest.format)


def copy_image_masked(source: RawImage, dest: RawImage, mask: PixelMask) -> None:
    """Копирует только пиксели, для которых маска истинна.

    Наложение под маской идёт попиксельно, поэтому источник обязан быть 8-битным
    даже при совпадении форматов.
    """
    if source.format.bit_depth != 8:
        raise PixelFormatError(
            f"наложение по маске поддерживает только 8 бит на канал, получено {source.format.bit_depth}",
            path=source.path,
        )
    if source.size != dest.size:
        raise ResolutionMismatchError(source.path, source.size, dest.size)
    if mask.shape[0] != source.num_pixels:
        raise ResolutionMismatchError(source.path, source.size, dest.size)

    src = source.pixel_view()
    dst = dest.pixel_view()
    if source.format == dest.format:
        dst[mask] = src[mask]
    else:
        dst[mask] = convert_pixels(src[mask], source.format, dest.format)


class CompositeService:
    def __init__(self, codec: ImageCodec, config: RunConfig) -> None:
        self._codec = codec
        self._config = config

    def output_format(self, first_layer: PixelFormat, suffix_index: int) -> PixelFormat:
        """Формат выходной текстуры определяется первым слоем суффикса.

        Для суффикса-источника маски альфа отбрасывается, если не задан `keep_mask_alpha`.
        """
        if suffix_index == 0 and not self._config.keep_mask_alpha:
            return first_layer.with_channels(ChannelLayout.RGB)
        return first_layer

    def composite_suffix(
        self,
        texture_sets: Sequence[TextureSet],
        mask_set: MaskSet,
        suffix_index: int,
    ) -> Optional[RawImage]:
        """Собирает выходное изображение для одного суффикса.

        Args:
            texture_sets: Валидные наборы в порядке группировки (выровнены с `mask_set`).
            mask_set: Маски наборов.
            suffix_index: Позиция суффикса в списке.

        Returns:
            Готовое изображение или None, если ни один набор не содержит слой этого суффикса.
        """
        output: Optional[RawImage] = None

        for set_index, texture_set in enumerate(texture_sets):
            file_path = texture_set.layer(suffix_index)
            if file_path is None:
                continue

            image = self._codec.decode(file_path)

            if output is None:
                output = RawImage.blank(self.output_format(image.format, suffix_index))
                copy_image(image, output)
                continue

            self._validate_layer(image, file_path, output.format, suffix_index)
            mask = mask_set[set_index]
            if mask.shape[0] != image.num_pixels:
                raise ResolutionMismatchError(file_path, image.size, mask_set.resolution)
            copy_image_masked(image, output, mask)

        return output

    def _validate_layer(self, image: RawImage, file_path: Path, output_format: PixelFormat, suffix_index: int) -> None:
        fmt = image.format
        if fmt.size != output_format.size:
            raise ResolutionMismatchError(file_path, fmt.size, output_format.size)
        if fmt.bit_depth != output_format.bit_depth:
            raise BitDepthMismatchError(file_path, fmt.bit_depth, output_format.bit_depth)

        if fmt.channels is output_format.channels:
            return
        if fmt.channels is ChannelLayout.RGB and output_format.channels is ChannelLayout.RGBA:
            # альфа достраивается как непрозрачная
            return
        if fmt.channels is ChannelLayout.RGBA and output_format.channels is ChannelLayout.RGB:
            if not (suffix_index == 0 and not self._config.keep_mask_alpha):
                logger.warning(
                    "Неожиданный альфа-канал в изображении '%s': он будет отброшен, "
                    "так как у предыдущих текстур его нет.",
                    file_path,
                )
            return
        raise PixelFormatError(f"Неподдерживаемое сочетание каналов {fmt.channels!r} -> {output_format.channels!r}", file_path)
