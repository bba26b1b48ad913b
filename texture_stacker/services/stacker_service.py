"""Оркестрация одного запуска: группировка -> маски -> склейка -> запись.

Принципы:
- SRP: сервис только упорядочивает шаги и пишет результаты; алгоритмы живут в сервисах
  группировки, масок и склейки.
- DIP: кодек и обработчик прогресса передаются при создании.
- Запуск не отменяется и не повторяется: он либо завершается (`DONE`), либо
  падает на первой фатальной ошибке (`FAILED`).
"""
from __future__ import annotations

import logging
import time
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Tuple, Union

from texture_stacker.models.errors import ConfigError, InputDirectoryError, OutputDirectoryError
from texture_stacker.models.texture_set import RunConfig, RunResult, RunStage
from texture_stacker.services.composite_service import CompositeService
from texture_stacker.services.grouping_service import gather_texture_sets, partition_valid
from texture_stacker.services.image_service import ImageCodec, ImageService
from texture_stacker.services.mask_service import MaskService

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIRECTORY_NAME = "Combined"

ProgressHandler = Callable[[float], None]


def resolve_output_location(
    input_directory: Union[str, Path],
    output_directory: Optional[Union[str, Path]],
    output_texture_name: str,
) -> Tuple[Path, str]:
    """Вычисляет выходную папку и базовое имя файлов.

    Без явной папки результаты пишутся в `<input>/Combined`. Имя текстуры может
    содержать относительный путь (`sub/Name`): тогда папка `sub` добавляется к
    выходной, а базовым именем становится последний компонент. Слэши в начале и
    в конце имени убираются, чтобы имя не стало абсолютным путём или папкой.

    Raises:
        ConfigError: имя содержит `..` и указывает за пределы выходной папки.
    """
    directory = Path(output_directory) if output_directory else Path(input_directory) / DEFAULT_OUTPUT_DIRECTORY_NAME
    name = output_texture_name.strip("/\\")
    name_path = PurePosixPath(name.replace("\\", "/"))
    if ".." in name_path.parts:
        raise ConfigError(f"Имя текстуры '{output_texture_name}' не может выходить за пределы выходной папки")
    if name and str(name_path.parent) != ".":
        directory = directory / Path(*name_path.parent.parts)
        name = name_path.name
    return directory, name


class TextureStacker:
    def __init__(
        self,
        config: RunConfig,
        codec: Optional[ImageCodec] = None,
        progress: Optional[ProgressHandler] = None,
    ) -> None:
        self.config = config
        self.stage = RunStage.IDLE
        self._codec: ImageCodec = codec if codec is not None else ImageService()
        self._progress = progress
        self._masks = MaskService(self._codec)
        self._compositor = CompositeService(self._codec, config)

    def run(self, input_directory: Union[str, Path]) -> RunResult:
        """Обрабатывает одну входную папку от начала до конца.

        Raises:
            TextureStackerError: любая фатальная ошибка; стадия становится `FAILED`.
        """
        started = time.perf_counter()
        try:
            result = self._run(Path(input_directory))
        except Exception:
            self.stage = RunStage.FAILED
            raise
        result.elapsed = time.perf_counter() - started
        logger.info("Готово за %.2f с", result.elapsed)
        return result

    def _run(self, input_directory: Path) -> RunResult:
        config = self.config
        if not config.suffixes:
            raise ConfigError("Не задано ни одного суффикса")
        if not input_directory.is_dir():
            raise InputDirectoryError(input_directory)

        self._ensure_output_directory()
        result = RunResult()

        self.stage = RunStage.GROUPING
        valid_sets, invalid_sets = partition_valid(gather_texture_sets(input_directory, config.suffixes))
        for texture_set in invalid_sets:
            logger.warning(
                "Невозможно вычислить маску для набора '%s': отсутствует текстура первого типа '%s'. "
                "Набор будет пропущен.",
                texture_set.name,
                config.mask_suffix,
            )
            result.skipped_sets.append(texture_set.name)

        self.stage = RunStage.MASK_BUILDING
        mask_set = self._masks.build_masks(valid_sets)
        if config.output_masks:
            result.masks_written = self._masks.write_mask_images(mask_set, config)

        self.stage = RunStage.COMPOSITING
        total = len(config.suffixes)
        for suffix_index, suffix in enumerate(config.suffixes):
            image = self._compositor.composite_suffix(valid_sets, mask_set, suffix_index)
            if image is None:
                logger.info("Нет ни одного слоя с суффиксом '%s', файл не создаётся", suffix)
            else:
                output_path = config.output_path(suffix)
                self._codec.encode(output_path, image)
                logger.info("Записано: %s", output_path)
                result.written.append(output_path)
            self._report_progress((suffix_index + 1) / total)

        self.stage = RunStage.DONE
        return result

    def _ensure_output_directory(self) -> None:
        directory = self.config.output_directory
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputDirectoryError(directory) from exc

    def _report_progress(self, value: float) -> None:
        if self._progress is not None:
            self._progress(value)
