"""Фоновый запуск склейки для интерактивного фронтенда.

Весь запуск выполняется в одном выделенном потоке, чтобы UI оставался отзывчивым.
Прогресс публикуется в `ProgressCell`, которую UI опрашивает сам; результат
(или исключение) забирается после завершения потока.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from texture_stacker.models.errors import TextureStackerError
from texture_stacker.models.progress import ProgressCell
from texture_stacker.models.texture_set import RunConfig, RunResult
from texture_stacker.services.image_service import ImageCodec
from texture_stacker.services.stacker_service import TextureStacker

logger = logging.getLogger(__name__)


class RunWorker:
    def __init__(
        self,
        config: RunConfig,
        input_directory: Union[str, Path],
        progress: Optional[ProgressCell] = None,
        codec: Optional[ImageCodec] = None,
    ) -> None:
        self.progress = progress if progress is not None else ProgressCell()
        self._stacker = TextureStacker(config, codec=codec, progress=self.progress)
        self._input_directory = Path(input_directory)
        self._thread: Optional[threading.Thread] = None
        self.result: Optional[RunResult] = None
        self.error: Optional[BaseException] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Запуск уже был начат")
        self.progress.reset()
        self._thread = threading.Thread(target=self._target, name="texture-stacker-run", daemon=True)
        self._thread.start()

    def is_finished(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def succeeded(self) -> bool:
        return self.is_finished() and self.error is None

    def _target(self) -> None:
        try:
            self.result = self._stacker.run(self._input_directory)
        except TextureStackerError as exc:
            # исключение передаётся UI-потоку через self.error
            logger.error("Склейка прервана: %s", exc)
            self.error = exc
        except Exception as exc:
            logger.exception("Непредвиденная ошибка склейки")
            self.error = exc
