"""Контроллер приложения: оркестрация UI и сервисов.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без логики склейки).
- DIP: склейка выполняется через `RunWorker`, настройки через `config_service`.
Clean Code:
- Обработчики компактны; тяжёлая работа идёт в рабочем потоке, UI только опрашивает прогресс.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import TclError, filedialog, messagebox
from typing import Optional

import customtkinter as ctk

from texture_stacker.models.config_model import StackerConfig
from texture_stacker.models.errors import TextureStackerError
from texture_stacker.models.progress import ProgressCell
from texture_stacker.services.config_service import (
    clean_suffixes,
    input_directory_from_drop,
    load_config,
    save_config,
    to_run_config,
    validate_for_run,
)
from texture_stacker.services.run_worker import RunWorker
from texture_stacker.ui.bottom_bar import BottomBar
from texture_stacker.ui.settings_panel import SettingsPanel

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 100


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Загрузка настроек при старте и сохранение при закрытии окна.
    - Проверка полей формы и запуск склейки в рабочем потоке.
    - Опрос прогресса и показ результата/ошибки.
    """
    settings: SettingsPanel
    bottom: BottomBar
    window: ctk.CTk
    config_path: Optional[Path] = None

    _config: StackerConfig = field(default_factory=StackerConfig)
    _progress: ProgressCell = field(default_factory=ProgressCell)
    _worker: Optional[RunWorker] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий и загружает сохранённые настройки."""
        self.settings.on_browse_input = self._handle_browse_input
        self.settings.on_reset = self._handle_reset
        self.bottom.on_combine = self._handle_combine
        self.window.protocol("WM_DELETE_WINDOW", self._handle_close)
        if getattr(self.window, "drop_enabled", False):
            self.window.dnd_bind("<<Drop>>", self._handle_drop)

        try:
            self._config = load_config(self.config_path)
        except TextureStackerError as exc:
            logger.error("Не удалось загрузить настройки: %s", exc)
            self._config = StackerConfig()
        self.settings.set_config(self._config)

    # ---- Handlers ----
    def _handle_browse_input(self) -> None:
        try:
            directory = filedialog.askdirectory(title="Выберите папку с текстурами")
        except TclError:
            # Silent fail if dialog cannot open
            return
        if directory:
            self.settings.set_input_directory(directory)

    def _handle_drop(self, event) -> str:
        directory = input_directory_from_drop(self.window.tk.splitlist(event.data))
        if directory:
            self.settings.set_input_directory(directory)
        return event.action

    def _handle_reset(self) -> None:
        self._config = StackerConfig(input_directory=self.settings.get_config().input_directory)
        self.settings.set_config(self._config)

    def _handle_combine(self) -> None:
        if self._worker is not None:
            return

        config = self.settings.get_config(self._config)
        try:
            validate_for_run(config)
            config.suffixes = clean_suffixes(config.suffixes)
            run_config = to_run_config(config, config.input_directory)
        except TextureStackerError as exc:
            self._show_error(str(exc))
            return

        self._config = config
        self.settings.set_config(config)
        self._worker = RunWorker(run_config, config.input_directory, progress=self._progress)
        self._worker.start()
        self._set_busy(True)
        self.bottom.set_status("Склейка…")
        self.window.after(POLL_INTERVAL_MS, self._poll_worker)

    def _handle_close(self) -> None:
        config = self.settings.get_config(self._config)
        try:
            path = save_config(config, self.config_path)
            logger.info("Настройки сохранены в %s", path)
        except TextureStackerError as exc:
            # окно закрывается в любом случае, ошибку пользователь уже не увидит
            logger.error("Не удалось сохранить настройки: %s", exc)
        self.window.destroy()

    # ---- Helpers ----
    def _poll_worker(self) -> None:
        worker = self._worker
        if worker is None:
            return
        self.bottom.set_progress(self._progress.get())
        if not worker.is_finished():
            self.window.after(POLL_INTERVAL_MS, self._poll_worker)
            return

        worker.join()
        self._worker = None
        self._set_busy(False)
        if worker.error is not None:
            self.bottom.set_status("Ошибка")
            self._show_error(str(worker.error))
            return

        result = worker.result
        self.bottom.set_progress(1.0)
        written = len(result.written) if result else 0
        self.bottom.set_status(f"Готово: записано текстур: {written}")

    def _set_busy(self, busy: bool) -> None:
        self.bottom.set_busy(busy)
        self.settings.set_enabled(not busy)

    def _show_error(self, message: str) -> None:
        messagebox.showerror("Ошибка", message, parent=self.window)
