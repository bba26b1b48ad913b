from __future__ import annotations

import logging
from pathlib import Path
from tkinter import TclError
from typing import Optional

import customtkinter as ctk
from tkinterdnd2 import DND_FILES, TkinterDnD

from texture_stacker.controllers.app_controller import AppController
from texture_stacker.ui.bottom_bar import BottomBar
from texture_stacker.ui.settings_panel import SettingsPanel

logger = logging.getLogger(__name__)


class TextureStackerApp(ctk.CTk, TkinterDnD.DnDWrapper):
    def __init__(self, config_path: Optional[Path] = None) -> None:
        super().__init__()
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        self.title("Texture Stacker")
        self.geometry("520x480")
        self.minsize(460, 420)
        self.drop_enabled = self._setup_drop()

        # root layout: settings on top, combine/progress bar at the bottom
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._settings = SettingsPanel(self)
        self._settings.grid(row=0, column=0, sticky="nsew", padx=12, pady=(12, 6))

        self._bottom = BottomBar(self)
        self._bottom.grid(row=1, column=0, sticky="ew", padx=12, pady=(0, 12))

        self._controller = AppController(
            settings=self._settings, bottom=self._bottom, window=self, config_path=config_path
        )
        self._controller.bind_events()

    def _setup_drop(self) -> bool:
        """Подключает tkdnd к окну; без него папку можно выбрать только через диалог."""
        try:
            self.TkdndVersion = TkinterDnD._require(self)
            self.drop_target_register(DND_FILES)
        except (RuntimeError, TclError) as exc:
            logger.warning("Перетаскивание папок недоступно: %s", exc)
            return False
        return True
