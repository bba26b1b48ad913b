"""Панель настроек: входная папка, имя результата, флаги и список суффиксов.

Принципы:
- SRP: управляет только UI параметров, не содержит логики склейки.
- ISP: отдаёт состояние через `get_config`, события через `on_*`.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import customtkinter as ctk

from texture_stacker.models.config_model import StackerConfig

_NEW_SUFFIX = "_D"


class SettingsPanel(ctk.CTkFrame):
    """Форма параметров запуска."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, **kwargs)

        self.grid_columnconfigure(1, weight=1)

        # Callbacks
        self.on_browse_input: Optional[Callable[[], None]] = None
        self.on_reset: Optional[Callable[[], None]] = None

        # Input directory
        self._input_label = ctk.CTkLabel(self, text="Входная папка")
        self._input_label.grid(row=0, column=0, padx=(8, 6), pady=(8, 4), sticky="w")
        self._input_val = ctk.StringVar(value="")
        self._input_entry = ctk.CTkEntry(self, textvariable=self._input_val)
        self._input_entry.grid(row=0, column=1, padx=6, pady=(8, 4), sticky="ew")
        self._browse_btn = ctk.CTkButton(self, text="Обзор…", width=80, command=self._emit_browse_input)
        self._browse_btn.grid(row=0, column=2, padx=(6, 8), pady=(8, 4), sticky="e")

        # Output name
        self._name_label = ctk.CTkLabel(self, text="Имя текстуры")
        self._name_label.grid(row=1, column=0, padx=(8, 6), pady=4, sticky="w")
        self._name_val = ctk.StringVar(value="")
        self._name_entry = ctk.CTkEntry(self, textvariable=self._name_val)
        self._name_entry.grid(row=1, column=1, columnspan=2, padx=(6, 8), pady=4, sticky="ew")

        # Flags
        self._keep_alpha_val = ctk.BooleanVar(value=False)
        self._keep_alpha_switch = ctk.CTkSwitch(self, text="Сохранять альфу маски", variable=self._keep_alpha_val)
        self._keep_alpha_switch.grid(row=2, column=0, columnspan=3, padx=8, pady=4, sticky="w")
        self._output_masks_val = ctk.BooleanVar(value=False)
        self._output_masks_switch = ctk.CTkSwitch(self, text="Выводить маски (отладка)", variable=self._output_masks_val)
        self._output_masks_switch.grid(row=3, column=0, columnspan=3, padx=8, pady=4, sticky="w")

        # Suffixes
        self._suffix_title = ctk.CTkLabel(self, text="Суффиксы", font=ctk.CTkFont(size=16, weight="bold"))
        self._suffix_title.grid(row=4, column=0, columnspan=3, padx=8, pady=(10, 2), sticky="w")
        self._suffix_hint = ctk.CTkLabel(self, text="Первый суффикс задаёт маску", anchor="w")
        self._suffix_hint.grid(row=5, column=0, columnspan=3, padx=8, pady=(0, 4), sticky="w")

        self._suffix_frame = ctk.CTkScrollableFrame(self, height=140)
        self._suffix_frame.grid(row=6, column=0, columnspan=3, padx=8, pady=(0, 4), sticky="nsew")
        self._suffix_frame.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(6, weight=1)
        self._suffix_rows: List[Tuple[ctk.StringVar, ctk.CTkEntry, ctk.CTkButton]] = []

        self._add_btn = ctk.CTkButton(self, text="Добавить суффикс", command=self._add_suffix)
        self._add_btn.grid(row=7, column=0, columnspan=2, padx=8, pady=(4, 8), sticky="w")
        self._reset_btn = ctk.CTkButton(self, text="Сбросить настройки", command=self._emit_reset)
        self._reset_btn.grid(row=7, column=2, padx=(6, 8), pady=(4, 8), sticky="e")

    # public API (sync from controller)
    def set_config(self, config: StackerConfig) -> None:
        self._input_val.set(config.input_directory or "")
        self._name_val.set(config.output_texture_name)
        self._keep_alpha_val.set(config.keep_mask_alpha)
        self._output_masks_val.set(config.output_masks)
        self._rebuild_suffix_rows(config.suffixes or [_NEW_SUFFIX])

    def get_config(self, base: Optional[StackerConfig] = None) -> StackerConfig:
        """Собирает настройки из формы; поля, которых нет в форме, берутся из `base`."""
        config = StackerConfig() if base is None else StackerConfig(**vars(base))
        config.input_directory = self._input_val.get().strip() or None
        config.output_texture_name = self._name_val.get().strip()
        config.keep_mask_alpha = bool(self._keep_alpha_val.get())
        config.output_masks = bool(self._output_masks_val.get())
        config.suffixes = [var.get() for var, _entry, _btn in self._suffix_rows]
        return config

    def set_input_directory(self, path: str) -> None:
        self._input_val.set(path)

    def set_enabled(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        widgets = [
            self._input_entry, self._browse_btn, self._name_entry, self._keep_alpha_switch,
            self._output_masks_switch, self._add_btn, self._reset_btn,
        ]
        for _var, entry, btn in self._suffix_rows:
            widgets.extend((entry, btn))
        for widget in widgets:
            widget.configure(state=state)
        if enabled:
            self._update_remove_buttons()

    # events
    def _emit_browse_input(self) -> None:
        if self.on_browse_input:
            self.on_browse_input()

    def _emit_reset(self) -> None:
        if self.on_reset:
            self.on_reset()

    # helpers
    def _rebuild_suffix_rows(self, suffixes: List[str]) -> None:
        for _var, entry, btn in self._suffix_rows:
            entry.destroy()
            btn.destroy()
        self._suffix_rows = []
        for suffix in suffixes:
            self._append_row(suffix)
        self._update_remove_buttons()

    def _append_row(self, suffix: str) -> None:
        var = ctk.StringVar(value=suffix)
        entry = ctk.CTkEntry(self._suffix_frame, textvariable=var)
        btn = ctk.CTkButton(self._suffix_frame, text="X", width=32)
        btn.configure(command=lambda v=var: self._remove_suffix(v))
        row = len(self._suffix_rows)
        entry.grid(row=row, column=0, padx=(4, 4), pady=2, sticky="ew")
        btn.grid(row=row, column=1, padx=(0, 4), pady=2, sticky="e")
        self._suffix_rows.append((var, entry, btn))

    def _add_suffix(self) -> None:
        self._append_row(_NEW_SUFFIX)
        self._update_remove_buttons()

    def _remove_suffix(self, var: ctk.StringVar) -> None:
        if len(self._suffix_rows) <= 1:
            return
        remaining = [v.get() for v, _e, _b in self._suffix_rows if v is not var]
        self._rebuild_suffix_rows(remaining)

    def _update_remove_buttons(self) -> None:
        # последний суффикс удалить нельзя
        state = "normal" if len(self._suffix_rows) > 1 else "disabled"
        for _var, _entry, btn in self._suffix_rows:
            btn.configure(state=state)
