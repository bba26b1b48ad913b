from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_combine: Optional[Callable[[], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # progress stretches

        self._combine_btn = ctk.CTkButton(
            self, text="Склеить", font=ctk.CTkFont(size=18, weight="bold"), command=self._emit_combine
        )
        self._combine_btn.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._progress = ctk.CTkProgressBar(self)
        self._progress.set(0)
        self._progress.grid(row=0, column=1, padx=6, pady=8, sticky="ew")

        self._percent_val = ctk.StringVar(value="0%")
        self._percent_label = ctk.CTkLabel(self, textvariable=self._percent_val, width=48, anchor="w")
        self._percent_label.grid(row=0, column=2, padx=(6, 6), pady=8, sticky="w")

        self._status_val = ctk.StringVar(value="")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status_val, anchor="w")
        self._status_label.grid(row=1, column=0, columnspan=3, padx=10, pady=(0, 8), sticky="w")

    # public API (sync from controller)
    def set_progress(self, value: float) -> None:
        self._progress.set(value)
        self._percent_val.set(f"{int(round(value * 100))}%")

    def set_status(self, text: str) -> None:
        self._status_val.set(text)

    def set_busy(self, busy: bool) -> None:
        self._combine_btn.configure(state="disabled" if busy else "normal")
        self._combine_btn.configure(text="Склейка…" if busy else "Склеить")

    # events
    def _emit_combine(self) -> None:
        if self.on_combine:
            self.on_combine()
