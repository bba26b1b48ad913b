"""Потокобезопасная ячейка прогресса.

Рабочий поток пишет, UI-поток периодически читает (опрос, а не push).
"""
from __future__ import annotations

import threading


class ProgressCell:
    def __init__(self, value: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._value = float(value)

    def set(self, value: float) -> None:
        value = max(0.0, min(1.0, float(value)))
        with self._lock:
            self._value = value

    def get(self) -> float:
        with self._lock:
            return self._value

    def reset(self) -> None:
        self.set(0.0)

    # удобно передавать ячейку напрямую как progress-callback
    def __call__(self, value: float) -> None:
        self.set(value)
