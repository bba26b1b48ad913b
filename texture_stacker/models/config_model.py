"""Сохраняемые настройки приложения (файл конфигурации, состояние формы GUI)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_SUFFIXES = ("_D", "_N", "_E", "_M")
DEFAULT_OUTPUT_TEXTURE_NAME = "Combined"


@dataclass
class StackerConfig:
    """Настройки, которые пользователь задаёт между запусками.

    Fields:
        suffixes: Список суффиксов; первый задаёт маску.
        keep_mask_alpha: Сохранять альфу в текстуре первого суффикса.
        output_masks: Отладочный вывод масок.
        input_directory: Последняя входная папка.
        output_directory: Выходная папка; None означает `<input>/Combined`.
        output_texture_name: Базовое имя выходных текстур (может содержать подпапку).
    """
    suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_SUFFIXES))
    keep_mask_alpha: bool = False
    output_masks: bool = False
    input_directory: Optional[str] = None
    output_directory: Optional[str] = None
    output_texture_name: str = DEFAULT_OUTPUT_TEXTURE_NAME
