"""Модели набора текстур и параметров запуска.

Принципы:
- SRP: только структуры данных, без логики обработки.
- `RunConfig` неизменяем: читается один раз за запуск.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

# Булева маска: одно значение на пиксель, построчно.
PixelMask = np.ndarray


@dataclass
class TextureSet:
    """Все слои с общим базовым именем, выровненные по списку суффиксов.

    Fields:
        name: Общее базовое имя файлов (без суффикса и расширения).
        layers: `layers[i]` это файл для `suffixes[i]` или None.
    """
    name: str
    layers: List[Optional[Path]]

    @property
    def is_valid(self) -> bool:
        # Без слоя-источника маски набор не участвует в склейке
        return len(self.layers) > 0 and self.layers[0] is not None

    def layer(self, index: int) -> Optional[Path]:
        return self.layers[index]


@dataclass(frozen=True)
class RunConfig:
    """Параметры одного запуска.

    Fields:
        suffixes: Упорядоченный список суффиксов; позиция 0 задаёт маску.
        keep_mask_alpha: Сохранять альфа-канал в выходной текстуре суффикса 0.
        output_masks: Записывать маски в PNG для отладки.
        output_directory: Папка для результатов.
        output_base_name: Базовое имя выходных файлов.
    """
    suffixes: Tuple[str, ...]
    output_directory: Path
    output_base_name: str
    keep_mask_alpha: bool = False
    output_masks: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "suffixes", tuple(self.suffixes))
        object.__setattr__(self, "output_directory", Path(self.output_directory))

    @property
    def mask_suffix(self) -> str:
        return self.suffixes[0]

    def output_path(self, suffix: str) -> Path:
        return self.output_directory / f"{self.output_base_name}{suffix}.png"

    def mask_path(self, set_index: int) -> Path:
        return self.output_directory / f"mask{set_index}.png"


@dataclass
class MaskSet:
    """Маски всех валидных наборов (в порядке группировки) и общее разрешение."""
    masks: List[PixelMask]
    resolution: Tuple[int, int]

    def __len__(self) -> int:
        return len(self.masks)

    def __getitem__(self, index: int) -> PixelMask:
        return self.masks[index]


class RunStage(Enum):
    IDLE = "idle"
    GROUPING = "grouping"
    MASK_BUILDING = "mask_building"
    COMPOSITING = "compositing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    """Итог успешного запуска."""
    written: List[Path] = field(default_factory=list)
    skipped_sets: List[str] = field(default_factory=list)
    masks_written: List[Path] = field(default_factory=list)
    elapsed: float = 0.0
