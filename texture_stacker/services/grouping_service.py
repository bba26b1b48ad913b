"""Группировка файлов папки в наборы текстур.

Имя файла разбирается как `<база>_<СУФФИКС>.<расширение>`; суффикс сравнивается
со списком суффиксов дословно, включая ведущее подчёркивание.

Наборы упорядочены по базовому имени. От него зависят индексы масок
и порядок наложения, поэтому повторные запуски на тех же файлах обязаны давать
одинаковый результат независимо от порядка листинга файловой системы.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from texture_stacker.models.errors import InputDirectoryError
from texture_stacker.models.texture_set import TextureSet

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".tga", ".bmp", ".tif", ".tiff")


def split_suffix(file_path: Union[str, Path]) -> Optional[Tuple[str, str]]:
    """Делит имя файла на (база, суффикс) по последнему подчёркиванию.

    >>> split_suffix("Body_D.png")
    ('Body', '_D')
    >>> split_suffix("Body.png") is None
    True
    """
    stem = Path(file_path).stem
    pos = stem.rfind("_")
    if pos < 0:
        return None
    return stem[:pos], stem[pos:]


def collect_and_group_files(directory: Union[str, Path]) -> Dict[str, List[Path]]:
    """Собирает файлы изображений и группирует их по базовому имени.

    Returns:
        Словарь база -> отсортированный список путей; ключи вставлены в
        отсортированном порядке.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise InputDirectoryError(directory)

    groups: Dict[str, List[Path]] = {}
    for path in directory.iterdir():
        if not path.is_file() or path.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        parts = split_suffix(path)
        if parts is None:
            logger.debug("Пропущен файл без суффикса: %s", path.name)
            continue
        groups.setdefault(parts[0], []).append(path)

    return {name: sorted(groups[name]) for name in sorted(groups)}


def gather_texture_sets(directory: Union[str, Path], suffixes: Sequence[str]) -> List[TextureSet]:
    """Строит наборы текстур, выровненные по списку суффиксов.

    При нескольких файлах с одинаковыми (база, суффикс) берётся
    лексикографически первый путь.
    """
    texture_sets: List[TextureSet] = []
    for name, files in collect_and_group_files(directory).items():
        layers: List[Optional[Path]] = [None] * len(suffixes)
        for index, suffix in enumerate(suffixes):
            matches = [path for path in files if split_suffix(path)[1] == suffix]
            if not matches:
                continue
            if len(matches) > 1:
                logger.debug(
                    "Набор '%s': несколько файлов для суффикса '%s', выбран %s",
                    name, suffix, matches[0].name,
                )
            layers[index] = matches[0]
        texture_sets.append(TextureSet(name=name, layers=layers))
    return texture_sets


def partition_valid(texture_sets: Sequence[TextureSet]) -> Tuple[List[TextureSet], List[TextureSet]]:
    """Разделяет наборы на валидные (есть источник маски) и отброшенные."""
    valid = [s for s in texture_sets if s.is_valid]
    invalid = [s for s in texture_sets if not s.is_valid]
    return valid, invalid
