"""Чтение и запись файла настроек (TOML) и подготовка `RunConfig`.

Ядро конфигурацию не разбирает: оно получает готовый неизменяемый `RunConfig`.
"""
from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import tomli_w

from texture_stacker.models.config_model import StackerConfig
from texture_stacker.models.errors import ConfigError, InputDirectoryError
from texture_stacker.models.texture_set import RunConfig
from texture_stacker.services.stacker_service import resolve_output_location

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "texture_stacker.toml"
CONFIG_ENV_VAR = "TEXTURE_STACKER_CONFIG"

_BOOL_KEYS = ("keep_mask_alpha", "output_masks")
_OPTIONAL_STR_KEYS = ("input_directory", "output_directory")


def default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / CONFIG_FILE_NAME


def clean_suffixes(suffixes: Iterable[str]) -> List[str]:
    """Убирает пустые суффиксы и дубликаты, сохраняя порядок первого вхождения."""
    result: List[str] = []
    for suffix in suffixes:
        suffix = suffix.strip()
        if suffix and suffix not in result:
            result.append(suffix)
    return result


def input_directory_from_drop(paths: Sequence[str]) -> Optional[str]:
    """Папка из перетащенных путей: берётся первый путь, для файла его родительская папка."""
    for raw in paths:
        raw = raw.strip().strip('"').strip("{}")
        if not raw:
            continue
        path = Path(raw)
        if path.is_file():
            path = path.parent
        return str(path)
    return None


def _parse(raw: Dict[str, Any], path: Path) -> StackerConfig:
    config = StackerConfig()

    if "suffixes" in raw:
        suffixes = raw["suffixes"]
        if not isinstance(suffixes, list) or not all(isinstance(s, str) for s in suffixes):
            raise ConfigError(f"{path}: 'suffixes' должен быть списком строк")
        config.suffixes = list(suffixes)

    for key in _BOOL_KEYS:
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ConfigError(f"{path}: '{key}' должен быть true или false")
            setattr(config, key, raw[key])

    for key in _OPTIONAL_STR_KEYS:
        if key in raw:
            if not isinstance(raw[key], str):
                raise ConfigError(f"{path}: '{key}' должен быть строкой")
            setattr(config, key, raw[key] or None)

    if "output_texture_name" in raw:
        if not isinstance(raw["output_texture_name"], str):
            raise ConfigError(f"{path}: 'output_texture_name' должен быть строкой")
        config.output_texture_name = raw["output_texture_name"]

    unknown = set(raw) - {"suffixes", "output_texture_name", *_BOOL_KEYS, *_OPTIONAL_STR_KEYS}
    for key in sorted(unknown):
        logger.warning("%s: неизвестный параметр '%s' проигнорирован", path, key)

    return config


def load_config(path: Optional[Union[str, Path]] = None) -> StackerConfig:
    """Загружает настройки; при отсутствии файла возвращает значения по умолчанию.

    Raises:
        ConfigError: если файл не читается, содержит некорректный TOML или значения неверных типов.
    """
    path = Path(path) if path is not None else default_config_path()
    if not path.is_file():
        logger.info("Файл настроек %s не найден, используются настройки по умолчанию", path)
        return StackerConfig()

    try:
        with path.open("rb") as fp:
            raw = tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: некорректный TOML ({exc})") from exc
    except OSError as exc:
        raise ConfigError(f"{path}: не удалось прочитать файл ({exc})") from exc

    logger.info("Загружен файл настроек %s", path)
    return _parse(raw, path)


def save_config(config: StackerConfig, path: Optional[Union[str, Path]] = None) -> Path:
    """Сохраняет настройки в TOML. Ключи со значением None не пишутся."""
    path = Path(path) if path is not None else default_config_path()
    data = {key: value for key, value in asdict(config).items() if value is not None}
    try:
        with path.open("wb") as fp:
            tomli_w.dump(data, fp)
    except OSError as exc:
        raise ConfigError(f"{path}: не удалось записать файл ({exc})") from exc
    return path


def validate_for_run(config: StackerConfig) -> None:
    """Проверка полей формы перед запуском.

    Raises:
        InputDirectoryError: входная папка не задана или не существует.
        ConfigError: нет ни одного непустого суффикса.
    """
    if not config.input_directory or not Path(config.input_directory).is_dir():
        raise InputDirectoryError(config.input_directory or "")
    if not clean_suffixes(config.suffixes):
        raise ConfigError("Не задано ни одного суффикса")


def to_run_config(config: StackerConfig, input_directory: Union[str, Path]) -> RunConfig:
    """Собирает неизменяемый `RunConfig` для запуска на заданной папке."""
    suffixes = clean_suffixes(config.suffixes)
    if not suffixes:
        raise ConfigError("Не задано ни одного суффикса")
    output_directory, base_name = resolve_output_location(
        input_directory, config.output_directory, config.output_texture_name
    )
    return RunConfig(
        suffixes=tuple(suffixes),
        output_directory=output_directory,
        output_base_name=base_name,
        keep_mask_alpha=config.keep_mask_alpha,
        output_masks=config.output_masks,
    )
