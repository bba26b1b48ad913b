"""Консольный фронтенд.

Входная папка берётся из аргумента, затем из файла настроек, затем спрашивается
у пользователя. Фатальные ошибки логируются, код выхода 1.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from texture_stacker.models.errors import ConfigError, TextureStackerError
from texture_stacker.services.config_service import load_config, to_run_config
from texture_stacker.services.stacker_service import TextureStacker

logger = logging.getLogger("texture_stacker")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        "texture-stacker",
        description="Склейка наборов текстур по маске из альфа-канала первого слоя",
    )
    ap.add_argument("input_directory", nargs="?", type=Path, help="Папка с файлами <имя>_<СУФФИКС>.png")
    ap.add_argument("--config", type=Path, default=None, help="Файл настроек TOML")
    ap.add_argument("--output-dir", type=Path, default=None, help="Выходная папка (по умолчанию <input>/Combined)")
    ap.add_argument("--name", default=None, help="Базовое имя выходных текстур")
    ap.add_argument(
        "--suffix", dest="suffixes", action="append", default=None,
        help="Суффикс слоя (можно повторять; первый задаёт маску)",
    )
    ap.add_argument("--keep-mask-alpha", action=argparse.BooleanOptionalAction, default=None,
                    help="Сохранять альфа-канал в текстуре первого суффикса")
    ap.add_argument("--output-masks", action=argparse.BooleanOptionalAction, default=None,
                    help="Записать маски mask<N>.png для отладки")
    ap.add_argument("-v", "--verbose", action="store_true", help="Подробный лог")
    return ap


def prompt_for_string(prompt: str) -> str:
    try:
        return input(prompt).strip().strip('"')
    except EOFError:
        return ""


def _log_progress(value: float) -> None:
    logger.info("Прогресс: %d%%", int(round(value * 100)))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.suffixes:
            config.suffixes = args.suffixes
        if args.keep_mask_alpha is not None:
            config.keep_mask_alpha = args.keep_mask_alpha
        if args.output_masks is not None:
            config.output_masks = args.output_masks
        if args.output_dir is not None:
            config.output_directory = str(args.output_dir)
        if args.name is not None:
            config.output_texture_name = args.name

        input_directory = args.input_directory or config.input_directory or prompt_for_string("Входная папка? ")
        if not input_directory:
            raise ConfigError("Входная папка не задана")
        run_config = to_run_config(config, input_directory)
        result = TextureStacker(run_config, progress=_log_progress).run(input_directory)
    except TextureStackerError as exc:
        logger.error("%s", exc)
        return 1

    logger.info(
        "Записано текстур: %d, пропущено наборов: %d",
        len(result.written), len(result.skipped_sets),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
