from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pytest
from PIL import Image

from texture_stacker.models.image_model import RawImage

Color = Tuple[int, ...]


def _save(path: Path, pixels: Sequence[Color], size: Tuple[int, int]) -> Path:
    mode = "RGBA" if len(pixels[0]) == 4 else "RGB"
    data = bytes(channel for pixel in pixels for channel in pixel)
    Image.frombytes(mode, size, data).save(path, format="PNG")
    return path


@pytest.fixture
def write_png():
    """Пишет PNG из списка пикселей (RGB или RGBA по длине кортежа)."""
    def _write(path: Path, pixels: Sequence[Color], size: Tuple[int, int] = (2, 2)) -> Path:
        return _save(path, pixels, size)
    return _write


@pytest.fixture
def fill_png():
    """Пишет PNG, залитый одним цветом."""
    def _fill(path: Path, color: Color, size: Tuple[int, int] = (2, 2)) -> Path:
        return _save(path, [color] * (size[0] * size[1]), size)
    return _fill


@pytest.fixture
def read_png():
    """Читает PNG как (режим, размер, список пикселей)."""
    def _read(path: Path) -> Tuple[str, Tuple[int, int], List[Color]]:
        with Image.open(path) as image:
            image.load()
            channels = len(image.mode)
            arr = np.asarray(image).reshape(-1, channels)
            return image.mode, image.size, [tuple(p) for p in arr.tolist()]
    return _read


class FakeCodec:
    """Кодек в памяти: позволяет подать форматы, которые PIL не отдаёт (16 бит)."""

    def __init__(self) -> None:
        self.images: Dict[Path, RawImage] = {}
        self.written: Dict[Path, RawImage] = {}
        self.fail_encode_for: set = set()

    def add(self, path: Path, image: RawImage) -> Path:
        path = Path(path)
        image.path = path
        self.images[path] = image
        return path

    def decode(self, file_path) -> RawImage:
        image = self.images[Path(file_path)]
        return RawImage(bytearray(image.data), image.format, path=image.path)

    def encode(self, file_path, image: RawImage) -> None:
        path = Path(file_path)
        if path.name in self.fail_encode_for:
            raise OSError(f"disk full: {path}")
        self.written[path] = RawImage(bytearray(image.data), image.format, path=path)


@pytest.fixture
def fake_codec() -> FakeCodec:
    return FakeCodec()
