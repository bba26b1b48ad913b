import logging

import numpy as np
import pytest

from texture_stacker.models.errors import PixelFormatError, ResolutionMismatchError, ZeroSizedImageError
from texture_stacker.models.image_model import ChannelLayout, PixelFormat, RawImage
from texture_stacker.models.texture_set import MaskSet, RunConfig, TextureSet
from texture_stacker.services.image_service import ImageService
from texture_stacker.services.mask_service import MaskService, mask_from_alpha, render_mask


def _rgba(pixels, size=(2, 2)):
    data = bytes(c for p in pixels for c in p)
    return RawImage(data, PixelFormat(size[0], size[1], ChannelLayout.RGBA, 8))


def test_mask_is_pointwise_alpha_nonzero():
    image = _rgba([(0, 0, 0, 0), (255, 255, 255, 1), (9, 9, 9, 255), (1, 1, 1, 0)])
    assert mask_from_alpha(image).tolist() == [False, True, True, False]


def test_mask_ignores_color_channels():
    image = _rgba([(255, 255, 255, 0), (0, 0, 0, 128)], size=(2, 1))
    assert mask_from_alpha(image).tolist() == [False, True]


def test_render_mask():
    image = render_mask(np.array([True, False]), (2, 1))
    assert image.format.channels is ChannelLayout.RGBA
    assert bytes(image.data) == bytes([255, 255, 255, 255, 0, 0, 0, 255])


def test_build_masks_in_grouping_order(tmp_path, write_png, fill_png):
    body = fill_png(tmp_path / "Body_D.png", (10, 10, 10, 255))
    doors = write_png(tmp_path / "Doors_D.png", [(1, 1, 1, 0), (2, 2, 2, 255), (3, 3, 3, 255), (4, 4, 4, 255)])
    sets = [TextureSet("Body", [body]), TextureSet("Doors", [doors])]

    mask_set = MaskService(ImageService()).build_masks(sets)

    assert mask_set.resolution == (2, 2)
    assert mask_set[0].tolist() == [True] * 4
    assert mask_set[1].tolist() == [False, True, True, True]


def test_mask_source_without_alpha_is_fatal(tmp_path, fill_png):
    path = fill_png(tmp_path / "Body_D.png", (10, 10, 10))
    with pytest.raises(PixelFormatError) as info:
        MaskService(ImageService()).build_masks([TextureSet("Body", [path])])
    assert info.value.path == path


def test_resolution_mismatch_names_both_sizes(tmp_path, fill_png):
    a = fill_png(tmp_path / "A_D.png", (0, 0, 0, 255), size=(2, 2))
    b = fill_png(tmp_path / "B_D.png", (0, 0, 0, 255), size=(4, 2))
    with pytest.raises(ResolutionMismatchError) as info:
        MaskService(ImageService()).build_masks([TextureSet("A", [a]), TextureSet("B", [b])])
    assert info.value.path == b
    assert info.value.actual == (4, 2)
    assert info.value.expected == (2, 2)
    assert "4x2" in str(info.value) and "2x2" in str(info.value)


def test_zero_sized_mask_source_is_fatal(tmp_path, fake_codec):
    path = fake_codec.add(tmp_path / "A_D.png", RawImage(b"", PixelFormat(0, 0, ChannelLayout.RGBA, 8)))
    with pytest.raises(ZeroSizedImageError):
        MaskService(fake_codec).build_masks([TextureSet("A", [path])])


def test_write_mask_images(tmp_path, fake_codec):
    config = RunConfig(suffixes=("_D",), output_directory=tmp_path, output_base_name="Out")
    mask_set = MaskSet([np.array([True, False]), np.array([False, False])], (2, 1))

    written = MaskService(fake_codec).write_mask_images(mask_set, config)

    assert written == [tmp_path / "mask0.png", tmp_path / "mask1.png"]
    assert bytes(fake_codec.written[tmp_path / "mask0.png"].data) == bytes([255, 255, 255, 255, 0, 0, 0, 255])


def test_write_mask_failure_is_logged_and_skipped(tmp_path, fake_codec, caplog):
    config = RunConfig(suffixes=("_D",), output_directory=tmp_path, output_base_name="Out")
    mask_set = MaskSet([np.array([True]), np.array([False])], (1, 1))
    fake_codec.fail_encode_for.add("mask0.png")

    with caplog.at_level(logging.ERROR):
        written = MaskService(fake_codec).write_mask_images(mask_set, config)

    assert written == [tmp_path / "mask1.png"]
    assert "mask0.png" in caplog.text
