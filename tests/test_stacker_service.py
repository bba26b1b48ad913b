import logging
from pathlib import Path

import pytest

from texture_stacker.models.errors import (
    ConfigError,
    InputDirectoryError,
    OutputDirectoryError,
    PixelFormatError,
    ResolutionMismatchError,
)
from texture_stacker.models.image_model import ChannelLayout, PixelFormat, RawImage
from texture_stacker.models.texture_set import RunConfig, RunStage
from texture_stacker.services.stacker_service import TextureStacker, resolve_output_location

BODY = [(10, 11, 12, 255)] * 4
DOORS = [(20, 21, 22, 0), (30, 31, 32, 255), (40, 41, 42, 255), (50, 51, 52, 255)]


def _config(tmp_path, suffixes=("_D",), **kwargs):
    return RunConfig(suffixes=suffixes, output_directory=tmp_path / "out", output_base_name="Car", **kwargs)


@pytest.fixture
def input_dir(tmp_path):
    directory = tmp_path / "input"
    directory.mkdir()
    return directory


def test_scenario_a_masked_composite(tmp_path, input_dir, write_png, read_png):
    write_png(input_dir / "Body_D.png", BODY)
    write_png(input_dir / "Doors_D.png", DOORS)

    result = TextureStacker(_config(tmp_path)).run(input_dir)

    output = tmp_path / "out" / "Car_D.png"
    assert result.written == [output]
    mode, size, pixels = read_png(output)
    assert (mode, size) == ("RGB", (2, 2))
    assert pixels == [(10, 11, 12), (30, 31, 32), (40, 41, 42), (50, 51, 52)]


def test_scenario_b_set_without_mask_source_is_skipped(tmp_path, input_dir, write_png, fill_png, read_png, caplog):
    write_png(input_dir / "Body_D.png", BODY)
    fill_png(input_dir / "Body_N.png", (1, 2, 3))
    fill_png(input_dir / "Wheel_N.png", (9, 9, 9))

    with caplog.at_level(logging.WARNING):
        result = TextureStacker(_config(tmp_path, suffixes=("_D", "_N"))).run(input_dir)

    assert result.skipped_sets == ["Wheel"]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Wheel" in warnings[0].getMessage()
    _mode, _size, normal = read_png(tmp_path / "out" / "Car_N.png")
    assert normal == [(1, 2, 3)] * 4


def test_scenario_c_partial_sets(tmp_path, input_dir, write_png, fill_png, read_png):
    write_png(input_dir / "Body_D.png", BODY)
    fill_png(input_dir / "Body_N.png", (1, 2, 3))
    write_png(input_dir / "Doors_D.png", DOORS)

    result = TextureStacker(_config(tmp_path, suffixes=("_D", "_N"))).run(input_dir)

    out = tmp_path / "out"
    assert result.written == [out / "Car_D.png", out / "Car_N.png"]
    assert read_png(out / "Car_N.png")[2] == [(1, 2, 3)] * 4
    assert read_png(out / "Car_D.png")[2] == [(10, 11, 12), (30, 31, 32), (40, 41, 42), (50, 51, 52)]


def test_scenario_d_resolution_mismatch_writes_nothing(tmp_path, input_dir, fill_png):
    fill_png(input_dir / "Body_D.png", (1, 1, 1, 255), size=(2, 2))
    fill_png(input_dir / "Doors_D.png", (1, 1, 1, 255), size=(4, 4))
    stacker = TextureStacker(_config(tmp_path))

    with pytest.raises(ResolutionMismatchError):
        stacker.run(input_dir)

    assert stacker.stage is RunStage.FAILED
    assert list((tmp_path / "out").iterdir()) == []


def test_suffix_without_layers_is_not_written(tmp_path, input_dir, write_png):
    write_png(input_dir / "Body_D.png", BODY)
    progress = []

    result = TextureStacker(_config(tmp_path, suffixes=("_D", "_E")), progress=progress.append).run(input_dir)

    assert result.written == [tmp_path / "out" / "Car_D.png"]
    assert not (tmp_path / "out" / "Car_E.png").exists()
    assert progress == [0.5, 1.0]


def test_keep_mask_alpha(tmp_path, input_dir, write_png, read_png):
    write_png(input_dir / "Doors_D.png", DOORS)
    TextureStacker(_config(tmp_path, keep_mask_alpha=True)).run(input_dir)
    mode, _size, pixels = read_png(tmp_path / "out" / "Car_D.png")
    assert mode == "RGBA"
    assert pixels == DOORS


def test_output_masks(tmp_path, input_dir, write_png, read_png):
    write_png(input_dir / "Body_D.png", BODY)
    write_png(input_dir / "Doors_D.png", DOORS)

    result = TextureStacker(_config(tmp_path, output_masks=True)).run(input_dir)

    out = tmp_path / "out"
    assert result.masks_written == [out / "mask0.png", out / "mask1.png"]
    white, black = (255, 255, 255, 255), (0, 0, 0, 255)
    assert read_png(out / "mask1.png")[2] == [black, white, white, white]


def test_stage_is_done_after_success(tmp_path, input_dir, write_png):
    write_png(input_dir / "Body_D.png", BODY)
    stacker = TextureStacker(_config(tmp_path))
    assert stacker.stage is RunStage.IDLE
    stacker.run(input_dir)
    assert stacker.stage is RunStage.DONE


def test_empty_directory_writes_nothing(tmp_path, input_dir):
    progress = []
    result = TextureStacker(_config(tmp_path), progress=progress.append).run(input_dir)
    assert result.written == []
    assert progress == [1.0]
    assert (tmp_path / "out").is_dir()


def test_empty_suffix_list(tmp_path, input_dir):
    with pytest.raises(ConfigError):
        TextureStacker(_config(tmp_path, suffixes=())).run(input_dir)


def test_missing_input_directory(tmp_path):
    stacker = TextureStacker(_config(tmp_path))
    with pytest.raises(InputDirectoryError):
        stacker.run(tmp_path / "missing")
    assert stacker.stage is RunStage.FAILED


def test_output_directory_cannot_be_created(tmp_path, input_dir):
    blocker = tmp_path / "out"
    blocker.write_text("a file, not a directory")
    with pytest.raises(OutputDirectoryError):
        TextureStacker(_config(tmp_path)).run(input_dir)


def test_resolve_output_location_defaults_to_combined_subdirectory(tmp_path):
    assert resolve_output_location(tmp_path, None, "Car") == (tmp_path / "Combined", "Car")


def test_resolve_output_location_with_relative_name(tmp_path):
    directory, name = resolve_output_location(tmp_path, tmp_path / "out", "/textures\\Car")
    assert directory == tmp_path / "out" / "textures"
    assert name == "Car"


def test_resolve_output_location_explicit_directory(tmp_path):
    assert resolve_output_location(tmp_path, str(tmp_path / "x"), "Car") == (Path(tmp_path / "x"), "Car")


def test_resolve_output_location_strips_trailing_separator(tmp_path):
    assert resolve_output_location(tmp_path, tmp_path / "out", "textures/") == (tmp_path / "out", "textures")
    assert resolve_output_location(tmp_path, tmp_path / "out", "maps\\Car\\") == (tmp_path / "out" / "maps", "Car")


@pytest.mark.parametrize("name", ["../Car", "maps/../../Car", "..\\Car"])
def test_resolve_output_location_rejects_parent_reference(tmp_path, name):
    with pytest.raises(ConfigError):
        resolve_output_location(tmp_path, tmp_path / "out", name)


def test_sixteen_bit_later_layer_fails_the_run(tmp_path, input_dir, fake_codec):
    mask_format = PixelFormat(2, 1, ChannelLayout.RGBA, 8)
    normal_format = PixelFormat(2, 1, ChannelLayout.RGB, 16)
    for name, fill in (("A", 1), ("B", 2)):
        for suffix, image in (
            ("_D", RawImage(bytes([fill, fill, fill, 255] * 2), mask_format)),
            ("_N", RawImage(bytes([fill] * 12), normal_format)),
        ):
            path = input_dir / f"{name}{suffix}.png"
            path.touch()
            fake_codec.add(path, image)

    stacker = TextureStacker(_config(tmp_path, suffixes=("_D", "_N")), codec=fake_codec)
    with pytest.raises(PixelFormatError) as info:
        stacker.run(input_dir)

    assert info.value.path == input_dir / "B_N.png"
    assert stacker.stage is RunStage.FAILED
    assert tmp_path / "out" / "Car_N.png" not in fake_codec.written
