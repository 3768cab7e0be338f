import math

import pytest

from profileready.domain.entities.render_parameters import (
    CropBox,
    OverlayPlacement,
    RenderParameters,
    TargetSize,
    round_half_up,
)
from profileready.domain.errors import InvalidParameterError, InvalidSizeError, OverlayNotFoundError
from profileready.domain.presets import Overlay, SizePreset


@pytest.mark.parametrize("preset", list(SizePreset))
def test_presets_resolve_to_their_dimensions(preset):
    target = TargetSize.parse(preset.value)
    assert (target.width, target.height) == preset.dimensions


def test_custom_size_accepts_surrounding_whitespace():
    assert TargetSize.parse(" 320x240 ") == TargetSize(320, 240)
    assert str(TargetSize(320, 240)) == "320x240"


@pytest.mark.parametrize("size", [None, "", "abc", "0x100", "100x0", "100x", "-5x10", "10.5x20"])
def test_invalid_size(size):
    with pytest.raises(InvalidSizeError) as exc:
        TargetSize.parse(size)
    assert exc.value.detail == "Invalid size parameter"


def test_round_half_up_matches_client_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(-0.4) == 0
    assert round_half_up(0.49) == 0


def test_crop_is_clamped_into_image():
    box = CropBox.clamped(-10, 20, 150, 90)
    assert box == CropBox(0.0, 20.0, 100.0, 80.0)


def test_zero_area_crop_is_rejected():
    with pytest.raises(InvalidParameterError):
        CropBox.clamped(100, 0, 10, 10)
    with pytest.raises(InvalidParameterError):
        CropBox.clamped(0, 0, 0, 50)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_values_are_rejected(bad):
    with pytest.raises(InvalidParameterError):
        CropBox.clamped(bad, 0, 100, 100)
    with pytest.raises(InvalidParameterError):
        RenderParameters.build(asset_id="a", size="600x600", brightness=bad)


def test_crop_to_pixels_clips_and_is_at_least_one_pixel():
    assert CropBox(25, 0, 50, 50).to_pixels(100, 200) == (25, 0, 50, 100)
    assert CropBox(0, 0, 100, 100).to_pixels(7, 9) == (0, 0, 7, 9)
    assert CropBox(99.9, 99.9, 0.1, 0.1).to_pixels(10, 10) == (9, 9, 1, 1)


def test_crop_from_pixels():
    box = CropBox.from_pixels(100, 50, 200, 100, 400, 200)
    assert box == CropBox(25.0, 25.0, 50.0, 50.0)
    assert not box.is_full_frame
    assert CropBox().is_full_frame
    with pytest.raises(InvalidParameterError):
        CropBox.from_pixels(0, 0, 1, 1, 0, 10)


def test_overlay_placement_is_clamped_per_axis():
    placement = OverlayPlacement.clamped(10, 500, -150, 30)
    assert placement == OverlayPlacement(50.0, 200.0, -100.0, 30.0)


def test_overlay_size_and_offset_scale_with_target():
    target = TargetSize(750, 975)
    placement = OverlayPlacement(150, 100, 20, -20)
    assert placement.size_for(target) == (1125, 975)
    assert placement.offset_for(target) == (150, -195)
    assert placement.geometry_for(target) == "+150-195"
    assert OverlayPlacement().geometry_for(target) == "+0+0"


def test_build_normalises_values():
    params = RenderParameters.build(
        asset_id="123_ab",
        size="600x600",
        bgcolor="#a1b2c3",
        overlay="",
        brightness=250,
        contrast=-5,
    )
    assert params.background == "A1B2C3"
    assert params.executor_color == "#A1B2C3"
    assert params.overlay is None
    assert params.brightness == 200.0
    assert params.contrast == 0.0
    assert params.brightness_adjustment == 100.0
    assert params.contrast_adjustment == -100.0
    assert params.resolve_overlay() is None


def test_build_defaults_background_to_white():
    params = RenderParameters.build(asset_id="a", size="600x600", bgcolor=None)
    assert params.background == "FFFFFF"


@pytest.mark.parametrize("color", ["#12345", "red", "#GGGGGG"])
def test_invalid_background(color):
    with pytest.raises(InvalidParameterError):
        RenderParameters.build(asset_id="a", size="600x600", bgcolor=color)


def test_resolve_overlay():
    params = RenderParameters.build(asset_id="a", size="600x600", overlay="mansuit")
    assert params.resolve_overlay() is Overlay.MEN_SUIT
    with pytest.raises(OverlayNotFoundError):
        RenderParameters.build(asset_id="a", size="600x600", overlay="tuxedo").resolve_overlay()
