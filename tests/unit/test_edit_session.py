from unittest.mock import Mock

import pytest

from profileready.application.dtos.render_dto import RenderResponse
from profileready.application.edit_session import EditSession
from profileready.domain.entities.render_parameters import CropBox
from profileready.domain.errors import OverlayNotFoundError, UnsupportedFormatError
from profileready.domain.presets import Overlay


def test_setters_record_and_refresh():
    refresh = Mock()
    session = EditSession(asset_id="1_ab", on_refresh=refresh)
    session.set_brightness(120)
    session.set_contrast(80)
    assert session.css_filter == "brightness(1.2) contrast(0.8)"
    assert len(session.history.past) == 3
    assert refresh.call_count == 2


def test_undo_restores_controls_without_recording():
    session = EditSession(asset_id="1_ab")
    session.set_brightness(110)
    session.set_brightness(130)
    restored = session.undo()
    assert restored.brightness == 110
    assert session.controls.brightness == 110
    assert len(session.history.past) == 2
    session.redo()
    assert session.controls.brightness == 130


def test_select_overlay_resets_placement():
    session = EditSession(asset_id="1_ab")
    session.select_overlay("mansuit")
    session.set_scale(x=150)
    session.set_offset(y=20)
    assert session.overlay_transform == "translate(-50%, 0) translate(0%, 20%) scale(1.5, 1)"
    session.select_overlay("womensuit")
    assert session.overlay is Overlay.WOMEN_SUIT
    assert (session.controls.scale_x, session.controls.offset_y) == (100, 0)
    # the reset is itself undoable
    session.undo()
    assert session.controls.scale_x == 150


def test_select_unknown_overlay():
    session = EditSession(asset_id="1_ab")
    with pytest.raises(OverlayNotFoundError):
        session.select_overlay("tuxedo")


def test_crop_pixels_become_percentages():
    session = EditSession(asset_id="1_ab")
    session.set_crop_pixels(100, 50, 200, 100, 400, 200)
    assert session.controls.crop == CropBox(25.0, 25.0, 50.0, 50.0)


def test_render_request_without_overlay_omits_overlay_fields():
    session = EditSession(asset_id="1_ab")
    session.select_size("600x600")
    session.select_background("#00ff00")
    session.set_brightness(120)
    request = session.build_render_request()
    body = request.model_dump(by_alias=True, exclude_unset=True)
    assert body["assetId"] == "1_ab"
    assert body["size"] == "600x600"
    assert body["bgcolor"] == "#00FF00"
    assert body["brightness"] == 120
    assert "overlay" not in body
    assert "overlayScaleX" not in body


def test_render_request_with_overlay():
    session = EditSession(asset_id="1_ab")
    session.select_overlay("mansuit")
    session.set_scale(x=150, y=120)
    session.set_offset(x=-10)
    params = session.build_render_request().to_parameters()
    assert params.overlay == "mansuit"
    assert params.placement.scale_x == 150
    assert params.placement.scale_y == 120
    assert params.placement.offset_x == -10


def test_apply_render_result_and_download_path():
    session = EditSession(asset_id="1_ab")
    session.apply_render_result(RenderResponse(preview_url="/static/2_cd-rendered.png", new_asset_id="2_cd", width=600, height=600))
    assert session.asset_id == "2_cd"
    assert session.preview_url == "/static/2_cd-rendered.png"
    assert session.download_path("JPG") == "/api/image/download?assetId=2_cd&format=jpg"
    with pytest.raises(UnsupportedFormatError):
        session.download_path("bmp")
