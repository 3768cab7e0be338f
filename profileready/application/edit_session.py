from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import urlencode

from profileready.application.dtos.render_dto import RenderRequest, RenderResponse
from profileready.domain.entities.edit_history import EditHistoryEntry
from profileready.domain.entities.render_parameters import CropBox, normalize_color
from profileready.domain.errors import OverlayNotFoundError, UnsupportedFormatError
from profileready.domain.presets import DEFAULT_BACKGROUND, DOWNLOAD_CONTENT_TYPES, Overlay, SizePreset
from profileready.domain.services.edit_history import EditHistory

RefreshCallback = Callable[["EditSession"], None]


@dataclass
class EditSession:
    """Client-side state of the settings page.

    ``controls`` mirrors what the sliders, numeric inputs, overlay transform
    and crop tool show. Every setter updates ``controls``, refreshes the
    derived visuals through ``on_refresh`` and records a snapshot; undo and
    redo write the restored snapshot back into ``controls`` without
    recording.
    """

    asset_id: str
    preview_url: str | None = None
    size: str = SizePreset.PORTRAIT_750.value
    background: str = DEFAULT_BACKGROUND
    overlay: Overlay | None = None
    on_refresh: RefreshCallback | None = None
    controls: EditHistoryEntry = field(default_factory=EditHistoryEntry)

    def __post_init__(self) -> None:
        self.history = EditHistory(self.controls, on_apply=self._apply)

    # --- derived visuals -------------------------------------------------
    @property
    def css_filter(self) -> str:
        return self.controls.css_filter()

    @property
    def overlay_transform(self) -> str:
        return self.controls.overlay_transform()

    # --- control changes -------------------------------------------------
    def set_scale(self, *, x: float | None = None, y: float | None = None) -> None:
        self._change(
            scale_x=self.controls.scale_x if x is None else float(x),
            scale_y=self.controls.scale_y if y is None else float(y),
        )

    def set_offset(self, *, x: float | None = None, y: float | None = None) -> None:
        self._change(
            offset_x=self.controls.offset_x if x is None else float(x),
            offset_y=self.controls.offset_y if y is None else float(y),
        )

    def set_brightness(self, value: float) -> None:
        self._change(brightness=float(value))

    def set_contrast(self, value: float) -> None:
        self._change(contrast=float(value))

    def set_crop_pixels(
        self, x: float, y: float, width: float, height: float, natural_width: int, natural_height: int
    ) -> None:
        """Take the crop tool's pixel box, relative to the photo's natural size."""
        self._change(crop=CropBox.from_pixels(x, y, width, height, natural_width, natural_height))

    def select_overlay(self, code: str) -> None:
        selected = Overlay.lookup(code)
        if selected is None:
            raise OverlayNotFoundError(f"Unknown overlay: {code}")
        self.overlay = selected
        # a new overlay starts from the default scale and offset
        self.controls = self.controls.with_default_placement()
        self._refresh()
        self.history.record(self.controls)

    def clear_overlay(self) -> None:
        self.overlay = None

    def select_size(self, size: str) -> None:
        self.size = size

    def select_background(self, color: str) -> None:
        self.background = normalize_color(color)

    # --- history ---------------------------------------------------------
    def undo(self) -> EditHistoryEntry:
        return self.history.undo()

    def redo(self) -> EditHistoryEntry:
        return self.history.redo()

    # --- server round trips ----------------------------------------------
    def build_render_request(self) -> RenderRequest:
        state = self.history.current()
        body: dict[str, object] = {
            "assetId": self.asset_id,
            "size": self.size,
            "bgcolor": f"#{self.background}",
            "overlay": self.overlay.value if self.overlay else "",
            "brightness": state.brightness,
            "contrast": state.contrast,
            "cropX": state.crop.x,
            "cropY": state.crop.y,
            "cropW": state.crop.width,
            "cropH": state.crop.height,
        }
        # overlay adjustments are only meaningful with an overlay selected
        if self.overlay is not None:
            body.update(
                overlayScaleX=state.scale_x,
                overlayScaleY=state.scale_y,
                overlayOffsetX=state.offset_x,
                overlayOffsetY=state.offset_y,
            )
        return RenderRequest.model_validate(body)

    def apply_render_result(self, result: RenderResponse) -> None:
        self.asset_id = result.new_asset_id
        self.preview_url = result.preview_url

    def download_path(self, fmt: str) -> str:
        fmt = fmt.lower()
        if fmt not in DOWNLOAD_CONTENT_TYPES:
            raise UnsupportedFormatError(f"Unsupported format: {fmt}")
        return f"/api/image/download?{urlencode({'assetId': self.asset_id, 'format': fmt})}"

    # --- internals -------------------------------------------------------
    def _change(self, **changes: object) -> None:
        self.controls = self.controls.with_changes(**changes)
        self._refresh()
        self.history.record(self.controls)

    def _apply(self, entry: EditHistoryEntry) -> None:
        self.controls = entry
        self._refresh()

    def _refresh(self) -> None:
        if self.on_refresh is not None:
            self.on_refresh(self)
