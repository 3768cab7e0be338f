from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from profileready.domain.entities.render_parameters import RenderParameters


class RenderRequest(BaseModel):
    """Render request body; accepted as JSON or as a form."""

    model_config = ConfigDict(populate_by_name=True)

    asset_id: str | None = Field(None, alias="assetId", description="Asset to render from", examples=["1718000000000_9f2c01ab"])
    size: str | None = Field(None, description="Size preset or WIDTHxHEIGHT", examples=["750x975"])
    bgcolor: str | None = Field(None, description="Background colour, 6 hex digits with optional '#'", examples=["#FFFFFF"])
    overlay: str | None = Field(None, description="Overlay code; empty for none", examples=["mansuit"])
    overlay_scale_x: float = Field(100.0, alias="overlayScaleX", description="Overlay width in percent of the target width")
    overlay_scale_y: float = Field(100.0, alias="overlayScaleY", description="Overlay height in percent of the target height")
    overlay_offset_x: float = Field(0.0, alias="overlayOffsetX", description="Horizontal offset in percent of the target width")
    overlay_offset_y: float = Field(0.0, alias="overlayOffsetY", description="Vertical offset in percent of the target height")
    crop_x: float = Field(0.0, alias="cropX", description="Crop left edge in percent of the original width")
    crop_y: float = Field(0.0, alias="cropY", description="Crop top edge in percent of the original height")
    crop_w: float = Field(100.0, alias="cropW", description="Crop width in percent of the original width")
    crop_h: float = Field(100.0, alias="cropH", description="Crop height in percent of the original height")
    brightness: float = Field(100.0, description="100 = unchanged, range 0-200")
    contrast: float = Field(100.0, description="100 = unchanged, range 0-200")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        # form posts send "" for untouched controls
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data

    def to_parameters(self) -> RenderParameters:
        return RenderParameters.build(
            asset_id=self.asset_id,
            size=self.size,
            bgcolor=self.bgcolor,
            overlay=self.overlay,
            overlay_scale_x=self.overlay_scale_x,
            overlay_scale_y=self.overlay_scale_y,
            overlay_offset_x=self.overlay_offset_x,
            overlay_offset_y=self.overlay_offset_y,
            crop_x=self.crop_x,
            crop_y=self.crop_y,
            crop_w=self.crop_w,
            crop_h=self.crop_h,
            brightness=self.brightness,
            contrast=self.contrast,
        )


class RenderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preview_url: str = Field(..., alias="previewUrl", description="URL of the rendered image (local or signed)")
    new_asset_id: str = Field(..., alias="newAssetId", description="Identifier of the rendered asset")
    width: int = Field(..., description="Rendered width in pixels", gt=0)
    height: int = Field(..., description="Rendered height in pixels", gt=0)
