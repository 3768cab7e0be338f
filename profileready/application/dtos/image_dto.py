from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadImageResponse(BaseModel):
    """Response model for successful image upload."""

    model_config = ConfigDict(populate_by_name=True)

    preview_url: str = Field(..., alias="previewUrl", description="URL of the bounded preview", examples=["/static/1718000000000_9f2c01ab-preview.png"])
    asset_id: str = Field(..., alias="assetId", description="Identifier of the stored original", examples=["1718000000000_9f2c01ab"])


class SizePresetItem(BaseModel):
    value: str = Field(..., description="Preset as WIDTHxHEIGHT", examples=["750x975"])
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class OverlayItem(BaseModel):
    code: str = Field(..., description="Overlay code sent as `overlay` in render requests", examples=["mansuit"])
    filename: str = Field(..., description="Overlay image file name")
    url: str = Field(..., description="Where the client can load the overlay for previews")


class PresetsResponse(BaseModel):
    sizes: list[SizePresetItem]
    overlays: list[OverlayItem]
    formats: list[str] = Field(..., description="Download formats accepted by the download endpoint")
