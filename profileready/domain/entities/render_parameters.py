from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from profileready.domain.errors import InvalidParameterError, InvalidSizeError, OverlayNotFoundError
from profileready.domain.presets import DEFAULT_BACKGROUND, Overlay, SizePreset

_SIZE_RE = re.compile(r"^\s*(\d+)x(\d+)\s*$", re.IGNORECASE)
_HEX_RE = re.compile(r"^[0-9a-fA-F]{6}$")

# Documented control ranges; out-of-range inputs are clamped into them.
CROP_RANGE = (0.0, 100.0)
SCALE_RANGE = (50.0, 200.0)
OFFSET_RANGE = (-100.0, 100.0)
TONE_RANGE = (0.0, 200.0)


def round_half_up(value: float) -> int:
    # Matches the client's Math.round, including for negative values.
    return int(math.floor(value + 0.5))


def finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be a finite number")
    return value


def clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(max(value, low), high)


def signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def normalize_color(value: str | None) -> str:
    """Strip the leading ``#``; default to white."""
    if not value:
        return DEFAULT_BACKGROUND
    color = value.strip().lstrip("#")
    if not _HEX_RE.match(color):
        raise InvalidParameterError(f"Invalid background color: {value}")
    return color.upper()


@dataclass(frozen=True)
class TargetSize:
    width: int
    height: int

    @classmethod
    def parse(cls, size: str | None) -> TargetSize:
        preset = SizePreset.lookup(size)
        if preset is not None:
            return cls(*preset.dimensions)
        match = _SIZE_RE.match(size or "")
        if match:
            width, height = int(match.group(1)), int(match.group(2))
            if width > 0 and height > 0:
                return cls(width, height)
        raise InvalidSizeError("Invalid size parameter")

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class CropBox:
    """Crop rectangle in percent of the referenced image's dimensions."""

    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0

    @classmethod
    def clamped(cls, x: float, y: float, width: float, height: float) -> CropBox:
        x = clamp(finite("cropX", x), CROP_RANGE)
        y = clamp(finite("cropY", y), CROP_RANGE)
        width = clamp(finite("cropW", width), (0.0, 100.0 - x))
        height = clamp(finite("cropH", height), (0.0, 100.0 - y))
        if width <= 0 or height <= 0:
            raise InvalidParameterError("Crop area must be larger than zero")
        return cls(x, y, width, height)

    @classmethod
    def from_pixels(
        cls, x: float, y: float, width: float, height: float, natural_width: int, natural_height: int
    ) -> CropBox:
        if natural_width <= 0 or natural_height <= 0:
            raise InvalidParameterError("Natural image size must be positive")
        return cls.clamped(
            x / natural_width * 100,
            y / natural_height * 100,
            width / natural_width * 100,
            height / natural_height * 100,
        )

    @property
    def is_full_frame(self) -> bool:
        return (self.x, self.y, self.width, self.height) == (0.0, 0.0, 100.0, 100.0)

    def to_pixels(self, image_width: int, image_height: int) -> tuple[int, int, int, int]:
        """Return ``(left, top, width, height)`` clipped to the image."""
        left = min(round_half_up(self.x / 100 * image_width), image_width - 1)
        top = min(round_half_up(self.y / 100 * image_height), image_height - 1)
        width = max(1, min(round_half_up(self.width / 100 * image_width), image_width - left))
        height = max(1, min(round_half_up(self.height / 100 * image_height), image_height - top))
        return left, top, width, height


@dataclass(frozen=True)
class OverlayPlacement:
    """Overlay scale and offset, both in percent of the target size."""

    scale_x: float = 100.0
    scale_y: float = 100.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def clamped(cls, scale_x: float, scale_y: float, offset_x: float, offset_y: float) -> OverlayPlacement:
        return cls(
            clamp(finite("overlayScaleX", scale_x), SCALE_RANGE),
            clamp(finite("overlayScaleY", scale_y), SCALE_RANGE),
            clamp(finite("overlayOffsetX", offset_x), OFFSET_RANGE),
            clamp(finite("overlayOffsetY", offset_y), OFFSET_RANGE),
        )

    def size_for(self, target: TargetSize) -> tuple[int, int]:
        width = max(1, round_half_up(target.width * self.scale_x / 100))
        height = max(1, round_half_up(target.height * self.scale_y / 100))
        return width, height

    def offset_for(self, target: TargetSize) -> tuple[int, int]:
        return (
            round_half_up(self.offset_x / 100 * target.width),
            round_half_up(self.offset_y / 100 * target.height),
        )

    def geometry_for(self, target: TargetSize) -> str:
        dx, dy = self.offset_for(target)
        return f"{signed(dx)}{signed(dy)}"


@dataclass(frozen=True)
class RenderParameters:
    asset_id: str | None
    size: str | None
    background: str = DEFAULT_BACKGROUND
    crop: CropBox = field(default_factory=CropBox)
    overlay: str | None = None
    placement: OverlayPlacement = field(default_factory=OverlayPlacement)
    brightness: float = 100.0
    contrast: float = 100.0

    @classmethod
    def build(
        cls,
        *,
        asset_id: str | None,
        size: str | None,
        bgcolor: str | None = None,
        overlay: str | None = None,
        overlay_scale_x: float = 100.0,
        overlay_scale_y: float = 100.0,
        overlay_offset_x: float = 0.0,
        overlay_offset_y: float = 0.0,
        crop_x: float = 0.0,
        crop_y: float = 0.0,
        crop_w: float = 100.0,
        crop_h: float = 100.0,
        brightness: float = 100.0,
        contrast: float = 100.0,
    ) -> RenderParameters:
        """Normalise raw request values; the target size is resolved later by the pipeline."""
        return cls(
            asset_id=asset_id or None,
            size=size,
            background=normalize_color(bgcolor),
            crop=CropBox.clamped(crop_x, crop_y, crop_w, crop_h),
            overlay=overlay or None,
            placement=OverlayPlacement.clamped(
                overlay_scale_x, overlay_scale_y, overlay_offset_x, overlay_offset_y
            ),
            brightness=clamp(finite("brightness", brightness), TONE_RANGE),
            contrast=clamp(finite("contrast", contrast), TONE_RANGE),
        )

    @property
    def executor_color(self) -> str:
        return f"#{self.background}"

    # 100 is neutral; the executor takes a signed adjustment in [-100, 100]
    @property
    def brightness_adjustment(self) -> float:
        return self.brightness - 100

    @property
    def contrast_adjustment(self) -> float:
        return self.contrast - 100

    def resolve_overlay(self) -> Overlay | None:
        if self.overlay is None:
            return None
        selected = Overlay.lookup(self.overlay)
        if selected is None:
            raise OverlayNotFoundError(f"Unknown overlay: {self.overlay}")
        return selected
