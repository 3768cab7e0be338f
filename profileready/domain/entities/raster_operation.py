"""Named raster operations understood by every executor backend.

An executor receives one input raster and an ordered sequence of these values
and writes a single output raster. Geometry follows ImageMagick conventions:
gravity picks the anchor, offsets are signed pixels from that anchor.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from profileready.domain.entities.render_parameters import CropBox, round_half_up

NORTH = "north"
CENTER = "center"


@dataclass(frozen=True)
class AutoOrient:
    """Apply the EXIF orientation so pixels match what the camera displayed."""


@dataclass(frozen=True)
class CropPercent:
    box: CropBox


@dataclass(frozen=True)
class Repage:
    """Reset virtual canvas offsets left behind by a crop."""


@dataclass(frozen=True)
class ResizeFill:
    """Scale so the image covers ``width x height`` (``WxH^``)."""

    width: int
    height: int


@dataclass(frozen=True)
class Resize:
    width: int
    height: int
    keep_aspect: bool = False  # False: exact size (``WxH!``)
    only_shrink: bool = False  # ``WxH>``

    def output_size(self, image_width: int, image_height: int) -> tuple[int, int]:
        if not self.keep_aspect:
            return self.width, self.height
        scale = min(self.width / image_width, self.height / image_height)
        if self.only_shrink and scale >= 1.0:
            return image_width, image_height
        return max(1, round_half_up(image_width * scale)), max(1, round_half_up(image_height * scale))


@dataclass(frozen=True)
class Extent:
    width: int
    height: int
    background: str  # "#RRGGBB"
    gravity: str = NORTH


@dataclass(frozen=True)
class BrightnessContrast:
    brightness: float  # [-100, 100]
    contrast: float  # [-100, 100]


@dataclass(frozen=True)
class CompositeOver:
    overlay: Path
    offset_x: int = 0
    offset_y: int = 0
    gravity: str = NORTH


RasterOperation = Union[
    AutoOrient, CropPercent, Repage, ResizeFill, Resize, Extent, BrightnessContrast, CompositeOver
]


def anchor(gravity: str, canvas: tuple[int, int], image: tuple[int, int]) -> tuple[int, int]:
    """Top-left position of ``image`` on ``canvas`` for the given gravity, before offsets."""
    canvas_w, canvas_h = canvas
    image_w, image_h = image
    x = (canvas_w - image_w) // 2
    if gravity == NORTH:
        return x, 0
    if gravity == CENTER:
        return x, (canvas_h - image_h) // 2
    raise ValueError(f"Unsupported gravity: {gravity}")
