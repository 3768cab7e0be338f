from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image, UnidentifiedImageError

from profileready.domain.entities.raster_operation import (
    NORTH,
    AutoOrient,
    BrightnessContrast,
    CompositeOver,
    CropPercent,
    Extent,
    RasterOperation,
    Repage,
    Resize,
    ResizeFill,
    anchor,
)
from profileready.domain.entities.render_parameters import round_half_up
from profileready.domain.errors import ExecutorError
from profileready.domain.services.processing_service import ProcessingService
from profileready.infrastructure.executors.base import OUTPUT_FORMATS

logger = logging.getLogger(__name__)

_ORIENTATION_TAG = 0x0112


def _load(path: Path) -> tuple[np.ndarray, int]:
    with Image.open(path) as img:
        orientation = int(img.getexif().get(_ORIENTATION_TAG, 1) or 1)
        arr = np.asarray(img.convert("RGBA")).astype(np.float32) / 255.0
    return arr, orientation


def _to_image(array: np.ndarray) -> Image.Image:
    arr = (np.clip(array, 0.0, 1.0) * 255.0 + 0.5).astype("uint8")
    return Image.fromarray(arr)


def _resize(array: np.ndarray, width: int, height: int) -> np.ndarray:
    if array.shape[1] == width and array.shape[0] == height:
        return array
    img = _to_image(array).resize((width, height), Image.Resampling.LANCZOS)
    return np.asarray(img).astype(np.float32) / 255.0


def _fills_north_extent(op: ResizeFill, following: RasterOperation | None) -> bool:
    return (
        isinstance(following, Extent)
        and following.gravity == NORTH
        and (following.width, following.height) == (op.width, op.height)
    )


class PillowExecutor:
    """In-process executor on Pillow and NumPy."""

    def __init__(self, processing: ProcessingService | None = None) -> None:
        self.processing = processing or ProcessingService()

    def run(self, source: Path, operations: Sequence[RasterOperation], destination: Path) -> None:
        fmt = OUTPUT_FORMATS.get(destination.suffix.lower())
        if fmt is None:
            raise ExecutorError(f"Unsupported output format: {destination.suffix}")
        logger.debug("Rendering %s -> %s (%d ops)", source.name, destination.name, len(operations))
        try:
            frame, orientation = _load(source)
            ops = list(operations)
            for index, op in enumerate(ops):
                following = ops[index + 1] if index + 1 < len(ops) else None
                if isinstance(op, ResizeFill) and _fills_north_extent(op, following):
                    frame = self._fill_extent(frame, op)
                else:
                    frame = self._apply(op, frame, orientation)
            self._save(frame, destination, fmt)
        except ExecutorError:
            raise
        except (OSError, ValueError, MemoryError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
            logger.error("Raster processing failed for %s: %s", source.name, exc)
            raise ExecutorError(f"Raster processing failed: {exc}") from exc

    def _apply(self, op: RasterOperation, frame: np.ndarray, orientation: int) -> np.ndarray:
        ps = self.processing
        h, w = frame.shape[:2]
        if isinstance(op, AutoOrient):
            return ps.orient(frame, orientation)
        if isinstance(op, CropPercent):
            left, top, cw, ch = op.box.to_pixels(w, h)
            return ps.crop(frame, left, left + cw, top, top + ch)
        if isinstance(op, Repage):
            # arrays carry no virtual canvas offset
            return frame
        if isinstance(op, ResizeFill):
            scale = max(op.width / w, op.height / h)
            return _resize(frame, max(1, round_half_up(w * scale)), max(1, round_half_up(h * scale)))
        if isinstance(op, Resize):
            return _resize(frame, *op.output_size(w, h))
        if isinstance(op, Extent):
            canvas = ps.canvas(op.width, op.height, ps.hex_to_rgb(op.background))
            x, y = anchor(op.gravity, (op.width, op.height), (w, h))
            return ps.composite_over(canvas, frame, x, y)
        if isinstance(op, BrightnessContrast):
            return ps.adjust_brightness_contrast(frame, op.brightness, op.contrast)
        if isinstance(op, CompositeOver):
            overlay, _ = _load(op.overlay)
            x, y = anchor(op.gravity, (w, h), overlay.shape[1::-1])
            return ps.composite_over(frame, overlay, x + op.offset_x, y + op.offset_y)
        raise ExecutorError(f"Unsupported operation: {type(op).__name__}")

    def _fill_extent(self, frame: np.ndarray, op: ResizeFill) -> np.ndarray:
        """
        Resize-fill followed by a same-size north extent, without the oversized
        intermediate.

        Only the part of the source that survives the extent is cropped out
        (horizontally centred, top-anchored) and resized straight to
        ``width x height``.
        """
        h, w = frame.shape[:2]
        scale = max(op.width / w, op.height / h)
        keep_w = min(w, max(1, round_half_up(op.width / scale)))
        keep_h = min(h, max(1, round_half_up(op.height / scale)))
        left, _ = anchor(NORTH, (w, h), (keep_w, keep_h))
        kept = self.processing.crop(frame, left, left + keep_w, 0, keep_h)
        return _resize(kept, op.width, op.height)

    def _save(self, frame: np.ndarray, destination: Path, fmt: str) -> None:
        if fmt == "PNG" and not self.processing.is_opaque(frame):
            img = _to_image(frame)
        else:
            img = _to_image(self.processing.flatten(frame))
        destination.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "JPEG":
            img.save(destination, format=fmt, quality=95)
        else:
            img.save(destination, format=fmt)
