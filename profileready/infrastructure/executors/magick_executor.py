from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from PIL import Image, UnidentifiedImageError

from profileready.domain.entities.raster_operation import (
    AutoOrient,
    BrightnessContrast,
    CompositeOver,
    CropPercent,
    Extent,
    RasterOperation,
    Repage,
    Resize,
    ResizeFill,
)
from profileready.domain.entities.render_parameters import round_half_up, signed
from profileready.domain.errors import ExecutorError
from profileready.infrastructure.executors.base import OUTPUT_FORMATS

logger = logging.getLogger(__name__)

_ORIENTATION_TAG = 0x0112
_SWAPPED_ORIENTATIONS = {5, 6, 7, 8}


def _probe(path: Path) -> tuple[int, int, int]:
    with Image.open(path) as img:
        orientation = int(img.getexif().get(_ORIENTATION_TAG, 1) or 1)
        return img.width, img.height, orientation


class MagickExecutor:
    """Runs the ImageMagick ``magick`` binary, one process per call."""

    def __init__(self, binary: str = "magick", timeout: float | None = 60.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def build_command(self, source: Path, operations: Sequence[RasterOperation], destination: Path) -> list[str]:
        # Percent crops are resolved to pixels here, so the current size is tracked per step.
        width = height = orientation = 0
        if any(isinstance(op, CropPercent) for op in operations):
            width, height, orientation = _probe(source)
        args: list[str] = [self.binary, str(source)]
        for op in operations:
            if isinstance(op, AutoOrient):
                args.append("-auto-orient")
                if orientation in _SWAPPED_ORIENTATIONS:
                    width, height = height, width
            elif isinstance(op, CropPercent):
                left, top, width, height = op.box.to_pixels(width, height)
                args += ["-crop", f"{width}x{height}+{left}+{top}"]
            elif isinstance(op, Repage):
                args.append("+repage")
            elif isinstance(op, ResizeFill):
                args += ["-resize", f"{op.width}x{op.height}^"]
                if width and height:
                    scale = max(op.width / width, op.height / height)
                    width, height = round_half_up(width * scale), round_half_up(height * scale)
            elif isinstance(op, Resize):
                if not op.keep_aspect:
                    geometry = f"{op.width}x{op.height}!"
                else:
                    geometry = f"{op.width}x{op.height}" + (">" if op.only_shrink else "")
                args += ["-resize", geometry]
                if width and height:
                    width, height = op.output_size(width, height)
            elif isinstance(op, Extent):
                args += [
                    "-gravity", op.gravity,
                    "-background", op.background,
                    "-extent", f"{op.width}x{op.height}",
                ]
                width, height = op.width, op.height
            elif isinstance(op, BrightnessContrast):
                args += ["-brightness-contrast", f"{op.brightness:g}x{op.contrast:g}"]
            elif isinstance(op, CompositeOver):
                args += [
                    str(op.overlay),
                    "-gravity", op.gravity,
                    "-geometry", f"{signed(op.offset_x)}{signed(op.offset_y)}",
                    "-compose", "over",
                    "-composite",
                ]
            else:
                raise ExecutorError(f"Unsupported operation: {type(op).__name__}")
        args.append(str(destination))
        return args

    def run(self, source: Path, operations: Sequence[RasterOperation], destination: Path) -> None:
        if destination.suffix.lower() not in OUTPUT_FORMATS:
            raise ExecutorError(f"Unsupported output format: {destination.suffix}")
        try:
            cmd = self.build_command(source, operations, destination)
        except (OSError, UnidentifiedImageError) as exc:
            raise ExecutorError(f"Cannot read {source.name}: {exc}") from exc
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Running ImageMagick: %s", " ".join(cmd))
        try:
            subprocess.run(cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE, timeout=self.timeout)
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", errors="ignore") if exc.stderr else ""
            logger.error("ImageMagick failed (returncode=%s): %s", exc.returncode, stderr)
            raise ExecutorError(stderr or str(exc)) from exc
        except subprocess.TimeoutExpired as exc:
            logger.error("ImageMagick timed out after %ss", self.timeout)
            raise ExecutorError(f"Raster processing timed out after {self.timeout}s") from exc
        except FileNotFoundError as exc:
            raise ExecutorError(f"ImageMagick binary not found: {self.binary}") from exc
