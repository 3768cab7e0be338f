from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence

from profileready.domain.entities.raster_operation import RasterOperation

# Output format is taken from the destination suffix
OUTPUT_FORMATS: dict[str, str] = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".pdf": "PDF",
}


class RasterExecutor(Protocol):
    """Black-box raster engine.

    ``run`` blocks until the output raster exists and raises
    ``ExecutorError`` on any failure. Callers treat each call as a suspend
    point and chain calls strictly sequentially.
    """

    def run(self, source: Path, operations: Sequence[RasterOperation], destination: Path) -> None:
        ...
