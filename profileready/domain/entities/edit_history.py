from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from profileready.domain.entities.render_parameters import CropBox


def _fmt(value: float) -> str:
    return f"{value:g}"


@dataclass(frozen=True)
class EditHistoryEntry:
    """Snapshot of the editable controls at one point of the interaction timeline."""

    scale_x: float = 100.0
    scale_y: float = 100.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    brightness: float = 100.0
    contrast: float = 100.0
    crop: CropBox = field(default_factory=CropBox)

    def with_changes(self, **changes: Any) -> EditHistoryEntry:
        return replace(self, **changes)

    def with_default_placement(self) -> EditHistoryEntry:
        return replace(self, scale_x=100.0, scale_y=100.0, offset_x=0.0, offset_y=0.0)

    # CSS filter applied to the photo and overlay previews
    def css_filter(self) -> str:
        return f"brightness({_fmt(self.brightness / 100)}) contrast({_fmt(self.contrast / 100)})"

    # Overlay is anchored top-centre, then translated and scaled per axis
    def overlay_transform(self) -> str:
        return (
            f"translate(-50%, 0) translate({_fmt(self.offset_x)}%, {_fmt(self.offset_y)}%) "
            f"scale({_fmt(self.scale_x / 100)}, {_fmt(self.scale_y / 100)})"
        )
