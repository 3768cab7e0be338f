from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class AssetRole(str, Enum):
    ORIGINAL = "original"  # as uploaded, never mutated
    PREVIEW = "preview"
    RENDERED = "rendered"  # becomes the client's current asset after a render
    BASE = "base"  # intermediate, removed after each render
    OVERLAY = "overlay"  # intermediate, removed after each render


@dataclass(frozen=True)
class Asset:
    id: str
    role: AssetRole
    path: Path  # {id}-{role}{ext}

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix.lower().lstrip(".")
