"""Enumerated tables shared by the server and the editing client.

Both the render endpoint and the client read these; ``GET /api/presets``
publishes them so there is a single source for size and overlay choices.
"""
from __future__ import annotations

from enum import Enum


class SizePreset(str, Enum):
    SQUARE_1000 = "1000x1000"
    PORTRAIT_750 = "750x975"
    PORTRAIT_900 = "900x1200"
    PORTRAIT_1200 = "1200x1500"
    PORTRAIT_1524 = "1524x1905"
    PORTRAIT_1200_TALL = "1200x1800"
    SQUARE_1080 = "1080x1080"
    SQUARE_600 = "600x600"
    PASSPORT_390 = "390x567"
    PORTRAIT_450 = "450x600"

    @property
    def dimensions(self) -> tuple[int, int]:
        width, height = self.value.split("x")
        return int(width), int(height)

    @classmethod
    def lookup(cls, value: str | None) -> SizePreset | None:
        try:
            return cls(value)
        except ValueError:
            return None


class Overlay(str, Enum):
    WOMEN_SUIT = "womensuit"
    MEN_SUIT = "mansuit"
    BOYS_SCHOOL_UNIFORM = "boys-school-uniform"
    GIRLS_SCHOOL_UNIFORM = "girls-school-uniform"
    MENS_UNIVERSITY_UNIFORM = "mens-university-uniform"
    WOMENS_UNIVERSITY_UNIFORM = "womens-university-uniform"

    @property
    def filename(self) -> str:
        return OVERLAY_FILES[self]

    @classmethod
    def lookup(cls, value: str | None) -> Overlay | None:
        try:
            return cls(value)
        except ValueError:
            return None


OVERLAY_FILES: dict[Overlay, str] = {
    Overlay.WOMEN_SUIT: "womensuit.png",
    Overlay.MEN_SUIT: "mansuit.png",
    Overlay.BOYS_SCHOOL_UNIFORM: "boy's-school-uniform.png",
    Overlay.GIRLS_SCHOOL_UNIFORM: "girl's-school-uniform.png",
    Overlay.MENS_UNIVERSITY_UNIFORM: "men's-university-uniform.png",
    Overlay.WOMENS_UNIVERSITY_UNIFORM: "women's-university-uniform.png",
}

DEFAULT_BACKGROUND = "FFFFFF"

# Download formats and their content types
DOWNLOAD_CONTENT_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "pdf": "application/pdf",
}
