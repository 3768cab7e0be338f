from __future__ import annotations

import logging
import re
import secrets
import time
from pathlib import Path

from profileready.domain.entities.asset import Asset, AssetRole
from profileready.domain.errors import NotFoundError

logger = logging.getLogger(__name__)

# Extensions accepted for stored originals; anything else is stored as .png
ORIGINAL_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tif", ".tiff"}

# Served rasters, most authoritative first
_SERVED_ROLES = (AssetRole.RENDERED, AssetRole.PREVIEW)

_ID_RE = re.compile(r"^[A-Za-z0-9_]+$")


def new_asset_id() -> str:
    """Timestamp plus random suffix, e.g. ``1718000000000_9f2c01ab``."""
    return f"{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def original_extension(filename: str | None) -> str:
    ext = Path(filename or "").suffix.lower()
    return ext if ext in ORIGINAL_EXTENSIONS else ".png"


class LocalAssetStore:
    """Filesystem store for originals, intermediates and served rasters.

    Originals and per-render temporaries live under ``upload_dir``; previews
    and renders live under ``static_dir`` which is served at ``/static``.
    Lookups are by exact identifier, never by bare prefix.
    """

    def __init__(self, upload_dir: Path, static_dir: Path, static_url: str = "/static") -> None:
        self.upload_dir = Path(upload_dir)
        self.static_dir = Path(static_dir)
        self.static_url = static_url.rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.static_dir.mkdir(parents=True, exist_ok=True)

    def save_original(self, asset_id: str, data: bytes, filename: str | None) -> Asset:
        path = self.upload_dir / f"{asset_id}-{AssetRole.ORIGINAL.value}{original_extension(filename)}"
        path.write_bytes(data)
        return Asset(id=asset_id, role=AssetRole.ORIGINAL, path=path)

    def served(self, asset_id: str, role: AssetRole) -> Asset:
        return Asset(id=asset_id, role=role, path=self.static_dir / f"{asset_id}-{role.value}.png")

    def temporary(self, asset_id: str, role: AssetRole) -> Asset:
        return Asset(id=asset_id, role=role, path=self.upload_dir / f"{asset_id}-{role.value}.png")

    def find_original(self, asset_id: str) -> Asset:
        if not _ID_RE.match(asset_id or ""):
            raise NotFoundError("Original file not found")
        for path in sorted(self.upload_dir.glob(f"{asset_id}-{AssetRole.ORIGINAL.value}.*")):
            if path.is_file():
                return Asset(id=asset_id, role=AssetRole.ORIGINAL, path=path)
        # Rendered assets point back to the original they were rendered from
        root_file = self._root_file(asset_id)
        if root_file.is_file():
            root_id = root_file.read_text(encoding="utf-8").strip()
            if root_id != asset_id:
                return self.find_original(root_id)
        raise NotFoundError("Original file not found")

    def link_root(self, asset_id: str, original: Asset) -> None:
        """Remember that ``asset_id`` was rendered from ``original``; re-renders start from it."""
        self._root_file(asset_id).write_text(original.id, encoding="utf-8")

    def _root_file(self, asset_id: str) -> Path:
        return self.upload_dir / f"{asset_id}.root"

    def find_latest(self, asset_id: str) -> Asset:
        """Served raster for ``asset_id``: the render if there is one, else the preview."""
        if _ID_RE.match(asset_id or ""):
            for role in _SERVED_ROLES:
                asset = self.served(asset_id, role)
                if asset.path.is_file():
                    return asset
        raise NotFoundError("File not found")

    def public_url(self, asset: Asset) -> str:
        return f"{self.static_url}/{asset.filename}"

    def discard(self, path: Path) -> None:
        """Best-effort delete; failures are logged and never raised."""
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not delete temporary file %s: %s", path, exc)
