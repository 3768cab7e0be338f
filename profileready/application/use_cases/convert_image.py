from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path

from profileready.domain.errors import ExecutorError, UnsupportedFormatError
from profileready.domain.presets import DOWNLOAD_CONTENT_TYPES
from profileready.infrastructure.executors.base import RasterExecutor
from profileready.infrastructure.storage.asset_store import LocalAssetStore

logger = logging.getLogger(__name__)


@dataclass
class ConvertedFile:
    data: bytes
    content_type: str
    filename: str


@dataclass
class ConvertImageUseCase:
    store: LocalAssetStore
    executor: RasterExecutor
    scratch_dir: Path

    def execute(self, asset_id: str, fmt: str | None = "png") -> ConvertedFile:
        fmt = (fmt or "png").lower()
        content_type = DOWNLOAD_CONTENT_TYPES.get(fmt)
        if content_type is None:
            raise UnsupportedFormatError(f"Unsupported format: {fmt}")
        source = self.store.find_latest(asset_id)

        ext = "jpg" if fmt == "jpeg" else fmt
        scratch = self.scratch_dir / f"{asset_id}-{secrets.token_hex(4)}.{ext}"
        try:
            self.executor.run(source.path, [], scratch)
            data = scratch.read_bytes()
        except OSError as exc:
            raise ExecutorError(f"Converted file could not be read: {exc}") from exc
        finally:
            self.store.discard(scratch)
        logger.info("Converted %s to %s (%d bytes)", source.filename, fmt, len(data))
        return ConvertedFile(data=data, content_type=content_type, filename=f"{asset_id}.{fmt}")
