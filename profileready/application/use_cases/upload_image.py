from __future__ import annotations

import logging
from dataclasses import dataclass

from profileready.application.use_cases.publish_preview import PublishPreviewUseCase
from profileready.domain.entities.asset import AssetRole
from profileready.domain.entities.raster_operation import AutoOrient, Resize
from profileready.domain.errors import ExecutorError, NoFileError, PayloadTooLargeError
from profileready.infrastructure.executors.base import RasterExecutor
from profileready.infrastructure.storage.asset_store import LocalAssetStore, new_asset_id

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    asset_id: str
    preview_url: str


@dataclass
class UploadImageUseCase:
    store: LocalAssetStore
    executor: RasterExecutor
    publisher: PublishPreviewUseCase
    max_bytes: int = 10 * 1024 * 1024
    preview_max_edge: int = 600

    def execute(self, data: bytes | None, filename: str | None = None) -> UploadResult:
        """
        Store an uploaded photo and derive its preview.

        The raw bytes are kept untouched as the ``original`` asset; every
        later render starts from it. The preview is auto-oriented and shrunk
        so its long edge is at most ``preview_max_edge`` (never upscaled).
        """
        if not data:
            raise NoFileError("No file uploaded")
        if len(data) > self.max_bytes:
            raise PayloadTooLargeError(f"File exceeds {self.max_bytes // (1024 * 1024)} MB limit")

        asset_id = new_asset_id()
        original = self.store.save_original(asset_id, data, filename)
        preview = self.store.served(asset_id, AssetRole.PREVIEW)
        edge = self.preview_max_edge
        try:
            self.executor.run(
                original.path,
                [AutoOrient(), Resize(edge, edge, keep_aspect=True, only_shrink=True)],
                preview.path,
            )
        except ExecutorError:
            self.store.discard(original.path)
            self.store.discard(preview.path)
            raise
        logger.info("Stored upload %s (%d bytes)", asset_id, len(data))
        return UploadResult(asset_id=asset_id, preview_url=self.publisher.execute(preview, "previews"))
