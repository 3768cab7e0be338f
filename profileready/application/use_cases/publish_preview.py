from __future__ import annotations

import logging
from dataclasses import dataclass

from profileready.domain.entities.asset import Asset
from profileready.domain.errors import RemoteStorageError
from profileready.infrastructure.storage.asset_store import LocalAssetStore
from profileready.infrastructure.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


@dataclass
class PublishPreviewUseCase:
    """Resolve the URL a client uses to fetch a served raster.

    With remote storage configured the raster is pushed to the bucket and a
    signed URL is returned. Any remote failure falls back to the local
    ``/static`` URL; publishing never fails the caller's operation.
    """

    store: LocalAssetStore
    remote: SupabaseStorage | None = None
    expires_in: int = 24 * 60 * 60

    def execute(self, asset: Asset, folder: str) -> str:
        local_url = self.store.public_url(asset)
        if self.remote is None:
            return local_url
        try:
            return self.remote.publish_file(asset.path, f"{folder}/{asset.filename}", self.expires_in)
        except RemoteStorageError as exc:
            logger.error("Remote publish of %s failed, serving locally: %s", asset.filename, exc.detail)
            return local_url
