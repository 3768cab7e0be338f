from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass

from profileready.domain.errors import (
    ForbiddenError,
    InvalidParameterError,
    NoFileError,
    PayloadTooLargeError,
    RemoteStorageUnavailableError,
)
from profileready.infrastructure.storage.supabase_storage import SignedObject, SupabaseStorage
from profileready.infrastructure.supabase_client import UserInfo

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def user_prefix(user: UserInfo) -> str:
    return f"users/{user.id}/"


@dataclass
class RemoteFilesUseCase:
    """Per-user uploads and signed URLs, namespaced under ``users/<uid>/``."""

    remote: SupabaseStorage | None
    expires_in: int = 3600
    max_bytes: int = 10 * 1024 * 1024

    def _storage(self) -> SupabaseStorage:
        if self.remote is None:
            raise RemoteStorageUnavailableError("Supabase not configured")
        return self.remote

    def upload_for_user(
        self, user: UserInfo, data: bytes | None, filename: str | None, content_type: str | None
    ) -> SignedObject:
        if not data:
            raise NoFileError("No file uploaded")
        if len(data) > self.max_bytes:
            raise PayloadTooLargeError(f"File exceeds {self.max_bytes // (1024 * 1024)} MB limit")
        storage = self._storage()
        safe_name = _UNSAFE_CHARS.sub("_", filename or "upload")
        path = f"{user_prefix(user)}{int(time.time() * 1000)}_{safe_name}"
        logger.info("Uploading %s for user %s", path, user.id)
        return storage.upload_and_sign(path, data, content_type or "application/octet-stream", self.expires_in)

    def sign_for_user(self, user: UserInfo, path: str | None, expires_in: int | None = None) -> SignedObject:
        if not path:
            raise InvalidParameterError("Missing path")
        storage = self._storage()
        if not path.startswith(user_prefix(user)) or ".." in path.split("/"):
            raise ForbiddenError("Forbidden: can only sign your own files")
        ttl = int(expires_in or self.expires_in)
        if ttl <= 0:
            raise InvalidParameterError("expiresInSeconds must be positive")
        return SignedObject(
            bucket=storage.bucket, path=path, signed_url=storage.create_signed_url(path, ttl), expires_in=ttl
        )
