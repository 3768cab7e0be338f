from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from supabase import Client

from profileready.domain.errors import RemoteStorageError

logger = logging.getLogger(__name__)


@dataclass
class SignedObject:
    bucket: str
    path: str
    signed_url: str
    expires_in: int


class SupabaseStorage:
    """Storage adapter for a Supabase Storage bucket.

    Every SDK failure is raised as ``RemoteStorageError``; callers decide
    whether that is fatal.
    """

    def __init__(self, client: Client, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def upload_bytes(self, path: str, data: bytes, content_type: str, *, upsert: bool = False) -> None:
        try:
            self.client.storage.from_(self.bucket).upload(
                path=path,
                file=data,
                file_options={"content-type": content_type, "upsert": "true" if upsert else "false"},
            )
        except Exception as exc:
            raise RemoteStorageError(f"Upload failed: {exc}") from exc

    def create_signed_url(self, path: str, expires_in: int) -> str:
        try:
            res = self.client.storage.from_(self.bucket).create_signed_url(path, expires_in)
        except Exception as exc:
            raise RemoteStorageError(f"Signed URL failed: {exc}") from exc
        url = (res or {}).get("signedUrl") or (res or {}).get("signedURL")
        if not url:
            raise RemoteStorageError("Signed URL failed: empty response")
        return url

    def upload_and_sign(
        self, path: str, data: bytes, content_type: str, expires_in: int, *, upsert: bool = False
    ) -> SignedObject:
        self.upload_bytes(path, data, content_type, upsert=upsert)
        return SignedObject(
            bucket=self.bucket, path=path, signed_url=self.create_signed_url(path, expires_in), expires_in=expires_in
        )

    def publish_file(self, local_path: Path, remote_path: str, expires_in: int) -> str:
        """Upload a served PNG (overwriting) and return a time-limited URL for it."""
        try:
            data = local_path.read_bytes()
        except OSError as exc:
            raise RemoteStorageError(f"Cannot read {local_path.name}: {exc}") from exc
        return self.upload_and_sign(remote_path, data, "image/png", expires_in, upsert=True).signed_url
