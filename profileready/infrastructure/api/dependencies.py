from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from profileready.application.use_cases.convert_image import ConvertImageUseCase
from profileready.application.use_cases.publish_preview import PublishPreviewUseCase
from profileready.application.use_cases.remote_files import RemoteFilesUseCase
from profileready.application.use_cases.render_image import RenderImageUseCase
from profileready.application.use_cases.upload_image import UploadImageUseCase
from profileready.config import Settings, get_settings
from profileready.domain.errors import AuthenticationError
from profileready.infrastructure.executors.base import RasterExecutor
from profileready.infrastructure.executors.magick_executor import MagickExecutor
from profileready.infrastructure.executors.pillow_executor import PillowExecutor
from profileready.infrastructure.storage.asset_store import LocalAssetStore
from profileready.infrastructure.storage.supabase_storage import SupabaseStorage
from profileready.infrastructure.supabase_client import (
    SupabaseAuthAdapter,
    UserInfo,
    get_supabase_client,
)

_bearer_scheme = HTTPBearer(auto_error=False)

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_client(settings: SettingsDep) -> Client | None:
    return get_supabase_client(settings)


def get_store(settings: SettingsDep) -> LocalAssetStore:
    return LocalAssetStore(settings.UPLOAD_DIR, settings.STATIC_DIR)


def get_executor(settings: SettingsDep) -> RasterExecutor:
    if settings.EXECUTOR_BACKEND == "magick":
        return MagickExecutor(binary=settings.MAGICK_BINARY, timeout=settings.EXECUTOR_TIMEOUT)
    return PillowExecutor()


def get_remote_storage(
    settings: SettingsDep,
    client: Annotated[Client | None, Depends(get_client)],
) -> SupabaseStorage | None:
    if client is None:
        return None
    return SupabaseStorage(client, settings.SUPABASE_BUCKET)


def get_publisher(
    settings: SettingsDep,
    store: Annotated[LocalAssetStore, Depends(get_store)],
    remote: Annotated[SupabaseStorage | None, Depends(get_remote_storage)],
) -> PublishPreviewUseCase:
    return PublishPreviewUseCase(store=store, remote=remote, expires_in=settings.RENDER_URL_TTL)


def get_upload_use_case(
    settings: SettingsDep,
    store: Annotated[LocalAssetStore, Depends(get_store)],
    executor: Annotated[RasterExecutor, Depends(get_executor)],
    publisher: Annotated[PublishPreviewUseCase, Depends(get_publisher)],
) -> UploadImageUseCase:
    return UploadImageUseCase(
        store=store,
        executor=executor,
        publisher=publisher,
        max_bytes=settings.max_upload_bytes,
        preview_max_edge=settings.PREVIEW_MAX_EDGE,
    )


def get_render_use_case(
    settings: SettingsDep,
    store: Annotated[LocalAssetStore, Depends(get_store)],
    executor: Annotated[RasterExecutor, Depends(get_executor)],
    publisher: Annotated[PublishPreviewUseCase, Depends(get_publisher)],
) -> RenderImageUseCase:
    return RenderImageUseCase(store=store, executor=executor, publisher=publisher, overlay_dir=settings.OVERLAY_DIR)


def get_convert_use_case(
    settings: SettingsDep,
    store: Annotated[LocalAssetStore, Depends(get_store)],
    executor: Annotated[RasterExecutor, Depends(get_executor)],
) -> ConvertImageUseCase:
    settings.SCRATCH_DIR.mkdir(parents=True, exist_ok=True)
    return ConvertImageUseCase(store=store, executor=executor, scratch_dir=settings.SCRATCH_DIR)


def get_remote_files_use_case(
    settings: SettingsDep,
    remote: Annotated[SupabaseStorage | None, Depends(get_remote_storage)],
) -> RemoteFilesUseCase:
    return RemoteFilesUseCase(remote=remote, expires_in=settings.USER_URL_TTL, max_bytes=settings.max_upload_bytes)


def get_auth_adapter(
    settings: SettingsDep,
    client: Annotated[Client | None, Depends(get_client)],
) -> SupabaseAuthAdapter:
    return SupabaseAuthAdapter(client, settings)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)] = None,
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)] = None,
) -> UserInfo:
    if not credentials or not credentials.scheme or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing Authorization Bearer token")
    token = credentials.credentials
    if not token:
        raise AuthenticationError("Missing Authorization Bearer token")
    return auth.validate_token(token)
