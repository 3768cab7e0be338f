from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from profileready.application.dtos.common_dto import ErrorResponse
from profileready.application.dtos.storage_dto import (
    RemoteUploadResponse,
    SignedUrlRequest,
    SignedUrlResponse,
)
from profileready.application.use_cases.remote_files import RemoteFilesUseCase
from profileready.infrastructure.api.dependencies import get_current_user, get_remote_files_use_case
from profileready.infrastructure.supabase_client import UserInfo

router = APIRouter(
    prefix="/api",
    tags=["Remote Storage"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Missing or invalid bearer token"},
        502: {"model": ErrorResponse, "description": "Bad Gateway - Remote storage request failed"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Supabase not configured"},
    },
)


@router.post(
    "/upload-supabase",
    response_model=RemoteUploadResponse,
    response_model_by_alias=True,
    summary="Upload To Remote Storage",
    description="""
    Upload a file into the caller's folder `users/<uid>/` of the storage bucket
    and return a signed URL for it.

    **Form field**: `file`
    **Authentication required**: Yes (Bearer token)
    """,
    response_description="Bucket, object path and a signed URL valid for one hour",
)
async def upload_to_remote(
    file: UploadFile | None = File(None, description="File to upload"),
    user: UserInfo = Depends(get_current_user),
    use_case: RemoteFilesUseCase = Depends(get_remote_files_use_case),
):
    """Upload a file for the authenticated user."""
    data = await file.read() if file is not None else b""
    filename = file.filename if file is not None else None
    content_type = file.content_type if file is not None else None
    signed = await run_in_threadpool(use_case.upload_for_user, user, data, filename, content_type)
    return RemoteUploadResponse(
        bucket=signed.bucket, path=signed.path, signed_url=signed.signed_url, expires_in=signed.expires_in
    )


@router.post(
    "/signed-url",
    response_model=SignedUrlResponse,
    response_model_by_alias=True,
    summary="Sign Remote File",
    description="""
    Create a signed URL for one of the caller's own files.

    The path must start with `users/<uid>/`; anything else is rejected with 403.
    **Authentication required**: Yes (Bearer token)
    """,
    response_description="Signed URL and its lifetime in seconds",
    responses={403: {"model": ErrorResponse, "description": "Forbidden - Path outside the caller's folder"}},
)
async def sign_remote_file(
    payload: SignedUrlRequest,
    user: UserInfo = Depends(get_current_user),
    use_case: RemoteFilesUseCase = Depends(get_remote_files_use_case),
):
    """Sign a path inside the caller's folder."""
    signed = await run_in_threadpool(use_case.sign_for_user, user, payload.path, payload.expires_in_seconds)
    return SignedUrlResponse(signed_url=signed.signed_url, expires_in=signed.expires_in)
