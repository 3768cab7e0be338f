from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from profileready.application.dtos.common_dto import ErrorResponse
from profileready.application.dtos.image_dto import (
    OverlayItem,
    PresetsResponse,
    SizePresetItem,
    UploadImageResponse,
)
from profileready.application.dtos.render_dto import RenderRequest, RenderResponse
from profileready.application.use_cases.convert_image import ConvertImageUseCase
from profileready.application.use_cases.render_image import RenderImageUseCase
from profileready.application.use_cases.upload_image import UploadImageUseCase
from profileready.domain.errors import InvalidParameterError
from profileready.domain.presets import DOWNLOAD_CONTENT_TYPES, Overlay, SizePreset
from profileready.infrastructure.api.dependencies import (
    get_convert_use_case,
    get_render_use_case,
    get_upload_use_case,
)

router = APIRouter(
    prefix="/api",
    tags=["Image Pipeline"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Invalid parameters"},
        500: {"model": ErrorResponse, "description": "Internal Server Error - Raster processing failed"},
    },
)

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_render_body(request: Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidParameterError("Request body must be JSON or a form") from exc
    if not isinstance(body, dict):
        raise InvalidParameterError("Request body must be a JSON object")
    return body


@router.post(
    "/image/process",
    response_model=UploadImageResponse,
    response_model_by_alias=True,
    summary="Upload Photo",
    description="""
    Store an uploaded photo and create its preview.

    **Form field**: `photo`
    **Maximum file size**: `MAX_UPLOAD_MB` (10 MB by default)

    The raw upload is kept untouched as the original every render starts from.
    The preview is auto-oriented and shrunk to fit 600x600 (never enlarged).
    """,
    response_description="Preview URL and the asset id to render from",
    responses={413: {"model": ErrorResponse, "description": "Payload Too Large - File exceeds the size limit"}},
)
async def process_image(
    photo: UploadFile | None = File(None, description="Photo to upload"),
    use_case: UploadImageUseCase = Depends(get_upload_use_case),
):
    """Upload a photo and build its preview."""
    data = await photo.read() if photo is not None else b""
    filename = photo.filename if photo is not None else None
    result = await run_in_threadpool(use_case.execute, data, filename)
    return UploadImageResponse(preview_url=result.preview_url, asset_id=result.asset_id)


@router.post(
    "/image/render",
    response_model=RenderResponse,
    response_model_by_alias=True,
    summary="Render Photo",
    description="""
    Render a new asset from the original photo behind `assetId`.

    Accepts a JSON body or a form with the fields `assetId`, `size`, `bgcolor`,
    `overlay`, `overlayScaleX`, `overlayScaleY`, `overlayOffsetX`,
    `overlayOffsetY`, `cropX`, `cropY`, `cropW`, `cropH`, `brightness` and
    `contrast`. Out-of-range numbers are clamped to the control ranges.

    Rendering always starts from the original upload, so passing the id of a
    previous render does not stack edits.
    """,
    response_description="URL and id of the rendered asset",
    responses={404: {"model": ErrorResponse, "description": "Not Found - Unknown asset or overlay"}},
)
async def render_image(
    request: Request,
    use_case: RenderImageUseCase = Depends(get_render_use_case),
):
    """Render the photo at the requested size with crop, tone and overlay."""
    body = await _read_render_body(request)
    try:
        render_request = RenderRequest.model_validate(body)
    except ValidationError as exc:
        raise InvalidParameterError(f"Invalid render parameters: {exc.errors()[0]['msg']}") from exc
    params = render_request.to_parameters()
    result = await run_in_threadpool(use_case.execute, params)
    return RenderResponse(
        preview_url=result.preview_url,
        new_asset_id=result.asset_id,
        width=result.width,
        height=result.height,
    )


@router.get(
    "/image/download",
    summary="Download Photo",
    description="""
    Download the latest raster of an asset (the render, else the preview)
    converted to `png`, `jpg`, `jpeg` or `pdf`.
    """,
    response_description="Converted file as an attachment",
    responses={
        200: {"content": {"image/png": {}, "image/jpeg": {}, "application/pdf": {}}},
        404: {"model": ErrorResponse, "description": "Not Found - No served raster for the asset"},
    },
)
async def download_image(
    asset_id: str | None = Query(None, alias="assetId", description="Asset to download"),
    fmt: str = Query("png", alias="format", description="Target format"),
    use_case: ConvertImageUseCase = Depends(get_convert_use_case),
):
    """Convert and download an asset."""
    if not asset_id:
        raise InvalidParameterError("Missing assetId")
    converted = await run_in_threadpool(use_case.execute, asset_id, fmt)
    return Response(
        content=converted.data,
        media_type=converted.content_type,
        headers={"Content-Disposition": f'attachment; filename="{converted.filename}"'},
    )


@router.get(
    "/presets",
    response_model=PresetsResponse,
    summary="List Presets",
    description="Size presets, overlay codes and download formats shared with the editing client.",
)
def list_presets():
    """Get the preset tables."""
    return PresetsResponse(
        sizes=[
            SizePresetItem(value=preset.value, width=preset.dimensions[0], height=preset.dimensions[1])
            for preset in SizePreset
        ],
        overlays=[
            OverlayItem(code=overlay.value, filename=overlay.filename, url=f"/overlays/{quote(overlay.filename)}")
            for overlay in Overlay
        ],
        formats=list(DOWNLOAD_CONTENT_TYPES),
    )
