from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from profileready.domain.errors import (
    AuthenticationError,
    ExecutorError,
    ForbiddenError,
    InvalidParameterError,
    InvalidSizeError,
    NoFileError,
    NotFoundError,
    OverlayNotFoundError,
    PayloadTooLargeError,
    ProfileReadyError,
    RemoteStorageError,
    RemoteStorageUnavailableError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[ProfileReadyError], int] = {
    NoFileError: status.HTTP_400_BAD_REQUEST,
    PayloadTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidSizeError: status.HTTP_400_BAD_REQUEST,
    InvalidParameterError: status.HTTP_400_BAD_REQUEST,
    OverlayNotFoundError: status.HTTP_404_NOT_FOUND,
    UnsupportedFormatError: status.HTTP_400_BAD_REQUEST,
    ExecutorError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    RemoteStorageError: status.HTTP_502_BAD_GATEWAY,
    RemoteStorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
}


def status_for(exc: ProfileReadyError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def profileready_error_handler(request: Request, exc: ProfileReadyError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.kind, exc.detail)
    else:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.kind, exc.detail)
    return JSONResponse(status_code=code, content={"error": exc.kind, "detail": exc.detail})


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "Invalid request"
    for error in exc.errors()[:1]:
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        detail = f"Invalid {field or 'request'}: {error.get('msg')}"
    logger.info("%s %s rejected: invalid_parameter (%s)", request.method, request.url.path, detail)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": InvalidParameterError.kind, "detail": detail},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "detail": "Internal server error"},
    )


def add_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProfileReadyError, profileready_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
