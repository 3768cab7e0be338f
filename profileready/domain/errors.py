"""Error taxonomy shared by the render pipeline and the HTTP layer.

Every error carries a short machine-checkable ``kind`` and a human-readable
``detail``. The API layer maps each class to an HTTP status code.
"""
from __future__ import annotations


class ProfileReadyError(Exception):
    kind = "internal_error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.kind
        super().__init__(self.detail)


class NoFileError(ProfileReadyError):
    """No file uploaded"""

    kind = "no_file"


class PayloadTooLargeError(ProfileReadyError):
    """Uploaded file exceeds the size limit"""

    kind = "file_too_large"


class NotFoundError(ProfileReadyError):
    """File not found"""

    kind = "not_found"


class InvalidSizeError(ProfileReadyError):
    """Invalid size parameter"""

    kind = "invalid_size"


class InvalidParameterError(ProfileReadyError):
    """Invalid render parameter"""

    kind = "invalid_parameter"


class OverlayNotFoundError(ProfileReadyError):
    """Overlay file not found"""

    kind = "overlay_not_found"


class UnsupportedFormatError(ProfileReadyError):
    """Unsupported format"""

    kind = "unsupported_format"


class ExecutorError(ProfileReadyError):
    """Raster processing failed"""

    kind = "executor_error"


class RemoteStorageError(ProfileReadyError):
    """Remote storage request failed"""

    kind = "remote_storage_error"


class RemoteStorageUnavailableError(ProfileReadyError):
    """Supabase not configured"""

    kind = "remote_storage_unavailable"


class AuthenticationError(ProfileReadyError):
    """Missing Authorization Bearer token"""

    kind = "unauthorized"


class ForbiddenError(ProfileReadyError):
    """Forbidden: can only sign your own files"""

    kind = "forbidden"
