"""Application configuration loaded from environment variables."""
from __future__ import annotations

import os
import tempfile
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self) -> None:
        # Server
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "4000"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Local asset storage
        self.UPLOAD_DIR: Path = Path(os.getenv("UPLOAD_DIR", "uploads"))
        self.STATIC_DIR: Path = Path(os.getenv("STATIC_DIR", "static"))
        self.OVERLAY_DIR: Path = Path(os.getenv("OVERLAY_DIR", "assets/overlays"))
        self.SCRATCH_DIR: Path = Path(os.getenv("SCRATCH_DIR", tempfile.gettempdir()))
        self.FRONTEND_DIR: str | None = os.getenv("FRONTEND_DIR")
        self.MAX_UPLOAD_MB: float = float(os.getenv("MAX_UPLOAD_MB", "10"))
        self.PREVIEW_MAX_EDGE: int = int(os.getenv("PREVIEW_MAX_EDGE", "600"))

        # Raster executor
        self.EXECUTOR_BACKEND: str = os.getenv("EXECUTOR_BACKEND", "pillow").lower()
        self.MAGICK_BINARY: str = os.getenv("MAGICK_BINARY", "magick")
        self.EXECUTOR_TIMEOUT: float = float(os.getenv("EXECUTOR_TIMEOUT", "60"))

        # Supabase (auth + remote storage)
        self.SUPABASE_DISABLED: bool = _flag("SUPABASE_DISABLED")
        self.SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
        self.SUPABASE_SERVICE_ROLE_KEY: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.SUPABASE_BUCKET: str = os.getenv("SUPABASE_BUCKET", "user-uploads")
        self.RENDER_URL_TTL: int = int(os.getenv("RENDER_URL_TTL", str(24 * 60 * 60)))
        self.USER_URL_TTL: int = int(os.getenv("USER_URL_TTL", "3600"))

    @property
    def max_upload_bytes(self) -> int:
        return int(self.MAX_UPLOAD_MB * 1024 * 1024)

    @property
    def supabase_configured(self) -> bool:
        return not self.SUPABASE_DISABLED and bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
