from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SignedUrlRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str | None = Field(None, description="Object path, must start with users/<uid>/")
    expires_in_seconds: int | None = Field(None, alias="expiresInSeconds", description="URL lifetime, default 3600")


class SignedUrlResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    signed_url: str = Field(..., alias="signedUrl")
    expires_in: int = Field(..., alias="expiresIn")


class RemoteUploadResponse(SignedUrlResponse):
    bucket: str
    path: str
