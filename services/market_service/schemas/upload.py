"""Upload request/response schemas."""

from typing import Literal, Optional

from pydantic import Field
from services.market_service.schemas.common import CamelModel, UtcDatetime


class PresignRequest(CamelModel):
    file_name: Optional[str] = Field(None, max_length=255)
    content_type: Optional[str] = Field(None, max_length=128)


class PresignResponse(CamelModel):
    upload_url: str
    object_key: str
    expires_at: UtcDatetime
    headers: dict[str, str]
    public_url: str


class Base64UploadRequest(CamelModel):
    file_data: str = Field(..., min_length=1)
    file_name: Optional[str] = Field(None, max_length=255)
    file_type: Optional[str] = Field(None, max_length=128)
    directory: Optional[str] = Field(None, pattern=r"^[A-Za-z0-9_\-/]{1,64}$")


class UploadResponse(CamelModel):
    url: str
    object_key: str
    size: int
    type: Literal["oss"] = "oss"
