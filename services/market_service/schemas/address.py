"""Address request/response schemas."""

import uuid
from typing import Optional

from pydantic import Field
from services.market_service.schemas.common import CamelModel, MobilePhone


class AddressPayload(CamelModel):
    contact_name: str = Field(..., min_length=1, max_length=64)
    contact_phone: MobilePhone
    province: str = Field(..., min_length=1, max_length=64)
    city: str = Field(..., min_length=1, max_length=64)
    district: str = Field(..., min_length=1, max_length=64)
    street: str = Field(..., min_length=1, max_length=255)
    detail: Optional[str] = Field(None, max_length=255)
    postal_code: Optional[str] = Field(None, max_length=16)
    tag: Optional[str] = Field(None, max_length=32)
    is_default: bool = False
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    latitude: Optional[float] = Field(None, ge=-90, le=90)


class AddressResponse(AddressPayload):
    id: uuid.UUID
    user_id: uuid.UUID
    contact_phone: str
