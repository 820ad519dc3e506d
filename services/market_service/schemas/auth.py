"""Auth and user profile schemas."""

import uuid
from typing import Optional

from pydantic import Field
from services.market_service.models import User, UserRole
from services.market_service.schemas.common import CamelModel, UtcDatetime


class RegisterRequest(CamelModel):
    phone: str = Field(..., min_length=8, max_length=20)
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(None, max_length=64)


class LoginRequest(CamelModel):
    phone: str = Field(..., min_length=8, max_length=20)
    password: str = Field(..., min_length=6, max_length=128)


class UserResponse(CamelModel):
    id: uuid.UUID
    phone: str
    name: Optional[str] = None
    role: UserRole
    farmer_profile_id: Optional[uuid.UUID] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            phone=user.phone,
            name=user.name,
            role=user.role,
            farmer_profile_id=user.farmer_profile.id if user.farmer_profile else None,
        )


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class ProfileResponse(UserResponse):
    address_count: int
    created_at: UtcDatetime
