import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    The verified principal carried by a FarmDirect access token.
    """

    user_id: str = Field(..., alias="sub")
    phone: Optional[str] = None
    name: Optional[str] = None
    role: str = "customer"
    farmer_profile_id: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def id(self) -> uuid.UUID:
        return uuid.UUID(self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_farmer(self) -> bool:
        return self.role == "farmer"
