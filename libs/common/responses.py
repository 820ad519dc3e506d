"""Success envelope shared by every endpoint: ``{"success": true, "data": ...}``."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


def ok(data) -> ApiResponse:
    """Wrap an already-built response schema in the success envelope."""
    return ApiResponse(data=data)
