"""Current user profile."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import ProfileResponse, UserResponse
from services.market_service.services import auth_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me", response_model=ApiResponse[ProfileResponse])
async def get_me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Profile of the signed-in user, with the number of saved addresses."""
    user, address_count = await auth_ops.get_profile(db, current_user.id)
    base = UserResponse.from_user(user)
    return ok(
        ProfileResponse(
            **base.model_dump(),
            address_count=address_count,
            created_at=user.created_at,
        )
    )
