"""Registration and login."""

from fastapi import APIRouter, Depends, Request, status
from libs.common.rate_limit import auth_limit
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from services.market_service.services import auth_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
)
@auth_limit
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create a customer account and return an access token."""
    user, token = await auth_ops.register_user(
        db, phone=payload.phone, password=payload.password, name=payload.name
    )
    return ok(AuthResponse(user=UserResponse.from_user(user), access_token=token))


@router.post("/login", response_model=ApiResponse[AuthResponse])
@auth_limit
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    user, token = await auth_ops.login(
        db, phone=payload.phone, password=payload.password
    )
    return ok(AuthResponse(user=UserResponse.from_user(user), access_token=token))
