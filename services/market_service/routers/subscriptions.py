"""Produce-box subscription plans and user subscriptions."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user, require_farmer_or_admin
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import (
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    SubscriptionCreate,
    SubscriptionStatusUpdate,
    UserSubscriptionResponse,
)
from services.market_service.services import subscription_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# ============================================================================
# PLANS
# ============================================================================


@router.get("/plans", response_model=ApiResponse[list[PlanResponse]])
async def list_plans(db: AsyncSession = Depends(get_async_db)):
    """Active plans, newest first."""
    plans = await subscription_ops.list_active_plans(db)
    return ok([PlanResponse.from_plan(p) for p in plans])


@router.get("/plans/{plan_id}", response_model=ApiResponse[PlanResponse])
async def get_plan(plan_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    plan = await subscription_ops.get_plan(db, plan_id)
    return ok(PlanResponse.from_plan(plan))


@router.post(
    "/plans",
    response_model=ApiResponse[PlanResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_plan(
    payload: PlanCreate,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    plan = await subscription_ops.create_plan(db, actor=current_user, payload=payload)
    return ok(PlanResponse.from_plan(plan))


@router.patch("/plans/{plan_id}", response_model=ApiResponse[PlanResponse])
async def update_plan(
    plan_id: uuid.UUID,
    payload: PlanUpdate,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    plan = await subscription_ops.update_plan(
        db, actor=current_user, plan_id=plan_id, payload=payload
    )
    return ok(PlanResponse.from_plan(plan))


@router.get("/farmer/plans", response_model=ApiResponse[list[PlanResponse]])
async def list_farmer_plans(
    farmer_id: Optional[uuid.UUID] = Query(None, alias="farmerId"),
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Every plan (active or not) of the caller's farm; admins pick the farm."""
    plans = await subscription_ops.list_plans_for_farmer(db, current_user, farmer_id)
    return ok([PlanResponse.from_plan(p) for p in plans])


# ============================================================================
# USER SUBSCRIPTIONS
# ============================================================================


@router.get("/me", response_model=ApiResponse[list[UserSubscriptionResponse]])
async def list_my_subscriptions(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    subscriptions = await subscription_ops.list_user_subscriptions(db, current_user.id)
    return ok([UserSubscriptionResponse.from_subscription(s) for s in subscriptions])


@router.post(
    "",
    response_model=ApiResponse[UserSubscriptionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def subscribe(
    payload: SubscriptionCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    subscription = await subscription_ops.create_subscription(
        db, user_id=current_user.id, payload=payload
    )
    return ok(UserSubscriptionResponse.from_subscription(subscription))


@router.patch(
    "/{subscription_id}/status",
    response_model=ApiResponse[UserSubscriptionResponse],
)
async def update_subscription_status(
    subscription_id: uuid.UUID,
    payload: SubscriptionStatusUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Pause, resume, cancel or complete one of the caller's subscriptions."""
    subscription = await subscription_ops.update_subscription_status(
        db,
        user_id=current_user.id,
        subscription_id=subscription_id,
        status=payload.status,
    )
    return ok(UserSubscriptionResponse.from_subscription(subscription))
