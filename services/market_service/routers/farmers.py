"""Farmer story pages: overview and dated story entries."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import (
    FarmerStoryResponse,
    StoryEntryCreate,
    StoryEntryResponse,
    StoryOverviewResponse,
    StoryOverviewUpdate,
)
from services.market_service.services import farmer_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/farmers", tags=["farmers"])


@router.get("/{farmer_id}/story", response_model=ApiResponse[FarmerStoryResponse])
async def get_farmer_story(
    farmer_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)
):
    """Overview (null for unknown farmers) plus the latest story entries."""
    profile = await farmer_ops.get_overview(db, farmer_id)
    stories = await farmer_ops.list_stories(db, farmer_id)
    return ok(
        FarmerStoryResponse(
            overview=StoryOverviewResponse.from_profile(profile) if profile else None,
            stories=[StoryEntryResponse.model_validate(s) for s in stories],
        )
    )


@router.get(
    "/{farmer_id}/stories", response_model=ApiResponse[list[StoryEntryResponse]]
)
async def list_farmer_stories(
    farmer_id: uuid.UUID,
    limit: int = Query(farmer_ops.MAX_STORY_LIMIT, ge=1, le=farmer_ops.MAX_STORY_LIMIT),
    db: AsyncSession = Depends(get_async_db),
):
    stories = await farmer_ops.list_stories(db, farmer_id, limit)
    return ok([StoryEntryResponse.model_validate(s) for s in stories])


@router.put("/{farmer_id}/story", response_model=ApiResponse[StoryOverviewResponse])
async def update_farmer_story(
    farmer_id: uuid.UUID,
    payload: StoryOverviewUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await farmer_ops.update_overview(
        db, actor=current_user, farmer_id=farmer_id, payload=payload
    )
    return ok(StoryOverviewResponse.from_profile(profile))


@router.post(
    "/{farmer_id}/stories",
    response_model=ApiResponse[StoryEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_farmer_story(
    farmer_id: uuid.UUID,
    payload: StoryEntryCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    story = await farmer_ops.create_story(
        db, actor=current_user, farmer_id=farmer_id, payload=payload
    )
    return ok(StoryEntryResponse.model_validate(story))
