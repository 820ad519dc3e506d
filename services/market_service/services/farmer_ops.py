"""Farmer story content: the profile overview and dated story entries."""

import uuid
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.errors import forbidden, not_found
from libs.common.logging import get_logger
from services.market_service.models import FarmerProfile, FarmerStory
from services.market_service.schemas.farmer import StoryEntryCreate, StoryOverviewUpdate
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_STORY_LIMIT = 50
MAX_STORY_LIMIT = 100

# Wire field -> FarmerProfile column
_OVERVIEW_COLUMNS = {
    "hero_image": "hero_image",
    "region": "region",
    "story_headline": "headline",
    "story_content": "story_content",
    "story_highlights": "highlights",
    "story_gallery": "gallery",
    "certifications": "certifications",
}


def ensure_can_edit(actor: AuthUser, farmer_id: uuid.UUID) -> None:
    if actor.is_admin:
        return
    if not actor.is_farmer or actor.farmer_profile_id != str(farmer_id):
        raise forbidden("只能编辑自己的农户故事")


async def get_overview(
    db: AsyncSession, farmer_id: uuid.UUID
) -> Optional[FarmerProfile]:
    return await db.get(FarmerProfile, farmer_id)


async def list_stories(
    db: AsyncSession, farmer_id: uuid.UUID, limit: int = DEFAULT_STORY_LIMIT
) -> list[FarmerStory]:
    result = await db.execute(
        select(FarmerStory)
        .where(FarmerStory.farmer_id == farmer_id)
        .order_by(FarmerStory.published_at.desc(), FarmerStory.id)
        .limit(min(limit, MAX_STORY_LIMIT))
    )
    return list(result.scalars().all())


async def update_overview(
    db: AsyncSession,
    *,
    actor: AuthUser,
    farmer_id: uuid.UUID,
    payload: StoryOverviewUpdate,
) -> FarmerProfile:
    ensure_can_edit(actor, farmer_id)
    profile = await db.get(FarmerProfile, farmer_id)
    if profile is None:
        raise not_found("农户不存在")

    for field, value in payload.model_dump(mode="json", exclude_unset=True).items():
        setattr(profile, _OVERVIEW_COLUMNS[field], value)

    await db.commit()
    await db.refresh(profile)
    logger.info("Updated story overview for farmer %s", farmer_id)
    return profile


async def create_story(
    db: AsyncSession,
    *,
    actor: AuthUser,
    farmer_id: uuid.UUID,
    payload: StoryEntryCreate,
) -> FarmerStory:
    ensure_can_edit(actor, farmer_id)
    if await db.get(FarmerProfile, farmer_id) is None:
        raise not_found("农户不存在")

    story = FarmerStory(
        farmer_id=farmer_id,
        title=payload.title,
        content=payload.content,
        labels=payload.labels,
        media=[item.model_dump(mode="json", exclude_none=True) for item in payload.media],
        published_at=payload.published_at or utc_now(),
    )
    db.add(story)
    await db.commit()
    await db.refresh(story)
    logger.info("Farmer %s published story %s", farmer_id, story.id)
    return story
