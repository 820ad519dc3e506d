"""Farmer story schemas."""

import uuid
from typing import Literal, Optional

from pydantic import Field, HttpUrl
from services.market_service.models import FarmerProfile
from services.market_service.schemas.common import CamelModel, UtcDatetime


class GalleryItem(CamelModel):
    type: Literal["image", "video"] = "image"
    url: HttpUrl
    caption: Optional[str] = None


class Certification(CamelModel):
    title: str
    issuer: Optional[str] = None
    issued_at: Optional[str] = None
    credential_url: Optional[HttpUrl] = None


class StoryMedia(CamelModel):
    type: Literal["image", "video", "audio", "link", "text"] = "image"
    url: Optional[str] = None
    cover: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class StoryOverviewUpdate(CamelModel):
    hero_image: Optional[HttpUrl] = None
    region: Optional[str] = Field(None, max_length=128)
    story_headline: Optional[str] = Field(None, max_length=255)
    story_content: Optional[str] = None
    story_highlights: Optional[list[str]] = None
    story_gallery: Optional[list[GalleryItem]] = None
    certifications: Optional[list[Certification]] = None


class StoryEntryCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    labels: list[str] = Field(default_factory=list)
    media: list[StoryMedia] = Field(default_factory=list)
    published_at: Optional[UtcDatetime] = None


class StoryOverviewResponse(CamelModel):
    farmer_id: uuid.UUID
    farm_name: str
    hero_image: Optional[str] = None
    region: Optional[str] = None
    story_headline: Optional[str] = None
    story_content: Optional[str] = None
    story_highlights: list[str] = Field(default_factory=list)
    story_gallery: list[GalleryItem] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)

    @classmethod
    def from_profile(cls, profile: FarmerProfile) -> "StoryOverviewResponse":
        return cls(
            farmer_id=profile.id,
            farm_name=profile.farm_name,
            hero_image=profile.hero_image,
            region=profile.region,
            story_headline=profile.headline,
            story_content=profile.story_content,
            story_highlights=profile.highlights or [],
            story_gallery=profile.gallery or [],
            certifications=profile.certifications or [],
        )


class StoryEntryResponse(CamelModel):
    id: uuid.UUID
    farmer_id: uuid.UUID
    title: str
    content: str
    labels: list[str]
    media: list[StoryMedia]
    published_at: UtcDatetime
    created_at: UtcDatetime


class FarmerStoryResponse(CamelModel):
    overview: Optional[StoryOverviewResponse] = None
    stories: list[StoryEntryResponse]
