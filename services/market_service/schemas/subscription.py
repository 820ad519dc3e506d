"""Subscription plan and user subscription schemas."""

import uuid
from datetime import date
from typing import Optional

from pydantic import Field, HttpUrl, model_validator
from services.market_service.models import (
    SubscriptionCycle,
    SubscriptionPlan,
    SubscriptionStatus,
    UserSubscription,
)
from services.market_service.schemas.common import (
    CamelModel,
    Money,
    PositiveMoney,
    UtcDatetime,
    money,
)


class PlanItem(CamelModel):
    name: str = Field(..., min_length=1)
    quantity: Optional[str] = None
    description: Optional[str] = None
    image: Optional[HttpUrl] = None


class PlanCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    cover_image: Optional[HttpUrl] = None
    price: PositiveMoney
    original_price: Optional[PositiveMoney] = None
    cycle: SubscriptionCycle
    deliver_weekday: Optional[int] = Field(None, ge=0, le=6)
    items: list[PlanItem] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    farmer_id: Optional[uuid.UUID] = None


class PlanUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    cover_image: Optional[HttpUrl] = None
    price: Optional[PositiveMoney] = None
    original_price: Optional[PositiveMoney] = None
    cycle: Optional[SubscriptionCycle] = None
    deliver_weekday: Optional[int] = Field(None, ge=0, le=6)
    items: Optional[list[PlanItem]] = None
    benefits: Optional[list[str]] = None
    farmer_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "PlanUpdate":
        if not self.model_fields_set:
            raise ValueError("至少需要更新一个字段")
        return self


class PlanResponse(CamelModel):
    id: uuid.UUID
    farmer_id: Optional[uuid.UUID] = None
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    price: Money
    original_price: Optional[Money] = None
    cycle: SubscriptionCycle
    deliver_weekday: Optional[int] = None
    items: list[PlanItem]
    benefits: list[str]
    is_active: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @classmethod
    def from_plan(cls, plan: SubscriptionPlan) -> "PlanResponse":
        return cls(
            id=plan.id,
            farmer_id=plan.farmer_id,
            title=plan.title,
            subtitle=plan.subtitle,
            description=plan.description,
            cover_image=plan.cover_image,
            price=money(plan.price_fen),
            original_price=money(plan.original_price_fen),
            cycle=plan.cycle,
            deliver_weekday=plan.deliver_weekday,
            items=plan.items or [],
            benefits=plan.benefits or [],
            is_active=plan.is_active,
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )


class SubscriptionCreate(CamelModel):
    plan_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class SubscriptionStatusUpdate(CamelModel):
    status: SubscriptionStatus


class UserSubscriptionResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    plan_id: uuid.UUID
    quantity: int
    status: SubscriptionStatus
    start_date: date
    next_delivery_date: Optional[date] = None
    last_shipment_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    plan: Optional[PlanResponse] = None

    @classmethod
    def from_subscription(cls, sub: UserSubscription) -> "UserSubscriptionResponse":
        return cls(
            id=sub.id,
            user_id=sub.user_id,
            plan_id=sub.plan_id,
            quantity=sub.quantity,
            status=sub.status,
            start_date=sub.start_date,
            next_delivery_date=sub.next_delivery_date,
            last_shipment_at=sub.last_shipment_at,
            notes=sub.notes,
            created_at=sub.created_at,
            updated_at=sub.updated_at,
            plan=PlanResponse.from_plan(sub.plan) if sub.plan else None,
        )
