"""Produce-box subscription plans and the users subscribed to them."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType
from services.market_service.models.enums import (
    SubscriptionCycle,
    SubscriptionStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, Date, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    farmer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("farmer_profiles.id", ondelete="SET NULL"), index=True, nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    price_fen: Mapped[int] = mapped_column(Integer, nullable=False)
    original_price_fen: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cycle: Mapped[SubscriptionCycle] = mapped_column(
        SAEnum(
            SubscriptionCycle,
            name="subscription_cycle_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    deliver_weekday: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    items: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    benefits: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "deliver_weekday IS NULL OR (deliver_weekday BETWEEN 0 AND 6)",
            name="deliver_weekday_range",
        ),
    )


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    plan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("subscription_plans.id"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        SAEnum(
            SubscriptionStatus,
            name="subscription_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=SubscriptionStatus.ACTIVE,
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    next_delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_shipment_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    plan: Mapped["SubscriptionPlan"] = relationship(lazy="selectin")
