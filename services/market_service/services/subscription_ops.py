"""Subscription plans and user subscriptions.

Plans belong to a farmer (or to nobody, for platform plans created by an
admin). ``deliver_weekday`` counts from Sunday = 0, and delivery dates
advance by whole weeks so they always land on that weekday.
"""

import uuid
from datetime import date, timedelta
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.currency import yuan_to_fen
from libs.common.datetime_utils import utc_now
from libs.common.errors import INVALID_TRANSITION, bad_request, forbidden, not_found
from libs.common.logging import get_logger
from services.market_service.models import (
    SubscriptionCycle,
    SubscriptionPlan,
    SubscriptionStatus,
    UserSubscription,
)
from services.market_service.schemas.subscription import (
    PlanCreate,
    PlanUpdate,
    SubscriptionCreate,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CYCLE_INTERVALS = {
    SubscriptionCycle.WEEKLY: timedelta(weeks=1),
    SubscriptionCycle.BIWEEKLY: timedelta(weeks=2),
    SubscriptionCycle.MONTHLY: timedelta(weeks=4),
    SubscriptionCycle.SEASONAL: timedelta(weeks=13),
}

TERMINAL_STATUSES = frozenset(
    {SubscriptionStatus.CANCELLED, SubscriptionStatus.COMPLETED}
)

_PLAN_NOT_FOUND = "订阅方案不存在"


def next_delivery_date(
    start: date,
    cycle: SubscriptionCycle,
    deliver_weekday: Optional[int] = None,
    *,
    today: Optional[date] = None,
) -> date:
    """First delivery on or after ``today`` in the schedule anchored at ``start``."""
    anchor = start
    if deliver_weekday is not None:
        # date.weekday() counts from Monday = 0
        target = (deliver_weekday - 1) % 7
        anchor = start + timedelta(days=(target - start.weekday()) % 7)

    today = today or utc_now().date()
    if anchor >= today:
        return anchor
    interval = CYCLE_INTERVALS[cycle]
    periods = -(-(today - anchor).days // interval.days)
    return anchor + interval * periods


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def _ensure_can_manage(actor: AuthUser, farmer_id: Optional[uuid.UUID]) -> None:
    if actor.is_admin:
        return
    if not actor.is_farmer:
        raise forbidden("当前账号无操作权限")
    if farmer_id is not None and actor.farmer_profile_id != str(farmer_id):
        raise forbidden("不能编辑其他农户的订阅计划")


async def list_active_plans(db: AsyncSession) -> list[SubscriptionPlan]:
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.is_active.is_(True))
        .order_by(SubscriptionPlan.created_at.desc())
    )
    return list(result.scalars().all())


async def list_plans_for_farmer(
    db: AsyncSession, actor: AuthUser, farmer_id: Optional[uuid.UUID] = None
) -> list[SubscriptionPlan]:
    if not actor.is_admin or farmer_id is None:
        if actor.farmer_profile_id is None:
            raise bad_request("当前账号未绑定农户信息")
        farmer_id = uuid.UUID(actor.farmer_profile_id)
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.farmer_id == farmer_id)
        .order_by(SubscriptionPlan.created_at.desc())
    )
    return list(result.scalars().all())


async def get_plan(db: AsyncSession, plan_id: uuid.UUID) -> SubscriptionPlan:
    plan = await db.get(SubscriptionPlan, plan_id)
    if plan is None:
        raise not_found(_PLAN_NOT_FOUND)
    return plan


def _money_columns(payload, fields) -> dict:
    columns = {}
    if "price" in fields:
        columns["price_fen"] = yuan_to_fen(payload.price)
    if "original_price" in fields:
        columns["original_price_fen"] = (
            yuan_to_fen(payload.original_price)
            if payload.original_price is not None
            else None
        )
    return columns


async def create_plan(
    db: AsyncSession, *, actor: AuthUser, payload: PlanCreate
) -> SubscriptionPlan:
    _ensure_can_manage(actor, payload.farmer_id)
    farmer_id = payload.farmer_id
    if farmer_id is None and actor.is_farmer and actor.farmer_profile_id:
        farmer_id = uuid.UUID(actor.farmer_profile_id)

    data = payload.model_dump(
        mode="json", exclude={"farmer_id", "price", "original_price", "cycle"}
    )
    plan = SubscriptionPlan(
        **data,
        **_money_columns(payload, ("price", "original_price")),
        cycle=payload.cycle,
        farmer_id=farmer_id,
    )
    db.add(plan)
    await db.commit()
    await db.refresh(plan)
    logger.info("Created subscription plan %s", plan.id)
    return plan


async def update_plan(
    db: AsyncSession, *, actor: AuthUser, plan_id: uuid.UUID, payload: PlanUpdate
) -> SubscriptionPlan:
    plan = await get_plan(db, plan_id)
    _ensure_can_manage(actor, payload.farmer_id or plan.farmer_id)

    changes = payload.model_dump(
        mode="json",
        exclude_unset=True,
        exclude={"price", "original_price", "cycle", "farmer_id"},
    )
    changes.update(_money_columns(payload, payload.model_fields_set))
    if payload.cycle is not None:
        changes["cycle"] = payload.cycle
    if "farmer_id" in payload.model_fields_set:
        changes["farmer_id"] = payload.farmer_id
    for field, value in changes.items():
        setattr(plan, field, value)

    await db.commit()
    await db.refresh(plan)
    return plan


# ---------------------------------------------------------------------------
# User subscriptions
# ---------------------------------------------------------------------------


async def list_user_subscriptions(
    db: AsyncSession, user_id: uuid.UUID
) -> list[UserSubscription]:
    result = await db.execute(
        select(UserSubscription)
        .where(UserSubscription.user_id == user_id)
        .order_by(UserSubscription.created_at.desc())
    )
    return list(result.scalars().all())


async def create_subscription(
    db: AsyncSession, *, user_id: uuid.UUID, payload: SubscriptionCreate
) -> UserSubscription:
    plan = await db.get(SubscriptionPlan, payload.plan_id)
    if plan is None or not plan.is_active:
        raise not_found("订阅方案不存在或已下架")

    start = payload.start_date or utc_now().date()
    subscription = UserSubscription(
        user_id=user_id,
        plan_id=plan.id,
        quantity=payload.quantity,
        status=SubscriptionStatus.ACTIVE,
        start_date=start,
        next_delivery_date=next_delivery_date(start, plan.cycle, plan.deliver_weekday),
        notes=payload.notes,
    )
    db.add(subscription)
    await db.commit()
    await db.refresh(subscription)
    logger.info("User %s subscribed to plan %s", user_id, plan.id)
    return subscription


async def update_subscription_status(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    subscription_id: uuid.UUID,
    status: SubscriptionStatus,
) -> UserSubscription:
    result = await db.execute(
        select(UserSubscription).where(
            UserSubscription.id == subscription_id,
            UserSubscription.user_id == user_id,
        )
    )
    subscription = result.scalar_one_or_none()
    if subscription is None:
        raise not_found("订阅不存在")

    if subscription.status == status:
        return subscription
    if subscription.status in TERMINAL_STATUSES:
        raise bad_request(
            f"订阅状态无法从 {subscription.status.value} 变更为 {status.value}",
            INVALID_TRANSITION,
        )

    subscription.status = status
    if status == SubscriptionStatus.ACTIVE:
        subscription.next_delivery_date = next_delivery_date(
            subscription.start_date,
            subscription.plan.cycle,
            subscription.plan.deliver_weekday,
        )
    elif status in TERMINAL_STATUSES:
        subscription.next_delivery_date = None

    await db.commit()
    await db.refresh(subscription)
    logger.info("Subscription %s is now %s", subscription.id, status.value)
    return subscription
