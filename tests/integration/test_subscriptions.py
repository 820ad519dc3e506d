"""Integration tests for subscription plans and user subscriptions."""

import uuid
from datetime import date, timedelta

import pytest
from tests.factories import SubscriptionPlanFactory, make_farmer

PLAN = {
    "title": "双周水果箱",
    "price": "128.00",
    "originalPrice": "158.00",
    "cycle": "biweekly",
    "deliverWeekday": 6,
    "items": [{"name": "应季水果", "quantity": "3kg"}],
    "benefits": ["包邮", "坏果包赔"],
}


async def _plan(db, **overrides):
    plan = SubscriptionPlanFactory.create(**overrides)
    db.add(plan)
    await db.commit()
    return plan


async def _subscribe(client, account, plan_id, **extra):
    response = await client.post(
        "/api/v1/subscriptions",
        json={"planId": str(plan_id), **extra},
        headers=account.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_public_plan_list_hides_inactive(client, db_session):
    await _plan(db_session, title="上架方案")
    await _plan(db_session, title="下架方案", is_active=False)

    response = await client.get("/api/v1/subscriptions/plans")

    assert [p["title"] for p in response.json()["data"]] == ["上架方案"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_farmer_creates_plan_for_own_farm(client, farmer):
    response = await client.post(
        "/api/v1/subscriptions/plans", json=PLAN, headers=farmer.headers
    )

    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["farmerId"] == str(farmer.profile.id)
    assert data["price"] == 128
    assert data["originalPrice"] == 158
    assert data["cycle"] == "biweekly"
    assert data["isActive"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_creates_platform_plan(client, admin):
    response = await client.post(
        "/api/v1/subscriptions/plans", json=PLAN, headers=admin.headers
    )

    assert response.status_code == 201
    assert response.json()["data"]["farmerId"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_plan_weekday_range(client, farmer):
    response = await client.post(
        "/api/v1/subscriptions/plans",
        json={**PLAN, "deliverWeekday": 7},
        headers=farmer.headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_cannot_create_plan(client, customer):
    response = await client.post(
        "/api/v1/subscriptions/plans", json=PLAN, headers=customer.headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_farmer_deactivates_own_plan(client, db_session, farmer):
    plan = await _plan(db_session, farmer_id=farmer.profile.id)

    response = await client.patch(
        f"/api/v1/subscriptions/plans/{plan.id}",
        json={"isActive": False, "price": "89.90"},
        headers=farmer.headers,
    )

    data = response.json()["data"]
    assert data["isActive"] is False
    assert data["price"] == 89.9

    farm_plans = await client.get(
        "/api/v1/subscriptions/farmer/plans", headers=farmer.headers
    )
    assert [p["id"] for p in farm_plans.json()["data"]] == [str(plan.id)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_farmer_cannot_edit_other_farm_plan(client, db_session, farmer):
    other = await make_farmer(db_session)
    plan = await _plan(db_session, farmer_id=other.profile.id)

    response = await client.patch(
        f"/api/v1/subscriptions/plans/{plan.id}",
        json={"title": "改名"},
        headers=farmer.headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_plan(client):
    response = await client.get(f"/api/v1/subscriptions/plans/{uuid.uuid4()}")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Subscribing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_subscribe_schedules_first_delivery(client, db_session, customer):
    plan = await _plan(db_session, deliver_weekday=1)
    start = date.today() + timedelta(days=30)

    data = await _subscribe(
        client, customer, plan.id, quantity=2, startDate=start.isoformat()
    )

    first = date.fromisoformat(data["nextDeliveryDate"])
    assert data["status"] == "active"
    assert data["quantity"] == 2
    assert data["plan"]["id"] == str(plan.id)
    assert first.weekday() == 0
    assert start <= first < start + timedelta(days=7)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_subscribe_without_weekday_starts_on_start_date(
    client, db_session, customer
):
    plan = await _plan(db_session)
    start = date.today() + timedelta(days=3)

    data = await _subscribe(client, customer, plan.id, startDate=start.isoformat())

    assert data["nextDeliveryDate"] == start.isoformat()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inactive_plan_cannot_be_subscribed(client, db_session, customer):
    plan = await _plan(db_session, is_active=False)

    response = await client.post(
        "/api/v1/subscriptions",
        json={"planId": str(plan.id)},
        headers=customer.headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_subscriptions(client, db_session, customer, farmer):
    plan = await _plan(db_session)
    await _subscribe(client, customer, plan.id)
    await _subscribe(client, farmer, plan.id)

    response = await client.get("/api/v1/subscriptions/me", headers=customer.headers)

    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["userId"] == str(customer.user.id)


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pause_and_resume(client, db_session, customer):
    plan = await _plan(db_session)
    subscription = await _subscribe(client, customer, plan.id)
    url = f"/api/v1/subscriptions/{subscription['id']}/status"

    paused = await client.patch(url, json={"status": "paused"}, headers=customer.headers)
    resumed = await client.patch(url, json={"status": "active"}, headers=customer.headers)

    assert paused.json()["data"]["status"] == "paused"
    assert resumed.json()["data"]["status"] == "active"
    assert resumed.json()["data"]["nextDeliveryDate"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancelled_subscription_is_terminal(client, db_session, customer):
    plan = await _plan(db_session)
    subscription = await _subscribe(client, customer, plan.id)
    url = f"/api/v1/subscriptions/{subscription['id']}/status"

    cancelled = await client.patch(
        url, json={"status": "cancelled"}, headers=customer.headers
    )
    resumed = await client.patch(url, json={"status": "active"}, headers=customer.headers)

    assert cancelled.json()["data"]["nextDeliveryDate"] is None
    assert resumed.status_code == 400
    assert resumed.json()["code"] == "INVALID_TRANSITION"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_foreign_subscription_not_found(client, db_session, customer, farmer):
    plan = await _plan(db_session)
    subscription = await _subscribe(client, farmer, plan.id)

    response = await client.patch(
        f"/api/v1/subscriptions/{subscription['id']}/status",
        json={"status": "paused"},
        headers=customer.headers,
    )

    assert response.status_code == 404
