"""Integration tests for registration, login, profile and the address book."""

import uuid

import pytest
from services.market_service.models import Address
from sqlalchemy import select
from tests.factories import DEFAULT_PASSWORD, AddressFactory

ADDRESS = {
    "contactName": "李四",
    "contactPhone": "13912345678",
    "province": "上海市",
    "city": "上海市",
    "district": "浦东新区",
    "street": "世纪大道 1 号",
    "tag": "公司",
}


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_returns_token(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"phone": "13700000001", "password": "secret123", "name": "王五"},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["role"] == "customer"
    assert body["data"]["user"]["farmerProfileId"] is None
    assert body["data"]["tokenType"] == "bearer"

    me = await client.get(
        "/api/v1/users/me",
        headers={"Authorization": f"Bearer {body['data']['accessToken']}"},
    )
    assert me.json()["data"]["phone"] == "13700000001"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_duplicate_phone(client, customer):
    response = await client.post(
        "/api/v1/auth/register",
        json={"phone": customer.user.phone, "password": "another123"},
    )

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_short_password(client):
    response = await client.post(
        "/api/v1/auth/register", json={"phone": "13700000002", "password": "123"}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login(client, customer):
    response = await client.post(
        "/api/v1/auth/login",
        json={"phone": customer.user.phone, "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == str(customer.user.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_farmer_login_carries_profile(client, farmer):
    response = await client.post(
        "/api/v1/auth/login",
        json={"phone": farmer.user.phone, "password": DEFAULT_PASSWORD},
    )

    user = response.json()["data"]["user"]
    assert user["role"] == "farmer"
    assert user["farmerProfileId"] == str(farmer.profile.id)


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("phone_suffix,password", [("", "wrong-pass"), ("9", "secret123")])
async def test_login_bad_credentials(client, customer, phone_suffix, password):
    phone = customer.user.phone if not phone_suffix else "139" + "9" * 8

    response = await client.post(
        "/api/v1/auth/login", json={"phone": phone, "password": password}
    )

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_token(client):
    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_profile_counts_addresses(client, db_session, customer):
    db_session.add_all(
        [AddressFactory.create(customer.user.id) for _ in range(2)]
    )
    await db_session.commit()

    response = await client.get("/api/v1/users/me", headers=customer.headers)

    data = response.json()["data"]
    assert data["id"] == str(customer.user.id)
    assert data["addressCount"] == 2
    assert data["name"] == "测试用户"


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_and_list_addresses(client, customer):
    created = await client.post(
        "/api/v1/addresses", json=ADDRESS, headers=customer.headers
    )

    assert created.status_code == 201, created.text
    assert created.json()["data"]["isDefault"] is False

    listed = await client.get("/api/v1/addresses", headers=customer.headers)
    assert [a["contactName"] for a in listed.json()["data"]] == ["李四"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_new_default_replaces_old_default(client, db_session, customer):
    old = AddressFactory.create(customer.user.id, is_default=True)
    db_session.add(old)
    await db_session.commit()
    old_id = old.id

    response = await client.post(
        "/api/v1/addresses",
        json={**ADDRESS, "isDefault": True},
        headers=customer.headers,
    )

    assert response.status_code == 201
    new_id = uuid.UUID(response.json()["data"]["id"])
    rows = dict(
        (
            await db_session.execute(
                select(Address.id, Address.is_default).where(
                    Address.user_id == customer.user.id
                )
            )
        ).all()
    )
    assert rows == {old_id: False, new_id: True}

    listed = await client.get("/api/v1/addresses", headers=customer.headers)
    assert listed.json()["data"][0]["id"] == str(new_id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_address(client, db_session, customer):
    address = AddressFactory.create(customer.user.id)
    db_session.add(address)
    await db_session.commit()

    response = await client.put(
        f"/api/v1/addresses/{address.id}",
        json={**ADDRESS, "detail": "3 楼"},
        headers=customer.headers,
    )

    data = response.json()["data"]
    assert data["contactName"] == "李四"
    assert data["detail"] == "3 楼"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_address_phone_validated(client, customer):
    response = await client.post(
        "/api/v1/addresses",
        json={**ADDRESS, "contactPhone": "12345"},
        headers=customer.headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_foreign_address_not_found(client, db_session, customer, farmer):
    address = AddressFactory.create(farmer.user.id)
    db_session.add(address)
    await db_session.commit()

    updated = await client.put(
        f"/api/v1/addresses/{address.id}", json=ADDRESS, headers=customer.headers
    )
    deleted = await client.delete(
        f"/api/v1/addresses/{address.id}", headers=customer.headers
    )

    assert updated.status_code == 404
    assert deleted.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_address(client, db_session, customer):
    address = AddressFactory.create(customer.user.id)
    db_session.add(address)
    await db_session.commit()

    response = await client.delete(
        f"/api/v1/addresses/{address.id}", headers=customer.headers
    )

    assert response.status_code == 204
    listed = await client.get("/api/v1/addresses", headers=customer.headers)
    assert listed.json()["data"] == []
