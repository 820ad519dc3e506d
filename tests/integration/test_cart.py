"""Integration tests for the shopping cart."""

import uuid

import pytest
from services.market_service.models import CartItem, ProductStatus
from sqlalchemy import func, select
from tests.factories import CartItemFactory, ProductFactory


async def _product(db, farmer, **overrides):
    product = ProductFactory.create(farmer_id=farmer.profile.id, **overrides)
    db.add(product)
    await db.commit()
    return product


# ---------------------------------------------------------------------------
# Adding lines
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_to_cart(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)

    response = await client.post(
        "/api/v1/cart",
        json={"productId": str(product.id), "quantity": 2},
        headers=customer.headers,
    )

    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["quantity"] == 2
    assert data["selected"] is True
    assert data["product"]["name"] == "高山有机番茄"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_adding_again_merges_and_reselects(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)
    db_session.add(
        CartItemFactory.create(
            customer.user.id, product.id, quantity=3, selected=False
        )
    )
    await db_session.commit()

    response = await client.post(
        "/api/v1/cart",
        json={"productId": str(product.id), "quantity": 2},
        headers=customer.headers,
    )

    data = response.json()["data"]
    assert data["quantity"] == 5
    assert data["selected"] is True
    lines = (
        await db_session.execute(
            select(func.count())
            .select_from(CartItem)
            .where(CartItem.user_id == customer.user.id)
        )
    ).scalar_one()
    assert lines == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_beyond_stock(client, db_session, customer, farmer):
    product = await _product(db_session, farmer, stock=2)

    response = await client.post(
        "/api/v1/cart",
        json={"productId": str(product.id), "quantity": 3},
        headers=customer.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_STOCK"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_sold_out_product(client, db_session, customer, farmer):
    product = await _product(db_session, farmer, stock=0)

    response = await client.post(
        "/api/v1/cart",
        json={"productId": str(product.id)},
        headers=customer.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_STOCK"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_inactive_product(client, db_session, customer, farmer):
    product = await _product(db_session, farmer, status=ProductStatus.INACTIVE)

    response = await client.post(
        "/api/v1/cart",
        json={"productId": str(product.id)},
        headers=customer.headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cart_requires_auth(client):
    response = await client.get("/api/v1/cart")
    assert response.status_code == 401
    assert response.json()["success"] is False


# ---------------------------------------------------------------------------
# Reading and editing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cart_summary_counts_selected_lines(client, db_session, customer, farmer):
    tomato = await _product(db_session, farmer, price_fen=2990)
    rice = await _product(db_session, farmer, name="稻花香大米", price_fen=7510)
    honey = await _product(db_session, farmer, name="百花蜜", price_fen=5000)
    db_session.add_all(
        [
            CartItemFactory.create(customer.user.id, tomato.id, quantity=2),
            CartItemFactory.create(customer.user.id, rice.id, quantity=1),
            CartItemFactory.create(customer.user.id, honey.id, selected=False),
        ]
    )
    await db_session.commit()

    response = await client.get("/api/v1/cart", headers=customer.headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["items"]) == 3
    summary = data["summary"]
    assert summary["subtotal"] == 134.9
    assert summary["discount"] == 0
    assert summary["deliveryFee"] == 8
    assert summary["total"] == 142.9
    assert [line["label"] for line in summary["details"]] == [
        "商品小计",
        "优惠减免",
        "冷链配送",
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_cart(client, customer):
    response = await client.get("/api/v1/cart", headers=customer.headers)

    data = response.json()["data"]
    assert data["items"] == []
    assert data["summary"]["total"] == 0
    assert data["summary"]["deliveryFee"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_select_all_toggles_every_line(client, db_session, customer, farmer):
    first = await _product(db_session, farmer)
    second = await _product(db_session, farmer, name="黄瓜")
    db_session.add_all(
        [
            CartItemFactory.create(customer.user.id, first.id),
            CartItemFactory.create(customer.user.id, second.id),
        ]
    )
    await db_session.commit()

    response = await client.post(
        "/api/v1/cart/select-all",
        json={"selected": False},
        headers=customer.headers,
    )

    data = response.json()["data"]
    assert [item["selected"] for item in data["items"]] == [False, False]
    assert data["summary"]["total"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_quantity_and_selection(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)
    item = CartItemFactory.create(customer.user.id, product.id)
    db_session.add(item)
    await db_session.commit()

    response = await client.patch(
        f"/api/v1/cart/{item.id}",
        json={"quantity": 4, "selected": False},
        headers=customer.headers,
    )

    data = response.json()["data"]
    assert data["quantity"] == 4
    assert data["selected"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_quantity_below_one_is_clamped(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)
    item = CartItemFactory.create(customer.user.id, product.id, quantity=3)
    db_session.add(item)
    await db_session.commit()

    response = await client.patch(
        f"/api/v1/cart/{item.id}", json={"quantity": 0}, headers=customer.headers
    )

    assert response.json()["data"]["quantity"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_beyond_stock(client, db_session, customer, farmer):
    product = await _product(db_session, farmer, stock=5)
    item = CartItemFactory.create(customer.user.id, product.id)
    db_session.add(item)
    await db_session.commit()

    response = await client.patch(
        f"/api/v1/cart/{item.id}", json={"quantity": 6}, headers=customer.headers
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_STOCK"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_needs_a_field(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)
    item = CartItemFactory.create(customer.user.id, product.id)
    db_session.add(item)
    await db_session.commit()

    response = await client.patch(
        f"/api/v1/cart/{item.id}", json={}, headers=customer.headers
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_remove_line(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)
    item = CartItemFactory.create(customer.user.id, product.id)
    db_session.add(item)
    await db_session.commit()

    response = await client.delete(f"/api/v1/cart/{item.id}", headers=customer.headers)

    assert response.status_code == 204
    cart = await client.get("/api/v1/cart", headers=customer.headers)
    assert cart.json()["data"]["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_other_users_line_is_not_found(client, db_session, customer, farmer):
    product = await _product(db_session, farmer)
    item = CartItemFactory.create(farmer.user.id, product.id)
    db_session.add(item)
    await db_session.commit()

    patched = await client.patch(
        f"/api/v1/cart/{item.id}", json={"selected": False}, headers=customer.headers
    )
    deleted = await client.delete(f"/api/v1/cart/{uuid.uuid4()}", headers=customer.headers)

    assert patched.status_code == 404
    assert deleted.status_code == 404
