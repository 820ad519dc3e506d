"""Integration tests for the product catalog and farmer product management."""

import uuid

import pytest
from services.market_service.models import ProductStatus
from tests.factories import ProductFactory, make_farmer

NEW_PRODUCT = {
    "name": "  稻花香大米  ",
    "description": "五常核心产区",
    "images": ["https://img.farmdirect.test/rice.jpg", "  "],
    "price": "75.10",
    "originalPrice": "89.00",
    "unit": "5kg",
    "origin": "黑龙江 五常",
    "categoryId": "grains",
    "stock": 20,
    "isOrganic": True,
}


async def _seed(db, farmer, *rows):
    products = [
        ProductFactory.create(farmer_id=farmer.profile.id, **fields) for fields in rows
    ]
    db.add_all(products)
    await db.commit()
    return products


# ---------------------------------------------------------------------------
# Public listing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_defaults_to_active_products(client, db_session, farmer):
    await _seed(
        db_session,
        farmer,
        {"name": "番茄"},
        {"name": "黄瓜"},
        {"name": "草稿", "status": ProductStatus.DRAFT},
    )

    response = await client.get("/api/v1/products")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 2
    assert {item["name"] for item in data["items"]} == {"番茄", "黄瓜"}
    assert data["items"][0]["thumbnail"].startswith("https://")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_filters_and_sorts(client, db_session, farmer):
    await _seed(
        db_session,
        farmer,
        {"name": "有机番茄", "price_fen": 2990, "category_id": "vegetables"},
        {"name": "樱桃番茄", "price_fen": 1990, "category_id": "vegetables"},
        {"name": "苹果", "price_fen": 990, "category_id": "fruits"},
    )

    response = await client.get(
        "/api/v1/products",
        params={
            "categoryId": "vegetables",
            "keyword": "番茄",
            "sortBy": "price",
            "sortOrder": "desc",
        },
    )

    data = response.json()["data"]
    assert [item["name"] for item in data["items"]] == ["有机番茄", "樱桃番茄"]
    assert [item["price"] for item in data["items"]] == [29.9, 19.9]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_paginates(client, db_session, farmer):
    await _seed(db_session, farmer, *({"name": f"商品{i}"} for i in range(5)))

    response = await client.get("/api/v1/products", params={"page": 2, "pageSize": 2})

    data = response.json()["data"]
    assert data["total"] == 5
    assert data["page"] == 2
    assert data["pageSize"] == 2
    assert len(data["items"]) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_rejects_unknown_sort_field(client):
    response = await client.get("/api/v1/products", params={"sortBy": "rating"})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_product_detail(client, db_session, farmer):
    (product,) = await _seed(db_session, farmer, {"original_price_fen": 3990})

    response = await client.get(f"/api/v1/products/{product.id}")

    data = response.json()["data"]
    assert data["price"] == 29.9
    assert data["originalPrice"] == 39.9
    assert data["images"] == ["https://img.farmdirect.test/tomato.jpg"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_product(client):
    response = await client.get(f"/api/v1/products/{uuid.uuid4()}")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Farmer management
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_farmer_creates_product(client, farmer):
    response = await client.post(
        "/api/v1/products", json=NEW_PRODUCT, headers=farmer.headers
    )

    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["name"] == "稻花香大米"
    assert data["images"] == ["https://img.farmdirect.test/rice.jpg"]
    assert data["price"] == 75.1
    assert data["originalPrice"] == 89
    assert data["farmerId"] == str(farmer.profile.id)
    assert data["status"] == "active"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_requires_an_image(client, farmer):
    response = await client.post(
        "/api/v1/products",
        json={**NEW_PRODUCT, "images": ["   "]},
        headers=farmer.headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_rejects_non_positive_price(client, farmer):
    response = await client.post(
        "/api/v1/products",
        json={**NEW_PRODUCT, "price": "0"},
        headers=farmer.headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_cannot_create_product(client, customer):
    response = await client.post(
        "/api/v1/products", json=NEW_PRODUCT, headers=customer.headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_farmer_updates_own_product(client, db_session, farmer):
    (product,) = await _seed(db_session, farmer, {})

    response = await client.put(
        f"/api/v1/products/{product.id}",
        json={"price": "25.00", "stock": 7},
        headers=farmer.headers,
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["price"] == 25
    assert data["stock"] == 7
    assert data["name"] == "高山有机番茄"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_update_rejected(client, db_session, farmer):
    (product,) = await _seed(db_session, farmer, {})

    response = await client.put(
        f"/api/v1/products/{product.id}", json={}, headers=farmer.headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_other_farmer_product_is_hidden(client, db_session, farmer):
    other = await make_farmer(db_session)
    (product,) = await _seed(db_session, other, {})

    response = await client.patch(
        f"/api/v1/products/{product.id}/status",
        json={"status": "inactive"},
        headers=farmer.headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_changes_any_product_status(client, db_session, farmer, admin):
    (product,) = await _seed(db_session, farmer, {})

    response = await client.patch(
        f"/api/v1/products/{product.id}/status",
        json={"status": "inactive"},
        headers=admin.headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "inactive"


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_restock_and_write_off(client, db_session, farmer):
    (product,) = await _seed(db_session, farmer, {"stock": 5})

    restocked = await client.post(
        f"/api/v1/products/{product.id}/stock",
        json={"delta": 10},
        headers=farmer.headers,
    )
    written_off = await client.post(
        f"/api/v1/products/{product.id}/stock",
        json={"delta": -15},
        headers=farmer.headers,
    )

    assert restocked.json()["data"]["stock"] == 15
    assert written_off.json()["data"]["stock"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stock_never_goes_negative(client, db_session, farmer):
    (product,) = await _seed(db_session, farmer, {"stock": 2})
    product_id = product.id

    response = await client.post(
        f"/api/v1/products/{product_id}/stock",
        json={"delta": -3},
        headers=farmer.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_STOCK"
    detail = await client.get(f"/api/v1/products/{product_id}")
    assert detail.json()["data"]["stock"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_zero_stock_delta_rejected(client, db_session, farmer):
    (product,) = await _seed(db_session, farmer, {})

    response = await client.post(
        f"/api/v1/products/{product.id}/stock",
        json={"delta": 0},
        headers=farmer.headers,
    )

    assert response.status_code == 400
