import pytest


@pytest.mark.asyncio
async def test_category_crud(client):
    created = await client.post("/api/v1/categories", json={"name": "Beverages"})
    assert created.status_code == 201
    category = created.json()
    assert set(category) == {"id", "name", "createdAt", "updatedAt"}

    duplicate = await client.post("/api/v1/categories", json={"name": "Beverages"})
    assert duplicate.status_code == 409

    renamed = await client.patch(f"/api/v1/categories/{category['id']}", json={"name": "Drinks"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Drinks"

    listing = await client.get("/api/v1/categories")
    assert [c["name"] for c in listing.json()] == ["Drinks"]

    deleted = await client.delete(f"/api/v1/categories/{category['id']}")
    assert deleted.status_code == 204

    missing = await client.get(f"/api/v1/categories/{category['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_category_with_products_cannot_be_deleted(client, beverages, water):
    response = await client.delete(f"/api/v1/categories/{beverages.id}")

    assert response.status_code == 409
    assert "products" in response.json()["detail"]


@pytest.mark.asyncio
async def test_product_create_and_lookup(client, beverages):
    response = await client.post("/api/v1/products", json={
        "name": "Cola 330ml",
        "barcode": "6901234567891",
        "price": 3.0,
        "category_id": beverages.id,
        "unit": "can",
    })
    assert response.status_code == 201
    product = response.json()
    assert product["price"] == 3.0
    assert product["category_id"] == beverages.id

    by_barcode = await client.get("/api/v1/products/barcode/6901234567891")
    assert by_barcode.json()["id"] == product["id"]

    assert (await client.get("/api/v1/products/barcode/000")).status_code == 404
    assert (await client.get("/api/v1/products/nope")).status_code == 404


@pytest.mark.asyncio
async def test_product_rules_over_http(client, water):
    duplicate = await client.post("/api/v1/products", json={"name": "X", "barcode": water.barcode, "price": 1})
    assert duplicate.status_code == 409

    bad_category = await client.post("/api/v1/products", json={
        "name": "X", "barcode": "123", "price": 1, "category_id": "nope",
    })
    assert bad_category.status_code == 400

    negative = await client.post("/api/v1/products", json={"name": "X", "barcode": "124", "price": -1})
    assert negative.status_code == 422


@pytest.mark.asyncio
async def test_product_list_query(client, water, chips):
    response = await client.get("/api/v1/products", params={
        "page": 1, "pageSize": 1, "sortBy": "name", "sortOrder": "asc",
    })
    assert response.status_code == 200
    page = response.json()
    assert page["total"] == 2
    assert [p["name"] for p in page["list"]] == [water.name]

    uncategorized = await client.get("/api/v1/products", params={"categoryId": "uncategorized"})
    assert [p["id"] for p in uncategorized.json()["list"]] == [chips.id]

    bad_sort = await client.get("/api/v1/products", params={"sortBy": "colour"})
    assert bad_sort.status_code == 400


@pytest.mark.asyncio
async def test_product_update_and_delete(client, water):
    updated = await client.patch(f"/api/v1/products/{water.id}", json={"price": 2.5})
    assert updated.json()["price"] == 2.5
    assert updated.json()["barcode"] == water.barcode

    assert (await client.delete(f"/api/v1/products/{water.id}")).status_code == 204
    assert (await client.get(f"/api/v1/products/{water.id}")).status_code == 404


@pytest.mark.asyncio
async def test_bulk_products(client, water):
    response = await client.post("/api/v1/products/bulk", json=[
        {"name": "Tea", "barcode": "500", "price": 3},
        {"name": "Clash", "barcode": water.barcode, "price": 3},
    ])

    assert response.status_code == 200
    body = response.json()
    assert [p["name"] for p in body["created"]] == ["Tea"]
    assert body["failed"][0]["record"]["name"] == "Clash"
