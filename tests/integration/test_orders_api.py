import pytest

from supermarket.core.clock import local_now


async def place_order(client, product_id, quantity=3, unit_price=2.0):
    response = await client.post("/api/v1/orders", json={
        "items": [{"productId": product_id, "quantity": quantity, "unitPrice": unit_price}],
    })
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_and_fetch_order(client, water):
    created = await place_order(client, water.id)

    assert created["order"]["totalAmount"] == 6.0
    assert created["order"]["status"] == "completed"
    assert created["items"][0]["subtotal"] == 6.0

    fetched = await client.get(f"/api/v1/orders/{created['order']['id']}")
    assert fetched.status_code == 200
    assert len(fetched.json()["items"]) == 1

    assert (await client.get("/api/v1/orders/ghost")).status_code == 404


@pytest.mark.asyncio
async def test_mismatched_total_rejected(client, water):
    response = await client.post("/api/v1/orders", json={
        "items": [{"productId": water.id, "quantity": 1, "unitPrice": 2.0}],
        "totalAmount": 5.0,
    })
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cancel_then_delete(client, water):
    order_id = (await place_order(client, water.id))["order"]["id"]

    cancelled = await client.post(f"/api/v1/orders/{order_id}/cancel")
    assert cancelled.json()["status"] == "cancelled"

    assert (await client.delete(f"/api/v1/orders/{order_id}")).status_code == 204
    assert (await client.delete(f"/api/v1/orders/{order_id}")).status_code == 404


@pytest.mark.asyncio
async def test_replace_order(client, water):
    created = await place_order(client, water.id)
    item = created["items"][0]

    response = await client.put(f"/api/v1/orders/{created['order']['id']}", json={
        "order": created["order"],
        "items": [{**item, "quantity": 5}],
    })

    assert response.status_code == 200
    assert response.json()["order"]["totalAmount"] == 10.0

    mismatch = await client.put("/api/v1/orders/other-id", json={"order": created["order"], "items": []})
    assert mismatch.status_code == 400


@pytest.mark.asyncio
async def test_list_statistics_and_top_products(client, water, chips):
    await place_order(client, water.id, 3, 2.0)
    await place_order(client, chips.id, 1, 4.5)

    listing = await client.get("/api/v1/orders")
    assert len(listing.json()) == 2

    top = await client.get("/api/v1/orders/top-products", params={"limit": 1})
    assert top.json() == [{"productId": water.id, "quantity": 3, "amount": 6.0}]

    half_range = await client.get("/api/v1/orders/top-products", params={"start": "2025-01-01"})
    assert half_range.status_code == 400

    today = local_now().date().isoformat()
    stats = await client.get("/api/v1/orders/statistics", params={"start": "2000-01-01", "end": "2100-01-01"})
    assert stats.status_code == 200
    assert sum(s["count"] for s in stats.json()) == 2

    backwards = await client.get("/api/v1/orders", params={"start": today, "end": "2000-01-01"})
    assert backwards.status_code == 400


@pytest.mark.asyncio
async def test_purge_endpoint(client, water):
    await place_order(client, water.id)

    response = await client.delete("/api/v1/orders/purge")

    assert response.json() == {"count": 0, "success": True}


@pytest.mark.asyncio
async def test_statistics_report(client, water):
    await place_order(client, water.id, 3, 2.0)

    today = local_now().date().isoformat()
    response = await client.get("/api/v1/statistics/report", params={"start": today, "end": today})

    assert response.status_code == 200
    report = response.json()
    assert report["summary"]["totalSales"] == 6.0
    assert report["topProducts"][0]["productName"] == water.name
    assert len(report["hourlySales"]) == 24
