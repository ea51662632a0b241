import pytest


@pytest.mark.asyncio
async def test_scan_and_checkout(client, water, chips):
    scanned = await client.post("/api/v1/checkout/scan", json={"barcode": water.barcode, "quantity": 3})
    assert scanned.status_code == 200
    assert scanned.json()["totalAmount"] == 6.0

    added = await client.post(f"/api/v1/checkout/cart/{chips.id}")
    assert added.json()["itemCount"] == 4

    updated = await client.patch(f"/api/v1/checkout/cart/{chips.id}", json={"quantity": 2})
    assert updated.json()["totalAmount"] == 15.0

    order = await client.post("/api/v1/checkout")
    assert order.status_code == 201
    assert order.json()["order"]["totalAmount"] == 15.0

    cart = await client.get("/api/v1/checkout/cart")
    assert cart.json()["items"] == []


@pytest.mark.asyncio
async def test_unknown_barcode_and_empty_checkout(client):
    assert (await client.post("/api/v1/checkout/scan", json={"barcode": "000"})).status_code == 404
    assert (await client.post("/api/v1/checkout")).status_code == 400


@pytest.mark.asyncio
async def test_remove_and_clear(client, water, chips):
    await client.post(f"/api/v1/checkout/cart/{water.id}", json={"quantity": 2})
    await client.post(f"/api/v1/checkout/cart/{chips.id}")

    removed = await client.delete(f"/api/v1/checkout/cart/{water.id}")
    assert [i["product"]["id"] for i in removed.json()["items"]] == [chips.id]

    cleared = await client.delete("/api/v1/checkout/cart")
    assert cleared.json()["itemCount"] == 0
