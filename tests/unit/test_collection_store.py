import pytest
from sqlalchemy.exc import OperationalError

from supermarket.core.exceptions import StorageIOError


@pytest.mark.asyncio
async def test_set_then_get_returns_value(store):
    await store.products.set("p1", {"id": "p1", "name": "Water"})

    assert await store.products.get("p1") == {"id": "p1", "name": "Water"}
    assert await store.products.get("missing") is None


@pytest.mark.asyncio
async def test_set_overwrites_existing_key(store):
    await store.products.set("p1", {"id": "p1", "name": "Water"})
    await store.products.set("p1", {"id": "p1", "name": "Sparkling Water"})

    assert (await store.products.get("p1"))["name"] == "Sparkling Water"
    assert await store.products.count() == 1


@pytest.mark.asyncio
async def test_remove_missing_key_is_silent(store):
    await store.products.remove("nothing-here")
    assert await store.products.count() == 0


@pytest.mark.asyncio
async def test_clear_only_touches_one_collection(store):
    await store.products.set("p1", {"id": "p1"})
    await store.categories.set("c1", {"id": "c1"})

    await store.products.clear()

    assert await store.products.count() == 0
    assert await store.categories.get("c1") == {"id": "c1"}


@pytest.mark.asyncio
async def test_iterate_stops_on_truthy_visitor_result(store):
    for i in range(5):
        await store.orders.set(f"o{i}", {"id": f"o{i}"})

    seen = []

    def visitor(value, key):
        seen.append(key)
        return len(seen) == 2

    await store.orders.iterate(visitor)

    assert len(seen) == 2


@pytest.mark.asyncio
async def test_find_one_and_find_all(store):
    await store.products.set("a", {"id": "a", "barcode": "111"})
    await store.products.set("b", {"id": "b", "barcode": "222"})
    await store.products.set("c", {"id": "c", "barcode": "222"})

    found = await store.products.find_one(lambda v: v["barcode"] == "111")
    matches = await store.products.find_all(lambda v: v["barcode"] == "222")

    assert found["id"] == "a"
    assert sorted(v["id"] for v in matches) == ["b", "c"]
    assert await store.products.find_one(lambda v: v["barcode"] == "999") is None


@pytest.mark.asyncio
async def test_database_failure_is_reported_as_storage_error(store, monkeypatch):
    def broken_factory():
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store.products, "session_factory", broken_factory)

    with pytest.raises(StorageIOError):
        await store.products.get("p1")
    with pytest.raises(StorageIOError):
        await store.products.set("p1", {"id": "p1"})
