import pytest

from supermarket.core.exceptions import (
    DuplicateNameError,
    HasDependentsError,
    NotFoundError,
    ValidationError,
)


@pytest.mark.asyncio
async def test_add_category_sets_id_and_timestamps(category_service, clock):
    category = await category_service.add({"name": "Snacks"})

    assert category.id
    assert category.name == "Snacks"
    assert category.created_at == clock.now
    assert category.updated_at == clock.now


@pytest.mark.asyncio
async def test_blank_name_is_rejected(category_service):
    with pytest.raises(ValidationError):
        await category_service.add({"name": "   "})
    with pytest.raises(ValidationError):
        await category_service.add({"name": "x" * 51})


@pytest.mark.asyncio
async def test_rename_to_blank_is_rejected(category_service):
    snacks = await category_service.add({"name": "Snacks"})

    with pytest.raises(ValidationError):
        await category_service.update(snacks.id, {"name": "   "})

    assert (await category_service.get_by_id(snacks.id)).name == "Snacks"


@pytest.mark.asyncio
async def test_duplicate_name_is_rejected(category_service):
    await category_service.add({"name": "Snacks"})

    with pytest.raises(DuplicateNameError):
        await category_service.add({"name": "Snacks"})

    # Case sensitive
    assert (await category_service.add({"name": "snacks"})).name == "snacks"


@pytest.mark.asyncio
async def test_get_all_sorted_oldest_first(category_service, clock):
    await category_service.add({"name": "B"})
    clock.advance(minutes=1)
    await category_service.add({"name": "A"})

    assert [c.name for c in await category_service.get_all()] == ["B", "A"]


@pytest.mark.asyncio
async def test_cache_serves_stale_data_until_ttl(category_service, store, monotonic):
    await category_service.add({"name": "Dairy"})
    assert len(await category_service.get_all()) == 1

    # Written behind the service's back, so the cache does not know
    await store.categories.set("raw", {
        "id": "raw",
        "name": "Deli",
        "createdAt": "2025-03-15T11:00:00+08:00",
        "updatedAt": "2025-03-15T11:00:00+08:00",
    })

    monotonic.value += 299
    assert len(await category_service.get_all()) == 1

    monotonic.value += 1
    assert len(await category_service.get_all()) == 2


@pytest.mark.asyncio
async def test_cached_categories_are_copies(category_service):
    await category_service.add({"name": "Dairy"})

    first = await category_service.get_all()
    first[0].name = "Changed"
    second = await category_service.get_all()
    second[0].name = "Changed again"

    assert [c.name for c in await category_service.get_all()] == ["Dairy"]


@pytest.mark.asyncio
async def test_writes_invalidate_cache(category_service):
    await category_service.get_all()
    await category_service.add({"name": "Dairy"})

    assert [c.name for c in await category_service.get_all()] == ["Dairy"]


@pytest.mark.asyncio
async def test_update_renames_and_checks_uniqueness(category_service, clock):
    dairy = await category_service.add({"name": "Dairy"})
    await category_service.add({"name": "Deli"})
    clock.advance(hours=1)

    renamed = await category_service.update(dairy.id, {"name": "Milk"})
    assert renamed.name == "Milk"
    assert renamed.updated_at == clock.now
    assert renamed.created_at == dairy.created_at

    # Keeping its own name is not a clash
    assert (await category_service.update(dairy.id, {"name": "Milk"})).name == "Milk"

    with pytest.raises(DuplicateNameError):
        await category_service.update(dairy.id, {"name": "Deli"})


@pytest.mark.asyncio
async def test_update_missing_category(category_service):
    with pytest.raises(NotFoundError):
        await category_service.update("missing", {"name": "X"})


@pytest.mark.asyncio
async def test_delete_refused_while_products_use_it(category_service, product_service, beverages, water):
    with pytest.raises(HasDependentsError):
        await category_service.delete(beverages.id)

    await product_service.delete(water.id)
    assert await category_service.delete(beverages.id) is True
    assert await category_service.get_by_id(beverages.id) is None


@pytest.mark.asyncio
async def test_delete_missing_category(category_service):
    with pytest.raises(NotFoundError):
        await category_service.delete("missing")


@pytest.mark.asyncio
async def test_recover_keeps_id_and_timestamps(category_service):
    restored = await category_service.recover({
        "id": "cat-1",
        "name": "Beverages",
        "createdAt": "2024/1/5 9:03:00",
        "updatedAt": "2024-01-06T10:00:00+08:00",
    })

    stored = await category_service.get_by_id("cat-1")
    assert stored == restored
    assert stored.created_at.year == 2024
    assert stored.created_at.tzinfo is not None
