import pytest

from supermarket.core.exceptions import StorageIOError


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["dependencies"]["database"] == "ok"


@pytest.mark.asyncio
async def test_operation_id_header(client):
    response = await client.get("/api/v1/categories")

    assert response.headers["X-Operation-Id"]


@pytest.mark.asyncio
async def test_storage_failure_maps_to_503(client, container, monkeypatch):
    async def broken():
        raise StorageIOError("Could not read in 'categories'")

    monkeypatch.setattr(container.categories, "get_all", broken)

    response = await client.get("/api/v1/categories")

    assert response.status_code == 503
