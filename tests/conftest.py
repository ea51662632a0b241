from datetime import datetime, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import supermarket.models  # noqa: F401
from supermarket.core.clock import store_timezone
from supermarket.core.deps import ServiceContainer, get_container
from supermarket.crud.store import ObjectStore
from supermarket.db.base import Base
from supermarket.db.sessions import get_session_factory
from supermarket.main import app
from supermarket.services.auto_backup import AutoBackupScheduler
from supermarket.services.backup_service import BackupService
from supermarket.services.cart_service import CartService
from supermarket.services.category_service import CategoryCache, CategoryService
from supermarket.services.lock_service import SessionLockService
from supermarket.services.order_service import OrderService
from supermarket.services.product_service import ProductService
from supermarket.services.statistics_service import StatisticsService
from supermarket.storage.local_storage import LocalBackupStorage

# DATABASE SETUP (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FIXED_NOW = datetime(2025, 3, 15, 10, 30, 0, tzinfo=store_timezone())


class FakeClock:
    """Wall clock frozen at `now`; tests move it explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeMonotonic:
    def __init__(self):
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


# PYTEST CORE FIXTURES
@pytest.fixture
async def engine():
    """Fresh in-memory database per test; tables created and dropped around it."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def store(session_factory):
    return ObjectStore(session_factory)


@pytest.fixture
def clock():
    return FakeClock(FIXED_NOW)


@pytest.fixture
def monotonic():
    return FakeMonotonic()


# SERVICES
@pytest.fixture
def category_service(store, clock, monotonic):
    return CategoryService(store, cache=CategoryCache(ttl_seconds=300, clock=monotonic), clock=clock)


@pytest.fixture
def product_service(store, category_service, clock):
    return ProductService(store, category_service, clock=clock)


@pytest.fixture
def order_service(store, clock):
    return OrderService(store, clock=clock)


@pytest.fixture
def statistics_service(order_service, product_service, category_service):
    return StatisticsService(order_service, product_service, category_service)


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backup"


@pytest.fixture
def backup_storage(backup_dir, clock):
    return LocalBackupStorage(backup_dir, clock=clock)


@pytest.fixture
def backup_service(store, category_service, product_service, order_service, backup_storage, clock):
    return BackupService(store, category_service, product_service, order_service, backup_storage, clock=clock)


@pytest.fixture
def auto_backup(backup_service, clock):
    return AutoBackupScheduler(backup_service, auto_backup_days=1, clock=clock)


@pytest.fixture
def cart_service(product_service, order_service, category_service):
    return CartService(product_service, order_service, category_service)


@pytest.fixture
def lock_service(clock):
    return SessionLockService(auto_lock_minutes=5, clock=clock)


# HTTP CLIENT
@pytest.fixture
def container(session_factory, backup_storage):
    return ServiceContainer(session_factory, backup_storage)


@pytest.fixture
async def client(container, session_factory) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_container] = lambda: container
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# DATA FIXTURES
@pytest.fixture
async def beverages(category_service):
    return await category_service.add({"name": "Beverages"})


@pytest.fixture
async def water(product_service, beverages):
    return await product_service.add({
        "name": "Mineral Water 500ml",
        "barcode": "6901234567890",
        "price": Decimal("2.00"),
        "category_id": beverages.id,
        "unit": "bottle",
    })


@pytest.fixture
async def chips(product_service):
    return await product_service.add({
        "name": "Potato Chips",
        "barcode": "6901234567893",
        "price": Decimal("4.50"),
    })
