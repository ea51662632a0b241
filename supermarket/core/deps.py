import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supermarket.core.config import settings
from supermarket.crud.store import ObjectStore
from supermarket.db.sessions import get_session_factory
from supermarket.services.auto_backup import AutoBackupScheduler
from supermarket.services.backup_service import BackupService
from supermarket.services.cart_service import CartService
from supermarket.services.category_service import CategoryService
from supermarket.services.lock_service import SessionLockService
from supermarket.services.order_service import OrderService
from supermarket.services.product_service import ProductService
from supermarket.services.statistics_service import StatisticsService
from supermarket.storage.base import BackupStorageInterface
from supermarket.storage.local_storage import LocalBackupStorage

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    One instance of every service for the running till. The category
    cache, the cart and the lock state live on these instances.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], files: BackupStorageInterface):
        self.store = ObjectStore(session_factory)
        self.files = files

        self.categories = CategoryService(self.store)
        self.products = ProductService(self.store, self.categories)
        self.orders = OrderService(self.store)
        self.statistics = StatisticsService(self.orders, self.products, self.categories)
        self.backup = BackupService(self.store, self.categories, self.products, self.orders, files)
        self.auto_backup = AutoBackupScheduler(self.backup, settings.auto_backup_days)
        self.cart = CartService(self.products, self.orders, self.categories)
        self.lock = SessionLockService(settings.lock_password, settings.auto_lock_minutes)


@lru_cache
def build_container(session_factory: async_sessionmaker[AsyncSession]) -> ServiceContainer:
    logger.info(f"Services initialised; backups under {settings.backup_dir}")
    return ServiceContainer(session_factory, LocalBackupStorage(settings.backup_dir))


def get_container(session_factory: async_sessionmaker = Depends(get_session_factory)) -> ServiceContainer:
    return build_container(session_factory)


# SERVICE DEPENDENCIES

def get_category_service(container: ServiceContainer = Depends(get_container)) -> CategoryService:
    return container.categories

def get_product_service(container: ServiceContainer = Depends(get_container)) -> ProductService:
    return container.products

def get_order_service(container: ServiceContainer = Depends(get_container)) -> OrderService:
    return container.orders

def get_statistics_service(container: ServiceContainer = Depends(get_container)) -> StatisticsService:
    return container.statistics

def get_backup_service(container: ServiceContainer = Depends(get_container)) -> BackupService:
    return container.backup

def get_auto_backup(container: ServiceContainer = Depends(get_container)) -> AutoBackupScheduler:
    return container.auto_backup

def get_cart_service(container: ServiceContainer = Depends(get_container)) -> CartService:
    return container.cart

def get_lock_service(container: ServiceContainer = Depends(get_container)) -> SessionLockService:
    return container.lock
