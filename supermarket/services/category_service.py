import logging
import time
import uuid
from typing import Any, Callable, List, Optional

from supermarket.core.clock import Clock, local_now
from supermarket.core.config import settings
from supermarket.core.exceptions import DuplicateNameError, HasDependentsError, NotFoundError
from supermarket.crud.store import ObjectStore
from supermarket.schemas.category import Category, CategoryCreate, CategoryUpdate
from supermarket.schemas.common import coerce

logger = logging.getLogger(__name__)


class CategoryCache:
    """
    Time-bounded copy of the sorted category list.
    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._data: Optional[List[Category]] = None
        self._loaded_at = 0.0

    def get(self) -> Optional[List[Category]]:
        if self._data is None:
            return None
        if self.clock() - self._loaded_at >= self.ttl_seconds:
            self._data = None
            return None
        return [c.model_copy() for c in self._data]

    def put(self, data: List[Category]) -> None:
        self._data = [c.model_copy() for c in data]
        self._loaded_at = self.clock()

    def invalidate(self) -> None:
        self._data = None


class CategoryService:

    def __init__(self, store: ObjectStore, cache: CategoryCache | None = None, clock: Clock = local_now):
        self.store = store
        self.cache = cache or CategoryCache(ttl_seconds=settings.category_cache_ttl_seconds)
        self.clock = clock

    def clear_cache(self) -> None:
        self.cache.invalidate()

    async def get_all(self) -> List[Category]:
        """Every category, oldest first."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        categories = [Category.model_validate(v) for v in await self.store.categories.values()]
        categories.sort(key=lambda c: c.created_at)

        self.cache.put(categories)
        return list(categories)

    async def get_by_id(self, category_id: str) -> Category | None:
        value = await self.store.categories.get(category_id)
        return Category.model_validate(value) if value else None

    async def get_by_name(self, name: str) -> Category | None:
        """Case-sensitive exact match; the scan stops at the first hit."""
        value = await self.store.categories.find_one(lambda c: c.get("name") == name)
        return Category.model_validate(value) if value else None

    async def _ensure_name_free(self, name: str, exclude_id: str | None = None) -> None:
        existing = await self.get_by_name(name)
        if existing and existing.id != exclude_id:
            logger.warning(f"Category rejected: name '{name}' already used by {existing.id}")
            raise DuplicateNameError(f"Category name '{name}' already exists")

    async def add(self, category_in: CategoryCreate | dict[str, Any]) -> Category:
        category_in = coerce(CategoryCreate, category_in)
        await self._ensure_name_free(category_in.name)

        now = self.clock()
        category = Category(
            id=str(uuid.uuid4()),
            name=category_in.name,
            created_at=now,
            updated_at=now,
        )

        await self.store.categories.set(category.id, category.to_store())
        self.cache.invalidate()

        logger.info(f"Category created: {category.id} ({category.name})")
        return category

    async def update(self, category_id: str, patch: CategoryUpdate | dict[str, Any]) -> Category:
        patch = coerce(CategoryUpdate, patch)

        existing = await self.get_by_id(category_id)
        if not existing:
            raise NotFoundError(f"Category {category_id} not found")

        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes and changes["name"] != existing.name:
            await self._ensure_name_free(changes["name"], exclude_id=category_id)

        updated = existing.model_copy(update={**changes, "updated_at": self.clock()})
        await self.store.categories.set(category_id, updated.to_store())
        self.cache.invalidate()

        logger.info(f"Category updated: {category_id}")
        return updated

    async def delete(self, category_id: str) -> bool:
        if not await self.store.categories.get(category_id):
            raise NotFoundError(f"Category {category_id} not found")

        dependent = await self.store.products.find_one(
            lambda p: bool(p.get("category_id")) and p.get("category_id") == category_id
        )
        if dependent:
            logger.warning(f"Category delete blocked: {category_id} still has products")
            raise HasDependentsError("Category still has products and cannot be deleted")

        await self.store.categories.remove(category_id)
        self.cache.invalidate()

        logger.info(f"Category deleted: {category_id}")
        return True

    async def recover(self, category: Category | dict[str, Any]) -> Category:
        """Restore path: keeps the original id and timestamps."""
        category = coerce(Category, category)
        await self._ensure_name_free(category.name)

        await self.store.categories.set(category.id, category.to_store())
        self.cache.invalidate()
        return category
