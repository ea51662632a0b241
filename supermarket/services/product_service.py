import logging
import math
import uuid
from typing import Any, Iterable, List

from supermarket.core.clock import Clock, local_now
from supermarket.core.exceptions import (
    DuplicateBarcodeError,
    NotFoundError,
    SupermarketError,
    ValidationError,
)
from supermarket.crud.store import ObjectStore
from supermarket.db.enums import SortOrder
from supermarket.schemas.common import coerce
from supermarket.schemas.product import (
    UNCATEGORIZED,
    BulkResult,
    FailedRow,
    Product,
    ProductCreate,
    ProductPage,
    ProductUpdate,
)
from supermarket.services.category_service import CategoryService

logger = logging.getLogger(__name__)

# Wire name or attribute name -> attribute used as sort key
SORTABLE_FIELDS = {
    "name": "name",
    "price": "price",
    "barcode": "barcode",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}


class ProductService:

    def __init__(self, store: ObjectStore, category_service: CategoryService, clock: Clock = local_now):
        self.store = store
        self.category_service = category_service
        self.clock = clock

    async def get_all(self) -> List[Product]:
        """All products, unfiltered and unsorted."""
        return [Product.model_validate(v) for v in await self.store.products.values()]

    async def get_by_id(self, product_id: str) -> Product | None:
        value = await self.store.products.get(product_id)
        return Product.model_validate(value) if value else None

    async def get_by_barcode(self, barcode: str) -> Product | None:
        """Exact barcode match, used by the till scanner and duplicate checks."""
        value = await self.store.products.find_one(lambda p: p.get("barcode") == barcode)
        return Product.model_validate(value) if value else None

    async def get_product_list(
        self,
        page: int = 1,
        page_size: float | None = 10,
        keyword: str = "",
        category_id: str = "",
        sort_by: str | None = None,
        sort_order: SortOrder | str | None = None,
    ) -> ProductPage:
        """
        Filter by keyword, then category, sort, then slice one page.
        page_size of math.inf (or None) returns every match on page 1.
        """
        if page < 1:
            raise ValidationError("page must be >= 1")
        if page_size is not None and page_size <= 0:
            raise ValidationError("page_size must be positive")

        products = await self.get_all()

        if keyword:
            lower_keyword = keyword.lower()
            products = [
                p for p in products
                if lower_keyword in p.name.lower() or keyword in p.barcode
            ]

        if category_id == UNCATEGORIZED:
            products = [p for p in products if not p.category_id]
        elif category_id:
            products = [p for p in products if p.category_id == category_id]

        attribute = SORTABLE_FIELDS.get(sort_by or "updatedAt")
        if attribute is None:
            raise ValidationError(f"Cannot sort products by '{sort_by}'")
        order = SortOrder(sort_order) if sort_order else SortOrder.DESC
        products.sort(key=lambda p: getattr(p, attribute), reverse=order == SortOrder.DESC)

        total = len(products)
        if page_size is None or page_size == math.inf:
            page_size = max(total, 1)
        page_size = int(page_size)

        start = (page - 1) * page_size
        return ProductPage(list=products[start:start + page_size], total=total)

    async def _ensure_category_exists(self, category_id: str | None) -> None:
        if not category_id:
            return
        if not await self.category_service.get_by_id(category_id):
            raise ValidationError(f"Category {category_id} does not exist")

    async def _ensure_barcode_free(self, barcode: str, exclude_id: str | None = None) -> None:
        existing = await self.get_by_barcode(barcode)
        if existing and existing.id != exclude_id:
            logger.warning(f"Product rejected: barcode {barcode} already used by {existing.id}")
            raise DuplicateBarcodeError(f"Barcode '{barcode}' already exists")

    async def add(self, product_in: ProductCreate | dict[str, Any]) -> Product:
        product_in = coerce(ProductCreate, product_in)

        await self._ensure_category_exists(product_in.category_id)
        await self._ensure_barcode_free(product_in.barcode)

        now = self.clock()
        product = Product(
            **product_in.model_dump(),
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )

        await self.store.products.set(product.id, product.to_store())

        logger.info(f"Product created: {product.id} | barcode {product.barcode} | price {product.price}")
        return product

    async def update(self, product_id: str, patch: ProductUpdate | dict[str, Any]) -> Product:
        patch = coerce(ProductUpdate, patch)

        existing = await self.get_by_id(product_id)
        if not existing:
            raise NotFoundError(f"Product {product_id} not found")

        changes = patch.model_dump(exclude_unset=True)
        # Nulls are only meaningful for the optional fields
        changes = {
            k: v for k, v in changes.items()
            if v is not None or k in ("category_id", "unit")
        }

        if changes.get("category_id") and changes["category_id"] != existing.category_id:
            await self._ensure_category_exists(changes["category_id"])
        if "barcode" in changes and changes["barcode"] != existing.barcode:
            await self._ensure_barcode_free(changes["barcode"], exclude_id=product_id)

        updated = existing.model_copy(update={**changes, "updated_at": self.clock()})
        await self.store.products.set(product_id, updated.to_store())

        logger.info(f"Product updated: {product_id}")
        return updated

    async def delete(self, product_id: str) -> bool:
        """
        Unconditional. Historical order items keep pointing at the id.
        """
        await self.store.products.remove(product_id)
        logger.info(f"Product deleted: {product_id}")
        return True

    async def recover(self, product: Product | dict[str, Any]) -> Product:
        """Restore path: keeps the original id and timestamps."""
        product = coerce(Product, product)

        await self._ensure_category_exists(product.category_id)
        await self._ensure_barcode_free(product.barcode, exclude_id=product.id)

        await self.store.products.set(product.id, product.to_store())
        return product

    async def bulk_add(self, rows: Iterable[ProductCreate | dict[str, Any]]) -> BulkResult:
        """Add rows one by one; a bad row is reported and skipped."""
        result = BulkResult()
        for row in rows:
            try:
                result.created.append(await self.add(row))
            except SupermarketError as e:
                record = row.model_dump(by_alias=True, mode="json") if isinstance(row, ProductCreate) else dict(row)
                result.failed.append(FailedRow(record=record, reason=str(e)))

        logger.info(f"Bulk product import: {len(result.created)} created, {len(result.failed)} failed")
        return result
