import asyncio
import logging
from decimal import Decimal

from supermarket.core.config import settings
from supermarket.core.logging import setup_logging
from supermarket.crud.store import ObjectStore
from supermarket.db.sessions import AsyncSessionLocal, async_engine, init_models
from supermarket.services.category_service import CategoryService
from supermarket.services.product_service import ProductService

logger = logging.getLogger(__name__)

INITIAL_CATEGORIES = [
    "Beverages",
    "Snacks",
    "Instant Food",
    "Deli",
    "Dairy",
    "Household",
    "Other",
]

# Category given by name, resolved to its id while seeding
INITIAL_PRODUCTS = [
    ("Mineral Water 500ml", "6901234567890", "2.00", "Beverages", "bottle"),
    ("Cola 330ml", "6901234567891", "3.00", "Beverages", "can"),
    ("Beef Instant Noodles", "6901234567892", "5.50", "Instant Food", "cup"),
    ("Potato Chips Original", "6901234567893", "4.50", "Snacks", "bag"),
    ("Spring Water 1.5L", "6901234567894", "4.00", "Beverages", "bottle"),
    ("Ham Sausage", "6901234567895", "2.50", "Deli", "piece"),
    ("Custard Pie", "6901234567896", "8.00", "Snacks", "box"),
    ("Whole Milk 250ml", "6901234567897", "3.50", "Dairy", "box"),
    ("Laundry Liquid", "6901234567898", "25.00", "Household", "bottle"),
    ("Washing Powder", "6901234567899", "15.00", "Household", "bag"),
]


async def seed(categories: CategoryService, products: ProductService) -> bool:
    """
    Load the demo catalogue into an empty store.
    Returns False without touching anything when the store already has data.
    """
    if await categories.get_all() or await products.get_all():
        logger.info("Store already holds data; skipping seed.")
        return False

    ids = {}
    for name in INITIAL_CATEGORIES:
        category = await categories.add({"name": name})
        ids[name] = category.id

    for name, barcode, price, category_name, unit in INITIAL_PRODUCTS:
        await products.add({
            "name": name,
            "barcode": barcode,
            "price": Decimal(price),
            "category_id": ids.get(category_name),
            "unit": unit,
        })

    logger.info(f"Seeded {len(INITIAL_CATEGORIES)} categories and {len(INITIAL_PRODUCTS)} products.")
    return True


async def init_data():
    if settings.is_production:
        logger.info("Production environment; skipping seed.")
        return

    await init_models(async_engine)

    store = ObjectStore(AsyncSessionLocal)
    categories = CategoryService(store)
    await seed(categories, ProductService(store, categories))

    await async_engine.dispose()


if __name__ == "__main__":
    setup_logging(settings.log_level, settings.log_json)
    asyncio.run(init_data())
