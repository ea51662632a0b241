import logging
from datetime import date, datetime

from supermarket.core.config import settings
from supermarket.schemas.statistics import StatisticsReport
from supermarket.services import statistics
from supermarket.services.category_service import CategoryService
from supermarket.services.order_service import OrderService
from supermarket.services.product_service import ProductService

logger = logging.getLogger(__name__)


class StatisticsService:
    """Fetches what the statistics page needs and hands it to the pure helpers."""

    def __init__(self, order_service: OrderService, product_service: ProductService, category_service: CategoryService):
        self.order_service = order_service
        self.product_service = product_service
        self.category_service = category_service

    async def build_report(
        self,
        start: date | datetime,
        end: date | datetime,
        product_id: str | None = None,
        top_limit: int | None = None,
    ) -> StatisticsReport:
        items = await self.order_service.get_items_in_range(start, end)
        items = statistics.filter_order_items(items, product_id)

        products = await self.product_service.get_all()
        categories = await self.category_service.get_all()

        logger.debug(f"Statistics: {len(items)} items between {start} and {end}")
        return StatisticsReport(
            summary=statistics.calculate_summary(items),
            trend=statistics.generate_sales_trend(items, start, end),
            top_products=statistics.generate_product_ranking(
                items, products, categories, limit=top_limit or settings.top_selling_products_count
            ),
            category_sales=statistics.generate_category_sales(items, products, categories),
            hourly_sales=statistics.generate_hourly_sales(items),
        )
