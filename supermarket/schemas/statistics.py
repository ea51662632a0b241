from decimal import Decimal
from typing import List

from supermarket.schemas.common import Money, StoreModel


class SalesSummary(StoreModel):
    total_sales: Money = Decimal("0")
    total_orders: int = 0
    average_order_value: Money = Decimal("0")


class SalesTrendPoint(StoreModel):
    date: str
    sales_amount: Money
    order_count: int


class ProductRanking(StoreModel):
    product_id: str
    product_name: str
    category: str
    sales_quantity: int
    sales_amount: Money


class CategorySales(StoreModel):
    category: str
    sales_amount: Money


class HourlySales(StoreModel):
    hour: str
    sales_amount: Money


class StatisticsReport(StoreModel):
    summary: SalesSummary
    trend: List[SalesTrendPoint]
    top_products: List[ProductRanking]
    category_sales: List[CategorySales]
    hourly_sales: List[HourlySales]
