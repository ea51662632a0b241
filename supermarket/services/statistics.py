"""
Pure sales aggregations over order items.

Nothing here touches storage: callers fetch the items, products and
categories first and pass them in. Items may point at products that have
since been deleted; those fall back to the name and category snapshotted
on the item, then to a fixed label.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Sequence

from supermarket.core.clock import store_timezone
from supermarket.schemas.category import Category
from supermarket.schemas.order import OrderItem
from supermarket.schemas.product import Product
from supermarket.schemas.statistics import (
    CategorySales,
    HourlySales,
    ProductRanking,
    SalesSummary,
    SalesTrendPoint,
)

UNKNOWN_PRODUCT = "Unknown product"
UNCATEGORIZED_LABEL = "Uncategorized"


def _amount(item: OrderItem) -> Decimal:
    return item.unit_price * item.quantity


def _local(moment: datetime) -> datetime:
    return moment.astimezone(store_timezone())


def _as_date(value: date | datetime) -> date:
    return _local(value).date() if isinstance(value, datetime) else value


def filter_order_items(items: Iterable[OrderItem], product_id: str | None = None) -> List[OrderItem]:
    """Restrict to one product; None or "all" keeps everything."""
    if not product_id or product_id == "all":
        return list(items)
    return [item for item in items if item.product_id == product_id]


def calculate_summary(items: Sequence[OrderItem]) -> SalesSummary:
    if not items:
        return SalesSummary()

    total_sales = sum((_amount(item) for item in items), Decimal("0"))
    total_orders = len({item.order_id for item in items})
    return SalesSummary(
        total_sales=total_sales,
        total_orders=total_orders,
        average_order_value=total_sales / total_orders if total_orders else Decimal("0"),
    )


def generate_sales_trend(
    items: Iterable[OrderItem],
    start: date | datetime,
    end: date | datetime,
) -> List[SalesTrendPoint]:
    """Daily sales and order counts; every day of [start, end] gets a point."""
    amounts: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    orders: dict[str, set[str]] = defaultdict(set)

    for item in items:
        key = _local(item.created_at).date().isoformat()
        amounts[key] += _amount(item)
        orders[key].add(item.order_id)

    day = _as_date(start)
    last = _as_date(end)
    while day <= last:
        key = day.isoformat()
        amounts.setdefault(key, Decimal("0"))
        orders.setdefault(key, set())
        day += timedelta(days=1)

    return [
        SalesTrendPoint(date=key, sales_amount=amounts[key], order_count=len(orders[key]))
        for key in sorted(amounts)
    ]


def _category_label(
    item: OrderItem,
    product: Product | None,
    categories_by_id: dict[str, Category],
) -> str:
    if product and product.category_id:
        category = categories_by_id.get(product.category_id)
        return category.name if category else product.category_id
    if item.category:
        return item.category
    return UNCATEGORIZED_LABEL


def generate_product_ranking(
    items: Iterable[OrderItem],
    products: Iterable[Product],
    categories: Iterable[Category],
    limit: int = 10,
) -> List[ProductRanking]:
    """Best sellers by quantity, labelled with current (or snapshotted) names."""
    products_by_id = {p.id: p for p in products}
    categories_by_id = {c.id: c for c in categories}

    ranking: dict[str, ProductRanking] = {}
    for item in items:
        product = products_by_id.get(item.product_id)
        name = (product.name if product else None) or item.product_name or UNKNOWN_PRODUCT
        category = _category_label(item, product, categories_by_id)

        current = ranking.get(item.product_id)
        ranking[item.product_id] = ProductRanking(
            product_id=item.product_id,
            product_name=name,
            category=category,
            sales_quantity=(current.sales_quantity if current else 0) + item.quantity,
            sales_amount=(current.sales_amount if current else Decimal("0")) + _amount(item),
        )

    ordered = sorted(ranking.values(), key=lambda r: (-r.sales_quantity, r.product_id))
    return ordered[:limit]


def generate_category_sales(
    items: Iterable[OrderItem],
    products: Iterable[Product],
    categories: Iterable[Category],
) -> List[CategorySales]:
    products_by_id = {p.id: p for p in products}
    categories_by_id = {c.id: c for c in categories}

    totals: dict[str, Decimal] = {}
    for item in items:
        label = _category_label(item, products_by_id.get(item.product_id), categories_by_id)
        totals[label] = totals.get(label, Decimal("0")) + _amount(item)

    return [CategorySales(category=label, sales_amount=amount) for label, amount in totals.items()]


def generate_hourly_sales(items: Iterable[OrderItem]) -> List[HourlySales]:
    """Sales per hour of day, "00:00" through "23:00", zero-filled."""
    hourly = {f"{hour:02d}:00": Decimal("0") for hour in range(24)}
    for item in items:
        hourly[f"{_local(item.created_at).hour:02d}:00"] += _amount(item)

    return [HourlySales(hour=hour, sales_amount=amount) for hour, amount in hourly.items()]
