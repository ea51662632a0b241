from decimal import Decimal
from typing import List

from pydantic import Field

from supermarket.db.enums import OrderStatus
from supermarket.schemas.common import Money, StoreModel, Timestamp


class Order(StoreModel):
    id: str
    total_amount: Money
    created_at: Timestamp
    status: OrderStatus = OrderStatus.COMPLETED


class OrderItem(StoreModel):
    id: str
    order_id: str
    # Not enforced: the product may have been deleted since the sale
    product_id: str
    quantity: int = Field(..., gt=0)
    unit_price: Money
    subtotal: Money
    created_at: Timestamp

    # Optional snapshot of the product at sale time
    product_name: str | None = None
    category: str | None = None


class OrderLine(StoreModel):
    """One checkout line as sent by the till."""
    product_id: str
    quantity: int = Field(..., gt=0, json_schema_extra={"example": 3})
    unit_price: Money
    subtotal: Money | None = None
    product_name: str | None = None
    category: str | None = None


class CreateOrderData(StoreModel):
    items: List[OrderLine] = Field(..., min_length=1)
    total_amount: Money | None = None


class OrderUpdate(StoreModel):
    order: Order
    items: List[OrderItem]


class OrderDetails(StoreModel):
    order: Order | None
    items: List[OrderItem]


class SalesStatistics(StoreModel):
    date: str
    amount: Money
    count: int


class TopProduct(StoreModel):
    product_id: str
    quantity: int
    amount: Money


class PurgeResult(StoreModel):
    count: int
    success: bool


def line_subtotal(quantity: int, unit_price: Decimal) -> Decimal:
    return unit_price * quantity
