from decimal import Decimal
from typing import List

from pydantic import Field

from supermarket.schemas.common import Money, StoreModel
from supermarket.schemas.product import Product


class CartItem(StoreModel):
    product: Product
    quantity: int
    subtotal: Money


class CartRead(StoreModel):
    items: List[CartItem]
    total_amount: Money = Decimal("0")
    item_count: int = 0


class ScanRequest(StoreModel):
    barcode: str = Field(..., min_length=1, json_schema_extra={"example": "6901234567890"})
    quantity: int = Field(1, gt=0)


class QuantityUpdate(StoreModel):
    quantity: int
