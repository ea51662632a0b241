from typing import List

from pydantic import Field, field_validator

from supermarket.schemas.common import Money, StoreModel, Timestamp

# UI filter value meaning "products without a category"
UNCATEGORIZED = "uncategorized"


def _normalize_category(v: str | None) -> str | None:
    if v is None or v == "" or v == UNCATEGORIZED:
        return None
    return v


class ProductBase(StoreModel):
    name: str = Field(..., min_length=1, json_schema_extra={"example": "Mineral Water 500ml"})
    barcode: str = Field(..., min_length=1, json_schema_extra={"example": "6901234567890"})
    price: Money
    category_id: str | None = Field(None, alias="category_id")
    unit: str | None = None

    @field_validator("category_id")
    @classmethod
    def empty_means_uncategorized(cls, v: str | None) -> str | None:
        return _normalize_category(v)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(StoreModel):
    """All fields optional; only the ones sent are merged."""
    name: str | None = Field(None, min_length=1)
    barcode: str | None = Field(None, min_length=1)
    price: Money | None = None
    category_id: str | None = Field(None, alias="category_id")
    unit: str | None = None

    @field_validator("category_id")
    @classmethod
    def empty_means_uncategorized(cls, v: str | None) -> str | None:
        return _normalize_category(v)


class Product(ProductBase):
    id: str
    created_at: Timestamp
    updated_at: Timestamp


class ProductPage(StoreModel):
    items: List[Product] = Field(alias="list")
    total: int


class FailedRow(StoreModel):
    record: dict
    reason: str


class BulkResult(StoreModel):
    created: List[Product] = []
    failed: List[FailedRow] = []
