import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status

from supermarket.core.deps import get_product_service
from supermarket.core.exceptions import NotFoundError
from supermarket.db.enums import SortOrder
from supermarket.schemas.product import BulkResult, Product, ProductCreate, ProductPage, ProductUpdate
from supermarket.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


# -------------------------------
# LIST / SEARCH
# -------------------------------
@router.get("", response_model=ProductPage)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int | None = Query(10, ge=1, alias="pageSize"),
    keyword: str = "",
    category_id: str = Query("", alias="categoryId", description="'uncategorized' selects products without one"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: SortOrder | None = Query(None, alias="sortOrder"),
    service: ProductService = Depends(get_product_service),
):
    return await service.get_product_list(
        page=page,
        page_size=page_size,
        keyword=keyword,
        category_id=category_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/all", response_model=List[Product])
async def all_products(service: ProductService = Depends(get_product_service)):
    return await service.get_all()


@router.get("/barcode/{barcode}", response_model=Product)
async def get_by_barcode(barcode: str, service: ProductService = Depends(get_product_service)):
    """Scanner lookup."""
    product = await service.get_by_barcode(barcode)
    if not product:
        raise NotFoundError(f"No product with barcode {barcode}")
    return product


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    product = await service.get_by_id(product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


# -------------------------------
# WRITES
# -------------------------------
@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(body: ProductCreate, service: ProductService = Depends(get_product_service)):
    return await service.add(body)


@router.post("/bulk", response_model=BulkResult)
async def bulk_create_products(rows: List[dict], service: ProductService = Depends(get_product_service)):
    """
    Add many products at once. Rows are validated one by one, so a bad row
    shows up under `failed` instead of rejecting the whole request.
    """
    return await service.bulk_add(rows)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    return await service.update(product_id, body)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    await service.delete(product_id)
