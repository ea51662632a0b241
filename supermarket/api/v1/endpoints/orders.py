import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, status

from supermarket.core.config import settings
from supermarket.core.deps import get_order_service
from supermarket.core.exceptions import NotFoundError, ValidationError
from supermarket.db.enums import SalesInterval
from supermarket.schemas.order import (
    CreateOrderData,
    Order,
    OrderDetails,
    OrderUpdate,
    PurgeResult,
    SalesStatistics,
    TopProduct,
)
from supermarket.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("start must not be after end")


# -------------------------------
# CREATE
# -------------------------------
@router.post("", response_model=OrderDetails, status_code=status.HTTP_201_CREATED)
async def create_order(body: CreateOrderData, service: OrderService = Depends(get_order_service)):
    """
    Record a sale. Subtotals are recomputed server side; a `totalAmount`
    that disagrees with them is rejected.
    """
    return await service.create(body)


# -------------------------------
# READS
# -------------------------------
@router.get("", response_model=List[Order])
async def list_orders(
    start: date | None = None,
    end: date | None = None,
    service: OrderService = Depends(get_order_service),
):
    """Newest first. With both `start` and `end`, only orders placed in that range."""
    if start is not None and end is not None:
        _check_range(start, end)
        return await service.get_by_date_range(start, end)
    return await service.get_all_orders()


@router.get("/statistics", response_model=List[SalesStatistics])
async def sales_statistics(
    start: date,
    end: date,
    interval: SalesInterval = SalesInterval.DAY,
    service: OrderService = Depends(get_order_service),
):
    _check_range(start, end)
    return await service.get_sales_statistics(start, end, interval)


@router.get("/top-products", response_model=List[TopProduct])
async def top_products(
    limit: int = Query(settings.top_selling_products_count, ge=1),
    start: date | None = None,
    end: date | None = None,
    service: OrderService = Depends(get_order_service),
):
    if start is not None and end is not None:
        _check_range(start, end)
    return await service.get_top_products(limit, start, end)


@router.get("/{order_id}", response_model=OrderDetails)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    details = await service.get_order_details(order_id)
    if details.order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return details


# -------------------------------
# UPDATE / DELETE
# -------------------------------
@router.put("/{order_id}", response_model=OrderDetails)
async def replace_order(
    order_id: str,
    body: OrderUpdate,
    service: OrderService = Depends(get_order_service),
):
    """Replace the order and its full item list."""
    if body.order.id != order_id:
        raise ValidationError("Order id in the body does not match the URL")
    return await service.update(body.order, body.items)


@router.post("/{order_id}/cancel", response_model=Order)
async def cancel_order(order_id: str, service: OrderService = Depends(get_order_service)):
    """Soft delete: the order stays on record as cancelled."""
    return await service.soft_delete(order_id)


@router.delete("/purge", response_model=PurgeResult)
async def purge_old_orders(service: OrderService = Depends(get_order_service)):
    """Drop every order older than one year, with its items."""
    return await service.delete_old_orders()


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    await service.delete(order_id)
