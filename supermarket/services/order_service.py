import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterable, List

from supermarket.core.clock import Clock, local_now, store_timezone
from supermarket.core.exceptions import NotFoundError, StorageIOError, ValidationError
from supermarket.crud.store import ObjectStore
from supermarket.db.enums import OrderStatus, SalesInterval
from supermarket.schemas.common import coerce
from supermarket.schemas.order import (
    CreateOrderData,
    Order,
    OrderDetails,
    OrderItem,
    PurgeResult,
    SalesStatistics,
    TopProduct,
    line_subtotal,
)

logger = logging.getLogger(__name__)

DateBound = date | datetime


def _range_bounds(start: DateBound, end: DateBound) -> tuple[datetime, datetime]:
    """Inclusive bounds; a bare date covers that whole day."""
    tz = store_timezone()

    def _as_datetime(value: DateBound, end_of_day: bool) -> datetime:
        if not isinstance(value, datetime):
            value = datetime.combine(value, time.max if end_of_day else time.min)
        return value if value.tzinfo else value.replace(tzinfo=tz)

    return _as_datetime(start, False), _as_datetime(end, True)


def one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # 29 February
        return moment.replace(year=moment.year - 1, day=28)


def bucket_key(moment: datetime, interval: SalesInterval) -> str:
    local = moment.astimezone(store_timezone()).date()
    if interval == SalesInterval.WEEK:
        # Monday starts the week; Sunday counts as day 7
        local = local - timedelta(days=local.isoweekday() - 1)
    elif interval == SalesInterval.MONTH:
        local = local.replace(day=1)
    return local.isoformat()


class OrderService:

    def __init__(self, store: ObjectStore, clock: Clock = local_now):
        self.store = store
        self.clock = clock

    # --- WRITES ---

    async def create(self, order_data: CreateOrderData | dict[str, Any]) -> OrderDetails:
        """
        Persist a checkout: the order first, then one item per line.

        The order is written as pending and only flipped to completed once
        every item is stored, so a failure halfway leaves a visibly
        incomplete order rather than a completed one with missing lines.
        """
        order_data = coerce(CreateOrderData, order_data)

        now = self.clock()
        order_id = str(uuid.uuid4())

        items = [
            OrderItem(
                id=str(uuid.uuid4()),
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line_subtotal(line.quantity, line.unit_price),
                created_at=now,
                product_name=line.product_name,
                category=line.category,
            )
            for line in order_data.items
        ]
        total = sum((item.subtotal for item in items), Decimal("0"))

        if order_data.total_amount is not None and order_data.total_amount != total:
            raise ValidationError(
                f"Order total {order_data.total_amount} does not match the sum of its lines ({total})"
            )

        order = Order(id=order_id, total_amount=total, created_at=now, status=OrderStatus.PENDING)
        await self.store.orders.set(order.id, order.to_store())

        try:
            for item in items:
                await self.store.order_items.set(item.id, item.to_store())
        except StorageIOError:
            logger.error(f"Order {order_id} left pending: item write failed", exc_info=True)
            raise

        order = order.model_copy(update={"status": OrderStatus.COMPLETED})
        await self.store.orders.set(order.id, order.to_store())

        logger.info(f"Order created: {order_id} | {len(items)} items | total {total}")
        return OrderDetails(order=order, items=items)

    async def update(self, order: Order | dict[str, Any], items: Iterable[OrderItem | dict[str, Any]]) -> OrderDetails:
        """
        Replace the order and all of its items (delete then re-insert).
        Subtotals and the order total are recomputed from the new lines.
        """
        order = coerce(Order, order)
        items = [coerce(OrderItem, item) for item in items]

        if not await self.store.orders.get(order.id):
            raise NotFoundError(f"Order {order.id} not found")

        items = [
            item.model_copy(update={
                "order_id": order.id,
                "subtotal": line_subtotal(item.quantity, item.unit_price),
            })
            for item in items
        ]
        order = order.model_copy(update={
            "total_amount": sum((item.subtotal for item in items), Decimal("0")),
        })

        await self.store.orders.set(order.id, order.to_store())

        for old in await self.store.order_items.find_all(lambda v: v.get("orderId") == order.id):
            await self.store.order_items.remove(old["id"])

        for item in items:
            await self.store.order_items.set(item.id, item.to_store())

        logger.info(f"Order updated: {order.id} | {len(items)} items | total {order.total_amount}")
        return OrderDetails(order=order, items=items)

    async def _remove_with_items(self, order_ids: set[str]) -> None:
        for item in await self.store.order_items.find_all(lambda v: v.get("orderId") in order_ids):
            await self.store.order_items.remove(item["id"])
        for order_id in order_ids:
            await self.store.orders.remove(order_id)

    async def delete(self, order_id: str) -> None:
        """Hard delete: the order and every item that belongs to it."""
        if not await self.store.orders.get(order_id):
            raise NotFoundError(f"Order {order_id} not found")

        await self._remove_with_items({order_id})
        logger.info(f"Order deleted: {order_id}")

    async def soft_delete(self, order_id: str) -> Order:
        """Mark the order cancelled; its items stay untouched."""
        value = await self.store.orders.get(order_id)
        if not value:
            raise NotFoundError(f"Order {order_id} not found")

        order = Order.model_validate(value)
        if order.status == OrderStatus.CANCELLED:
            return order

        order = order.model_copy(update={"status": OrderStatus.CANCELLED})
        await self.store.orders.set(order_id, order.to_store())

        logger.info(f"Order {order_id} cancelled.")
        return order

    async def delete_old_orders(self, now: datetime | None = None) -> PurgeResult:
        """
        Remove every order created strictly more than one year ago,
        together with its items.
        """
        now = now or self.clock()
        if not now.tzinfo:
            now = now.replace(tzinfo=store_timezone())
        cutoff = one_year_before(now)

        old_ids = {
            v["id"] for v in await self.store.orders.values()
            if Order.model_validate(v).created_at < cutoff
        }
        if not old_ids:
            return PurgeResult(count=0, success=True)

        try:
            await self._remove_with_items(old_ids)
        except StorageIOError:
            logger.error("Purging old orders failed", exc_info=True)
            return PurgeResult(count=0, success=False)

        logger.info(f"Purged {len(old_ids)} orders older than {cutoff.isoformat()}")
        return PurgeResult(count=len(old_ids), success=True)

    async def recover_order(self, order: Order | dict[str, Any]) -> Order:
        """Restore path: stores the record as given, id included."""
        order = coerce(Order, order)
        await self.store.orders.set(order.id, order.to_store())
        return order

    async def recover_order_item(self, item: OrderItem | dict[str, Any]) -> OrderItem:
        """Restore path: stores the record as given, id included."""
        item = coerce(OrderItem, item)
        await self.store.order_items.set(item.id, item.to_store())
        return item

    # --- READS ---

    async def get_all_orders(self) -> List[Order]:
        """Newest first."""
        orders = [Order.model_validate(v) for v in await self.store.orders.values()]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    async def get_by_id(self, order_id: str) -> Order | None:
        value = await self.store.orders.get(order_id)
        return Order.model_validate(value) if value else None

    async def get_by_date_range(self, start: DateBound, end: DateBound) -> List[Order]:
        """Orders created within [start, end], newest first."""
        lower, upper = _range_bounds(start, end)
        orders = [
            o for o in (Order.model_validate(v) for v in await self.store.orders.values())
            if lower <= o.created_at <= upper
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    async def get_all_order_items(self) -> List[OrderItem]:
        return [OrderItem.model_validate(v) for v in await self.store.order_items.values()]

    async def get_order_items(self, order_id: str) -> List[OrderItem]:
        values = await self.store.order_items.find_all(lambda v: v.get("orderId") == order_id)
        return [OrderItem.model_validate(v) for v in values]

    async def get_order_details(self, order_id: str) -> OrderDetails:
        order = await self.get_by_id(order_id)
        items = await self.get_order_items(order_id) if order else []
        return OrderDetails(order=order, items=items)

    async def get_items_in_range(self, start: DateBound, end: DateBound) -> List[OrderItem]:
        """Items whose order was placed inside [start, end]."""
        order_ids = {o.id for o in await self.get_by_date_range(start, end)}
        values = await self.store.order_items.find_all(lambda v: v.get("orderId") in order_ids)
        return [OrderItem.model_validate(v) for v in values]

    # --- AGGREGATES ---

    async def get_sales_statistics(
        self,
        start: DateBound,
        end: DateBound,
        interval: SalesInterval | str = SalesInterval.DAY,
    ) -> List[SalesStatistics]:
        """Order totals bucketed by day, ISO week (Monday) or month, oldest bucket first."""
        interval = SalesInterval(interval)

        buckets: dict[str, dict[str, Any]] = defaultdict(lambda: {"amount": Decimal("0"), "count": 0})
        for order in await self.get_by_date_range(start, end):
            bucket = buckets[bucket_key(order.created_at, interval)]
            bucket["amount"] += order.total_amount
            bucket["count"] += 1

        return [
            SalesStatistics(date=key, amount=data["amount"], count=data["count"])
            for key, data in sorted(buckets.items())
        ]

    async def get_top_products(
        self,
        limit: int = 10,
        start: DateBound | None = None,
        end: DateBound | None = None,
    ) -> List[TopProduct]:
        """Products ranked by quantity sold, optionally inside a date range."""
        if (start is None) != (end is None):
            raise ValidationError("A date range needs both start and end")
        if start is not None:
            items = await self.get_items_in_range(start, end)
        else:
            items = await self.get_all_order_items()

        sales: dict[str, dict[str, Any]] = defaultdict(lambda: {"quantity": 0, "amount": Decimal("0")})
        for item in items:
            sales[item.product_id]["quantity"] += item.quantity
            sales[item.product_id]["amount"] += item.subtotal

        ranked = sorted(
            sales.items(),
            key=lambda entry: (-entry[1]["quantity"], -entry[1]["amount"], entry[0]),
        )
        return [
            TopProduct(product_id=product_id, quantity=data["quantity"], amount=data["amount"])
            for product_id, data in ranked[:limit]
        ]
