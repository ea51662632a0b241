import logging
from decimal import Decimal

from supermarket.core.exceptions import NotFoundError, ValidationError
from supermarket.schemas.cart import CartItem, CartRead
from supermarket.schemas.order import CreateOrderData, OrderDetails, OrderLine
from supermarket.schemas.product import Product
from supermarket.services.category_service import CategoryService
from supermarket.services.order_service import OrderService
from supermarket.services.product_service import ProductService

logger = logging.getLogger(__name__)


class CartService:
    """
    The till's current sale. Lives in memory only; checkout turns it into
    an order and empties it.
    """

    def __init__(
        self,
        product_service: ProductService,
        order_service: OrderService,
        category_service: CategoryService,
    ):
        self.product_service = product_service
        self.order_service = order_service
        self.category_service = category_service
        self.items: list[CartItem] = []

    def _find(self, product_id: str) -> CartItem | None:
        return next((i for i in self.items if i.product.id == product_id), None)

    def get_cart(self) -> CartRead:
        return CartRead(
            items=list(self.items),
            total_amount=self.total_amount(),
            item_count=self.item_count(),
        )

    def total_amount(self) -> Decimal:
        return sum((i.subtotal for i in self.items), Decimal("0"))

    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def add_item(self, product: Product, quantity: int = 1) -> CartRead:
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")

        existing = self._find(product.id)
        if existing:
            existing.quantity += quantity
            existing.subtotal = product.price * existing.quantity
        else:
            self.items.append(CartItem(product=product, quantity=quantity, subtotal=product.price * quantity))
        return self.get_cart()

    async def scan(self, barcode: str, quantity: int = 1) -> CartRead:
        """Barcode scanner input: look the product up and add it."""
        product = await self.product_service.get_by_barcode(barcode)
        if not product:
            logger.info(f"Scan miss: no product with barcode {barcode}")
            raise NotFoundError(f"No product with barcode {barcode}")
        return self.add_item(product, quantity)

    def remove_item(self, product_id: str) -> CartRead:
        self.items = [i for i in self.items if i.product.id != product_id]
        return self.get_cart()

    def update_quantity(self, product_id: str, quantity: int) -> CartRead:
        """Set a line's quantity; zero or less drops the line."""
        if quantity <= 0:
            return self.remove_item(product_id)

        existing = self._find(product_id)
        if not existing:
            raise NotFoundError(f"Product {product_id} is not in the cart")

        existing.quantity = quantity
        existing.subtotal = existing.product.price * quantity
        return self.get_cart()

    def clear(self) -> CartRead:
        self.items = []
        return self.get_cart()

    async def checkout(self) -> OrderDetails:
        if not self.items:
            raise ValidationError("Cart is empty")

        categories = {c.id: c.name for c in await self.category_service.get_all()}
        lines = [
            OrderLine(
                product_id=item.product.id,
                quantity=item.quantity,
                unit_price=item.product.price,
                subtotal=item.subtotal,
                product_name=item.product.name,
                category=categories.get(item.product.category_id) if item.product.category_id else None,
            )
            for item in self.items
        ]

        details = await self.order_service.create(
            CreateOrderData(items=lines, total_amount=self.total_amount())
        )
        self.items = []

        logger.info(f"Checkout complete: order {details.order.id}")
        return details
