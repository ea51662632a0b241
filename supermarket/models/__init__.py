from supermarket.models.category import CategoryRecord
from supermarket.models.product import ProductRecord
from supermarket.models.order import OrderRecord
from supermarket.models.order_item import OrderItemRecord

__all__ = ["CategoryRecord", "ProductRecord", "OrderRecord", "OrderItemRecord"]
