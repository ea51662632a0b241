from supermarket.db.base import Base, KeyValueMixin


class OrderItemRecord(KeyValueMixin, Base):
    __tablename__ = "order_items"
