from supermarket.db.base import Base, KeyValueMixin


class OrderRecord(KeyValueMixin, Base):
    __tablename__ = "orders"
