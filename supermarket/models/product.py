from supermarket.db.base import Base, KeyValueMixin


class ProductRecord(KeyValueMixin, Base):
    __tablename__ = "products"
