from supermarket.db.base import Base, KeyValueMixin


class CategoryRecord(KeyValueMixin, Base):
    __tablename__ = "categories"
