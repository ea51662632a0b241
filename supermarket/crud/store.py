from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supermarket.crud.collection import CollectionCRUD
from supermarket.models import CategoryRecord, OrderItemRecord, OrderRecord, ProductRecord


class ObjectStore:
    """The four independent collections the whole core persists into."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.products = CollectionCRUD(session_factory, ProductRecord)
        self.categories = CollectionCRUD(session_factory, CategoryRecord)
        self.orders = CollectionCRUD(session_factory, OrderRecord)
        self.order_items = CollectionCRUD(session_factory, OrderItemRecord)

    def collections(self) -> list[CollectionCRUD]:
        return [self.products, self.orders, self.order_items, self.categories]
