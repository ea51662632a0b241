import logging
from typing import Any, Callable, Optional, Type

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supermarket.core.exceptions import StorageIOError
from supermarket.db.base import KeyValueMixin

logger = logging.getLogger(__name__)

Value = dict[str, Any]
Visitor = Callable[[Value, str], Any]
Predicate = Callable[[Value], bool]


class CollectionCRUD:
    """
    Async key-value access to one named collection.

    Every call opens its own short-lived session and commits it, so no
    operation spans more than one key atomically. Iteration order is not
    part of the contract; callers that need an order sort afterwards.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], model: Type[KeyValueMixin]):
        self.session_factory = session_factory
        self.model = model
        self.name = model.__tablename__

    def _fail(self, action: str, exc: SQLAlchemyError) -> StorageIOError:
        logger.error(f"Store '{self.name}': {action} failed: {exc}", exc_info=True, extra={"collection": self.name})
        return StorageIOError(f"Could not {action} in '{self.name}'")

    async def get(self, key: str) -> Optional[Value]:
        """Fetch one object by key."""
        try:
            async with self.session_factory() as session:
                row = await session.get(self.model, key)
                return dict(row.value) if row else None
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e

    async def set(self, key: str, value: Value) -> Value:
        """Insert or overwrite the object stored under key."""
        try:
            async with self.session_factory() as session:
                row = await session.get(self.model, key)
                if row:
                    row.value = value
                else:
                    session.add(self.model(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._fail("write", e) from e
        return value

    async def remove(self, key: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(delete(self.model).where(self.model.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._fail("remove", e) from e

    async def clear(self) -> None:
        """Remove every object in this collection, and only this collection."""
        try:
            async with self.session_factory() as session:
                await session.execute(delete(self.model))
                await session.commit()
            logger.info(f"Store '{self.name}': cleared.")
        except SQLAlchemyError as e:
            raise self._fail("clear", e) from e

    async def count(self) -> int:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(func.count()).select_from(self.model))
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise self._fail("count", e) from e

    async def iterate(self, visitor: Visitor) -> None:
        """
        Call visitor(value, key) for every stored object.
        A truthy return value from the visitor stops the walk.
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(self.model.key, self.model.value))
                for key, value in result:
                    if visitor(dict(value), key):
                        break
        except SQLAlchemyError as e:
            raise self._fail("iterate", e) from e

    async def values(self) -> list[Value]:
        collected: list[Value] = []
        await self.iterate(lambda value, key: collected.append(value))
        return collected

    # --- QUERY INTERFACE ---
    # Linear scans today; an indexed store can replace these without
    # touching the services.

    async def find_one(self, predicate: Predicate) -> Optional[Value]:
        found: list[Value] = []

        def _visit(value: Value, key: str) -> bool:
            if predicate(value):
                found.append(value)
                return True
            return False

        await self.iterate(_visit)
        return found[0] if found else None

    async def find_all(self, predicate: Predicate) -> list[Value]:
        matches: list[Value] = []

        def _visit(value: Value, key: str) -> None:
            if predicate(value):
                matches.append(value)

        await self.iterate(_visit)
        return matches
