"""
Entity Store - document persistence on top of SQLAlchemy.

Every write commits on its own, so a single document is replaced
atomically but two writes never are. Services that touch two documents
must tolerate a failure between them.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, TypeVar

from loguru import logger
from sqlalchemy import select
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from forum_api.core.database import Base
from forum_api.core.exceptions import (
    ConcurrentUpdate,
    DuplicateDocument,
    StoreUnavailable,
)

T = TypeVar("T", bound=Base)


class EntityStore:
    """
    Point lookups, secondary-key queries and single-document writes.

    Usage:
        store = EntityStore(db_session)
        forum = await store.get_by_id(Forum, forum_id)
        await store.replace(forum)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize store with database session."""
        self.db = db

    @asynccontextmanager
    async def _guard(self, action: str) -> AsyncIterator[None]:
        """Translate driver errors into domain errors."""
        try:
            yield
        except StaleDataError as e:
            await self._rollback()
            logger.warning(f"Concurrent update during {action}: {e}")
            raise ConcurrentUpdate() from e
        except sa_exc.IntegrityError as e:
            await self._rollback()
            raise DuplicateDocument() from e
        except (
            sa_exc.DBAPIError,
            sa_exc.TimeoutError,
            asyncio.TimeoutError,
            OSError,
        ) as e:
            # Connection failures surface as OSError or asyncio.TimeoutError
            # from the driver, outside the DBAPIError hierarchy
            await self._rollback()
            logger.error(f"Store failure during {action}: {e}")
            raise StoreUnavailable() from e

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except (sa_exc.SQLAlchemyError, OSError) as e:
            logger.error(f"Rollback failed: {e}")

    # ==================== Reads ====================

    async def get_by_id(self, kind: type[T], entity_id: str) -> T | None:
        """Get document by identifier, or None."""
        async with self._guard(f"get {kind.__name__}"):
            return await self.db.get(kind, entity_id)

    async def reload(self, kind: type[T], entity_id: str) -> T | None:
        """Re-read a document, overwriting any state held by the session."""
        async with self._guard(f"reload {kind.__name__}"):
            return await self.db.get(kind, entity_id, populate_existing=True)

    async def find_by(
        self,
        kind: type[T],
        field: str,
        value: Any,
        order_by: str = "date",
        descending: bool = True,
        limit: int | None = None,
    ) -> list[T]:
        """
        Find documents by a secondary field.

        Args:
            kind: Document class
            field: Attribute to match
            value: Value to match
            order_by: Attribute to sort on
            descending: Sort direction
            limit: Max results (None for all)

        Returns:
            List of matching documents
        """
        query = select(kind).where(getattr(kind, field) == value)
        return await self._fetch(kind, query, order_by, descending, limit)

    async def list_all(
        self,
        kind: type[T],
        order_by: str = "date",
        descending: bool = True,
        limit: int | None = None,
    ) -> list[T]:
        """List all documents of a kind."""
        return await self._fetch(kind, select(kind), order_by, descending, limit)

    async def _fetch(
        self,
        kind: type[T],
        query: Any,
        order_by: str,
        descending: bool,
        limit: int | None,
    ) -> list[T]:
        column = getattr(kind, order_by)
        query = query.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            query = query.limit(limit)

        async with self._guard(f"query {kind.__name__}"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    # ==================== Writes ====================

    async def insert(self, entity: T) -> T:
        """Insert a new document."""
        async with self._guard(f"insert {entity!r}"):
            self.db.add(entity)
            await self.db.commit()
        return entity

    async def replace(self, entity: T) -> None:
        """Persist the full current state of a document."""
        async with self._guard(f"replace {entity!r}"):
            self.db.add(entity)
            await self.db.commit()

    async def delete(self, entity: T) -> None:
        """Delete a document."""
        async with self._guard(f"delete {entity!r}"):
            await self.db.delete(entity)
            await self.db.commit()
