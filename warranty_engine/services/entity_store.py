"""
Entity Store - keyed record access over an async SQLAlchemy session.

All lifecycle mutations go through EntityStore.transaction():

    store = EntityStore(db)
    async with store.transaction():
        claim = await store.create(Claim, warranty_id=..., ...)
        await store.increment(Warranty, warranty_id, "claim_count")

The transaction holds one process-wide asyncio.Lock (single writer),
commits on success and rolls back on any exception, so multi-entity
updates are all-or-nothing. Reports read under the same lock through
read_consistent() so they never observe a half-applied update.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Mapping, Optional, Type, TypeVar

from sqlalchemy import func, inspect, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.core.exceptions import InvalidInputError
from warranty_engine.database import Base, utc_now
from warranty_engine.services.identifier_service import IdentifierService

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)

_write_lock: Optional[asyncio.Lock] = None


def get_write_lock() -> asyncio.Lock:
    """Process-wide writer lock, created on first use."""
    global _write_lock
    if _write_lock is None:
        _write_lock = asyncio.Lock()
    return _write_lock


def primary_key_of(model: Type[Base]):
    return inspect(model).primary_key[0]


class EntityStore:
    """Repository for engine entities bound to one session."""

    def __init__(self, db: AsyncSession, lock: Optional[asyncio.Lock] = None):
        self.db = db
        self.lock = lock or get_write_lock()
        self.identifiers = IdentifierService(db)

    # ==================== TRANSACTIONS ====================

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["EntityStore"]:
        """Serialize a unit of work; commit on success, roll back on error."""
        async with self.lock:
            try:
                yield self
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

    @asynccontextmanager
    async def read_consistent(self) -> AsyncIterator["EntityStore"]:
        """Hold the writer lock for a multi-query read."""
        async with self.lock:
            yield self

    # ==================== READS ====================

    async def get(
        self,
        model: Type[M],
        entity_id: Optional[str],
        for_update: bool = False,
    ) -> Optional[M]:
        """
        Load a record by identifier, always re-reading the row.

        for_update takes a row lock (SELECT ... FOR UPDATE) where the
        backend supports it; SQLite ignores it.
        """
        if not entity_id:
            return None
        return await self.db.get(
            model,
            entity_id,
            populate_existing=True,
            with_for_update=True if for_update else None,
        )

    async def list(
        self,
        model: Type[M],
        *criteria,
        newest_first: bool = False,
    ) -> List[M]:
        """
        List records matching all criteria.

        newest_first sorts by created_at descending, ties broken by
        identifier descending; otherwise records come back in identifier order.
        """
        pk = primary_key_of(model)
        query = select(model)
        if criteria:
            query = query.where(*criteria)

        if newest_first:
            query = query.order_by(model.created_at.desc(), pk.desc())
        else:
            query = query.order_by(pk)

        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def count(self, model: Type[M], *criteria) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        return await self.db.scalar(query) or 0

    # ==================== WRITES ====================

    async def create(self, model: Type[M], **fields: Any) -> M:
        """Insert a record with the next identifier and fresh timestamps."""
        pk = primary_key_of(model)
        fields[pk.key] = await self.identifiers.next_identifier(model)

        now = utc_now()
        fields.setdefault("created_at", now)
        fields.setdefault("updated_at", now)

        entity = model(**fields)
        self.db.add(entity)
        await self.db.flush()

        logger.debug(f"Created {model.__name__} {fields[pk.key]}")
        return entity

    async def update(
        self,
        model: Type[M],
        entity_id: str,
        patch: Mapping[str, Any],
    ) -> Optional[M]:
        """Shallow-merge patch over an existing record and stamp updated_at."""
        self._check_fields(model, patch)
        entity = await self.get(model, entity_id)
        if not entity:
            return None

        for field, value in patch.items():
            setattr(entity, field, value)
        entity.updated_at = utc_now()

        await self.db.flush()
        return entity

    async def increment(
        self,
        model: Type[M],
        entity_id: str,
        field: str,
        amount: int = 1,
    ) -> Optional[M]:
        """
        Add amount to a counter column in SQL (col = col + amount).

        The arithmetic runs in the database, so concurrent writers never
        lose an increment. Returns the re-read record, or None if missing.
        """
        self._check_fields(model, [field])
        pk = primary_key_of(model)
        column = getattr(model, field)

        await self.db.execute(
            sql_update(model)
            .where(pk == entity_id)
            .values({field: func.coalesce(column, 0) + amount, "updated_at": utc_now()})
            .execution_options(synchronize_session=False)
        )
        return await self.get(model, entity_id)

    @staticmethod
    def _check_fields(model: Type[M], fields) -> None:
        columns = inspect(model).columns.keys()
        unknown = [field for field in fields if field not in columns]
        if unknown:
            raise InvalidInputError(
                f"Unknown fields for {model.__name__}: {', '.join(unknown)}",
                {"entity": model.__name__, "fields": unknown},
            )
