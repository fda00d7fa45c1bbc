import json
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from datetime import datetime, date, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from psycopg.types.json import set_json_dumps

from warranty_engine.config import settings

logger = logging.getLogger(__name__)


# Custom JSON encoder that handles Decimal, datetime, etc.
class CustomJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date/datetime values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


def custom_json_dumps(obj):
    """Custom JSON dumps function shared by psycopg and the SQLAlchemy JSON type."""
    return json.dumps(obj, cls=CustomJSONEncoder)


# Configure psycopg to use our custom JSON encoder globally
set_json_dumps(custom_json_dumps)


def normalize_database_url(database_url: str) -> str:
    """Point PostgreSQL URLs at the async psycopg driver."""
    if database_url.startswith("postgresql+asyncpg://"):
        return database_url.replace("postgresql+asyncpg://", "postgresql+psycopg://")
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://")
    return database_url


def build_engine(database_url: str, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """Create an async engine with settings appropriate for the backend."""
    if database_url.startswith("sqlite"):
        # SQLite doesn't support pool settings
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        return create_async_engine(
            database_url,
            echo=echo,
            json_serializer=custom_json_dumps,
            **engine_kwargs,
        )

    return create_async_engine(
        normalize_database_url(database_url),
        echo=echo,
        json_serializer=custom_json_dumps,
        pool_pre_ping=True,  # Check connection health before use
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        **engine_kwargs,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Create an async session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create async session factory
async_session_factory = build_session_factory(engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin for adding created_at and updated_at columns."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Context manager for getting database session (for scripts and workers)."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create all engine tables."""
    # Import all models to register them with Base.metadata
    from warranty_engine import models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Initialized {len(Base.metadata.tables)} tables")
