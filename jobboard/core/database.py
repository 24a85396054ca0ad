"""
Async SQLAlchemy engine, sessions and the declarative base.

The engine is created by init_db() at startup and disposed by close_db()
at shutdown. Request handlers get a session through the get_db dependency.
"""

from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from sqlalchemy import DateTime, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from jobboard.core.config import settings, is_sqlite
from jobboard.core.logging_config import get_logger

logger = get_logger(__name__)

NOT_INITIALIZED = "Database not initialized; call init_db() first."

# Largest value a signed 64-bit INTEGER column can hold
MAX_ID = 2 ** 63 - 1


def is_storable_id(value: Optional[int]) -> bool:
    """
    True when ``value`` could be a primary key.

    Ids outside 1..MAX_ID cannot match any row, and the drivers refuse
    to bind them, so callers treat them as "not found" without querying.
    """
    return value is not None and 1 <= value <= MAX_ID


class Base(DeclarativeBase):
    """Declarative base; init_db() creates the tables of every subclass."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """created_at / updated_at, filled in by the ORM on insert and update."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


# =============================================================================
# Engine lifecycle
# =============================================================================

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _engine_options() -> dict:
    options = {
        "pool_pre_ping": True,
        "echo": settings.DEBUG and settings.ENVIRONMENT == "development",
    }
    # SQLite uses the driver's own pool; the sizing knobs only apply to PostgreSQL
    if not is_sqlite():
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_recycle=3600,
        )
    return options


async def init_db() -> None:
    """
    Create the engine and session factory, check connectivity and create
    any missing tables.

    Called once by the app lifespan, and by the admin CLI. Connection
    errors propagate, so the app does not start without a database.
    """
    global _engine, _session_factory

    _engine = create_async_engine(settings.DATABASE_URL, **_engine_options())
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        # Responses are built from objects after the handler has committed
        expire_on_commit=False,
        autoflush=False,
    )

    # Registers every model on Base.metadata
    import jobboard.models  # noqa: F401

    async with _engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Database ready",
        backend=settings.DATABASE_URL.split(":", 1)[0],
        pool_size=None if is_sqlite() else settings.DATABASE_POOL_SIZE,
    )


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is None:
        return

    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database connections closed")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for code running outside a request (the admin CLI)."""
    if _session_factory is None:
        raise RuntimeError(NOT_INITIALIZED)
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request.

        @router.get("/job_posts")
        async def list_job_posts(db: AsyncSession = Depends(get_db)):
            ...

    Handlers commit their own writes. Whatever is still pending when the
    handler returns is committed here; an exception rolls it back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_db_health() -> bool:
    """Round-trip a SELECT 1; False when the engine is down or unreachable."""
    if _engine is None:
        return False

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False
    return True
