"""Async database engine and session factory.

The engine URL is derived from ``configs.Database``. Celery tasks must not
reuse ``engine`` across event loops; they build their own with
``create_task_engine`` instead.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.common.code import ErrCode
from wordbank.configs import configs

logger = logging.getLogger(__name__)


def build_database_url() -> str:
    db = configs.Database
    if db.Engine == "sqlite":
        return f"sqlite+aiosqlite:///{db.SQLite.Path}"
    if db.Engine == "postgres":
        pg = db.Postgres
        return f"postgresql+asyncpg://{pg.User}:{pg.Password}@{pg.Host}:{pg.Port}/{pg.DBName}"
    raise ValueError(f"Unsupported database engine: {db.Engine}")


ASYNC_DATABASE_URL = build_database_url()


def _engine_kwargs() -> dict[str, Any]:
    if configs.Database.Engine == "postgres":
        return {
            "pool_size": configs.Database.Postgres.PoolSize,
            "max_overflow": configs.Database.Postgres.MaxOverflow,
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        }
    return {}


engine: AsyncEngine = create_async_engine(
    ASYNC_DATABASE_URL,
    echo=configs.Database.Echo,
    future=True,
    **_engine_kwargs(),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def create_task_engine() -> AsyncEngine:
    """Fresh engine for a Celery task's private event loop."""
    return create_async_engine(ASYNC_DATABASE_URL, echo=False, future=True, pool_pre_ping=True)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def create_db_and_tables(bind: AsyncEngine | None = None) -> None:
    """Create every ledger table that does not exist yet."""
    # Register table models on SQLModel.metadata
    import wordbank.models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info(f"Ledger tables ensured on {target.url.render_as_string(hide_password=True)}")


# lock_not_available, deadlock_detected, serialization_failure
CONCURRENCY_SQLSTATES = frozenset({"55P03", "40P01", "40001"})
UNIQUE_VIOLATION_SQLSTATE = "23505"


def _sqlstate(exc: DBAPIError) -> str | None:
    return getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)


def is_concurrency_error(exc: DBAPIError) -> bool:
    """
    Whether a driver error means the operation lost a race and may be retried.

    Only a unique violation counts among integrity errors: two writers
    creating the same balance row. NOT NULL, foreign key and check
    violations are bugs and propagate as-is.
    """
    orig = exc.orig
    sqlstate = _sqlstate(exc)
    if isinstance(exc, IntegrityError):
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE or "UNIQUE constraint failed" in str(orig)
    if sqlstate in CONCURRENCY_SQLSTATES:
        return True
    return "database is locked" in str(orig)


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run one all-or-nothing unit of work on ``db``.

    Commits on success and rolls back on any exception. Lock timeouts,
    deadlocks, serialization failures and duplicate inserts surface as a
    retryable ``CONCURRENCY_CONFLICT``.
    """
    try:
        yield db
        await db.commit()
    except DBAPIError as e:
        await db.rollback()
        if is_concurrency_error(e):
            logger.warning(f"Concurrency conflict, rolled back: {e.orig}")
            raise ErrCode.CONCURRENCY_CONFLICT.with_errors(e) from e
        raise
    except BaseException:
        await db.rollback()
        raise
