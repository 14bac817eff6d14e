import os

os.environ.setdefault("WORDBANK_DATABASE_ENGINE", "sqlite")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import date  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from tests.factories.ledger import TODAY  # noqa: E402
from wordbank.infra.database import create_db_and_tables  # noqa: E402
from wordbank.models.balance import UserTokenBalance  # noqa: E402

MakeBalance = Callable[..., Awaitable[UserTokenBalance]]


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_balance(db_session: AsyncSession) -> MakeBalance:
    """Insert and commit a balance row with explicit field values."""

    async def _make(user_id: str, **fields: object) -> UserTokenBalance:
        fields.setdefault("quota_reset_date", TODAY)
        balance = UserTokenBalance(user_id=user_id, **fields)
        db_session.add(balance)
        await db_session.commit()
        await db_session.refresh(balance)
        return balance

    return _make
