"""Daily free quota reset.

Celery beat fires ``reset_daily_quotas`` at the configured local time. A
Redis lock keyed by the ledger day keeps concurrent beats from running it
twice; running it twice is harmless anyway. A failed run is logged and the
next tick retries, and consumption normalizes stale counters in between.
"""

import asyncio
import logging
from datetime import date

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.core.celery_app import celery_app
from wordbank.infra.database import atomic, create_task_engine
from wordbank.repos.balance import TokenBalanceRepository
from wordbank.utils.dates import local_today

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "wordbank:quota_reset:"


async def reset_all_daily_quotas(db: AsyncSession, today: date) -> int:
    """Zero every balance's daily counter for ``today`` in one transaction."""
    async with atomic(db):
        count = await TokenBalanceRepository(db).reset_all_daily_quotas(today)
    return count


async def _run_quota_reset(today: date | None = None) -> int:
    """Core async reset logic."""
    import redis.asyncio as aioredis

    from wordbank.configs import configs

    today = today or local_today()
    redis_client = aioredis.from_url(configs.Redis.REDIS_URL, decode_responses=True)

    try:
        lock = redis_client.lock(f"{LOCK_KEY_PREFIX}{today.isoformat()}", timeout=300)
        if not await lock.acquire(blocking=False):
            logger.info(f"Daily quota reset for {today} already running elsewhere, skipping")
            return 0

        task_engine = create_task_engine()
        TaskSessionLocal = async_sessionmaker(bind=task_engine, class_=AsyncSession, expire_on_commit=False)
        try:
            async with TaskSessionLocal() as db:
                return await reset_all_daily_quotas(db, today)
        finally:
            await task_engine.dispose()
    finally:
        await redis_client.aclose()


@celery_app.task(name="reset_daily_quotas", ignore_result=True)
def reset_daily_quotas_task() -> int:
    """Celery task entry-point - runs the reset in an event loop."""
    try:
        count = asyncio.run(_run_quota_reset())
    except Exception:
        logger.exception("Daily quota reset failed, will retry on the next tick")
        return 0
    logger.info(f"Daily quota reset: {count} balances")
    return count
