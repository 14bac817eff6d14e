import logging.config

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from wordbank.configs import configs
from wordbank.core.logger import LOGGING_CONFIG

celery_app = Celery(
    "wordbank_worker",
    broker=configs.Redis.REDIS_URL,
    backend=configs.Redis.REDIS_URL,
    include=["wordbank.tasks.quota_reset"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=configs.Ledger.Timezone,
    enable_utc=True,
    beat_schedule={
        "reset-daily-quotas": {
            "task": "reset_daily_quotas",
            "schedule": crontab(hour=configs.Ledger.QuotaResetHour, minute=configs.Ledger.QuotaResetMinute),
        },
    },
)


@setup_logging.connect
def configure_logging(**kwargs: object) -> None:
    """Use the ledger's logging config instead of Celery's default handlers."""
    logging.config.dictConfig(LOGGING_CONFIG)
