import logging
from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from config import settings

HOUR = 60 * 60
DAY = 24 * HOUR

celery_app = Celery(
    'chat_quota',
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=['tasks.subscription_tasks']
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone=settings.TIMEZONE,
    enable_utc=True,
    worker_hijack_root_logger=False,
    task_acks_late=True,
    task_track_started=True,
)


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Workers keep the root logger, so give it the same handler and format as the API."""
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)


# Runs are dropped once stale so a backed-up queue never replays old sweeps
celery_app.conf.beat_schedule = {
    'process-auto-renewals-hourly': {
        'task': 'tasks.process_auto_renewals',
        'schedule': crontab(minute=0),
        'options': {'expires': HOUR - 60},
    },
    'reset-monthly-usage-daily': {
        'task': 'tasks.reset_monthly_usage',
        'schedule': crontab(hour=0, minute=5),
        'options': {'expires': DAY - 60},
    },
}
