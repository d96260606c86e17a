import logging
from dataclasses import asdict
from typing import Any, Dict
from celery import shared_task

from jobs.renewal_job import RenewalJob

logger = logging.getLogger(__name__)

RETRY_COUNTDOWN = 300


@shared_task(bind=True, name="tasks.process_auto_renewals", max_retries=3)
def process_auto_renewals(self) -> Dict[str, Any]:
    """Renew or retire every bundle whose renewal date has passed."""
    try:
        report = RenewalJob().process_renewals()
    except Exception as e:
        logger.error(f"Auto-renewal sweep failed: {str(e)}")
        raise self.retry(exc=e, countdown=RETRY_COUNTDOWN)
    return {"status": "success", **asdict(report)}


@shared_task(bind=True, name="tasks.reset_monthly_usage", max_retries=3)
def reset_monthly_usage(self) -> Dict[str, Any]:
    """Zero the free-quota counters on the first day of a month."""
    try:
        reset = RenewalJob().reset_usage()
    except Exception as e:
        logger.error(f"Monthly usage reset failed: {str(e)}")
        raise self.retry(exc=e, countdown=RETRY_COUNTDOWN)
    return {"status": "success", "users_reset": reset}
