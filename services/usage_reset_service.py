import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from repositories.monthly_usage_repository import MonthlyUsageRepository
from utils.time import utcnow

logger = logging.getLogger(__name__)


class UsageResetService:
    """Starts every user with a zeroed counter when a new month begins."""

    def __init__(self, db: Session, usage_repository: MonthlyUsageRepository):
        self.db = db
        self.usage_repository = usage_repository

    def reset_monthly_usage_if_needed(self, now: Optional[datetime] = None) -> int:
        """
        Only acts on the first day of the month. Past periods are left as they
        are; each user seen in a past period gets a current-period row at 0.

        Returns the number of users whose current-period row was created or reset.
        """
        now = now or utcnow()
        if now.day != 1:
            return 0

        stale = self.usage_repository.find_outside_period(now.year, now.month)
        user_ids = sorted({usage.user_id for usage in stale})
        touched = 0

        for user_id in user_ids:
            current = self.usage_repository.find(user_id, now.year, now.month)
            if current is None:
                self.usage_repository.create(user_id, now.year, now.month, now)
                touched += 1
            elif current.message_count > 0:
                self.usage_repository.update(current.reset(now))
                touched += 1

        self.db.commit()
        logger.info(f"Monthly usage reset for {now.year}-{now.month:02d}: {touched} of {len(user_ids)} user(s) updated")
        return touched
