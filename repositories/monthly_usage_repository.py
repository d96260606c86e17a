from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.monthly_usage import MonthlyUsage


class MonthlyUsageRepository:
    def __init__(self, db: Session):
        self.db = db

    def find(self, user_id: str, year: int, month: int) -> Optional[MonthlyUsage]:
        return self.db.query(MonthlyUsage).filter(
            MonthlyUsage.user_id == user_id,
            MonthlyUsage.year == year,
            MonthlyUsage.month == month,
        ).first()

    def create(self, user_id: str, year: int, month: int, now: datetime, message_count: int = 0) -> MonthlyUsage:
        usage = MonthlyUsage(
            user_id=user_id,
            year=year,
            month=month,
            message_count=message_count,
            last_reset_date=now,
        )
        self.db.add(usage)
        self.db.flush()
        return usage

    def get_or_create(self, user_id: str, year: int, month: int, now: datetime) -> MonthlyUsage:
        usage = self.find(user_id, year, month)
        if usage is None:
            usage = self.create(user_id, year, month, now)
        return usage

    def update(self, usage: MonthlyUsage) -> MonthlyUsage:
        self.db.add(usage)
        self.db.flush()
        return usage

    def find_outside_period(self, year: int, month: int) -> List[MonthlyUsage]:
        """Rows that belong to any period other than (year, month)."""
        return self.db.query(MonthlyUsage).filter(
            or_(MonthlyUsage.year != year, MonthlyUsage.month != month)
        ).all()
