import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from utils.time import utcnow


class MonthlyUsage(Base):
    """Free-quota message counter for one user in one calendar month."""
    __tablename__ = 'monthly_usage'
    __table_args__ = (
        UniqueConstraint('user_id', 'year', 'month', name='uq_monthly_usage_user_period'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    message_count = Column(Integer, nullable=False, default=0)
    last_reset_date = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="monthly_usage")

    def increment(self) -> "MonthlyUsage":
        self.message_count = (self.message_count or 0) + 1
        return self

    def reset(self, now: datetime) -> "MonthlyUsage":
        self.message_count = 0
        self.last_reset_date = now
        return self

    def __repr__(self):
        return f"<MonthlyUsage(user_id={self.user_id}, period={self.year}-{self.month:02d}, count={self.message_count})>"
