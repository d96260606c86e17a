import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from database import Base
from utils.time import utcnow


class User(Base):
    """Account that owns chat messages, usage counters and subscription bundles."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    chat_messages = relationship("ChatMessage", back_populates="user")
    subscription_bundles = relationship("SubscriptionBundle", back_populates="user")
    monthly_usage = relationship("MonthlyUsage", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
