"""
Models package for the application.

This package contains all SQLAlchemy models for the application.
"""

from .user import User
from .chat_message import ChatMessage
from .monthly_usage import MonthlyUsage
from .subscription_bundle import (
    SubscriptionBundle,
    SubscriptionTier,
    BillingCycle,
    SUBSCRIPTION_TIERS,
    UNLIMITED,
)

__all__ = [
    'User',
    'ChatMessage',
    'MonthlyUsage',
    'SubscriptionBundle',
    'SubscriptionTier',
    'BillingCycle',
    'SUBSCRIPTION_TIERS',
    'UNLIMITED',
]
