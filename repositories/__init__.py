"""
Datastore adapters.

One class per entity exposing the create/find/update operations the services
need. Adapters only flush; committing is left to the service that owns the
unit of work.
"""
from .user_repository import UserRepository
from .chat_message_repository import ChatMessageRepository
from .monthly_usage_repository import MonthlyUsageRepository
from .subscription_bundle_repository import SubscriptionBundleRepository

__all__ = [
    'UserRepository',
    'ChatMessageRepository',
    'MonthlyUsageRepository',
    'SubscriptionBundleRepository',
]
