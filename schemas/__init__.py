from .base import CamelModel, ErrorDetail, ErrorResponse
from .chat import ChatMessageCreate, ChatMessageResponse, ChatHistoryResponse
from .subscription import (
    SubscriptionCreate, AutoRenewUpdate, BundleView, FreeQuotaView,
    SubscriptionEntry, SubscriptionListResponse, CancelSubscriptionResponse
)
from .user import UserCreate, UserResponse

__all__ = [
    'CamelModel', 'ErrorDetail', 'ErrorResponse',
    # Chat models
    'ChatMessageCreate', 'ChatMessageResponse', 'ChatHistoryResponse',
    # Subscription models
    'SubscriptionCreate', 'AutoRenewUpdate', 'BundleView', 'FreeQuotaView',
    'SubscriptionEntry', 'SubscriptionListResponse', 'CancelSubscriptionResponse',
    # User models
    'UserCreate', 'UserResponse',
]
