"""
Services package for the application.

This package contains the service classes that hold the quota, chat and
subscription business rules.
"""
from .quota_service import QuotaService, QuotaDecision, DebitSource, DebitSourceKind
from .chat_service import ChatService
from .subscription_service import SubscriptionService, FreeQuotaInfo, RenewalReport
from .usage_reset_service import UsageResetService
from .payment_service import PaymentGateway, SimulatedPaymentGateway
from .user_service import UserService

__all__ = [
    'QuotaService',
    'QuotaDecision',
    'DebitSource',
    'DebitSourceKind',
    'ChatService',
    'SubscriptionService',
    'FreeQuotaInfo',
    'RenewalReport',
    'UsageResetService',
    'PaymentGateway',
    'SimulatedPaymentGateway',
    'UserService',
]
