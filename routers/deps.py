"""
FastAPI dependency providers.

Services get their datastore adapters from here, so the wiring lives in one
place and tests can override any provider through ``app.dependency_overrides``.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from ai.services.ai_service import AIService
from database import get_db
from repositories import (
    ChatMessageRepository,
    MonthlyUsageRepository,
    SubscriptionBundleRepository,
    UserRepository,
)
from services.chat_service import ChatService
from services.payment_service import PaymentGateway, SimulatedPaymentGateway
from services.quota_service import QuotaService
from services.subscription_service import SubscriptionService
from services.usage_reset_service import UsageResetService
from services.user_service import UserService


def get_ai_service() -> AIService:
    return AIService()


def get_payment_gateway() -> PaymentGateway:
    return SimulatedPaymentGateway()


def get_quota_service(db: Session = Depends(get_db)) -> QuotaService:
    return QuotaService(MonthlyUsageRepository(db), SubscriptionBundleRepository(db))


def get_chat_service(
    db: Session = Depends(get_db),
    quota_service: QuotaService = Depends(get_quota_service),
    ai_service: AIService = Depends(get_ai_service),
) -> ChatService:
    return ChatService(
        db,
        ChatMessageRepository(db),
        UserRepository(db),
        quota_service,
        ai_service,
    )


def get_subscription_service(
    db: Session = Depends(get_db),
    payment_gateway: PaymentGateway = Depends(get_payment_gateway),
) -> SubscriptionService:
    return SubscriptionService(
        db,
        SubscriptionBundleRepository(db),
        UserRepository(db),
        MonthlyUsageRepository(db),
        payment_gateway=payment_gateway,
    )


def get_usage_reset_service(db: Session = Depends(get_db)) -> UsageResetService:
    return UsageResetService(db, MonthlyUsageRepository(db))


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db, UserRepository(db))
