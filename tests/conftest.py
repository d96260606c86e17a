import os
import sys
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import app, app_error_handler
from ai.services.ai_service import AIService
from core.exceptions import AppError
from database import Base, get_db, init_models
from models import User, MonthlyUsage, SubscriptionBundle, SubscriptionTier, BillingCycle, SUBSCRIPTION_TIERS
from models.subscription_bundle import price_for, period_end
from repositories import (
    ChatMessageRepository,
    MonthlyUsageRepository,
    SubscriptionBundleRepository,
    UserRepository,
)
from routers import dev
from routers.deps import get_ai_service, get_payment_gateway
from services.chat_service import ChatService
from services.quota_service import QuotaService
from services.subscription_service import SubscriptionService
from services.usage_reset_service import UsageResetService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

init_models()


class FixedPaymentGateway:
    """Payment gateway whose answer is decided by the test."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.charged = []

    def charge_renewal(self, bundle) -> bool:
        self.charged.append(bundle.id)
        return self.succeed


def create_dev_app():
    """Only the development routes, mounted the way main.py mounts them."""
    test_app = FastAPI()
    test_app.include_router(dev.router, prefix="/api/test")
    test_app.add_exception_handler(AppError, app_error_handler)
    return test_app


dev_app = create_dev_app()


# Fixtures
@pytest.fixture
def now():
    """A mid-month instant every test can treat as the current time."""
    return datetime(2024, 5, 15, 12, 0, 0)


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def payment_gateway():
    return FixedPaymentGateway(succeed=True)


def _override_dependencies(target_app, test_db, payment_gateway):
    def override_get_db():
        try:
            yield test_db
        finally:
            # The session is managed by the test_db fixture
            pass

    target_app.dependency_overrides[get_db] = override_get_db
    target_app.dependency_overrides[get_ai_service] = lambda: AIService(delay_range=(0, 0))
    target_app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway


@pytest.fixture(scope="function")
def client(test_db, payment_gateway):
    """Test client for the application, backed by the test database."""
    _override_dependencies(app, test_db, payment_gateway)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def dev_client(test_db, payment_gateway):
    _override_dependencies(dev_app, test_db, payment_gateway)
    yield TestClient(dev_app)
    dev_app.dependency_overrides.clear()


# Services
@pytest.fixture
def quota_service(test_db):
    return QuotaService(MonthlyUsageRepository(test_db), SubscriptionBundleRepository(test_db))


@pytest.fixture
def chat_service(test_db, quota_service):
    return ChatService(
        test_db,
        ChatMessageRepository(test_db),
        UserRepository(test_db),
        quota_service,
        AIService(delay_range=(0, 0)),
    )


@pytest.fixture
def subscription_service(test_db, payment_gateway):
    return SubscriptionService(
        test_db,
        SubscriptionBundleRepository(test_db),
        UserRepository(test_db),
        MonthlyUsageRepository(test_db),
        payment_gateway=payment_gateway,
    )


@pytest.fixture
def usage_reset_service(test_db):
    return UsageResetService(test_db, MonthlyUsageRepository(test_db))


# Model factories
@pytest.fixture
def create_user(test_db):
    """Factory to create a test user."""
    counter = {"n": 0}

    def _create_user(**kwargs):
        counter["n"] += 1
        user_data = {"email": f"user{counter['n']}@example.com"}
        user_data.update(kwargs)

        user = User(**user_data)
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user
    return _create_user


@pytest.fixture
def create_bundle(test_db, create_user, now):
    """Factory to create a bundle; defaults to an active monthly Basic bundle."""
    def _create_bundle(**kwargs):
        if 'user_id' not in kwargs:
            kwargs['user_id'] = create_user().id

        tier = SubscriptionTier(kwargs.pop('tier', SubscriptionTier.BASIC))
        billing_cycle = BillingCycle(kwargs.pop('billing_cycle', BillingCycle.MONTHLY))
        start_date = kwargs.pop('start_date', now)
        auto_renew = kwargs.pop('auto_renew', False)
        max_messages = kwargs.pop('max_messages', SUBSCRIPTION_TIERS[tier].max_messages)

        bundle = SubscriptionBundle.build(
            user_id=kwargs.pop('user_id'),
            tier=tier,
            billing_cycle=billing_cycle,
            max_messages=max_messages,
            price=kwargs.pop('price', price_for(tier, billing_cycle)),
            start_date=start_date,
            end_date=kwargs.pop('end_date', period_end(start_date, billing_cycle)),
            auto_renew=auto_renew,
        )
        for key, value in kwargs.items():
            setattr(bundle, key, value)

        test_db.add(bundle)
        test_db.commit()
        test_db.refresh(bundle)
        return bundle
    return _create_bundle


@pytest.fixture
def create_usage(test_db, now):
    """Factory to create a monthly usage row, by default for the current month."""
    def _create_usage(user_id, message_count=0, year=None, month=None):
        usage = MonthlyUsage(
            user_id=user_id,
            year=year or now.year,
            month=month or now.month,
            message_count=message_count,
            last_reset_date=now,
        )
        test_db.add(usage)
        test_db.commit()
        test_db.refresh(usage)
        return usage
    return _create_usage
