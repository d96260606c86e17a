import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from config import settings
from core.exceptions import QuotaExceededError, SubscriptionRequiredError
from models.monthly_usage import MonthlyUsage
from models.subscription_bundle import SubscriptionBundle
from repositories.monthly_usage_repository import MonthlyUsageRepository
from repositories.subscription_bundle_repository import SubscriptionBundleRepository
from utils.time import utcnow

logger = logging.getLogger(__name__)


class DebitSourceKind(str, Enum):
    FREE_QUOTA = "free_quota"
    BUNDLE = "bundle"


@dataclass(frozen=True)
class DebitSource:
    kind: DebitSourceKind
    bundle_id: Optional[str] = None

    @classmethod
    def free_quota(cls) -> "DebitSource":
        return cls(DebitSourceKind.FREE_QUOTA)

    @classmethod
    def bundle(cls, bundle_id: str) -> "DebitSource":
        return cls(DebitSourceKind.BUNDLE, bundle_id)


@dataclass
class QuotaDecision:
    allowed: bool
    debit_source: DebitSource
    usage: MonthlyUsage
    bundle: Optional[SubscriptionBundle] = None


class QuotaService:
    """Decides which entitlement pays for a chat message and debits it."""

    def __init__(
        self,
        usage_repository: MonthlyUsageRepository,
        bundle_repository: SubscriptionBundleRepository,
        free_messages_per_month: int = None,
    ):
        self.usage_repository = usage_repository
        self.bundle_repository = bundle_repository
        self.free_messages_per_month = (
            settings.FREE_MESSAGES_PER_MONTH if free_messages_per_month is None else free_messages_per_month
        )

    def get_or_create_usage(self, user_id: str, now: datetime) -> MonthlyUsage:
        """Usage row for the calendar month containing ``now``."""
        return self.usage_repository.get_or_create(user_id, now.year, now.month, now)

    def can_send_message(self, user_id: str, now: Optional[datetime] = None) -> QuotaDecision:
        """
        Pick the debit source for one more message.

        Free quota is used first. Once it is exhausted the most recently
        created active bundle with quota left is chosen.

        Raises:
            SubscriptionRequiredError: free quota used up and no usable bundle
            QuotaExceededError: the selected bundle can no longer be used
        """
        now = now or utcnow()
        usage = self.get_or_create_usage(user_id, now)

        bundle = self._select_bundle(user_id, usage.message_count)
        if bundle is None:
            return QuotaDecision(True, DebitSource.free_quota(), usage)
        return QuotaDecision(True, DebitSource.bundle(bundle.id), usage, bundle)

    def check_allowed(self, user_id: str, now: Optional[datetime] = None) -> None:
        """
        Same rules as ``can_send_message`` but read-only: no usage row is
        created, so no write transaction is opened.
        """
        now = now or utcnow()
        usage = self.usage_repository.find(user_id, now.year, now.month)
        self._select_bundle(user_id, usage.message_count if usage else 0)

    def _select_bundle(self, user_id: str, message_count: int) -> Optional[SubscriptionBundle]:
        """None while free quota remains, otherwise the bundle to debit."""
        if message_count < self.free_messages_per_month:
            return None

        bundles = self.bundle_repository.find_active_with_remaining_quota(user_id)
        if not bundles:
            logger.info(f"User {user_id} has no free quota and no usable bundle")
            raise SubscriptionRequiredError()

        bundle = bundles[0]
        if not bundle.can_use():
            raise QuotaExceededError()
        return bundle

    def debit(self, decision: QuotaDecision) -> QuotaDecision:
        if decision.debit_source.kind == DebitSourceKind.FREE_QUOTA:
            self.usage_repository.update(decision.usage.increment())
        else:
            self.bundle_repository.update(decision.bundle.use_message())
        return decision

    def consume(self, user_id: str, now: Optional[datetime] = None) -> QuotaDecision:
        """Evaluate and debit in one step. Exactly one row changes on success."""
        decision = self.can_send_message(user_id, now)
        self.debit(decision)
        logger.debug(f"Debited {decision.debit_source} for user {user_id}")
        return decision
