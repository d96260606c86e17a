import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from config import settings
from core.exceptions import NotFoundError, ValidationError
from models.subscription_bundle import (
    SubscriptionBundle,
    SubscriptionTier,
    BillingCycle,
    SUBSCRIPTION_TIERS,
    price_for,
    period_end,
)
from repositories.monthly_usage_repository import MonthlyUsageRepository
from repositories.subscription_bundle_repository import SubscriptionBundleRepository
from repositories.user_repository import UserRepository
from services.payment_service import PaymentGateway
from utils.time import utcnow, month_bounds, add_months

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FreeQuotaInfo:
    """The free monthly allowance as it stands for one user right now."""
    user_id: str
    year: int
    month: int
    max_messages: int
    remaining_messages: int
    start_date: datetime
    end_date: datetime
    renewal_date: datetime


@dataclass
class RenewalReport:
    processed: int = 0
    renewed: int = 0
    deactivated: int = 0
    failed: int = 0


class SubscriptionService:
    """Purchase, cancellation and renewal of subscription bundles."""

    def __init__(
        self,
        db: Session,
        bundle_repository: SubscriptionBundleRepository,
        user_repository: UserRepository,
        usage_repository: MonthlyUsageRepository,
        payment_gateway: Optional[PaymentGateway] = None,
        free_messages_per_month: Optional[int] = None,
    ):
        self.db = db
        self.bundle_repository = bundle_repository
        self.user_repository = user_repository
        self.usage_repository = usage_repository
        self.payment_gateway = payment_gateway
        self.free_messages_per_month = (
            settings.FREE_MESSAGES_PER_MONTH if free_messages_per_month is None else free_messages_per_month
        )

    def create(
        self,
        user_id: str,
        tier: SubscriptionTier,
        billing_cycle: BillingCycle,
        auto_renew: bool = False,
        now: Optional[datetime] = None,
    ) -> SubscriptionBundle:
        """
        Buy a bundle starting now.

        Yearly bundles cost ten times the monthly price of the tier.
        """
        if not self.user_repository.exists(user_id):
            raise NotFoundError("User")

        try:
            tier = SubscriptionTier(tier)
            billing_cycle = BillingCycle(billing_cycle)
        except ValueError as e:
            raise ValidationError(str(e))

        tier_config = SUBSCRIPTION_TIERS[tier]
        start_date = now or utcnow()
        bundle = SubscriptionBundle.build(
            user_id=user_id,
            tier=tier,
            billing_cycle=billing_cycle,
            max_messages=tier_config.max_messages,
            price=price_for(tier, billing_cycle),
            start_date=start_date,
            end_date=period_end(start_date, billing_cycle),
            auto_renew=auto_renew,
        )
        self.bundle_repository.create(bundle)
        self.db.commit()
        self.db.refresh(bundle)
        logger.info(f"Created {tier.value}/{billing_cycle.value} bundle {bundle.id} for user {user_id}")
        return bundle

    def get(self, bundle_id: str) -> SubscriptionBundle:
        bundle = self.bundle_repository.get(bundle_id)
        if not bundle:
            raise NotFoundError("Subscription")
        return bundle

    def list_for_user(self, user_id: str) -> List[SubscriptionBundle]:
        return self.bundle_repository.find_by_user(user_id)

    def list_active_for_user(self, user_id: str) -> List[SubscriptionBundle]:
        return self.bundle_repository.find_active_by_user(user_id)

    def get_free_quota_info(self, user_id: str, now: Optional[datetime] = None) -> FreeQuotaInfo:
        now = now or utcnow()
        usage = self.usage_repository.find(user_id, now.year, now.month)
        message_count = usage.message_count if usage else 0
        start_date, end_date = month_bounds(now.year, now.month)
        return FreeQuotaInfo(
            user_id=user_id,
            year=now.year,
            month=now.month,
            max_messages=self.free_messages_per_month,
            remaining_messages=max(0, self.free_messages_per_month - message_count),
            start_date=start_date,
            end_date=end_date,
            renewal_date=add_months(start_date, 1),
        )

    def cancel(self, bundle_id: str) -> SubscriptionBundle:
        bundle = self.get(bundle_id)
        self.bundle_repository.update(bundle.cancel())
        self.db.commit()
        self.db.refresh(bundle)
        logger.info(f"Cancelled renewal of bundle {bundle_id}")
        return bundle

    def toggle_auto_renew(self, bundle_id: str, auto_renew: bool) -> SubscriptionBundle:
        bundle = self.get(bundle_id)
        self.bundle_repository.update(bundle.set_auto_renew(auto_renew))
        self.db.commit()
        self.db.refresh(bundle)
        return bundle

    def deactivate(self, bundle_id: str) -> SubscriptionBundle:
        bundle = self.get(bundle_id)
        self.bundle_repository.update(bundle.deactivate())
        self.db.commit()
        self.db.refresh(bundle)
        return bundle

    def set_renewal_date(self, bundle_id: str, renewal_date: datetime) -> SubscriptionBundle:
        bundle = self.get(bundle_id)
        bundle.renewal_date = renewal_date
        self.bundle_repository.update(bundle)
        self.db.commit()
        self.db.refresh(bundle)
        logger.info(f"Renewal date of bundle {bundle_id} set to {renewal_date.isoformat()}")
        return bundle

    def renew(self, bundle: SubscriptionBundle) -> Optional[SubscriptionBundle]:
        """
        Charge for one more period of ``bundle``.

        The old bundle is retired either way. On a successful charge a fresh
        bundle starting at the old end date is returned, otherwise ``None``.
        """
        if self.payment_gateway is None:
            raise RuntimeError("A payment gateway is required to renew subscriptions")

        paid = self.payment_gateway.charge_renewal(bundle)
        self.bundle_repository.update(bundle.deactivate())
        if not paid:
            self.db.commit()
            logger.warning(f"Renewal payment failed, bundle {bundle.id} deactivated")
            return None

        renewed = self.bundle_repository.create(bundle.next_period())
        self.db.commit()
        logger.info(f"Bundle {bundle.id} renewed as {renewed.id} until {renewed.end_date.isoformat()}")
        return renewed

    def process_auto_renewals(self, now: Optional[datetime] = None) -> RenewalReport:
        now = now or utcnow()
        report = RenewalReport()
        due = self.bundle_repository.find_due_for_renewal(now)
        logger.info(f"{len(due)} bundle(s) due for renewal")

        for bundle in due:
            report.processed += 1
            bundle_id = bundle.id
            try:
                if self.renew(bundle) is None:
                    report.deactivated += 1
                else:
                    report.renewed += 1
            except Exception as e:
                self.db.rollback()
                report.failed += 1
                logger.error(f"Error renewing bundle {bundle_id}: {str(e)}")

        return report
