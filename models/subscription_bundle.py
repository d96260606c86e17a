import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Dict, Optional
from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from core.exceptions import QuotaExceededError
from database import Base
from utils.time import utcnow, add_months, add_years

UNLIMITED = -1
YEARLY_PRICE_MULTIPLIER = 10


class SubscriptionTier(str, PyEnum):
    BASIC = "Basic"
    PRO = "Pro"
    ENTERPRISE = "Enterprise"


class BillingCycle(str, PyEnum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class TierConfig:
    tier: SubscriptionTier
    max_messages: int
    price: Decimal


SUBSCRIPTION_TIERS: Dict[SubscriptionTier, TierConfig] = {
    SubscriptionTier.BASIC: TierConfig(SubscriptionTier.BASIC, 10, Decimal("9.99")),
    SubscriptionTier.PRO: TierConfig(SubscriptionTier.PRO, 100, Decimal("29.99")),
    SubscriptionTier.ENTERPRISE: TierConfig(SubscriptionTier.ENTERPRISE, UNLIMITED, Decimal("99.99")),
}


def price_for(tier: SubscriptionTier, billing_cycle: BillingCycle) -> Decimal:
    base = SUBSCRIPTION_TIERS[tier].price
    if billing_cycle == BillingCycle.YEARLY:
        return base * YEARLY_PRICE_MULTIPLIER
    return base


def period_end(start: datetime, billing_cycle: BillingCycle) -> datetime:
    """End of a billing period that begins at ``start``."""
    if billing_cycle == BillingCycle.YEARLY:
        return add_years(start, 1)
    return add_months(start, 1)


SubscriptionTierEnum = Enum(
    *[e.value for e in SubscriptionTier],
    name="subscription_tier_enum"
)

BillingCycleEnum = Enum(
    *[e.value for e in BillingCycle],
    name="billing_cycle_enum"
)


class SubscriptionBundle(Base):
    """A purchased, time-boxed message allowance."""
    __tablename__ = 'subscription_bundles'
    __table_args__ = (
        Index('ix_subscription_bundles_renewal', 'is_active', 'auto_renew', 'renewal_date'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    tier = Column(SubscriptionTierEnum, nullable=False)
    billing_cycle = Column(BillingCycleEnum, nullable=False)
    max_messages = Column(Integer, nullable=False)
    remaining_messages = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    renewal_date = Column(DateTime, nullable=True)
    auto_renew = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="subscription_bundles")

    @classmethod
    def build(
        cls,
        user_id: str,
        tier: SubscriptionTier,
        billing_cycle: BillingCycle,
        max_messages: int,
        price: Decimal,
        start_date: datetime,
        end_date: datetime,
        auto_renew: bool,
    ) -> "SubscriptionBundle":
        """New bundle with a full quota. Nothing is persisted here."""
        return cls(
            user_id=user_id,
            tier=SubscriptionTier(tier).value,
            billing_cycle=BillingCycle(billing_cycle).value,
            max_messages=max_messages,
            remaining_messages=max_messages,
            price=price,
            start_date=start_date,
            end_date=end_date,
            renewal_date=end_date if auto_renew else None,
            auto_renew=auto_renew,
            is_active=True,
        )

    @property
    def is_unlimited(self) -> bool:
        return self.max_messages == UNLIMITED

    def can_use(self) -> bool:
        return bool(self.is_active) and (self.is_unlimited or self.remaining_messages > 0)

    def use_message(self) -> "SubscriptionBundle":
        if not self.can_use():
            raise QuotaExceededError()
        if not self.is_unlimited:
            self.remaining_messages = max(0, self.remaining_messages - 1)
        return self

    def cancel(self) -> "SubscriptionBundle":
        # Stops future renewals only; the bundle stays usable until it lapses.
        self.auto_renew = False
        self.renewal_date = None
        return self

    def set_auto_renew(self, auto_renew: bool) -> "SubscriptionBundle":
        self.auto_renew = auto_renew
        self.renewal_date = self.end_date if auto_renew else None
        return self

    def deactivate(self) -> "SubscriptionBundle":
        self.is_active = False
        return self

    def next_period(self) -> "SubscriptionBundle":
        """The bundle that continues this one for one more billing cycle."""
        cycle = BillingCycle(self.billing_cycle)
        start = self.end_date
        return SubscriptionBundle.build(
            user_id=self.user_id,
            tier=SubscriptionTier(self.tier),
            billing_cycle=cycle,
            max_messages=self.max_messages,
            price=self.price,
            start_date=start,
            end_date=period_end(start, cycle),
            auto_renew=self.auto_renew,
        )

    def __repr__(self):
        return (
            f"<SubscriptionBundle(id={self.id}, user_id={self.user_id}, tier={self.tier}, "
            f"remaining={self.remaining_messages}, is_active={self.is_active})>"
        )
