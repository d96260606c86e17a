from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from pydantic import Field, StrictBool

from models.subscription_bundle import SubscriptionTier, BillingCycle
from .base import CamelModel


class SubscriptionCreate(CamelModel):
    """Schema for buying a bundle."""
    tier: SubscriptionTier
    billing_cycle: BillingCycle
    auto_renew: StrictBool = False


class AutoRenewUpdate(CamelModel):
    auto_renew: StrictBool


class BundleView(CamelModel):
    """A purchased subscription bundle."""
    kind: Literal["bundle"] = "bundle"
    id: str
    user_id: str
    tier: SubscriptionTier
    billing_cycle: BillingCycle
    max_messages: int
    remaining_messages: int
    price: float
    start_date: datetime
    end_date: datetime
    renewal_date: Optional[datetime] = None
    auto_renew: bool
    is_active: bool
    created_at: datetime


class FreeQuotaView(CamelModel):
    """The free monthly allowance, listed next to the bundles."""
    kind: Literal["free"] = "free"
    id: str
    user_id: str
    tier: Literal["Free"] = "Free"
    billing_cycle: Literal["monthly"] = "monthly"
    max_messages: int
    remaining_messages: int
    price: float = 0.0
    start_date: datetime
    end_date: datetime
    renewal_date: datetime
    auto_renew: bool = True
    is_active: bool = True
    created_at: datetime
    year: int
    month: int

    @classmethod
    def from_info(cls, info) -> "FreeQuotaView":
        return cls(
            id=f"free-{info.year}-{info.month}",
            user_id=info.user_id,
            max_messages=info.max_messages,
            remaining_messages=info.remaining_messages,
            start_date=info.start_date,
            end_date=info.end_date,
            renewal_date=info.renewal_date,
            created_at=info.start_date,
            year=info.year,
            month=info.month,
        )


SubscriptionEntry = Annotated[Union[FreeQuotaView, BundleView], Field(discriminator="kind")]


class SubscriptionListResponse(CamelModel):
    subscriptions: List[SubscriptionEntry]


class CancelSubscriptionResponse(BundleView):
    message: str = "Subscription cancelled. It will remain active until the end of the billing cycle."
