"""
Maintenance endpoints for local testing.

Only mounted when ``ENVIRONMENT=development``. They let a developer trigger
the periodic sweeps by hand and move a bundle's renewal date into the past.
"""
import logging
from dataclasses import asdict
from datetime import timedelta
from fastapi import APIRouter, Depends, Query

from routers.deps import get_subscription_service, get_usage_reset_service
from schemas.subscription import BundleView
from services.subscription_service import SubscriptionService
from services.usage_reset_service import UsageResetService
from utils.time import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/renewals/process")
def process_renewals(service: SubscriptionService = Depends(get_subscription_service)):
    """Run the auto-renewal sweep now."""
    report = service.process_auto_renewals(utcnow())
    logger.info(f"Manual renewal sweep: {report}")
    return {"message": "Renewal processing completed", "report": asdict(report)}


@router.patch("/subscriptions/{subscription_id}/set-renewal-past")
def set_renewal_past(
    subscription_id: str,
    days: int = Query(1, ge=0),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Move the renewal date ``days`` into the past so the next sweep picks it up."""
    renewal_date = utcnow() - timedelta(days=days)
    bundle = service.set_renewal_date(subscription_id, renewal_date)
    return {
        "message": f"Renewal date set to {days} day(s) ago",
        "subscription": BundleView.model_validate(bundle),
    }


@router.get("/subscriptions/{subscription_id}/details")
def get_subscription_details(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    bundle = service.get(subscription_id)
    now = utcnow()
    return {
        "subscription": BundleView.model_validate(bundle),
        "dueForRenewal": bool(
            bundle.is_active and bundle.auto_renew
            and bundle.renewal_date is not None and bundle.renewal_date <= now
        ),
        "now": now,
    }


@router.post("/usage/reset")
def reset_usage(service: UsageResetService = Depends(get_usage_reset_service)):
    """Run the monthly reset check now. Does nothing unless today is the 1st."""
    touched = service.reset_monthly_usage_if_needed(utcnow())
    return {"message": "Monthly usage reset checked", "usersReset": touched}
