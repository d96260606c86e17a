from typing import List
from fastapi import APIRouter, Depends, status

from routers.deps import get_subscription_service
from schemas.base import ErrorResponse
from schemas.subscription import (
    SubscriptionCreate,
    AutoRenewUpdate,
    BundleView,
    FreeQuotaView,
    SubscriptionListResponse,
    CancelSubscriptionResponse,
)
from services.subscription_service import SubscriptionService

router = APIRouter(
    responses={404: {"model": ErrorResponse, "description": "Not found"}},
)


def _with_free_quota(service: SubscriptionService, user_id: str, bundles: List) -> dict:
    free = FreeQuotaView.from_info(service.get_free_quota_info(user_id))
    return {"subscriptions": [free, *[BundleView.model_validate(b) for b in bundles]]}


@router.post(
    "/users/{user_id}/subscriptions",
    response_model=BundleView,
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(
    user_id: str,
    payload: SubscriptionCreate,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Buy a bundle.

    - **tier**: Basic, Pro or Enterprise
    - **billingCycle**: monthly or yearly (yearly costs ten months)
    - **autoRenew**: renew automatically at the end of the period
    """
    return service.create(user_id, payload.tier, payload.billing_cycle, payload.auto_renew)


@router.get("/users/{user_id}/subscriptions", response_model=SubscriptionListResponse)
def get_user_subscriptions(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """All bundles of a user, preceded by the free monthly quota."""
    return _with_free_quota(service, user_id, service.list_for_user(user_id))


@router.get("/users/{user_id}/subscriptions/active", response_model=SubscriptionListResponse)
def get_active_subscriptions(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    return _with_free_quota(service, user_id, service.list_active_for_user(user_id))


@router.get("/{subscription_id}", response_model=BundleView)
def get_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.get(subscription_id)


@router.patch("/{subscription_id}/cancel", response_model=CancelSubscriptionResponse)
def cancel_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Stop auto-renewal. The bundle stays usable until the end of its period."""
    return CancelSubscriptionResponse.model_validate(service.cancel(subscription_id))


@router.patch("/{subscription_id}/auto-renew", response_model=BundleView)
def toggle_auto_renew(
    subscription_id: str,
    payload: AutoRenewUpdate,
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.toggle_auto_renew(subscription_id, payload.auto_renew)
