"""Subscription endpoints for end users.

Implements:
- POST /subscriptions - Subscribe to a plan
- GET /subscriptions - List own subscriptions
- GET /subscriptions/summary - Subscription and invoice summary
- GET /subscriptions/{subscription_id} - Get one subscription
- POST /subscriptions/{subscription_id}/renew - Start a fresh billing period
- POST /subscriptions/{subscription_id}/pause - Pause
- POST /subscriptions/{subscription_id}/resume - Resume a paused subscription
- POST /subscriptions/{subscription_id}/cancel - Cancel with a reason
- PATCH /subscriptions/{subscription_id}/auto-renew - Toggle auto-renewal
"""

from typing import List

from fastapi import APIRouter, Depends, Path

from membership_service.api.dependencies import get_actor, get_engine
from membership_service.logging_config import get_logger
from membership_service.models import (
    Actor,
    CancelSubscriptionRequest,
    CreateSubscriptionRequest,
    Subscription,
    SubscriptionSummary,
    UpdateAutoRenewRequest,
)
from membership_service.services.subscription_engine import SubscriptionEngine

logger = get_logger(__name__)
router = APIRouter(tags=["Subscriptions"], prefix="/subscriptions")

SubscriptionId = Path(..., description="Subscription identifier")


@router.post("", response_model=Subscription, status_code=201, summary="Subscribe to a plan")
def create_subscription(
    request: CreateSubscriptionRequest,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    """Create an active subscription for the caller.

    Raises:
        404: Plan not found
        409: Plan is no longer available
    """
    logger.info("create_subscription_request", plan_id=request.plan_id)
    return engine.create(actor, request.plan_id, auto_renew=request.auto_renew, notes=request.notes)


@router.get("", response_model=List[Subscription], summary="List own subscriptions")
def list_subscriptions(
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> List[Subscription]:
    return engine.list_subscriptions(actor)


@router.get("/summary", response_model=SubscriptionSummary, summary="Subscription summary")
def get_summary(
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> SubscriptionSummary:
    return engine.get_summary(actor.user_id)


@router.get("/{subscription_id}", response_model=Subscription, summary="Get subscription")
def get_subscription(
    subscription_id: str = SubscriptionId,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    return engine.get_subscription(actor, subscription_id)


@router.post("/{subscription_id}/renew", response_model=Subscription, summary="Renew subscription")
def renew_subscription(
    subscription_id: str = SubscriptionId,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    """Start a new billing period from now. Re-activates cancelled subscriptions."""
    return engine.renew(actor, subscription_id)


@router.post("/{subscription_id}/pause", response_model=Subscription, summary="Pause subscription")
def pause_subscription(
    subscription_id: str = SubscriptionId,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    return engine.pause(actor, subscription_id)


@router.post("/{subscription_id}/resume", response_model=Subscription, summary="Resume subscription")
def resume_subscription(
    subscription_id: str = SubscriptionId,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    """Resume a paused subscription.

    Raises:
        409: Subscription is not paused
    """
    return engine.resume(actor, subscription_id)


@router.post("/{subscription_id}/cancel", response_model=Subscription, summary="Cancel subscription")
def cancel_subscription(
    request: CancelSubscriptionRequest,
    subscription_id: str = SubscriptionId,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    """Cancel a subscription.

    Raises:
        400: Reason missing or blank
    """
    return engine.cancel(actor, subscription_id, request.reason)


@router.patch("/{subscription_id}/auto-renew", response_model=Subscription, summary="Toggle auto-renewal")
def update_auto_renew(
    request: UpdateAutoRenewRequest,
    subscription_id: str = SubscriptionId,
    actor: Actor = Depends(get_actor),
    engine: SubscriptionEngine = Depends(get_engine),
) -> Subscription:
    return engine.update_auto_renew(actor, subscription_id, request.auto_renew)
