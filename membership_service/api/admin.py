"""Admin endpoints.

Implements:
- POST /admin/subscriptions/{subscription_id}/pause|resume|cancel|renew - Lifecycle overrides
- PATCH /admin/subscriptions/{subscription_id} - Direct field patch
- GET /admin/subscriptions/stats - Subscription statistics
- POST /admin/users/{user_id}/suspend - Suspend account and cancel its subscriptions
- DELETE /admin/users/{user_id} - Delete account
- GET /admin/users/{user_id}/activity - Recent lifecycle events
- POST /admin/notifications - Notify one user
- POST /admin/notifications/bulk - Notify many users
- POST /admin/plans - Register a plan
- PATCH /admin/plans/{plan_id} - Edit price, features or active flag
- POST /admin/plans/{plan_id}/deactivate - Retire a plan
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from membership_service.api.dependencies import get_actor, get_admin_service
from membership_service.logging_config import get_logger
from membership_service.models import (
    Actor,
    AdminReasonRequest,
    AnalyticsEvent,
    BulkNotificationRequest,
    BulkNotificationResult,
    OperationResult,
    Plan,
    PlanCreate,
    PlanUpdate,
    SendNotificationRequest,
    Subscription,
    SubscriptionPatch,
    SubscriptionStats,
    SuspendUserResult,
)
from membership_service.services.admin_service import AdminService

logger = get_logger(__name__)
router = APIRouter(tags=["Admin"], prefix="/admin")


# Subscriptions


@router.get("/subscriptions/stats", response_model=SubscriptionStats, summary="Subscription statistics")
def get_subscription_stats(
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> SubscriptionStats:
    return admin.get_subscription_stats(actor)


@router.post("/subscriptions/{subscription_id}/pause", response_model=Subscription)
def pause_subscription(
    subscription_id: str,
    request: AdminReasonRequest,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Subscription:
    return admin.pause_subscription(actor, subscription_id, request.reason)


@router.post("/subscriptions/{subscription_id}/resume", response_model=Subscription)
def resume_subscription(
    subscription_id: str,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Subscription:
    return admin.resume_subscription(actor, subscription_id)


@router.post("/subscriptions/{subscription_id}/cancel", response_model=Subscription)
def cancel_subscription(
    subscription_id: str,
    request: AdminReasonRequest,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Subscription:
    return admin.cancel_subscription(actor, subscription_id, request.reason)


@router.post("/subscriptions/{subscription_id}/renew", response_model=Subscription)
def renew_subscription(
    subscription_id: str,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Subscription:
    return admin.renew_subscription(actor, subscription_id)


@router.patch("/subscriptions/{subscription_id}", response_model=Subscription, summary="Patch subscription")
def update_subscription(
    subscription_id: str,
    patch: SubscriptionPatch,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Subscription:
    """Write autoRenew, notes, renewalDate or endDate directly.

    Raises:
        400: Unknown field or empty patch
    """
    logger.info("admin_patch_request", fields=sorted(patch.model_dump(exclude_unset=True)))
    return admin.update_subscription(actor, subscription_id, patch)


# Users


@router.post("/users/{user_id}/suspend", response_model=SuspendUserResult, summary="Suspend user")
def suspend_user(
    user_id: str,
    request: AdminReasonRequest,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> SuspendUserResult:
    return admin.suspend_user(actor, user_id, request.reason)


@router.delete("/users/{user_id}", response_model=SuspendUserResult, summary="Delete user")
def delete_user(
    user_id: str,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> SuspendUserResult:
    return admin.delete_user(actor, user_id)


@router.get("/users/{user_id}/activity", response_model=List[AnalyticsEvent], summary="Recent activity")
def get_user_activity(
    user_id: str,
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> List[AnalyticsEvent]:
    return admin.get_user_activity(actor, user_id, limit=limit)


# Notifications


@router.post("/notifications", response_model=OperationResult, summary="Notify a user")
def send_notification(
    request: SendNotificationRequest,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> OperationResult:
    return admin.send_notification(actor, request.user_id, request.title, request.message, request.type)


@router.post("/notifications/bulk", response_model=BulkNotificationResult, summary="Notify many users")
def send_bulk_notification(
    request: BulkNotificationRequest,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> BulkNotificationResult:
    return admin.send_bulk_notification(actor, request.user_ids, request.title, request.message, request.type)


# Plans


@router.post("/plans", response_model=Plan, status_code=201, summary="Register a plan")
def create_plan(
    request: PlanCreate,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Plan:
    return admin.create_plan(actor, request)


@router.patch("/plans/{plan_id}", response_model=Plan, summary="Update a plan")
def update_plan(
    plan_id: str,
    request: PlanUpdate,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Plan:
    return admin.update_plan(actor, plan_id, request)


@router.post("/plans/{plan_id}/deactivate", response_model=Plan, summary="Deactivate a plan")
def deactivate_plan(
    plan_id: str,
    actor: Actor = Depends(get_actor),
    admin: AdminService = Depends(get_admin_service),
) -> Plan:
    return admin.deactivate_plan(actor, plan_id)
