"""API request models for subscription and admin endpoints."""

from typing import Optional

from pydantic import Field

from membership_service.models.base import WireModel
from membership_service.models.notification import NotificationType


class CreateSubscriptionRequest(WireModel):
    """Request to subscribe to a plan."""

    plan_id: str = Field(..., description="Plan to subscribe to")
    auto_renew: bool = Field(default=True)
    notes: Optional[str] = Field(None)

    class Config:
        json_schema_extra = {
            "example": {"planId": "plan_9f2c1a7b", "autoRenew": True, "notes": "Team account"}
        }


class CancelSubscriptionRequest(WireModel):
    """Request to cancel a subscription. The reason must not be blank."""

    reason: Optional[str] = Field(None, description="Why the subscription is cancelled")

    class Config:
        json_schema_extra = {"example": {"reason": "too expensive"}}


class UpdateAutoRenewRequest(WireModel):
    """Request to toggle auto-renewal."""

    auto_renew: bool = Field(..., description="New auto-renew value")

    class Config:
        json_schema_extra = {"example": {"autoRenew": False}}


class AdminReasonRequest(WireModel):
    """Admin action that records a reason (pause, cancel, suspend)."""

    reason: Optional[str] = Field(None)

    class Config:
        json_schema_extra = {"example": {"reason": "chargeback under review"}}


class SendNotificationRequest(WireModel):
    """Admin notification to one user."""

    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO


class BulkNotificationRequest(WireModel):
    """Admin notification to many users."""

    user_ids: list[str] = Field(..., description="Target user ids")
    title: str
    message: str
    type: NotificationType = NotificationType.INFO

    class Config:
        json_schema_extra = {
            "example": {
                "userIds": ["user-1", "user-2", "user-3"],
                "title": "Scheduled maintenance",
                "message": "The dashboard is read-only on Sunday 02:00-04:00 UTC.",
                "type": "warning",
            }
        }
