"""Subscription record and lifecycle statuses."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from membership_service.models.base import WireModel
from membership_service.models.plan import BillingCycle
from membership_service.state_logger import (
    log_auto_renew_change,
    log_billing_period_change,
    log_subscription_state_change,
)
from membership_service.utils.clock import ensure_utc, utc_now


class SubscriptionStatus(str, Enum):
    """Subscription status values."""

    PENDING = "pending"
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Subscription(WireModel):
    """A user's subscription with plan fields snapshotted at creation."""

    id: str = Field(..., description="Subscription identifier")
    user_id: str = Field(..., description="Owner of the subscription")
    plan_id: str = Field(..., description="Plan the subscription was created from")

    # Snapshot of the plan at creation time
    plan_name: str = Field(..., description="Plan name at purchase")
    price: float = Field(..., description="Price per billing cycle at purchase")
    currency: str = Field(default="USD", description="ISO 4217 currency code")
    billing_cycle: BillingCycle = Field(..., description="Billing cycle at purchase")

    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE)
    start_date: datetime = Field(..., description="Start of the current period")
    end_date: datetime = Field(..., description="End of the current period")
    renewal_date: datetime = Field(..., description="Next renewal date")
    auto_renew: bool = Field(default=True)
    notes: Optional[str] = Field(None)

    cancelled_at: Optional[datetime] = Field(None, description="Set only on cancellation")
    cancel_reason: Optional[str] = Field(None, description="Set only on cancellation")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def set_status(self, new_status: SubscriptionStatus, reason: Optional[str] = None) -> None:
        """Change subscription status and log the transition.

        Args:
            new_status: Status to transition to
            reason: Reason for the change
        """
        old_status = self.status
        if old_status != new_status:
            self.status = new_status
            log_subscription_state_change(
                subscription_id=self.id,
                old_state=old_status.value,
                new_state=new_status.value,
                reason=reason,
                user_id=self.user_id,
            )

    def set_auto_renew(self, auto_renew: bool, reason: Optional[str] = None) -> None:
        """Change the auto-renew flag and log the change."""
        old_value = self.auto_renew
        if old_value != auto_renew:
            self.auto_renew = auto_renew
            log_auto_renew_change(
                subscription_id=self.id,
                old_value=old_value,
                new_value=auto_renew,
                reason=reason,
                user_id=self.user_id,
            )

    def start_period(self, start: datetime, end: datetime, reason: str) -> None:
        """Replace the billing period; renewal date follows the new end date."""
        old_end = self.end_date
        self.start_date = start
        self.end_date = end
        self.renewal_date = end
        log_billing_period_change(
            subscription_id=self.id,
            old_end_date=old_end,
            new_end_date=end,
            reason=reason,
            user_id=self.user_id,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "id": "sub_5d1e0c3a9b7f4e21",
                "userId": "user-123",
                "planId": "plan_9f2c1a7b",
                "planName": "Premium Monthly",
                "price": 10.0,
                "currency": "USD",
                "billingCycle": "monthly",
                "status": "active",
                "startDate": "2026-01-31T09:00:00Z",
                "endDate": "2026-02-28T09:00:00Z",
                "renewalDate": "2026-02-28T09:00:00Z",
                "autoRenew": True,
                "notes": None,
                "cancelledAt": None,
                "cancelReason": None,
            }
        }


class SubscriptionPatch(WireModel):
    """Admin escape hatch: the only fields that may be written directly.

    Bypasses the lifecycle rules. Unknown keys are rejected.
    """

    auto_renew: Optional[bool] = None
    notes: Optional[str] = None
    renewal_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("renewal_date", "end_date")
    @classmethod
    def _normalise_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    class Config:
        extra = "forbid"
