"""API response models."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from membership_service.models.base import WireModel


class SubscriptionSummary(WireModel):
    """Aggregate view of a user's subscriptions and invoices."""

    total: int = 0
    active: int = 0
    cancelled: int = 0
    paused: int = 0
    expired: int = 0
    pending: int = 0
    total_spent: float = Field(0.0, description="Sum of price over all owned subscriptions")
    pending_invoices: int = 0
    paid_invoices: int = 0
    next_renewal: Optional[datetime] = Field(None, description="Earliest renewal among active subscriptions")


class SubscriptionStats(WireModel):
    """Service-wide subscription statistics."""

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_billing_cycle: dict[str, int] = Field(default_factory=dict)
    monthly_recurring_revenue: float = 0.0


class OperationResult(WireModel):
    """Acknowledgement of an admin action."""

    success: bool = True
    message: str


class SuspendUserResult(OperationResult):
    """Result of suspending or deleting a user."""

    cancelled_subscriptions: list[str] = Field(default_factory=list)


class BulkNotificationResult(WireModel):
    """Outcome of a bulk notification. Failed targets never abort the batch."""

    success: bool = True
    total_sent: int = 0
    failed: list[str] = Field(default_factory=list)


class ErrorResponse(WireModel):
    """Error body returned for rejected operations."""

    error: str
    message: str
