"""Invoice model.

Invoices are issued outside the lifecycle engine; the service reads them for
summaries and records payment status changes.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from membership_service.models.base import WireModel
from membership_service.utils.clock import utc_now


class InvoiceStatus(str, Enum):
    """Invoice payment status."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Invoice(WireModel):
    """Invoice issued for a subscription."""

    id: str
    user_id: str
    subscription_id: str
    amount: float
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.PENDING
    invoice_number: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = Field(None, description="Set exactly when status becomes paid")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
