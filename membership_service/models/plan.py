"""Subscription plan models.

Plans are registered by admins and referenced by subscriptions. After
creation only price, features and the active flag may change.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from membership_service.models.base import WireModel
from membership_service.utils.clock import utc_now


class BillingCycle(str, Enum):
    """Recurring period unit of a plan."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Plan(WireModel):
    """Subscription plan stored in the catalog."""

    id: str = Field(..., description="Plan identifier")
    name: str = Field(..., description="Human-readable plan name")
    description: str = Field(default="", description="Plan description")
    price: float = Field(..., description="Price per billing cycle")
    currency: str = Field(default="USD", description="ISO 4217 currency code")
    billing_cycle: BillingCycle = Field(..., description="monthly, quarterly or yearly")
    features: list[str] = Field(default_factory=list, description="Ordered feature list")
    max_users: Optional[int] = Field(None, description="Maximum users (family/team plans)")
    is_active: bool = Field(default=True, description="Whether new subscriptions may use this plan")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "plan_9f2c1a7b",
                "name": "Premium Monthly",
                "description": "All premium features, billed monthly",
                "price": 10.0,
                "currency": "USD",
                "billingCycle": "monthly",
                "features": ["Unlimited projects", "Priority support"],
                "maxUsers": None,
                "isActive": True,
            }
        }


class PlanCreate(WireModel):
    """Fields accepted when registering a plan."""

    name: str
    description: str = ""
    price: float
    currency: str = "USD"
    billing_cycle: BillingCycle
    features: list[str] = Field(default_factory=list)
    max_users: Optional[int] = None


class PlanUpdate(WireModel):
    """Editable plan fields. Anything else is rejected."""

    price: Optional[float] = None
    features: Optional[list[str]] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"
