"""Analytics event model."""

from datetime import datetime
from typing import Any

from pydantic import Field

from membership_service.models.base import WireModel
from membership_service.utils.clock import utc_now


class AnalyticsEvent(WireModel):
    """Lifecycle event appended for aggregate reporting."""

    id: str
    user_id: str
    event: str = Field(..., description="Event name, e.g. subscription_created")
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
