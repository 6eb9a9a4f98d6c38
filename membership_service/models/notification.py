"""In-app notification model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from membership_service.models.base import WireModel
from membership_service.utils.clock import utc_now


class NotificationType(str, Enum):
    """Severity of an in-app notification."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


class Notification(WireModel):
    """Notification shown to a user inside the application."""

    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    is_read: bool = False
    action_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
