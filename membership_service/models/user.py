"""User account and caller identity models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from membership_service.models.base import WireModel
from membership_service.utils.clock import utc_now


class UserRole(str, Enum):
    """Account role."""

    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class User(WireModel):
    """Registered account. Only the fields the lifecycle needs are modelled."""

    id: str
    email: str
    name: str = ""
    surname: str = ""
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def full_name(self) -> str:
        """Display name used in emails."""
        return f"{self.name} {self.surname}".strip() or self.email


class Actor(BaseModel):
    """Pre-authenticated caller of a lifecycle operation."""

    user_id: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
