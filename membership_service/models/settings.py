"""Service configuration models.

Models for config/membership.yaml.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from membership_service.models.plan import BillingCycle
from membership_service.models.user import UserRole


class ServiceSettings(BaseModel):
    """Service identity."""

    name: str = Field(default="membership-service")
    version: str = Field(default="0.1.0")


class StorageConfig(BaseModel):
    """Document store selection."""

    backend: Literal["memory", "firestore"] = Field(
        default="memory", description="'memory' for local runs, 'firestore' for Cloud Firestore"
    )
    project_id: Optional[str] = Field(None, description="GCP project for Firestore")
    database: Optional[str] = Field(None, description="Firestore database id (default database if unset)")
    collection_prefix: str = Field(default="", description="Prefix prepended to every collection name")


class EmailConfig(BaseModel):
    """SMTP transport settings. Without a host, emails are logged only."""

    host: Optional[str] = Field(None, description="SMTP server host")
    port: int = Field(default=587)
    username: Optional[str] = Field(None)
    password: Optional[str] = Field(None)
    use_tls: bool = Field(default=True, description="Upgrade the connection with STARTTLS")
    use_ssl: bool = Field(default=False, description="Connect with implicit TLS")
    timeout: int = Field(default=30, description="Socket timeout in seconds")
    from_email: str = Field(default="noreply@membership.local")
    from_name: Optional[str] = Field(default="Membership")

    @property
    def is_configured(self) -> bool:
        return bool(self.host)


class PubSubConfig(BaseModel):
    """Publication of analytics events to Google Cloud Pub/Sub."""

    enabled: bool = Field(default=False)
    project_id: Optional[str] = Field(None, description="GCP project ID")
    topic: str = Field(default="membership-lifecycle", description="Pub/Sub topic name")


class PlanSeed(BaseModel):
    """Plan preloaded into the in-memory catalog at start-up."""

    id: str
    name: str
    description: str = ""
    price: float
    currency: str = "USD"
    billing_cycle: BillingCycle
    features: list[str] = Field(default_factory=list)
    max_users: Optional[int] = None
    is_active: bool = True


class UserSeed(BaseModel):
    """Account preloaded into the in-memory user store at start-up."""

    id: str
    email: str
    name: str = ""
    surname: str = ""
    role: UserRole = UserRole.USER


class ServiceConfig(BaseModel):
    """Complete membership.yaml configuration."""

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    pubsub: PubSubConfig = Field(default_factory=PubSubConfig)
    seed_plans: list[PlanSeed] = Field(default_factory=list)
    seed_users: list[UserSeed] = Field(default_factory=list)
