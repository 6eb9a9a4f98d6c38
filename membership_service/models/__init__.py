"""Pydantic models for domain records, API requests and responses."""

from .analytics import AnalyticsEvent
from .api_request import (
    AdminReasonRequest,
    BulkNotificationRequest,
    CancelSubscriptionRequest,
    CreateSubscriptionRequest,
    SendNotificationRequest,
    UpdateAutoRenewRequest,
)
from .api_response import (
    BulkNotificationResult,
    ErrorResponse,
    OperationResult,
    SubscriptionStats,
    SubscriptionSummary,
    SuspendUserResult,
)
from .invoice import Invoice, InvoiceStatus
from .notification import Notification, NotificationType
from .plan import BillingCycle, Plan, PlanCreate, PlanUpdate
from .settings import (
    EmailConfig,
    PlanSeed,
    PubSubConfig,
    ServiceConfig,
    ServiceSettings,
    StorageConfig,
    UserSeed,
)
from .subscription import (
    Subscription,
    SubscriptionPatch,
    SubscriptionStatus,
)
from .user import Actor, User, UserRole, UserStatus

__all__ = [
    # Domain records
    "AnalyticsEvent",
    "Invoice",
    "InvoiceStatus",
    "Notification",
    "NotificationType",
    "BillingCycle",
    "Plan",
    "PlanCreate",
    "PlanUpdate",
    "Subscription",
    "SubscriptionPatch",
    "SubscriptionStatus",
    "Actor",
    "User",
    "UserRole",
    "UserStatus",
    # Configuration
    "EmailConfig",
    "PlanSeed",
    "PubSubConfig",
    "ServiceConfig",
    "ServiceSettings",
    "StorageConfig",
    "UserSeed",
    # API requests
    "AdminReasonRequest",
    "BulkNotificationRequest",
    "CancelSubscriptionRequest",
    "CreateSubscriptionRequest",
    "SendNotificationRequest",
    "UpdateAutoRenewRequest",
    # API responses
    "BulkNotificationResult",
    "ErrorResponse",
    "OperationResult",
    "SubscriptionStats",
    "SubscriptionSummary",
    "SuspendUserResult",
]
