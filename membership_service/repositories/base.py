"""Repository interfaces.

The lifecycle engine talks to the document store only through these
contracts. Adapters: in-memory stores for local runs and tests, and
Cloud Firestore for deployments. All timestamps crossing these interfaces
are aware UTC datetimes; storage-specific conversions stay in the adapters.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from membership_service.errors import NotFoundError
from membership_service.models import (
    AnalyticsEvent,
    Invoice,
    InvoiceStatus,
    Notification,
    Plan,
    Subscription,
    SubscriptionStatus,
    User,
)


class SubscriptionNotFoundError(NotFoundError):
    """Raised when a subscription id has no record."""

    pass


class PlanNotFoundError(NotFoundError):
    """Raised when a plan id has no record."""

    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user id has no record."""

    pass


class InvoiceNotFoundError(NotFoundError):
    """Raised when an invoice id has no record."""

    pass


class SubscriptionRepository(ABC):
    """Persistence for subscription records, queryable by user, status and plan."""

    @abstractmethod
    def add(self, subscription: Subscription) -> Subscription:
        """Persist a new subscription.

        Raises:
            ValueError: If the id already exists
        """

    @abstractmethod
    def get_by_id(self, subscription_id: str) -> Subscription:
        """Get a subscription.

        Raises:
            SubscriptionNotFoundError: If the id has no record
        """

    @abstractmethod
    def find_by_id(self, subscription_id: str) -> Optional[Subscription]:
        """Get a subscription or None."""

    @abstractmethod
    def update(self, subscription: Subscription) -> Subscription:
        """Overwrite an existing subscription (last write wins).

        Raises:
            SubscriptionNotFoundError: If the id has no record
        """

    @abstractmethod
    def get_by_user(self, user_id: str) -> List[Subscription]:
        """All subscriptions owned by a user."""

    @abstractmethod
    def get_by_status(self, status: SubscriptionStatus) -> List[Subscription]:
        """All subscriptions in a status."""

    @abstractmethod
    def get_by_plan(self, plan_id: str) -> List[Subscription]:
        """All subscriptions created from a plan."""

    @abstractmethod
    def get_all(self) -> List[Subscription]:
        """Every subscription."""


class PlanRepository(ABC):
    """Persistence for plans. Plans are never deleted."""

    @abstractmethod
    def add(self, plan: Plan) -> Plan:
        """Persist a new plan."""

    @abstractmethod
    def get_by_id(self, plan_id: str) -> Plan:
        """Get a plan.

        Raises:
            PlanNotFoundError: If the id has no record
        """

    @abstractmethod
    def find_by_id(self, plan_id: str) -> Optional[Plan]:
        """Get a plan or None."""

    @abstractmethod
    def update(self, plan: Plan) -> Plan:
        """Overwrite an existing plan."""

    @abstractmethod
    def get_all(self, active_only: bool = False) -> List[Plan]:
        """All plans, optionally only active ones."""


class UserRepository(ABC):
    """Persistence for user accounts."""

    @abstractmethod
    def add(self, user: User) -> User:
        """Persist a new user."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> User:
        """Get a user.

        Raises:
            UserNotFoundError: If the id has no record
        """

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        """Get a user or None."""

    @abstractmethod
    def update(self, user: User) -> User:
        """Overwrite an existing user."""

    @abstractmethod
    def remove(self, user_id: str) -> None:
        """Delete a user record.

        Raises:
            UserNotFoundError: If the id has no record
        """


class InvoiceRepository(ABC):
    """Persistence for invoices."""

    @abstractmethod
    def add(self, invoice: Invoice) -> Invoice:
        """Persist a new invoice."""

    @abstractmethod
    def get_by_user(self, user_id: str, status: Optional[InvoiceStatus] = None) -> List[Invoice]:
        """A user's invoices, optionally filtered by status."""

    @abstractmethod
    def update_status(
        self, invoice_id: str, status: InvoiceStatus, paid_at: Optional[datetime] = None
    ) -> Invoice:
        """Change invoice status. ``paid_at`` is kept only for the paid status.

        Raises:
            InvoiceNotFoundError: If the id has no record
        """


class NotificationRepository(ABC):
    """Append-only store of in-app notifications."""

    @abstractmethod
    def add(self, notification: Notification) -> Notification:
        """Persist a notification."""

    @abstractmethod
    def get_by_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        """A user's notifications, newest first."""

    @abstractmethod
    def mark_as_read(self, notification_id: str) -> None:
        """Flag a notification as read."""


class AnalyticsRepository(ABC):
    """Append-only store of lifecycle events."""

    @abstractmethod
    def add(self, event: AnalyticsEvent) -> AnalyticsEvent:
        """Append an event."""

    @abstractmethod
    def get_by_user(self, user_id: str, limit: int = 100) -> List[AnalyticsEvent]:
        """A user's events, newest first."""

    @abstractmethod
    def get_by_event(self, event: str) -> List[AnalyticsEvent]:
        """All events with a given name."""
