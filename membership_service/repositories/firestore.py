"""Cloud Firestore adapters for the repository interfaces.

Documents use the camelCase wire field names. Firestore hands timestamps
back as ``DatetimeWithNanoseconds`` (or protobuf ``Timestamp`` in raw
payloads, ISO strings in legacy documents); every value is normalised to a
plain aware UTC ``datetime`` before it reaches a domain model.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, List, Optional, Type, TypeVar

from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import BaseModel

from membership_service.logging_config import get_logger
from membership_service.models import (
    AnalyticsEvent,
    Invoice,
    InvoiceStatus,
    Notification,
    Plan,
    StorageConfig,
    Subscription,
    SubscriptionStatus,
    User,
)
from membership_service.repositories.base import (
    AnalyticsRepository,
    InvoiceNotFoundError,
    InvoiceRepository,
    NotificationRepository,
    PlanNotFoundError,
    PlanRepository,
    SubscriptionNotFoundError,
    SubscriptionRepository,
    UserNotFoundError,
    UserRepository,
)
from membership_service.utils.clock import ensure_utc, utc_now

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def create_firestore_client(storage: StorageConfig) -> firestore.Client:
    """Create the process-wide Firestore client.

    Credentials come from Application Default Credentials (or the emulator
    when FIRESTORE_EMULATOR_HOST is set).
    """
    kwargs: dict[str, Any] = {}
    if storage.project_id:
        kwargs["project"] = storage.project_id
    if storage.database:
        kwargs["database"] = storage.database
    client = firestore.Client(**kwargs)
    logger.info(
        "firestore_client_initialized",
        project_id=storage.project_id,
        database=storage.database or "(default)",
    )
    return client


def to_utc_datetime(value: Any) -> Optional[datetime]:
    """Convert any stored timestamp representation to an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = ensure_utc(value)
        return datetime(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            tzinfo=timezone.utc,
        )
    if isinstance(value, str):
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    if hasattr(value, "ToDatetime"):
        return to_utc_datetime(value.ToDatetime(tzinfo=timezone.utc))
    raise TypeError(f"Unsupported timestamp value: {type(value).__name__}")


def _decode_value(value: Any) -> Any:
    if isinstance(value, datetime) or hasattr(value, "ToDatetime"):
        return to_utc_datetime(value)
    if isinstance(value, dict):
        return {k: _decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode_value(v) for v in value]
    return value


def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _encode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode_value(v) for v in value]
    return value


class _FirestoreCollection(Generic[ModelT]):
    """Typed access to one Firestore collection."""

    def __init__(self, client: firestore.Client, name: str, model: Type[ModelT], prefix: str = ""):
        self._client = client
        self._model = model
        self.name = f"{prefix}{name}"

    @property
    def ref(self):
        return self._client.collection(self.name)

    def encode(self, record: ModelT) -> dict[str, Any]:
        return _encode_value(record.model_dump(by_alias=True, exclude={"id"}))

    def decode(self, snapshot) -> ModelT:
        data = _decode_value(snapshot.to_dict() or {})
        data["id"] = snapshot.id
        return self._model.model_validate(data)

    def create(self, record: ModelT) -> ModelT:
        try:
            self.ref.document(record.id).create(self.encode(record))
        except AlreadyExists:
            raise ValueError(f"Document '{record.id}' already exists in {self.name}")
        return record

    def find(self, doc_id: str) -> Optional[ModelT]:
        snapshot = self.ref.document(doc_id).get()
        if not snapshot.exists:
            return None
        return self.decode(snapshot)

    def overwrite(self, record: ModelT) -> bool:
        """Replace an existing document. Returns False if it does not exist."""
        try:
            self.ref.document(record.id).update(self.encode(record))
        except NotFound:
            return False
        return True

    def where(self, field: str, value: Any) -> List[ModelT]:
        query = self.ref.where(filter=FieldFilter(field, "==", _encode_value(value)))
        return [self.decode(s) for s in query.stream()]

    def all(self) -> List[ModelT]:
        return [self.decode(s) for s in self.ref.stream()]


class FirestoreSubscriptionRepository(SubscriptionRepository):
    """Subscriptions in the ``subscriptions`` collection."""

    def __init__(self, client: firestore.Client, prefix: str = ""):
        self._docs = _FirestoreCollection(client, "subscriptions", Subscription, prefix)

    def add(self, subscription: Subscription) -> Subscription:
        return self._docs.create(subscription)

    def get_by_id(self, subscription_id: str) -> Subscription:
        subscription = self._docs.find(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(
                f"Subscription not found: {subscription_id}",
                context={"subscription_id": subscription_id},
            )
        return subscription

    def find_by_id(self, subscription_id: str) -> Optional[Subscription]:
        return self._docs.find(subscription_id)

    def update(self, subscription: Subscription) -> Subscription:
        if not self._docs.overwrite(subscription):
            raise SubscriptionNotFoundError(
                f"Subscription not found: {subscription.id}",
                context={"subscription_id": subscription.id},
            )
        return subscription

    def get_by_user(self, user_id: str) -> List[Subscription]:
        return self._docs.where("userId", user_id)

    def get_by_status(self, status: SubscriptionStatus) -> List[Subscription]:
        return self._docs.where("status", status)

    def get_by_plan(self, plan_id: str) -> List[Subscription]:
        return self._docs.where("planId", plan_id)

    def get_all(self) -> List[Subscription]:
        return self._docs.all()


class FirestorePlanRepository(PlanRepository):
    """Plans in the ``subscriptionPlans`` collection."""

    def __init__(self, client: firestore.Client, prefix: str = ""):
        self._docs = _FirestoreCollection(client, "subscriptionPlans", Plan, prefix)

    def add(self, plan: Plan) -> Plan:
        return self._docs.create(plan)

    def get_by_id(self, plan_id: str) -> Plan:
        plan = self._docs.find(plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan not found: {plan_id}", context={"plan_id": plan_id})
        return plan

    def find_by_id(self, plan_id: str) -> Optional[Plan]:
        return self._docs.find(plan_id)

    def update(self, plan: Plan) -> Plan:
        if not self._docs.overwrite(plan):
            raise PlanNotFoundError(f"Plan not found: {plan.id}", context={"plan_id": plan.id})
        return plan

    def get_all(self, active_only: bool = False) -> List[Plan]:
        if active_only:
            return self._docs.where("isActive", True)
        return self._docs.all()


class FirestoreUserRepository(UserRepository):
    """Users in the ``users`` collection, keyed by auth uid."""

    def __init__(self, client: firestore.Client, prefix: str = ""):
        self._docs = _FirestoreCollection(client, "users", User, prefix)

    def add(self, user: User) -> User:
        return self._docs.create(user)

    def get_by_id(self, user_id: str) -> User:
        user = self._docs.find(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}", context={"user_id": user_id})
        return user

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self._docs.find(user_id)

    def update(self, user: User) -> User:
        if not self._docs.overwrite(user):
            raise UserNotFoundError(f"User not found: {user.id}", context={"user_id": user.id})
        return user

    def remove(self, user_id: str) -> None:
        if self._docs.find(user_id) is None:
            raise UserNotFoundError(f"User not found: {user_id}", context={"user_id": user_id})
        self._docs.ref.document(user_id).delete()


class FirestoreInvoiceRepository(InvoiceRepository):
    """Invoices in the ``invoices`` collection."""

    def __init__(self, client: firestore.Client, prefix: str = ""):
        self._docs = _FirestoreCollection(client, "invoices", Invoice, prefix)

    def add(self, invoice: Invoice) -> Invoice:
        return self._docs.create(invoice)

    def get_by_user(self, user_id: str, status: Optional[InvoiceStatus] = None) -> List[Invoice]:
        invoices = self._docs.where("userId", user_id)
        if status is not None:
            invoices = [i for i in invoices if i.status == status]
        return sorted(invoices, key=lambda i: i.created_at, reverse=True)

    def update_status(
        self, invoice_id: str, status: InvoiceStatus, paid_at: Optional[datetime] = None
    ) -> Invoice:
        invoice = self._docs.find(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(
                f"Invoice not found: {invoice_id}", context={"invoice_id": invoice_id}
            )
        invoice.status = status
        invoice.paid_at = (paid_at or utc_now()) if status == InvoiceStatus.PAID else None
        invoice.updated_at = utc_now()
        self._docs.overwrite(invoice)
        return invoice


class FirestoreNotificationRepository(NotificationRepository):
    """Notifications in the ``notifications`` collection."""

    def __init__(self, client: firestore.Client, prefix: str = ""):
        self._docs = _FirestoreCollection(client, "notifications", Notification, prefix)

    def add(self, notification: Notification) -> Notification:
        return self._docs.create(notification)

    def get_by_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        notifications = self._docs.where("userId", user_id)
        if unread_only:
            notifications = [n for n in notifications if not n.is_read]
        return sorted(notifications, key=lambda n: n.created_at, reverse=True)

    def mark_as_read(self, notification_id: str) -> None:
        try:
            self._docs.ref.document(notification_id).update({"isRead": True})
        except NotFound:
            logger.warning("notification_not_found", notification_id=notification_id)


class FirestoreAnalyticsRepository(AnalyticsRepository):
    """Lifecycle events in the ``analytics`` collection."""

    def __init__(self, client: firestore.Client, prefix: str = ""):
        self._docs = _FirestoreCollection(client, "analytics", AnalyticsEvent, prefix)

    def add(self, event: AnalyticsEvent) -> AnalyticsEvent:
        return self._docs.create(event)

    def get_by_user(self, user_id: str, limit: int = 100) -> List[AnalyticsEvent]:
        query = (
            self._docs.ref.where(filter=FieldFilter("userId", "==", user_id))
            .order_by("createdAt", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [self._docs.decode(s) for s in query.stream()]

    def get_by_event(self, event: str) -> List[AnalyticsEvent]:
        return self._docs.where("event", event)
