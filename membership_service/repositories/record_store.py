"""In-memory stores for invoices, notifications and analytics events."""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from membership_service.models import (
    AnalyticsEvent,
    Invoice,
    InvoiceStatus,
    Notification,
)
from membership_service.repositories.base import (
    AnalyticsRepository,
    InvoiceNotFoundError,
    InvoiceRepository,
    NotificationRepository,
)
from membership_service.utils.clock import utc_now


class InMemoryInvoiceStore(InvoiceRepository):
    """In-memory storage for invoices."""

    def __init__(self):
        self._invoices: Dict[str, Invoice] = {}
        self._lock = threading.RLock()

    def add(self, invoice: Invoice) -> Invoice:
        with self._lock:
            if invoice.id in self._invoices:
                raise ValueError(f"Invoice with id '{invoice.id}' already exists")
            self._invoices[invoice.id] = invoice.model_copy(deep=True)
            return invoice.model_copy(deep=True)

    def get_by_user(self, user_id: str, status: Optional[InvoiceStatus] = None) -> List[Invoice]:
        with self._lock:
            invoices = [
                i.model_copy(deep=True)
                for i in self._invoices.values()
                if i.user_id == user_id and (status is None or i.status == status)
            ]
        return sorted(invoices, key=lambda i: i.created_at, reverse=True)

    def update_status(
        self, invoice_id: str, status: InvoiceStatus, paid_at: Optional[datetime] = None
    ) -> Invoice:
        """Change invoice status.

        ``paid_at`` is stamped (defaulting to now) only when the status is paid
        and cleared otherwise.

        Raises:
            InvoiceNotFoundError: If invoice id not found
        """
        with self._lock:
            invoice = self._invoices.get(invoice_id)
            if invoice is None:
                raise InvoiceNotFoundError(
                    f"Invoice not found: {invoice_id}", context={"invoice_id": invoice_id}
                )
            invoice.status = status
            invoice.paid_at = (paid_at or utc_now()) if status == InvoiceStatus.PAID else None
            invoice.updated_at = utc_now()
            return invoice.model_copy(deep=True)

    def clear(self) -> None:
        with self._lock:
            self._invoices.clear()


class InMemoryNotificationStore(NotificationRepository):
    """Append-only in-memory storage for notifications."""

    def __init__(self):
        self._notifications: Dict[str, Notification] = {}
        self._lock = threading.RLock()

    def add(self, notification: Notification) -> Notification:
        with self._lock:
            self._notifications[notification.id] = notification.model_copy(deep=True)
            return notification.model_copy(deep=True)

    def get_by_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        with self._lock:
            notifications = [
                n.model_copy(deep=True)
                for n in self._notifications.values()
                if n.user_id == user_id and not (unread_only and n.is_read)
            ]
        return sorted(notifications, key=lambda n: n.created_at, reverse=True)

    def mark_as_read(self, notification_id: str) -> None:
        with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is not None:
                notification.is_read = True

    def clear(self) -> None:
        with self._lock:
            self._notifications.clear()


class InMemoryAnalyticsStore(AnalyticsRepository):
    """Append-only in-memory storage for analytics events."""

    def __init__(self):
        self._events: List[AnalyticsEvent] = []
        self._lock = threading.RLock()

    def add(self, event: AnalyticsEvent) -> AnalyticsEvent:
        with self._lock:
            self._events.append(event.model_copy(deep=True))
            return event.model_copy(deep=True)

    def get_by_user(self, user_id: str, limit: int = 100) -> List[AnalyticsEvent]:
        with self._lock:
            events = [e.model_copy(deep=True) for e in self._events if e.user_id == user_id]
        events.sort(key=lambda e: e.created_at, reverse=True)
        return events[:limit]

    def get_by_event(self, event: str) -> List[AnalyticsEvent]:
        with self._lock:
            return [e.model_copy(deep=True) for e in self._events if e.event == event]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
