"""In-app notifications and templated emails.

Every method raises on failure; the lifecycle engine decides whether a
failure matters.
"""

from datetime import datetime
from typing import Any, Optional

from membership_service.logging_config import get_logger
from membership_service.models import Notification, NotificationType, User
from membership_service.repositories.base import NotificationRepository, UserRepository
from membership_service.services.email_templates import format_amount, format_date, render_template
from membership_service.services.email_transport import EmailTransport
from membership_service.utils.clock import SystemClock
from membership_service.utils.id_generator import NOTIFICATION_PREFIX, generate_id

logger = get_logger(__name__)


class Notifier:
    """Delivers user-facing messages.

    Args:
        notifications: Notification repository
        users: User repository, used to address emails
        transport: Email transport
        clock: Time source for notification timestamps (system clock if omitted)
        brand: Product name shown in emails
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        users: UserRepository,
        transport: EmailTransport,
        clock=None,
        brand: str = "Membership",
    ):
        self.notifications = notifications
        self.users = users
        self.transport = transport
        self.clock = clock or SystemClock()
        self.brand = brand

    def notify_in_app(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        action_url: Optional[str] = None,
    ) -> Notification:
        """Persist an in-app notification."""
        notification = self.notifications.add(
            Notification(
                id=generate_id(NOTIFICATION_PREFIX),
                user_id=user_id,
                title=title,
                message=message,
                type=type,
                action_url=action_url,
                created_at=self.clock.now(),
            )
        )
        logger.info(
            "notification_created",
            user_id=user_id,
            notification_id=notification.id,
            notification_type=type.value,
        )
        return notification

    def _send(self, template_name: str, to: str, context: dict[str, Any]) -> None:
        subject, html_body, text_body = render_template(template_name, {"brand": self.brand, **context})
        self.transport.send(to, subject, html_body, text_body)
        logger.debug("email_dispatched", template=template_name, to=to)

    def _recipient(self, user_id: str) -> User:
        return self.users.get_by_id(user_id)

    def send_subscription_activation_email(
        self, user_id: str, plan_name: str, price: float, currency: str, start_date: datetime
    ) -> None:
        user = self._recipient(user_id)
        self._send(
            "subscription_activated",
            user.email,
            {
                "name": user.full_name,
                "plan_name": plan_name,
                "price": format_amount(price),
                "currency": currency,
                "start_date": format_date(start_date),
            },
        )

    def send_cancellation_email(self, user_id: str, plan_name: str) -> None:
        user = self._recipient(user_id)
        self._send("subscription_cancelled", user.email, {"name": user.full_name, "plan_name": plan_name})

    def send_account_suspension_email(self, user_id: str, reason: str) -> None:
        user = self._recipient(user_id)
        self._send("account_suspended", user.email, {"name": user.full_name, "reason": reason})
