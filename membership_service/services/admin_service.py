"""Admin operations: privileged lifecycle overrides, user moderation,
notifications and plan administration.

Every operation requires an admin actor. Lifecycle overrides go through the
subscription engine, so status rules still apply; only ``update_subscription``
writes fields directly.
"""

from typing import Any, Callable, List

from membership_service.errors import InvalidArgumentError, UnauthorizedError
from membership_service.logging_config import get_logger
from membership_service.models import (
    Actor,
    AnalyticsEvent,
    BulkNotificationResult,
    NotificationType,
    OperationResult,
    Plan,
    PlanCreate,
    PlanUpdate,
    Subscription,
    SubscriptionPatch,
    SubscriptionStats,
    SuspendUserResult,
    UserStatus,
)
from membership_service.repositories.base import SubscriptionRepository, UserRepository
from membership_service.services.analytics_recorder import AnalyticsRecorder
from membership_service.services.notifier import Notifier
from membership_service.services.plan_catalog import PlanCatalog
from membership_service.services.subscription_engine import SubscriptionEngine
from membership_service.state_logger import log_billing_period_change, log_user_status_change
from membership_service.utils.clock import SystemClock

logger = get_logger(__name__)


def _require_text(value: str, field: str) -> str:
    if not value or not value.strip():
        raise InvalidArgumentError(f"{field} is required")
    return value.strip()


class AdminService:
    """Admin override surface.

    Args:
        engine: Subscription lifecycle engine
        catalog: Plan catalog
        subscriptions: Subscription repository
        users: User repository
        notifier: Notification delivery
        analytics: Analytics recorder
        clock: Time source
    """

    def __init__(
        self,
        engine: SubscriptionEngine,
        catalog: PlanCatalog,
        subscriptions: SubscriptionRepository,
        users: UserRepository,
        notifier: Notifier,
        analytics: AnalyticsRecorder,
        clock=None,
    ):
        self.engine = engine
        self.catalog = catalog
        self.subscriptions = subscriptions
        self.users = users
        self.notifier = notifier
        self.analytics = analytics
        self.clock = clock or SystemClock()

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            logger.warning("admin_access_denied", actor_id=actor.user_id)
            raise UnauthorizedError("Admin role required")

    def _run_side_effect(self, name: str, user_id: str, fn: Callable[..., Any], *args) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.error(
                "side_effect_failed",
                side_effect=name,
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    # Subscriptions

    def pause_subscription(self, actor: Actor, subscription_id: str, reason: str) -> Subscription:
        self._require_admin(actor)
        return self.engine.pause(actor, subscription_id, _require_text(reason, "reason"))

    def resume_subscription(self, actor: Actor, subscription_id: str) -> Subscription:
        self._require_admin(actor)
        return self.engine.resume(actor, subscription_id)

    def cancel_subscription(self, actor: Actor, subscription_id: str, reason: str) -> Subscription:
        self._require_admin(actor)
        return self.engine.cancel(actor, subscription_id, reason)

    def renew_subscription(self, actor: Actor, subscription_id: str) -> Subscription:
        self._require_admin(actor)
        return self.engine.renew(actor, subscription_id)

    def update_subscription(self, actor: Actor, subscription_id: str, patch: SubscriptionPatch) -> Subscription:
        """Write allow-listed fields directly, bypassing the lifecycle rules.

        Raises:
            InvalidArgumentError: If the patch sets no field
            SubscriptionNotFoundError: If the subscription does not exist
        """
        self._require_admin(actor)
        fields = patch.model_dump(exclude_unset=True)
        if not fields:
            raise InvalidArgumentError("Patch must set at least one field")

        subscription = self.subscriptions.get_by_id(subscription_id)
        old_end_date = subscription.end_date

        if "auto_renew" in fields and fields["auto_renew"] is not None:
            subscription.set_auto_renew(fields["auto_renew"], reason="admin_patch")
        if "notes" in fields:
            subscription.notes = fields["notes"]
        if fields.get("renewal_date") is not None:
            subscription.renewal_date = fields["renewal_date"]
        if fields.get("end_date") is not None:
            subscription.end_date = fields["end_date"]
            log_billing_period_change(
                subscription_id=subscription.id,
                old_end_date=old_end_date,
                new_end_date=subscription.end_date,
                reason="admin_patch",
                actor_id=actor.user_id,
            )

        subscription.updated_at = self.clock.now()
        subscription = self.subscriptions.update(subscription)

        logger.info(
            "subscription_patched",
            subscription_id=subscription.id,
            fields=sorted(fields),
            actor_id=actor.user_id,
        )
        return subscription

    def get_subscription_stats(self, actor: Actor) -> SubscriptionStats:
        self._require_admin(actor)
        return self.analytics.subscription_stats()

    # Users

    def suspend_user(self, actor: Actor, user_id: str, reason: str) -> SuspendUserResult:
        """Suspend an account and cancel every one of its subscriptions.

        Cancellation re-stamps subscriptions that are already cancelled or expired.

        Raises:
            InvalidArgumentError: If reason is blank
            UserNotFoundError: If the user does not exist
        """
        self._require_admin(actor)
        reason = _require_text(reason, "reason")
        user = self.users.get_by_id(user_id)

        old_status = user.status
        user.status = UserStatus.SUSPENDED
        user.updated_at = self.clock.now()
        self.users.update(user)
        log_user_status_change(
            user_id=user_id,
            old_status=old_status.value,
            new_status=user.status.value,
            reason=reason,
            actor_id=actor.user_id,
        )

        self._run_side_effect(
            "in_app_notification",
            user_id,
            self.notifier.notify_in_app,
            user_id,
            "Account Suspended",
            f"Your account has been suspended. Reason: {reason}",
            NotificationType.ERROR,
        )
        self._run_side_effect(
            "suspension_email",
            user_id,
            self.notifier.send_account_suspension_email,
            user_id,
            reason,
        )

        cancelled = self._cancel_all_subscriptions(actor, user_id, f"Account suspended: {reason}")
        logger.info("user_suspended", user_id=user_id, cancelled_subscriptions=len(cancelled))
        return SuspendUserResult(message="User suspended successfully", cancelled_subscriptions=cancelled)

    def delete_user(self, actor: Actor, user_id: str) -> SuspendUserResult:
        """Cancel all of a user's subscriptions, then remove the account.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        self._require_admin(actor)
        self.users.get_by_id(user_id)

        cancelled = self._cancel_all_subscriptions(actor, user_id, "Account deleted")
        self.users.remove(user_id)

        logger.info("user_deleted", user_id=user_id, cancelled_subscriptions=len(cancelled))
        return SuspendUserResult(message="User deleted successfully", cancelled_subscriptions=cancelled)

    def _cancel_all_subscriptions(self, actor: Actor, user_id: str, reason: str) -> List[str]:
        cancelled = []
        for subscription in self.subscriptions.get_by_user(user_id):
            self.engine.cancel(actor, subscription.id, reason)
            cancelled.append(subscription.id)
        return cancelled

    def get_user_activity(self, actor: Actor, user_id: str, limit: int = 10) -> List[AnalyticsEvent]:
        """A user's most recent lifecycle events."""
        self._require_admin(actor)
        return self.analytics.recent_activity(user_id, limit=limit)

    # Notifications

    def send_notification(
        self,
        actor: Actor,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> OperationResult:
        """Send one in-app notification.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        self._require_admin(actor)
        title = _require_text(title, "title")
        message = _require_text(message, "message")
        self.users.get_by_id(user_id)

        self.notifier.notify_in_app(user_id, title, message, type)
        return OperationResult(message="Notification sent")

    def send_bulk_notification(
        self,
        actor: Actor,
        user_ids: List[str],
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> BulkNotificationResult:
        """Notify many users. Each target is independent; failures are collected."""
        self._require_admin(actor)
        title = _require_text(title, "title")
        message = _require_text(message, "message")

        failed = []
        for user_id in user_ids:
            try:
                if self.users.find_by_id(user_id) is None:
                    raise LookupError(f"User not found: {user_id}")
                self.notifier.notify_in_app(user_id, title, message, type)
            except Exception as e:
                logger.warning("bulk_notification_failed", user_id=user_id, error=str(e))
                failed.append(user_id)

        total_sent = len(user_ids) - len(failed)
        logger.info("bulk_notification_sent", total=len(user_ids), total_sent=total_sent, failed=len(failed))
        return BulkNotificationResult(success=True, total_sent=total_sent, failed=failed)

    # Plans

    def create_plan(self, actor: Actor, data: PlanCreate) -> Plan:
        self._require_admin(actor)
        return self.catalog.create(data)

    def update_plan(self, actor: Actor, plan_id: str, changes: PlanUpdate) -> Plan:
        self._require_admin(actor)
        return self.catalog.update(plan_id, changes)

    def deactivate_plan(self, actor: Actor, plan_id: str) -> Plan:
        self._require_admin(actor)
        return self.catalog.deactivate(plan_id)
