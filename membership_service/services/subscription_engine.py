"""Subscription lifecycle state machine.

Responsibilities:
- Create subscriptions from catalog plans (plan fields are snapshotted)
- Renew, cancel, pause and resume subscriptions
- Enforce ownership and status preconditions
- Calculate billing periods
- Dispatch side effects (in-app notification, email, analytics) after persistence

Side effects never fail an operation: each one is isolated, and a failure is
logged as ``side_effect_failed`` and dropped.
"""

from typing import Any, Callable, List, Optional

from membership_service.errors import InvalidArgumentError, InvalidStateError, UnauthorizedError
from membership_service.logging_config import get_logger
from membership_service.models import (
    Actor,
    InvoiceStatus,
    NotificationType,
    Subscription,
    SubscriptionStatus,
    SubscriptionSummary,
)
from membership_service.repositories.base import (
    InvoiceRepository,
    PlanRepository,
    SubscriptionRepository,
)
from membership_service.services.analytics_recorder import AnalyticsRecorder
from membership_service.services.notifier import Notifier
from membership_service.utils.billing_period import period_end
from membership_service.utils.clock import SystemClock
from membership_service.utils.id_generator import SUBSCRIPTION_PREFIX, generate_id

logger = get_logger(__name__)


class SubscriptionEngine:
    """Subscription lifecycle management engine.

    Every mutating operation takes the calling ``Actor``. Non-admin actors may
    only touch their own subscriptions.

    Args:
        subscriptions: Subscription repository
        plans: Plan repository
        invoices: Invoice repository (read for summaries)
        notifier: In-app notification and email delivery
        analytics: Analytics event recorder
        clock: Time source (defaults to the system clock)
    """

    def __init__(
        self,
        subscriptions: SubscriptionRepository,
        plans: PlanRepository,
        invoices: InvoiceRepository,
        notifier: Notifier,
        analytics: AnalyticsRecorder,
        clock=None,
    ):
        self.subscriptions = subscriptions
        self.plans = plans
        self.invoices = invoices
        self.notifier = notifier
        self.analytics = analytics
        self.clock = clock or SystemClock()

        logger.info("subscription_engine_initialized")

    def _load_authorized(self, actor: Actor, subscription_id: str) -> Subscription:
        """Load a subscription the actor may act on.

        Raises:
            SubscriptionNotFoundError: If the subscription does not exist
            UnauthorizedError: If the actor is neither the owner nor an admin
        """
        subscription = self.subscriptions.get_by_id(subscription_id)
        if not actor.is_admin and subscription.user_id != actor.user_id:
            logger.warning(
                "subscription_access_denied",
                subscription_id=subscription_id,
                actor_id=actor.user_id,
            )
            raise UnauthorizedError(
                "Unauthorized",
                context={"subscription_id": subscription_id},
            )
        return subscription

    def _save(self, subscription: Subscription) -> Subscription:
        subscription.updated_at = self.clock.now()
        return self.subscriptions.update(subscription)

    def _run_side_effect(self, name: str, subscription: Subscription, fn: Callable[..., Any], *args, **kwargs) -> None:
        """Run one side effect; failures are logged and dropped."""
        try:
            fn(*args, **kwargs)
        except Exception as e:
            logger.error(
                "side_effect_failed",
                side_effect=name,
                subscription_id=subscription.id,
                user_id=subscription.user_id,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    def _notify(self, subscription: Subscription, title: str, message: str, type: NotificationType) -> None:
        self._run_side_effect(
            "in_app_notification",
            subscription,
            self.notifier.notify_in_app,
            subscription.user_id,
            title,
            message,
            type,
        )

    def _record(self, subscription: Subscription, event: str, **metadata: Any) -> None:
        self._run_side_effect(
            "analytics",
            subscription,
            self.analytics.record,
            subscription.user_id,
            event,
            metadata,
        )

    def _send_activation_email(self, subscription: Subscription) -> None:
        self._run_side_effect(
            "activation_email",
            subscription,
            self.notifier.send_subscription_activation_email,
            subscription.user_id,
            subscription.plan_name,
            subscription.price,
            subscription.currency,
            subscription.start_date,
        )

    def create(
        self,
        actor: Actor,
        plan_id: str,
        auto_renew: bool = True,
        notes: Optional[str] = None,
    ) -> Subscription:
        """Subscribe the actor to a plan.

        The period starts now; the end date is one billing cycle later and
        the renewal date equals the end date.

        Raises:
            InvalidArgumentError: If plan_id is blank
            PlanNotFoundError: If the plan does not exist
            InvalidStateError: If the plan is no longer active
        """
        if not plan_id or not plan_id.strip():
            raise InvalidArgumentError("planId is required")

        plan = self.plans.get_by_id(plan_id)
        if not plan.is_active:
            raise InvalidStateError(
                "This plan is no longer available",
                context={"plan_id": plan_id},
            )

        now = self.clock.now()
        end = period_end(now, plan.billing_cycle)
        subscription = Subscription(
            id=generate_id(SUBSCRIPTION_PREFIX),
            user_id=actor.user_id,
            plan_id=plan.id,
            plan_name=plan.name,
            price=plan.price,
            currency=plan.currency,
            billing_cycle=plan.billing_cycle,
            status=SubscriptionStatus.ACTIVE,
            start_date=now,
            end_date=end,
            renewal_date=end,
            auto_renew=auto_renew,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        subscription = self.subscriptions.add(subscription)

        logger.info(
            "subscription_created",
            subscription_id=subscription.id,
            user_id=subscription.user_id,
            plan_id=plan.id,
            billing_cycle=plan.billing_cycle.value,
            end_date=end.isoformat(),
        )

        self._notify(
            subscription,
            "Subscription Activated",
            f"Your {plan.name} subscription is now active!",
            NotificationType.SUCCESS,
        )
        self._send_activation_email(subscription)
        self._record(
            subscription,
            "subscription_created",
            planId=plan.id,
            planName=plan.name,
            price=plan.price,
        )
        return subscription

    def renew(self, actor: Actor, subscription_id: str) -> Subscription:
        """Start a fresh billing period anchored at now.

        Re-activates paused and cancelled subscriptions and clears any
        cancellation data. Time left in the current period is not carried over.
        """
        subscription = self._load_authorized(actor, subscription_id)

        now = self.clock.now()
        subscription.start_period(now, period_end(now, subscription.billing_cycle), reason="renewal")
        subscription.set_status(SubscriptionStatus.ACTIVE, reason="renewal")
        subscription.cancelled_at = None
        subscription.cancel_reason = None
        subscription = self._save(subscription)

        logger.info(
            "subscription_renewed",
            subscription_id=subscription.id,
            end_date=subscription.end_date.isoformat(),
            actor_id=actor.user_id,
        )

        self._notify(
            subscription,
            "Subscription Renewed",
            f"Your {subscription.plan_name} subscription has been renewed successfully.",
            NotificationType.SUCCESS,
        )
        self._send_activation_email(subscription)
        self._record(
            subscription,
            "subscription_renewed",
            subscriptionId=subscription.id,
            planId=subscription.plan_id,
        )
        return subscription

    def cancel(self, actor: Actor, subscription_id: str, reason: Optional[str]) -> Subscription:
        """Cancel a subscription.

        Calling it again re-stamps cancelledAt and overwrites the reason.

        Raises:
            InvalidArgumentError: If reason is blank
        """
        if not reason or not reason.strip():
            raise InvalidArgumentError("Cancellation reason is required")
        reason = reason.strip()

        subscription = self._load_authorized(actor, subscription_id)

        subscription.set_status(SubscriptionStatus.CANCELLED, reason=reason)
        subscription.cancelled_at = self.clock.now()
        subscription.cancel_reason = reason
        subscription = self._save(subscription)

        logger.info(
            "subscription_cancelled",
            subscription_id=subscription.id,
            reason=reason,
            actor_id=actor.user_id,
        )

        if actor.is_admin:
            self._notify(
                subscription,
                "Subscription Cancelled",
                f"Your {subscription.plan_name} subscription has been cancelled: {reason}",
                NotificationType.ERROR,
            )
        else:
            self._notify(
                subscription,
                "Subscription Cancelled",
                f"Your {subscription.plan_name} subscription has been cancelled.",
                NotificationType.WARNING,
            )
        self._run_side_effect(
            "cancellation_email",
            subscription,
            self.notifier.send_cancellation_email,
            subscription.user_id,
            subscription.plan_name,
        )
        self._record(
            subscription,
            "subscription_cancelled",
            subscriptionId=subscription.id,
            planId=subscription.plan_id,
            reason=reason,
        )
        return subscription

    def pause(self, actor: Actor, subscription_id: str, reason: Optional[str] = None) -> Subscription:
        """Pause a subscription. Dates are left untouched.

        When an admin pauses with a reason, the notes become
        ``"Paused by admin: <reason>"``.
        """
        subscription = self._load_authorized(actor, subscription_id)

        subscription.set_status(SubscriptionStatus.PAUSED, reason=reason or "paused")
        if actor.is_admin and reason:
            subscription.notes = f"Paused by admin: {reason}"
        subscription = self._save(subscription)

        logger.info("subscription_paused", subscription_id=subscription.id, actor_id=actor.user_id)

        if actor.is_admin and reason:
            self._notify(
                subscription,
                "Subscription Paused",
                f"Your {subscription.plan_name} subscription has been paused: {reason}",
                NotificationType.WARNING,
            )
        else:
            self._notify(
                subscription,
                "Subscription Paused",
                f"Your {subscription.plan_name} subscription has been paused.",
                NotificationType.INFO,
            )
        self._record(subscription, "subscription_paused", subscriptionId=subscription.id)
        return subscription

    def resume(self, actor: Actor, subscription_id: str) -> Subscription:
        """Resume a paused subscription. Dates are left untouched.

        Raises:
            InvalidStateError: If the subscription is not paused
        """
        subscription = self._load_authorized(actor, subscription_id)
        if subscription.status != SubscriptionStatus.PAUSED:
            raise InvalidStateError(
                "Subscription is not paused",
                context={"subscription_id": subscription_id, "status": subscription.status.value},
            )

        subscription.set_status(SubscriptionStatus.ACTIVE, reason="resumed")
        subscription = self._save(subscription)

        logger.info("subscription_resumed", subscription_id=subscription.id, actor_id=actor.user_id)

        self._notify(
            subscription,
            "Subscription Resumed",
            f"Your {subscription.plan_name} subscription has been resumed.",
            NotificationType.SUCCESS,
        )
        self._record(subscription, "subscription_resumed", subscriptionId=subscription.id)
        return subscription

    def update_auto_renew(self, actor: Actor, subscription_id: str, auto_renew: bool) -> Subscription:
        """Turn auto-renewal on or off."""
        subscription = self._load_authorized(actor, subscription_id)

        subscription.set_auto_renew(auto_renew, reason="user_request")
        subscription = self._save(subscription)

        self._notify(
            subscription,
            "Subscription Settings Updated",
            f"Auto-renewal has been {'enabled' if auto_renew else 'disabled'}.",
            NotificationType.INFO,
        )
        self._record(
            subscription,
            "auto_renew_updated",
            subscriptionId=subscription.id,
            autoRenew=auto_renew,
        )
        return subscription

    def get_subscription(self, actor: Actor, subscription_id: str) -> Subscription:
        return self._load_authorized(actor, subscription_id)

    def list_subscriptions(self, actor: Actor) -> List[Subscription]:
        """The actor's own subscriptions, newest first."""
        subscriptions = self.subscriptions.get_by_user(actor.user_id)
        return sorted(subscriptions, key=lambda s: s.created_at, reverse=True)

    def get_summary(self, user_id: str) -> SubscriptionSummary:
        """Aggregate a user's subscriptions and invoices.

        ``total_spent`` sums the price of every owned subscription regardless
        of status. ``next_renewal`` is the earliest renewal date among active
        subscriptions.
        """
        subscriptions = self.subscriptions.get_by_user(user_id)
        invoices = self.invoices.get_by_user(user_id)

        def count(status: SubscriptionStatus) -> int:
            return sum(1 for s in subscriptions if s.status == status)

        active = [s for s in subscriptions if s.status == SubscriptionStatus.ACTIVE]

        return SubscriptionSummary(
            total=len(subscriptions),
            active=len(active),
            cancelled=count(SubscriptionStatus.CANCELLED),
            paused=count(SubscriptionStatus.PAUSED),
            expired=count(SubscriptionStatus.EXPIRED),
            pending=count(SubscriptionStatus.PENDING),
            total_spent=round(sum(s.price for s in subscriptions), 2),
            pending_invoices=sum(1 for i in invoices if i.status == InvoiceStatus.PENDING),
            paid_invoices=sum(1 for i in invoices if i.status == InvoiceStatus.PAID),
            next_renewal=min((s.renewal_date for s in active), default=None),
        )
