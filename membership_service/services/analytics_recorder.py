"""Analytics recorder - lifecycle event log and subscription statistics."""

from typing import Any, List, Optional

from membership_service.logging_config import get_logger
from membership_service.models import (
    AnalyticsEvent,
    BillingCycle,
    SubscriptionStats,
    SubscriptionStatus,
)
from membership_service.repositories.base import AnalyticsRepository, SubscriptionRepository
from membership_service.services.event_dispatcher import EventDispatcher
from membership_service.utils.billing_period import monthly_equivalent
from membership_service.utils.clock import SystemClock
from membership_service.utils.id_generator import EVENT_PREFIX, generate_id

logger = get_logger(__name__)


class AnalyticsRecorder:
    """Appends lifecycle events and aggregates subscription statistics.

    Args:
        events: Analytics event repository
        subscriptions: Subscription repository (for statistics)
        dispatcher: Optional Pub/Sub dispatcher each event is published to
        clock: Time source
    """

    def __init__(
        self,
        events: AnalyticsRepository,
        subscriptions: SubscriptionRepository,
        dispatcher: Optional[EventDispatcher] = None,
        clock=None,
    ):
        self.events = events
        self.subscriptions = subscriptions
        self.dispatcher = dispatcher
        self.clock = clock or SystemClock()

    def record(self, user_id: str, event: str, metadata: Optional[dict[str, Any]] = None) -> AnalyticsEvent:
        """Append an event and publish it when publication is enabled.

        A failed publication is logged; the stored event is kept.
        """
        stored = self.events.add(
            AnalyticsEvent(
                id=generate_id(EVENT_PREFIX),
                user_id=user_id,
                event=event,
                metadata=metadata or {},
                created_at=self.clock.now(),
            )
        )
        logger.debug("analytics_event_recorded", user_id=user_id, analytics_event=event)

        if self.dispatcher is not None:
            try:
                self.dispatcher.publish_event(stored)
            except Exception as e:
                logger.error(
                    "event_publish_failed",
                    analytics_event=event,
                    event_id=stored.id,
                    error=str(e),
                    exc_info=True,
                )
        return stored

    def recent_activity(self, user_id: str, limit: int = 10) -> List[AnalyticsEvent]:
        """A user's newest events."""
        return self.events.get_by_user(user_id, limit=limit)

    def subscription_stats(self) -> SubscriptionStats:
        """Counts by status and billing cycle, and monthly recurring revenue.

        Revenue counts active subscriptions only, with quarterly and yearly
        prices spread over their months.
        """
        subscriptions = self.subscriptions.get_all()
        by_status = {status.value: 0 for status in SubscriptionStatus}
        by_cycle = {cycle.value: 0 for cycle in BillingCycle}
        revenue = 0.0

        for subscription in subscriptions:
            by_status[subscription.status.value] += 1
            by_cycle[subscription.billing_cycle.value] += 1
            if subscription.status == SubscriptionStatus.ACTIVE:
                revenue += monthly_equivalent(subscription.price, subscription.billing_cycle)

        return SubscriptionStats(
            total=len(subscriptions),
            by_status=by_status,
            by_billing_cycle=by_cycle,
            monthly_recurring_revenue=round(revenue, 2),
        )
