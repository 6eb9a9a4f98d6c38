"""Subscription store - in-memory storage for subscription records.

Stores copies so callers only change persisted state through ``update``,
matching document-store semantics.
"""

import threading
from typing import Dict, List, Optional

from membership_service.models import Subscription, SubscriptionStatus
from membership_service.repositories.base import (
    SubscriptionNotFoundError,
    SubscriptionRepository,
)


class InMemorySubscriptionStore(SubscriptionRepository):
    """In-memory storage for subscription records.

    Thread-safe storage with lookup by id, user, status and plan.
    """

    def __init__(self):
        """Initialize subscription store with empty storage."""
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = threading.RLock()

    def add(self, subscription: Subscription) -> Subscription:
        """Add a subscription to the store.

        Args:
            subscription: Subscription to store

        Returns:
            Stored copy of the subscription

        Raises:
            ValueError: If subscription id already exists
        """
        with self._lock:
            if subscription.id in self._subscriptions:
                raise ValueError(f"Subscription with id '{subscription.id}' already exists")
            self._subscriptions[subscription.id] = subscription.model_copy(deep=True)
            return subscription.model_copy(deep=True)

    def get_by_id(self, subscription_id: str) -> Subscription:
        """Get subscription by id.

        Raises:
            SubscriptionNotFoundError: If id not found
        """
        subscription = self.find_by_id(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(
                f"Subscription not found: {subscription_id}",
                context={"subscription_id": subscription_id},
            )
        return subscription

    def find_by_id(self, subscription_id: str) -> Optional[Subscription]:
        """Find subscription by id (returns None if not found)."""
        with self._lock:
            subscription = self._subscriptions.get(subscription_id)
            return subscription.model_copy(deep=True) if subscription else None

    def update(self, subscription: Subscription) -> Subscription:
        """Update an existing subscription.

        Raises:
            SubscriptionNotFoundError: If subscription id not found
        """
        with self._lock:
            if subscription.id not in self._subscriptions:
                raise SubscriptionNotFoundError(
                    f"Subscription not found: {subscription.id}",
                    context={"subscription_id": subscription.id},
                )
            self._subscriptions[subscription.id] = subscription.model_copy(deep=True)
            return subscription.model_copy(deep=True)

    def _select(self, predicate) -> List[Subscription]:
        with self._lock:
            return [s.model_copy(deep=True) for s in self._subscriptions.values() if predicate(s)]

    def get_by_user(self, user_id: str) -> List[Subscription]:
        """Get all subscriptions for a specific user."""
        return self._select(lambda s: s.user_id == user_id)

    def get_by_status(self, status: SubscriptionStatus) -> List[Subscription]:
        """Get all subscriptions in a specific status."""
        return self._select(lambda s: s.status == status)

    def get_by_plan(self, plan_id: str) -> List[Subscription]:
        """Get all subscriptions created from a plan."""
        return self._select(lambda s: s.plan_id == plan_id)

    def get_all(self) -> List[Subscription]:
        """Get all subscriptions in the store."""
        return self._select(lambda s: True)

    def count(self) -> int:
        """Get total number of subscriptions."""
        with self._lock:
            return len(self._subscriptions)

    def clear(self) -> None:
        """Clear all subscriptions from the store."""
        with self._lock:
            self._subscriptions.clear()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, subscription_id: str) -> bool:
        with self._lock:
            return subscription_id in self._subscriptions

    def __repr__(self) -> str:
        return f"InMemorySubscriptionStore(subscriptions={self.count()})"
