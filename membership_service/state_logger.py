"""Simple state change logging for subscriptions, plans and users.

Tracks state transitions with before/after values for debugging and auditing.
"""

from datetime import datetime
from typing import Any, Optional

from membership_service.logging_config import get_logger

logger = get_logger(__name__)


def log_subscription_state_change(
    subscription_id: str,
    old_state: Any,
    new_state: Any,
    reason: Optional[str] = None,
    **extra_context: Any,
) -> None:
    """Log subscription status change.

    Args:
        subscription_id: Subscription identifier
        old_state: Previous status value
        new_state: New status value
        reason: Reason for the change
        **extra_context: Additional context (user_id, actor, etc.)
    """
    logger.info(
        "subscription_state_changed",
        subscription_id=subscription_id,
        old_state=str(old_state),
        new_state=str(new_state),
        reason=reason,
        **extra_context,
    )


def log_auto_renew_change(
    subscription_id: str,
    old_value: bool,
    new_value: bool,
    reason: Optional[str] = None,
    **extra_context: Any,
) -> None:
    """Log auto-renew setting change."""
    logger.info(
        "auto_renew_changed",
        subscription_id=subscription_id,
        old_value=old_value,
        new_value=new_value,
        reason=reason,
        **extra_context,
    )


def log_billing_period_change(
    subscription_id: str,
    old_end_date: Optional[datetime],
    new_end_date: datetime,
    reason: str,
    **extra_context: Any,
) -> None:
    """Log a new billing period.

    Args:
        subscription_id: Subscription identifier
        old_end_date: End of the previous period (None for a new subscription)
        new_end_date: End of the new period
        reason: Reason for change (creation, renewal, admin patch)
        **extra_context: Additional context
    """
    logger.info(
        "billing_period_changed",
        subscription_id=subscription_id,
        old_end_date=old_end_date.isoformat() if old_end_date else None,
        new_end_date=new_end_date.isoformat(),
        reason=reason,
        **extra_context,
    )


def log_plan_change(
    plan_id: str,
    changed_fields: dict[str, Any],
    reason: Optional[str] = None,
    **extra_context: Any,
) -> None:
    """Log plan catalog edits (price, features, active flag)."""
    logger.info(
        "plan_changed",
        plan_id=plan_id,
        changed_fields=sorted(changed_fields),
        reason=reason,
        **extra_context,
    )


def log_user_status_change(
    user_id: str,
    old_status: Any,
    new_status: Any,
    reason: Optional[str] = None,
    **extra_context: Any,
) -> None:
    """Log user account status change (active/suspended)."""
    logger.info(
        "user_status_changed",
        user_id=user_id,
        old_status=str(old_status),
        new_status=str(new_status),
        reason=reason,
        **extra_context,
    )
