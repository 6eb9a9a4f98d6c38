"""Plan catalog - registration and maintenance of subscription plans."""

from typing import List

from membership_service.errors import InvalidArgumentError
from membership_service.logging_config import get_logger
from membership_service.models import Plan, PlanCreate, PlanUpdate
from membership_service.repositories.base import PlanRepository
from membership_service.state_logger import log_plan_change
from membership_service.utils.clock import SystemClock
from membership_service.utils.id_generator import PLAN_PREFIX, generate_id

logger = get_logger(__name__)


class PlanCatalog:
    """Registry of plans. Plans are deactivated, never deleted."""

    def __init__(self, plans: PlanRepository, clock=None):
        self.plans = plans
        self.clock = clock or SystemClock()

    @staticmethod
    def _check_price(price: float) -> None:
        if price < 0:
            raise InvalidArgumentError("Plan price must not be negative", context={"price": price})

    def get(self, plan_id: str) -> Plan:
        """Get a plan.

        Raises:
            PlanNotFoundError: If the plan does not exist
        """
        return self.plans.get_by_id(plan_id)

    def list_active(self) -> List[Plan]:
        return self.plans.get_all(active_only=True)

    def list_all(self) -> List[Plan]:
        return self.plans.get_all()

    def create(self, data: PlanCreate) -> Plan:
        """Register a new, active plan.

        Raises:
            InvalidArgumentError: If the name is blank or the price negative
        """
        if not data.name.strip():
            raise InvalidArgumentError("Plan name is required")
        self._check_price(data.price)

        now = self.clock.now()
        plan = self.plans.add(
            Plan(
                id=generate_id(PLAN_PREFIX),
                is_active=True,
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
        )
        logger.info(
            "plan_created",
            plan_id=plan.id,
            plan_name=plan.name,
            price=plan.price,
            billing_cycle=plan.billing_cycle.value,
        )
        return plan

    def update(self, plan_id: str, changes: PlanUpdate) -> Plan:
        """Apply an allow-listed update (price, features, active flag).

        Raises:
            PlanNotFoundError: If the plan does not exist
            InvalidArgumentError: If the new price is negative
        """
        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "price" in fields:
            self._check_price(fields["price"])

        plan = self.plans.get_by_id(plan_id)
        if not fields:
            return plan

        for name, value in fields.items():
            setattr(plan, name, value)
        plan.updated_at = self.clock.now()
        plan = self.plans.update(plan)

        log_plan_change(plan_id=plan.id, changed_fields=fields, reason="admin_update")
        return plan

    def deactivate(self, plan_id: str) -> Plan:
        """Hide a plan from new subscriptions. Existing subscriptions keep their snapshot."""
        return self.update(plan_id, PlanUpdate(is_active=False))
