"""Plan store - in-memory storage for plan definitions."""

import threading
from typing import Dict, List, Optional

from membership_service.models import Plan
from membership_service.repositories.base import PlanNotFoundError, PlanRepository


class InMemoryPlanStore(PlanRepository):
    """In-memory storage for plans. Plans are never removed."""

    def __init__(self, plans: Optional[List[Plan]] = None):
        """Initialize plan store.

        Args:
            plans: Plans to preload (e.g. seed plans from configuration)
        """
        self._plans: Dict[str, Plan] = {}
        self._lock = threading.RLock()
        for plan in plans or []:
            self.add(plan)

    def add(self, plan: Plan) -> Plan:
        """Add a plan.

        Raises:
            ValueError: If plan id already exists
        """
        with self._lock:
            if plan.id in self._plans:
                raise ValueError(f"Plan with id '{plan.id}' already exists")
            self._plans[plan.id] = plan.model_copy(deep=True)
            return plan.model_copy(deep=True)

    def get_by_id(self, plan_id: str) -> Plan:
        """Get plan by id.

        Raises:
            PlanNotFoundError: If plan id not found
        """
        plan = self.find_by_id(plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan not found: {plan_id}", context={"plan_id": plan_id})
        return plan

    def find_by_id(self, plan_id: str) -> Optional[Plan]:
        with self._lock:
            plan = self._plans.get(plan_id)
            return plan.model_copy(deep=True) if plan else None

    def update(self, plan: Plan) -> Plan:
        """Update an existing plan.

        Raises:
            PlanNotFoundError: If plan id not found
        """
        with self._lock:
            if plan.id not in self._plans:
                raise PlanNotFoundError(f"Plan not found: {plan.id}", context={"plan_id": plan.id})
            self._plans[plan.id] = plan.model_copy(deep=True)
            return plan.model_copy(deep=True)

    def get_all(self, active_only: bool = False) -> List[Plan]:
        """Get all plans, optionally only active ones."""
        with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._plans.values()
                if p.is_active or not active_only
            ]

    def clear(self) -> None:
        with self._lock:
            self._plans.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._plans)
