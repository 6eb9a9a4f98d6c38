"""Tests for wire models: camelCase aliases and patch allow-lists."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from membership_service.models import (
    BillingCycle,
    CreateSubscriptionRequest,
    Plan,
    PlanUpdate,
    SubscriptionPatch,
    SubscriptionSummary,
    UpdateAutoRenewRequest,
)


class TestWireAliases:
    def test_dump_uses_camel_case(self):
        plan = Plan(id="p1", name="Basic", price=10.0, billing_cycle=BillingCycle.MONTHLY, max_users=3)
        data = plan.model_dump(by_alias=True)
        assert data["billingCycle"] == BillingCycle.MONTHLY
        assert data["maxUsers"] == 3
        assert data["isActive"] is True
        assert "billing_cycle" not in data

    def test_accepts_camel_case_and_snake_case(self):
        assert CreateSubscriptionRequest(planId="p1").plan_id == "p1"
        assert CreateSubscriptionRequest(plan_id="p1").plan_id == "p1"

    def test_create_request_defaults(self):
        request = CreateSubscriptionRequest.model_validate({"planId": "p1"})
        assert request.auto_renew is True
        assert request.notes is None

    def test_auto_renew_is_required(self):
        with pytest.raises(ValidationError):
            UpdateAutoRenewRequest.model_validate({})

    def test_summary_json_uses_aliases(self):
        data = SubscriptionSummary(total_spent=12.5).model_dump(by_alias=True, mode="json")
        assert data["totalSpent"] == 12.5
        assert data["nextRenewal"] is None


class TestSubscriptionPatch:
    """The admin patch only accepts its four fields."""

    def test_known_fields(self):
        patch = SubscriptionPatch.model_validate({"autoRenew": False, "notes": "vip"})
        assert patch.model_dump(exclude_unset=True) == {"auto_renew": False, "notes": "vip"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            SubscriptionPatch.model_validate({"status": "active"})

    def test_price_cannot_be_patched(self):
        with pytest.raises(ValidationError):
            SubscriptionPatch.model_validate({"price": 0})

    def test_dates_normalised_to_utc(self):
        patch = SubscriptionPatch.model_validate({"endDate": "2026-05-01T12:00:00+02:00"})
        assert patch.end_date == datetime(2026, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert patch.end_date.tzinfo == timezone.utc

    def test_naive_dates_taken_as_utc(self):
        patch = SubscriptionPatch(renewal_date=datetime(2026, 5, 1))
        assert patch.renewal_date.tzinfo == timezone.utc


class TestPlanUpdate:
    def test_allow_list(self):
        update = PlanUpdate.model_validate({"price": 12.0, "isActive": False})
        assert update.model_dump(exclude_unset=True) == {"price": 12.0, "is_active": False}

    def test_name_cannot_change(self):
        with pytest.raises(ValidationError):
            PlanUpdate.model_validate({"name": "Renamed"})

    def test_billing_cycle_cannot_change(self):
        with pytest.raises(ValidationError):
            PlanUpdate.model_validate({"billingCycle": "yearly"})
