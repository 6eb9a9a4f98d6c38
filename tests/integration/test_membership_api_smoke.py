"""Smoke tests for the HTTP API.

Quick validation tests to ensure routing, identity headers, camelCase
payloads and error mapping work end to end.
"""

import asyncio
import inspect
import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from membership_service.main import create_app
from membership_service.models import BillingCycle, PlanSeed, ServiceConfig, UserRole, UserSeed
from membership_service.services.container import build_container
from membership_service.utils.clock import FixedClock

USER = {"X-User-Id": "user-1"}
OTHER = {"X-User-Id": "user-2"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def container():
    settings = ServiceConfig(
        seed_plans=[
            PlanSeed(id="basic", name="Basic", price=10.0, billing_cycle=BillingCycle.MONTHLY),
            PlanSeed(id="legacy", name="Legacy", price=5.0, billing_cycle=BillingCycle.MONTHLY, is_active=False),
        ],
        seed_users=[
            UserSeed(id="user-1", email="ada@example.com"),
            UserSeed(id="user-2", email="grace@example.com"),
            UserSeed(id="admin-1", email="admin@example.com", role=UserRole.ADMIN),
        ],
    )
    return build_container(settings, clock=FixedClock(datetime(2026, 1, 31, 9, 0, tzinfo=timezone.utc)))


@pytest.fixture
def client(container):
    """Create test client; the context manager runs start-up and shutdown."""
    with TestClient(create_app(container=container)) as test_client:
        yield test_client


def subscribe(client, plan_id="basic"):
    response = client.post("/subscriptions", json={"planId": plan_id}, headers=USER)
    assert response.status_code == 201
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json()["service"] == "membership-service"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["storage"] == "memory"
    assert health["email"] == "disabled"
    assert health["pubsub"] == "disabled"


def test_create_subscription_uses_camel_case(client):
    data = subscribe(client)

    assert data["userId"] == "user-1"
    assert data["planName"] == "Basic"
    assert data["billingCycle"] == "monthly"
    assert data["autoRenew"] is True
    assert data["endDate"].startswith("2026-02-28T09:00:00")
    assert data["renewalDate"] == data["endDate"]


def test_missing_identity_is_unauthenticated(client):
    response = client.get("/subscriptions")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"


def test_unknown_role_rejected(client):
    response = client.get("/subscriptions", headers={"X-User-Id": "user-1", "X-User-Role": "owner"})
    assert response.status_code == 400


def test_list_and_get(client):
    created = subscribe(client)

    listed = client.get("/subscriptions", headers=USER).json()
    assert [s["id"] for s in listed] == [created["id"]]

    assert client.get(f"/subscriptions/{created['id']}", headers=USER).status_code == 200
    assert client.get("/subscriptions", headers=OTHER).json() == []


def test_other_user_is_forbidden(client):
    created = subscribe(client)

    response = client.post(f"/subscriptions/{created['id']}/pause", headers=OTHER)

    assert response.status_code == 403
    assert response.json() == {"error": "unauthorized", "message": "Unauthorized"}


def test_unknown_subscription(client):
    response = client.get("/subscriptions/sub_0000000000000000", headers=USER)

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_inactive_plan_conflict(client):
    response = client.post("/subscriptions", json={"planId": "legacy"}, headers=USER)

    assert response.status_code == 409
    assert response.json()["message"] == "This plan is no longer available"


def test_resume_active_conflict(client):
    created = subscribe(client)

    response = client.post(f"/subscriptions/{created['id']}/resume", headers=USER)

    assert response.status_code == 409
    assert response.json()["error"] == "invalid_state"


def test_pause_resume_cancel(client):
    created = subscribe(client)
    sub_url = f"/subscriptions/{created['id']}"

    assert client.post(f"{sub_url}/pause", headers=USER).json()["status"] == "paused"
    assert client.post(f"{sub_url}/resume", headers=USER).json()["status"] == "active"

    blank = client.post(f"{sub_url}/cancel", json={"reason": "  "}, headers=USER)
    assert blank.status_code == 400

    cancelled = client.post(f"{sub_url}/cancel", json={"reason": "too expensive"}, headers=USER).json()
    assert cancelled["status"] == "cancelled"
    assert cancelled["cancelReason"] == "too expensive"


def test_auto_renew_requires_value(client):
    created = subscribe(client)
    sub_url = f"/subscriptions/{created['id']}/auto-renew"

    missing = client.patch(sub_url, json={}, headers=USER)
    assert missing.status_code == 400
    assert missing.json()["error"] == "invalid_argument"

    updated = client.patch(sub_url, json={"autoRenew": False}, headers=USER)
    assert updated.json()["autoRenew"] is False


def test_summary(client):
    subscribe(client)

    summary = client.get("/subscriptions/summary", headers=USER).json()

    assert summary["total"] == 1
    assert summary["totalSpent"] == 10.0
    assert summary["nextRenewal"].startswith("2026-02-28")


def test_admin_requires_role(client):
    response = client.get("/admin/subscriptions/stats", headers=USER)
    assert response.status_code == 403


def test_admin_patch_rejects_unknown_keys(client):
    created = subscribe(client)

    response = client.patch(f"/admin/subscriptions/{created['id']}", json={"status": "active"}, headers=ADMIN)
    assert response.status_code == 400

    patched = client.patch(f"/admin/subscriptions/{created['id']}", json={"notes": "vip"}, headers=ADMIN)
    assert patched.status_code == 200
    assert patched.json()["notes"] == "vip"


def test_admin_stats_and_suspend(client):
    subscribe(client)

    stats = client.get("/admin/subscriptions/stats", headers=ADMIN).json()
    assert stats["byStatus"]["active"] == 1
    assert stats["monthlyRecurringRevenue"] == 10.0

    result = client.post("/admin/users/user-1/suspend", json={"reason": "fraud"}, headers=ADMIN).json()
    assert result["success"] is True
    assert len(result["cancelledSubscriptions"]) == 1

    activity = client.get("/admin/users/user-1/activity", params={"limit": 5}, headers=ADMIN).json()
    assert {e["event"] for e in activity} == {"subscription_created", "subscription_cancelled"}


def test_admin_bulk_notification(client):
    response = client.post(
        "/admin/notifications/bulk",
        json={"userIds": ["user-1", "ghost", "user-2"], "title": "Hi", "message": "News"},
        headers=ADMIN,
    )

    assert response.json() == {"success": True, "totalSent": 2, "failed": ["ghost"]}


def test_admin_plans(client):
    created = client.post(
        "/admin/plans",
        json={"name": "Team", "price": 49.0, "billingCycle": "quarterly", "features": ["SSO"]},
        headers=ADMIN,
    )
    assert created.status_code == 201
    plan_id = created.json()["id"]

    negative = client.patch(f"/admin/plans/{plan_id}", json={"price": -1}, headers=ADMIN)
    assert negative.status_code == 400

    assert client.post(f"/admin/plans/{plan_id}/deactivate", headers=ADMIN).json()["isActive"] is False
    assert client.post("/subscriptions", json={"planId": plan_id}, headers=USER).status_code == 409


class RendezvousTransport:
    """Email transport whose sends only return once `parties` sends are in flight together."""

    def __init__(self, parties: int):
        self.barrier = threading.Barrier(parties, timeout=5)
        self.delivered = []

    def send(self, to, subject, html_body, text_body=""):
        self.barrier.wait()
        self.delivered.append(to)

    def close(self):
        pass


@pytest.fixture
def anyio_backend():
    return "asyncio"


def test_io_handlers_are_sync():
    app = create_app(container=MagicMock())
    handlers = {route.path: route.endpoint for route in app.routes if isinstance(route, APIRoute) and route.path != "/"}
    assert "/subscriptions" in handlers
    assert [path for path, handler in handlers.items() if inspect.iscoroutinefunction(handler)] == []


@pytest.mark.anyio
async def test_concurrent_requests_overlap_email_delivery():
    settings = ServiceConfig(
        seed_plans=[PlanSeed(id="basic", name="Basic", price=10.0, billing_cycle=BillingCycle.MONTHLY)],
        seed_users=[UserSeed(id=f"user-{n}", email=f"member{n}@example.com") for n in range(3)],
    )
    transport = RendezvousTransport(parties=3)
    container = build_container(settings, transport=transport)
    app = create_app(container=container)
    # ASGITransport does not run the lifespan
    app.state.container = container

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        responses = await asyncio.gather(
            *(
                client.post("/subscriptions", json={"planId": "basic"}, headers={"X-User-Id": f"user-{n}"})
                for n in range(3)
            )
        )

    assert [r.status_code for r in responses] == [201, 201, 201]
    assert sorted(transport.delivered) == [f"member{n}@example.com" for n in range(3)]
