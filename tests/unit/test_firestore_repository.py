"""Tests for the Firestore adapters against a mocked client."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import AlreadyExists, NotFound

from membership_service.models import (
    BillingCycle,
    InvoiceStatus,
    StorageConfig,
    Subscription,
    SubscriptionStatus,
)
from membership_service.repositories.base import SubscriptionNotFoundError, UserNotFoundError
from membership_service.repositories.firestore import (
    FirestoreAnalyticsRepository,
    FirestoreInvoiceRepository,
    FirestoreNotificationRepository,
    FirestorePlanRepository,
    FirestoreSubscriptionRepository,
    FirestoreUserRepository,
    create_firestore_client,
    to_utc_datetime,
)

START = datetime(2026, 1, 31, 9, 0, tzinfo=timezone.utc)


def snapshot(doc_id, data, exists=True):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = exists
    snap.to_dict.return_value = data
    return snap


def subscription_doc(**overrides):
    doc = {
        "userId": "user-1",
        "planId": "basic",
        "planName": "Basic",
        "price": 10.0,
        "currency": "USD",
        "billingCycle": "monthly",
        "status": "active",
        "startDate": START,
        "endDate": START + timedelta(days=28),
        "renewalDate": START + timedelta(days=28),
        "autoRenew": True,
        "createdAt": START,
        "updatedAt": START,
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def client():
    return MagicMock()


class TestTimestamps:
    def test_aware_datetime(self):
        value = datetime(2026, 1, 31, 10, 0, tzinfo=timezone(timedelta(hours=1)))
        assert to_utc_datetime(value) == START
        assert to_utc_datetime(value).tzinfo == timezone.utc

    def test_naive_datetime_is_utc(self):
        assert to_utc_datetime(datetime(2026, 1, 31, 9, 0)) == START

    def test_iso_string(self):
        assert to_utc_datetime("2026-01-31T09:00:00Z") == START

    def test_protobuf_timestamp(self):
        timestamp = MagicMock(spec=["ToDatetime"])
        timestamp.ToDatetime.return_value = START
        assert to_utc_datetime(timestamp) == START
        timestamp.ToDatetime.assert_called_once_with(tzinfo=timezone.utc)

    def test_none(self):
        assert to_utc_datetime(None) is None

    def test_unsupported(self):
        with pytest.raises(TypeError):
            to_utc_datetime(12345)


class TestClientFactory:
    @patch("membership_service.repositories.firestore.firestore.Client")
    def test_project_and_database(self, mock_client_class):
        create_firestore_client(StorageConfig(backend="firestore", project_id="proj", database="members"))
        mock_client_class.assert_called_once_with(project="proj", database="members")

    @patch("membership_service.repositories.firestore.firestore.Client")
    def test_defaults(self, mock_client_class):
        create_firestore_client(StorageConfig(backend="firestore"))
        mock_client_class.assert_called_once_with()


class TestSubscriptionRepository:
    def test_get_decodes_document(self, client):
        client.collection.return_value.document.return_value.get.return_value = snapshot(
            "sub_1", subscription_doc()
        )
        repo = FirestoreSubscriptionRepository(client, prefix="test_")

        subscription = repo.get_by_id("sub_1")

        client.collection.assert_called_with("test_subscriptions")
        assert subscription.id == "sub_1"
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.billing_cycle == BillingCycle.MONTHLY
        assert subscription.start_date == START

    def test_get_missing(self, client):
        client.collection.return_value.document.return_value.get.return_value = snapshot("x", None, exists=False)
        with pytest.raises(SubscriptionNotFoundError):
            FirestoreSubscriptionRepository(client).get_by_id("x")

    def test_add_encodes_camel_case_without_id(self, client):
        repo = FirestoreSubscriptionRepository(client)
        subscription = Subscription(
            id="sub_1",
            user_id="user-1",
            plan_id="basic",
            plan_name="Basic",
            price=10.0,
            billing_cycle=BillingCycle.MONTHLY,
            start_date=START,
            end_date=START,
            renewal_date=START,
        )

        repo.add(subscription)

        client.collection.return_value.document.assert_called_with("sub_1")
        data = client.collection.return_value.document.return_value.create.call_args.args[0]
        assert "id" not in data
        assert data["userId"] == "user-1"
        assert data["status"] == "active"
        assert data["billingCycle"] == "monthly"
        assert data["startDate"] == START

    def test_add_duplicate(self, client):
        client.collection.return_value.document.return_value.create.side_effect = AlreadyExists("dup")
        repo = FirestoreSubscriptionRepository(client)
        subscription = Subscription.model_validate({"id": "sub_1", **subscription_doc()})

        with pytest.raises(ValueError, match="already exists"):
            repo.add(subscription)

    def test_update_missing(self, client):
        client.collection.return_value.document.return_value.update.side_effect = NotFound("gone")
        subscription = Subscription.model_validate({"id": "sub_1", **subscription_doc()})

        with pytest.raises(SubscriptionNotFoundError):
            FirestoreSubscriptionRepository(client).update(subscription)

    def test_get_by_status_filters_on_value(self, client):
        query = client.collection.return_value.where.return_value
        query.stream.return_value = [snapshot("sub_1", subscription_doc(status="paused"))]

        result = FirestoreSubscriptionRepository(client).get_by_status(SubscriptionStatus.PAUSED)

        field_filter = client.collection.return_value.where.call_args.kwargs["filter"]
        assert field_filter.field_path == "status"
        assert field_filter.value == "paused"
        assert [s.status for s in result] == [SubscriptionStatus.PAUSED]


class TestOtherRepositories:
    def test_plan_active_only(self, client):
        client.collection.return_value.where.return_value.stream.return_value = [
            snapshot("basic", {"name": "Basic", "price": 10.0, "billingCycle": "monthly", "isActive": True})
        ]

        plans = FirestorePlanRepository(client).get_all(active_only=True)

        client.collection.assert_called_with("subscriptionPlans")
        assert [p.id for p in plans] == ["basic"]

    def test_user_remove_missing(self, client):
        client.collection.return_value.document.return_value.get.return_value = snapshot("u", None, exists=False)
        with pytest.raises(UserNotFoundError):
            FirestoreUserRepository(client).remove("u")
        client.collection.return_value.document.return_value.delete.assert_not_called()

    def test_user_remove(self, client):
        client.collection.return_value.document.return_value.get.return_value = snapshot(
            "u", {"email": "u@example.com"}
        )
        FirestoreUserRepository(client).remove("u")
        client.collection.return_value.document.return_value.delete.assert_called_once()

    def test_invoice_status_filter_and_order(self, client):
        client.collection.return_value.where.return_value.stream.return_value = [
            snapshot("i1", {"userId": "u", "subscriptionId": "s", "amount": 5.0, "status": "paid", "createdAt": START}),
            snapshot(
                "i2",
                {"userId": "u", "subscriptionId": "s", "amount": 5.0, "status": "paid",
                 "createdAt": START + timedelta(days=1)},
            ),
            snapshot("i3", {"userId": "u", "subscriptionId": "s", "amount": 5.0, "status": "pending", "createdAt": START}),
        ]

        invoices = FirestoreInvoiceRepository(client).get_by_user("u", status=InvoiceStatus.PAID)

        assert [i.id for i in invoices] == ["i2", "i1"]

    def test_mark_missing_notification_as_read(self, client):
        client.collection.return_value.document.return_value.update.side_effect = NotFound("gone")

        with patch("membership_service.repositories.firestore.logger") as mock_logger:
            FirestoreNotificationRepository(client).mark_as_read("ntf_1")

        mock_logger.warning.assert_called_once_with("notification_not_found", notification_id="ntf_1")

    def test_analytics_newest_first_with_limit(self, client):
        query = client.collection.return_value.where.return_value.order_by.return_value.limit.return_value
        query.stream.return_value = [
            snapshot("evt_1", {"userId": "u", "event": "subscription_created", "createdAt": START})
        ]

        events = FirestoreAnalyticsRepository(client).get_by_user("u", limit=5)

        client.collection.return_value.where.return_value.order_by.return_value.limit.assert_called_once_with(5)
        assert events[0].event == "subscription_created"
