"""Tests for Pub/Sub publication of lifecycle events."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import NotFound

from membership_service.models import AnalyticsEvent, PubSubConfig
from membership_service.services.event_dispatcher import EventDispatcher, build_event_message


@pytest.fixture
def event():
    return AnalyticsEvent(
        id="evt_0123456789abcdef",
        user_id="user-1",
        event="subscription_created",
        metadata={"planId": "basic", "price": 10.0},
        created_at=datetime(2026, 1, 31, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def config():
    return PubSubConfig(enabled=True, project_id="test-project", topic="membership-lifecycle")


@pytest.fixture
def publisher():
    client = MagicMock()
    client.topic_path.return_value = "projects/test-project/topics/membership-lifecycle"
    client.publish.return_value.result.return_value = "message-1"
    return client


class TestMessageFormat:
    def test_payload(self, event):
        payload = json.loads(build_event_message(event))
        assert payload == {
            "eventId": "evt_0123456789abcdef",
            "userId": "user-1",
            "event": "subscription_created",
            "metadata": {"planId": "basic", "price": 10.0},
            "eventTimeMillis": 1769850000000,
        }


class TestInitialization:
    def test_disabled_by_config(self):
        dispatcher = EventDispatcher(PubSubConfig(enabled=False))
        assert dispatcher.is_enabled() is False

    @patch("membership_service.services.event_dispatcher.pubsub_v1.PublisherClient")
    def test_creates_publisher_when_enabled(self, mock_client_class, config):
        mock_client_class.return_value.topic_path.return_value = "projects/p/topics/t"

        dispatcher = EventDispatcher(config)

        mock_client_class.assert_called_once()
        assert dispatcher.is_enabled() is True

    def test_existing_topic_is_reused(self, config, publisher):
        EventDispatcher(config, publisher=publisher)
        publisher.get_topic.assert_called_once()
        publisher.create_topic.assert_not_called()

    def test_missing_topic_is_created(self, config, publisher):
        publisher.get_topic.side_effect = NotFound("no topic")

        dispatcher = EventDispatcher(config, publisher=publisher)

        publisher.create_topic.assert_called_once_with(
            request={"name": "projects/test-project/topics/membership-lifecycle"}
        )
        assert dispatcher.is_enabled() is True

    def test_init_failure_disables(self, config, publisher):
        publisher.get_topic.side_effect = RuntimeError("no credentials")

        with patch("membership_service.services.event_dispatcher.logger") as mock_logger:
            dispatcher = EventDispatcher(config, publisher=publisher)

        assert dispatcher.is_enabled() is False
        assert mock_logger.error.call_args.args == ("event_dispatcher_init_failed",)


class TestPublish:
    def test_publish(self, config, publisher, event):
        dispatcher = EventDispatcher(config, publisher=publisher)

        assert dispatcher.publish_event(event) is True

        args, kwargs = publisher.publish.call_args
        assert args[0] == "projects/test-project/topics/membership-lifecycle"
        assert json.loads(args[1])["eventId"] == event.id
        assert kwargs == {"event": "subscription_created", "user_id": "user-1"}
        publisher.publish.return_value.result.assert_called_once_with(timeout=5.0)

    def test_disabled_does_not_publish(self, event):
        assert EventDispatcher(PubSubConfig()).publish_event(event) is False

    def test_publish_errors_propagate(self, config, publisher, event):
        publisher.publish.return_value.result.side_effect = TimeoutError("deadline")
        dispatcher = EventDispatcher(config, publisher=publisher)

        with pytest.raises(TimeoutError):
            dispatcher.publish_event(event)

    def test_shutdown_disables(self, config, publisher, event):
        dispatcher = EventDispatcher(config, publisher=publisher)
        dispatcher.shutdown()

        assert dispatcher.is_enabled() is False
        assert dispatcher.publish_event(event) is False
