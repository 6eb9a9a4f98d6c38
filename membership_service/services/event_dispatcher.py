"""Lifecycle event publishing to Google Cloud Pub/Sub.

Responsibilities:
- Format analytics events as JSON messages
- Publish to the configured Pub/Sub topic
- Manage Pub/Sub client lifecycle
"""

import json
from threading import RLock
from typing import Optional

from google.api_core.exceptions import NotFound
from google.cloud import pubsub_v1

from membership_service.logging_config import get_logger
from membership_service.models import AnalyticsEvent, PubSubConfig

logger = get_logger(__name__)

PUBLISH_TIMEOUT_SECONDS = 5.0


def build_event_message(event: AnalyticsEvent) -> bytes:
    """Encode an analytics event as the published JSON payload."""
    payload = {
        "eventId": event.id,
        "userId": event.user_id,
        "event": event.event,
        "metadata": event.metadata,
        "eventTimeMillis": int(event.created_at.timestamp() * 1000),
    }
    return json.dumps(payload, default=str).encode("utf-8")


class EventDispatcher:
    """Publishes lifecycle events to a Pub/Sub topic.

    Disabled unless ``pubsub.enabled`` is set. Initialization failures
    disable the dispatcher instead of failing start-up.

    Args:
        config: Pub/Sub settings
        publisher: Pre-built publisher client (created from config if omitted)
    """

    def __init__(self, config: PubSubConfig, publisher: Optional[pubsub_v1.PublisherClient] = None):
        self._lock = RLock()
        self._config = config
        self._publisher = publisher
        self._topic_path: Optional[str] = None
        self._enabled = config.enabled

        self._initialize()

    def _initialize(self) -> None:
        if not self._enabled:
            logger.info("event_dispatcher_disabled", message="Pub/Sub publication is disabled in config")
            return

        try:
            if self._publisher is None:
                self._publisher = pubsub_v1.PublisherClient()
            self._topic_path = self._publisher.topic_path(self._config.project_id, self._config.topic)
            self._ensure_topic_exists()

            logger.info(
                "event_dispatcher_initialized",
                project_id=self._config.project_id,
                topic=self._config.topic,
                topic_path=self._topic_path,
            )

        except Exception as e:
            logger.error(
                "event_dispatcher_init_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            self._enabled = False

    def _ensure_topic_exists(self) -> None:
        """Create the topic if it does not exist yet."""
        try:
            self._publisher.get_topic(request={"topic": self._topic_path})
            logger.info("pubsub_topic_exists", topic_path=self._topic_path)
        except NotFound:
            topic = self._publisher.create_topic(request={"name": self._topic_path})
            logger.info("pubsub_topic_created", topic_path=topic.name)

    def is_enabled(self) -> bool:
        """True if publication is enabled and the client is initialized."""
        return self._enabled and self._publisher is not None

    def publish_event(self, event: AnalyticsEvent) -> bool:
        """Publish one lifecycle event.

        Returns:
            True if published, False if disabled

        Raises:
            Exception: Publication errors propagate to the caller
        """
        if not self.is_enabled():
            logger.debug("event_dispatcher_disabled", message="Skipping event publication")
            return False

        with self._lock:
            publisher, topic_path = self._publisher, self._topic_path
        if publisher is None:
            return False

        # PublisherClient is thread-safe; only the shutdown swap is guarded
        future = publisher.publish(
            topic_path,
            build_event_message(event),
            event=event.event,
            user_id=event.user_id,
        )
        message_id = future.result(timeout=PUBLISH_TIMEOUT_SECONDS)

        logger.info(
            "lifecycle_event_published",
            analytics_event=event.event,
            event_id=event.id,
            message_id=message_id,
        )
        return True

    def shutdown(self) -> None:
        """Shutdown the dispatcher and release the publisher."""
        with self._lock:
            if self._publisher:
                logger.info("event_dispatcher_shutting_down")
                self._publisher = None
                self._topic_path = None
                logger.info("event_dispatcher_shutdown_complete")
