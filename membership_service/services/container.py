"""Service wiring.

Builds every client and service once, from configuration, and hands them
to each other explicitly. The FastAPI app keeps the container on
``app.state``.
"""

from dataclasses import dataclass
from typing import Optional

from membership_service.logging_config import get_logger
from membership_service.models import Plan, ServiceConfig, User
from membership_service.repositories.base import (
    AnalyticsRepository,
    InvoiceRepository,
    NotificationRepository,
    PlanRepository,
    SubscriptionRepository,
    UserRepository,
)
from membership_service.repositories.plan_store import InMemoryPlanStore
from membership_service.repositories.record_store import (
    InMemoryAnalyticsStore,
    InMemoryInvoiceStore,
    InMemoryNotificationStore,
)
from membership_service.repositories.subscription_store import InMemorySubscriptionStore
from membership_service.repositories.user_store import InMemoryUserStore
from membership_service.services.admin_service import AdminService
from membership_service.services.analytics_recorder import AnalyticsRecorder
from membership_service.services.email_transport import EmailTransport, create_email_transport
from membership_service.services.event_dispatcher import EventDispatcher
from membership_service.services.notifier import Notifier
from membership_service.services.plan_catalog import PlanCatalog
from membership_service.services.subscription_engine import SubscriptionEngine
from membership_service.utils.clock import SystemClock

logger = get_logger(__name__)


@dataclass
class Repositories:
    subscriptions: SubscriptionRepository
    plans: PlanRepository
    users: UserRepository
    invoices: InvoiceRepository
    notifications: NotificationRepository
    analytics: AnalyticsRepository


@dataclass
class ServiceContainer:
    """Everything a request handler needs."""

    settings: ServiceConfig
    repositories: Repositories
    transport: EmailTransport
    dispatcher: EventDispatcher
    notifier: Notifier
    analytics: AnalyticsRecorder
    catalog: PlanCatalog
    engine: SubscriptionEngine
    admin: AdminService

    def shutdown(self) -> None:
        """Flush and release long-lived clients."""
        self.transport.close()
        self.dispatcher.shutdown()
        logger.info("service_container_shutdown")


def build_memory_repositories(settings: ServiceConfig, clock=None) -> Repositories:
    """In-memory stores seeded with the configured plans and users."""
    clock = clock or SystemClock()
    now = clock.now()
    plans = [Plan(created_at=now, updated_at=now, **seed.model_dump()) for seed in settings.seed_plans]

    users = InMemoryUserStore()
    for seed in settings.seed_users:
        users.add(User(created_at=now, updated_at=now, **seed.model_dump()))

    logger.info(
        "memory_repositories_seeded",
        plans=len(plans),
        users=len(settings.seed_users),
    )
    return Repositories(
        subscriptions=InMemorySubscriptionStore(),
        plans=InMemoryPlanStore(plans),
        users=users,
        invoices=InMemoryInvoiceStore(),
        notifications=InMemoryNotificationStore(),
        analytics=InMemoryAnalyticsStore(),
    )


def build_firestore_repositories(settings: ServiceConfig) -> Repositories:
    """Cloud Firestore adapters sharing one client."""
    from membership_service.repositories.firestore import (
        FirestoreAnalyticsRepository,
        FirestoreInvoiceRepository,
        FirestoreNotificationRepository,
        FirestorePlanRepository,
        FirestoreSubscriptionRepository,
        FirestoreUserRepository,
        create_firestore_client,
    )

    client = create_firestore_client(settings.storage)
    prefix = settings.storage.collection_prefix
    return Repositories(
        subscriptions=FirestoreSubscriptionRepository(client, prefix),
        plans=FirestorePlanRepository(client, prefix),
        users=FirestoreUserRepository(client, prefix),
        invoices=FirestoreInvoiceRepository(client, prefix),
        notifications=FirestoreNotificationRepository(client, prefix),
        analytics=FirestoreAnalyticsRepository(client, prefix),
    )


def build_container(
    settings: ServiceConfig,
    clock=None,
    repositories: Optional[Repositories] = None,
    transport: Optional[EmailTransport] = None,
    dispatcher: Optional[EventDispatcher] = None,
) -> ServiceContainer:
    """Construct all services from configuration.

    Args:
        settings: Validated configuration
        clock: Time source shared by all services (system clock if omitted)
        repositories: Pre-built repositories (built from ``settings.storage`` if omitted)
        transport: Pre-built email transport (built from ``settings.email`` if omitted)
        dispatcher: Pre-built Pub/Sub dispatcher (built from ``settings.pubsub`` if omitted)
    """
    clock = clock or SystemClock()

    if repositories is None:
        if settings.storage.backend == "firestore":
            repositories = build_firestore_repositories(settings)
        else:
            repositories = build_memory_repositories(settings, clock)

    transport = transport or create_email_transport(settings.email)
    dispatcher = dispatcher or EventDispatcher(settings.pubsub)

    notifier = Notifier(
        repositories.notifications,
        repositories.users,
        transport,
        clock,
        brand=settings.email.from_name or settings.service.name,
    )
    analytics = AnalyticsRecorder(repositories.analytics, repositories.subscriptions, dispatcher, clock)
    catalog = PlanCatalog(repositories.plans, clock)
    engine = SubscriptionEngine(
        repositories.subscriptions,
        repositories.plans,
        repositories.invoices,
        notifier,
        analytics,
        clock,
    )
    admin = AdminService(
        engine,
        catalog,
        repositories.subscriptions,
        repositories.users,
        notifier,
        analytics,
        clock,
    )

    logger.info("service_container_built", storage_backend=settings.storage.backend)
    return ServiceContainer(
        settings=settings,
        repositories=repositories,
        transport=transport,
        dispatcher=dispatcher,
        notifier=notifier,
        analytics=analytics,
        catalog=catalog,
        engine=engine,
        admin=admin,
    )
