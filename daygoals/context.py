"""Application context - builds and owns every long-lived component."""
import logging
from datetime import timedelta
from typing import Optional

from fastapi import Request

from daygoals.background import QueueConsumer
from daygoals.cache import Cache
from daygoals.config import Settings
from daygoals.conversation.dispatcher import NotificationDispatcher
from daygoals.conversation.menu import MenuHandler
from daygoals.conversation.rating import RatingHandler
from daygoals.conversation.registration import RegistrationHandler
from daygoals.conversation.router import ConversationRouter
from daygoals.conversation.tasks import TasksHandler
from daygoals.conversation.transport import Transport
from daygoals.conversation.webhook import HttpTransport
from daygoals.database import Database
from daygoals.models.user import FlowState
from daygoals.services.assignment_service import AssignmentService
from daygoals.services.catalog_service import CatalogService
from daygoals.services.dialog_service import DialogService
from daygoals.services.geo_service import GoogleTimezoneResolver, TimezoneResolver
from daygoals.services.lifecycle_service import LifecycleObserver
from daygoals.services.notification_service import EngagementScheduler
from daygoals.services.rating_service import RatingService
from daygoals.services.user_service import UserService
from daygoals.utils.timewindow import Clock, utc_now

logger = logging.getLogger(__name__)


class AppContext:
    """
    Everything the app needs, constructed once and passed by reference.

    Use create() to build one against the configured MongoDB; start()
    launches the background tasks and stop() tears everything down.
    """

    @classmethod
    async def create(cls, settings: Settings, **overrides) -> "AppContext":
        """Connect to MongoDB and build the context on top of it."""
        database = Database(settings)
        await database.connect()
        return cls(settings, database.db, database=database, **overrides)

    def __init__(
        self,
        settings: Settings,
        db,
        database: Optional[Database] = None,
        cache: Optional[Cache] = None,
        transport: Optional[Transport] = None,
        resolver: Optional[TimezoneResolver] = None,
        clock: Clock = utc_now,
    ):
        self.settings = settings
        self.database = database
        self.db = db
        self.clock = clock
        self.cache = cache or Cache.from_url(settings.redis_url)
        self.transport = transport or HttpTransport(settings.outbound_webhook_url)
        self.resolver = resolver or GoogleTimezoneResolver(settings.google_maps_api_key)

        dialog_ttl = None
        if settings.dialog_state_ttl_seconds:
            dialog_ttl = timedelta(seconds=settings.dialog_state_ttl_seconds)

        self.catalog = CatalogService(db, self.cache)
        self.users = UserService(db, self.cache)
        self.assignments = AssignmentService(db, self.catalog)
        self.dialogs = DialogService(self.cache, ttl=dialog_ttl)
        self.lifecycle = LifecycleObserver(
            db,
            interval=settings.lifecycle_interval_seconds,
            clock=clock,
        )
        self.engagement = EngagementScheduler(
            self.users,
            self.assignments,
            self.catalog,
            self.cache,
            interval=settings.engagement_interval_seconds,
            dedup_ttl=timedelta(hours=settings.notification_dedup_hours),
            clock=clock,
        )
        self.ratings = RatingService(
            db,
            self.assignments,
            self.catalog,
            self.users,
            self.engagement,
        )

        self.tasks = TasksHandler(
            self.transport,
            self.users,
            self.catalog,
            self.assignments,
            self.dialogs,
            clock=clock,
        )
        self.router = ConversationRouter(
            self.users,
            RegistrationHandler(
                self.transport,
                self.users,
                self.resolver,
                settings.default_timezone,
            ),
            {
                FlowState.MENU: MenuHandler(self.transport, self.users),
                FlowState.TASKS: self.tasks,
                FlowState.RATE: RatingHandler(self.transport, self.users, self.ratings),
            },
        )
        self.dispatcher = NotificationDispatcher(self.transport, self.users, self.tasks)

        self.consumers = [
            QueueConsumer("notification-dispatcher", self.engagement.messages, self.dispatcher.deliver),
            QueueConsumer("disapproval-notifier", self.ratings.disapprovals, self.ratings.notify_disapproval),
        ]

    async def start(self) -> None:
        """Launch background tasks."""
        if not self.settings.run_background_tasks:
            logger.info("Background tasks disabled")
            return

        self.lifecycle.start()
        self.engagement.start()
        for consumer in self.consumers:
            consumer.start()

    async def stop(self) -> None:
        """Stop background tasks and release connections."""
        for consumer in self.consumers:
            await consumer.stop()
        await self.engagement.stop()
        await self.lifecycle.stop()

        for closeable in (self.transport, self.resolver):
            close = getattr(closeable, "close", None)
            if close is not None:
                await close()
        await self.cache.close()

        if self.database is not None:
            await self.database.disconnect()


def get_context(request: Request) -> AppContext:
    """Dependency for getting the application context."""
    return request.app.state.context
