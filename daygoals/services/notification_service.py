"""Notification service - time-windowed, deduplicated reminders."""
import asyncio
import logging
from datetime import timedelta
from typing import Optional

from daygoals.background import PeriodicTask
from daygoals.cache import Cache
from daygoals.models.goal import WAKE_AT_6, WAKE_AT_8, WAKE_AT_10
from daygoals.models.goal_type import WAKE_TYPE_ID
from daygoals.models.message import Message
from daygoals.models.user import User
from daygoals.services.assignment_service import AssignmentService
from daygoals.services.catalog_service import CatalogService
from daygoals.services.user_service import UserService
from daygoals.utils.timewindow import Clock, local_day, localize, utc_now

logger = logging.getLogger(__name__)

TASK_LIST = "task_list"
MARK_TASKS = "mark_tasks"
NEXT_DAY = "next_day"
DISAPPROVE = "disapprove"

# Wake-up item -> local hours (from, to) of the morning window
WAKE_WINDOWS = {
    WAKE_AT_6: (6, 8),
    WAKE_AT_8: (8, 10),
    WAKE_AT_10: (10, 12),
}
DEFAULT_WAKE_WINDOW = (12, 14)

MARK_TASKS_SHIFT = 8
NEXT_DAY_SHIFT = 10


def in_window(hour: int, window: tuple[int, int], shift: int = 0) -> bool:
    """True if hour falls in window shifted by shift hours, bounds included."""
    start, end = window
    return start + shift <= hour <= end + shift


class EngagementScheduler(PeriodicTask):
    """
    Hourly pass over all users emitting reminders.

    Reminders go onto an unbounded queue drained by the transport. A marker
    in the cache keeps an identical (user, code, text) from being queued
    again for dedup_ttl, so each reminder is delivered once per day.
    """

    name = "engagement-scheduler"

    def __init__(
        self,
        users: UserService,
        assignments: AssignmentService,
        catalog: CatalogService,
        cache: Cache,
        interval: float = 3600,
        dedup_ttl: timedelta = timedelta(hours=8),
        clock: Clock = utc_now,
        messages: Optional["asyncio.Queue[Message]"] = None,
    ):
        super().__init__(interval)
        self.users = users
        self.assignments = assignments
        self.catalog = catalog
        self.cache = cache
        self.dedup_ttl = dedup_ttl
        self.messages: "asyncio.Queue[Message]" = messages if messages is not None else asyncio.Queue()
        self._clock = clock

    async def run_once(self) -> None:
        """Check every user once. A failing user doesn't stop the pass."""
        types_count = len(await self.catalog.list_types())

        for user in await self.users.list_users():
            try:
                await self.check_user(user, types_count)
            except Exception:
                logger.exception(f"Notification check failed for user {user.id}")

    async def check_user(self, user: User, types_count: int) -> list[str]:
        """
        Queue the reminders due for one user now.

        Args:
            user: User to check
            types_count: Number of goal types in the catalog

        Returns:
            Codes of the reminders that were queued
        """
        now = self._clock()
        hour = localize(now, user.timezone).hour
        today = local_day(now, user.timezone)

        user_goals = await self.assignments.user_goals_for_day(user, today)
        window = DEFAULT_WAKE_WINDOW
        for user_goal in user_goals:
            if user_goal.type == WAKE_TYPE_ID:
                window = WAKE_WINDOWS.get(user_goal.goal_id, window)

        candidates = []
        if user_goals and in_window(hour, window):
            candidates.append(TASK_LIST)
        if in_window(hour, window, MARK_TASKS_SHIFT):
            candidates.append(MARK_TASKS)
        if in_window(hour, window, NEXT_DAY_SHIFT):
            tomorrow_count = await self.assignments.count_for_day(
                user, today + timedelta(days=1)
            )
            if tomorrow_count < types_count:
                candidates.append(NEXT_DAY)

        return [code for code in candidates if await self.send(user, code)]

    async def send(self, user: User, code: str, text: str = "") -> bool:
        """
        Queue a message unless an identical one was queued recently.

        Returns:
            True if the message was queued, False if it was suppressed
        """
        key = self._marker_key(user, code, text)
        if await self.cache.exists(key):
            return False

        await self.cache.set(key, "1", ttl=self.dedup_ttl)
        self.messages.put_nowait(Message(user=user, code=code, text=text))
        logger.debug(f"Queued {code} for user {user.id}")
        return True

    def _marker_key(self, user: User, code: str, text: str) -> str:
        return f"{user.id}_{code}_{text}"
