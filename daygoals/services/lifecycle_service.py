"""Lifecycle service - advances binding phase and status over time."""
import logging

from daygoals.background import PeriodicTask
from daygoals.models.user_goal import Phase, Status
from daygoals.utils.timewindow import Clock, utc_now

logger = logging.getLogger(__name__)


class LifecycleObserver(PeriodicTask):
    """
    Periodic sweep over all planning and active bindings.

    Transitions are derived from stored state and the current time only, so
    running a sweep twice in a row changes nothing the second time.
    """

    name = "lifecycle-observer"

    def __init__(self, db, interval: float = 3600, clock: Clock = utc_now):
        """Initialize observer with database connection."""
        super().__init__(interval)
        self.db = db
        self.user_goals = db["user_goals"]
        self._clock = clock

    async def run_once(self) -> None:
        await self.sweep()

    async def sweep(self) -> dict:
        """
        Run one full sweep.

        Returns:
            Dictionary with activated and finished counts
        """
        activated = await self.update_planning()
        finished = await self.update_active()
        if activated or finished:
            logger.info(f"Sweep activated {activated}, finished {finished} bindings")
        return {"activated": activated, "finished": finished}

    async def update_planning(self) -> int:
        """Activate planning bindings whose window has started."""
        now = self._clock()
        cursor = self.user_goals.find({"phase": Phase.PLANNING.value})
        docs = await cursor.to_list(length=None)

        updated = 0
        for doc in docs:
            if now < doc["starts_at"]:
                continue

            try:
                await self.user_goals.update_one(
                    {"_id": doc["_id"]},
                    {"$set": {
                        "phase": Phase.ACTIVE.value,
                        "status": Status.IN_PROGRESS.value,
                    }},
                )
            except Exception:
                logger.exception(f"Failed to activate binding {doc['_id']}")
                continue
            updated += 1

        return updated

    async def update_active(self) -> int:
        """Finish active bindings whose window has ended.

        A binding still in progress at the end of its day has failed.
        """
        now = self._clock()
        cursor = self.user_goals.find({"phase": Phase.ACTIVE.value})
        docs = await cursor.to_list(length=None)

        updated = 0
        for doc in docs:
            if now < doc["ends_at"]:
                continue

            changes = {"phase": Phase.FINISHED.value}
            if doc["status"] == Status.IN_PROGRESS.value:
                changes["status"] = Status.FAILED.value

            try:
                await self.user_goals.update_one(
                    {"_id": doc["_id"]},
                    {"$set": changes},
                )
            except Exception:
                logger.exception(f"Failed to finish binding {doc['_id']}")
                continue
            updated += 1

        return updated
