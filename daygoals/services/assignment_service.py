"""Assignment service - binds goals to users for a local day."""
import logging
from datetime import date, datetime
from typing import Optional, Union

from bson import ObjectId
from bson.errors import InvalidId

from daygoals.models.goal import Goal, GoalCreate
from daygoals.models.user import User
from daygoals.models.user_goal import Phase, Status, UserGoal
from daygoals.services.catalog_service import CatalogService
from daygoals.utils.timewindow import DayWindow, window_for

logger = logging.getLogger(__name__)

When = Union[date, datetime]


class AssignmentService:
    """
    Service for per-day goal bindings.

    A day is the user's local window from 06:00 to 05:59:59 next morning.
    Each (user, goal type, day) has at most one binding; assigning again
    replaces the goal of the existing binding.
    """

    def __init__(self, db, catalog: CatalogService):
        """Initialize service with database connection and catalog."""
        self.db = db
        self.catalog = catalog
        self.user_goals = db["user_goals"]

    def _doc_to_user_goal(self, doc: dict) -> UserGoal:
        return UserGoal(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            goal_id=doc["goal_id"],
            type=doc["type"],
            phase=doc["phase"],
            status=doc["status"],
            starts_at=doc["starts_at"],
            ends_at=doc["ends_at"],
        )

    def _day_query(self, user: User, window: DayWindow) -> dict:
        # A day is keyed by its exact start; windows of 23h days overlap the next one
        return {"user_id": user.id, "starts_at": window.start}

    async def assign_goal(self, user: User, goal: Goal, when: When) -> UserGoal:
        """
        Assign a goal to the user for the day of when.

        Args:
            user: Owner of the binding
            goal: Goal to bind; persisted first if it has no known id
            when: Local date, or an aware instant inside the day

        Returns:
            The existing binding with its goal replaced, or a new binding
            in the planning phase
        """
        if goal.id is None or not await self.catalog.goal_exists(goal.id):
            goal = await self.catalog.create_goal(
                GoalCreate(type=goal.type, description=goal.description)
            )

        window = window_for(user.timezone, when)
        existing = await self._find_by_type(user, window, goal.type)

        if existing:
            # Phase and status are kept so an active slot keeps its progress
            await self.user_goals.update_one(
                {"_id": ObjectId(existing.id)},
                {"$set": {"goal_id": goal.id}},
            )
            logger.info(f"Replaced goal of binding {existing.id} with {goal.id}")
            return existing.model_copy(update={"goal_id": goal.id})

        user_goal_doc = {
            "user_id": user.id,
            "goal_id": goal.id,
            "type": goal.type,
            "phase": Phase.PLANNING.value,
            "status": Status.SOON.value,
            "starts_at": window.start,
            "ends_at": window.end,
        }
        result = await self.user_goals.insert_one(user_goal_doc)
        user_goal_doc["_id"] = result.inserted_id
        logger.info(
            f"Created binding {result.inserted_id} for user {user.id}, "
            f"type {goal.type}, from {window.start.isoformat()}"
        )

        return self._doc_to_user_goal(user_goal_doc)

    async def set_status(self, user: User, when: When, goal_type: int) -> None:
        """
        Toggle completion of the user's binding for a category and day.

        A complete binding goes back to in progress, anything else becomes
        complete.
        """
        for user_goal in await self.user_goals_for_day(user, when):
            if user_goal.type != goal_type:
                continue

            status = Status.COMPLETE
            if user_goal.status == Status.COMPLETE:
                status = Status.IN_PROGRESS

            await self.user_goals.update_one(
                {"_id": ObjectId(user_goal.id)},
                {"$set": {"status": status.value}},
            )

    async def reject_goal(self, user_goal_id: str) -> dict:
        """
        Hard delete a binding.

        Returns:
            Dictionary with deleted_count

        Raises:
            ValueError: If the id is malformed
        """
        try:
            object_id = ObjectId(user_goal_id)
        except (InvalidId, TypeError):
            raise ValueError("Invalid user goal ID format")

        result = await self.user_goals.delete_one({"_id": object_id})
        return {"deleted_count": result.deleted_count}

    async def check_date(self, user: User, when: When) -> bool:
        """True iff every goal type has a binding on the day."""
        types = await self.catalog.list_types()
        covered = {user_goal.type for user_goal in await self.user_goals_for_day(user, when)}
        return all(goal_type.id in covered for goal_type in types)

    async def get(self, user_goal_id: str) -> Optional[UserGoal]:
        """Get a binding by id, or None."""
        try:
            object_id = ObjectId(user_goal_id)
        except (InvalidId, TypeError):
            return None

        doc = await self.user_goals.find_one({"_id": object_id})
        if not doc:
            return None
        return self._doc_to_user_goal(doc)

    async def get_by_type(self, user: User, when: When, goal_type: int) -> Optional[UserGoal]:
        """The user's binding for a category on the day, or None."""
        return await self._find_by_type(user, window_for(user.timezone, when), goal_type)

    async def user_goals_for_day(self, user: User, when: When) -> list[UserGoal]:
        """All bindings of the user on the day."""
        window = window_for(user.timezone, when)
        cursor = self.user_goals.find(self._day_query(user, window))
        docs = await cursor.to_list(length=None)
        return [self._doc_to_user_goal(doc) for doc in docs]

    async def count_for_day(self, user: User, when: When) -> int:
        window = window_for(user.timezone, when)
        return await self.user_goals.count_documents(self._day_query(user, window))

    async def _find_by_type(self, user: User, window: DayWindow, goal_type: int) -> Optional[UserGoal]:
        query = self._day_query(user, window)
        query["type"] = goal_type
        doc = await self.user_goals.find_one(query)
        if not doc:
            return None
        return self._doc_to_user_goal(doc)
