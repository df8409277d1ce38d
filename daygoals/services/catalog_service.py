"""Catalog service - goal types and goals."""
import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from redis.exceptions import RedisError

from daygoals.cache import Cache
from daygoals.models.goal import Goal, GoalCreate
from daygoals.models.goal_type import GoalType

logger = logging.getLogger(__name__)

TYPE_LIST_KEY = "goal_type_list"


class CatalogService:
    """Read-mostly catalog of goal types and goals."""

    def __init__(self, db, cache: Cache):
        """Initialize service with database connection and cache."""
        self.db = db
        self.cache = cache
        self.goal_types = db["goal_types"]
        self.goals = db["goals"]

    def _doc_to_goal(self, doc: dict) -> Goal:
        return Goal(
            _id=str(doc["_id"]),
            type=doc["type"],
            description=doc["description"],
        )

    def _type_key(self, type_id: int) -> str:
        return f"goal_type_{type_id}"

    async def list_types(self) -> list[GoalType]:
        """
        List all goal types ordered by id.

        Served from the cache when possible. A cache failure is logged and
        the list is read from the database instead.
        """
        try:
            cached = await self.cache.get_json(TYPE_LIST_KEY)
        except (RedisError, ValueError) as e:
            logger.warning(f"Goal type cache read failed: {e}")
            cached = None

        if cached is not None:
            return [GoalType.model_validate(item) for item in cached]

        cursor = self.goal_types.find({}).sort("_id", 1)
        docs = await cursor.to_list(length=None)
        types = [GoalType.model_validate(doc) for doc in docs]

        try:
            await self.cache.set_json(
                TYPE_LIST_KEY, [t.model_dump(by_alias=True) for t in types]
            )
        except RedisError as e:
            logger.warning(f"Goal type cache write failed: {e}")

        return types

    async def get_type(self, type_id: int) -> Optional[GoalType]:
        """Get a goal type by id, or None."""
        try:
            cached = await self.cache.get_json(self._type_key(type_id))
        except (RedisError, ValueError) as e:
            logger.warning(f"Goal type cache read failed: {e}")
            cached = None

        if cached is not None:
            return GoalType.model_validate(cached)

        doc = await self.goal_types.find_one({"_id": type_id})
        if not doc:
            return None

        goal_type = GoalType.model_validate(doc)
        try:
            await self.cache.set_json(
                self._type_key(type_id), goal_type.model_dump(by_alias=True)
            )
        except RedisError as e:
            logger.warning(f"Goal type cache write failed: {e}")

        return goal_type

    async def list_goals(self, type_id: int) -> list[Goal]:
        """List catalog goals of one category."""
        cursor = self.goals.find({"type": type_id})
        docs = await cursor.to_list(length=None)
        return [self._doc_to_goal(doc) for doc in docs]

    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        """Get a goal by id, or None."""
        doc = await self.goals.find_one({"_id": self._goal_key(goal_id)})
        if not doc:
            return None
        return self._doc_to_goal(doc)

    async def goal_exists(self, goal_id: str) -> bool:
        doc = await self.goals.find_one({"_id": self._goal_key(goal_id)}, {"_id": 1})
        return doc is not None

    async def create_goal(self, goal_create: GoalCreate) -> Goal:
        """
        Persist a new goal.

        Args:
            goal_create: Category and description

        Returns:
            Created goal with its id
        """
        goal_doc = {
            "type": goal_create.type,
            "description": goal_create.description,
        }
        result = await self.goals.insert_one(goal_doc)
        goal_doc["_id"] = result.inserted_id
        return self._doc_to_goal(goal_doc)

    def _goal_key(self, goal_id: str):
        # Seeded catalog goals keep readable string ids, created ones are ObjectIds
        try:
            return ObjectId(goal_id)
        except (InvalidId, TypeError):
            return goal_id
