"""User service - registered users and their flow state."""
import logging
from datetime import datetime, timezone
from typing import Optional

from redis.exceptions import RedisError

from daygoals.cache import Cache
from daygoals.models.user import FlowState, User, UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """Directory of registered users."""

    def __init__(self, db, cache: Cache):
        """Initialize service with database connection and cache."""
        self.db = db
        self.cache = cache
        self.users = db["users"]

    def _key(self, user_id: int) -> str:
        return f"user_{user_id}"

    async def register_user(self, user_create: UserCreate) -> User:
        """
        Register a new user.

        Args:
            user_create: Profile with the resolved timezone

        Returns:
            Created user in the menu flow

        Raises:
            ValueError: If the user is already registered
        """
        existing = await self.users.find_one({"_id": user_create.id})
        if existing:
            raise ValueError("User already registered")

        user_doc = {
            "_id": user_create.id,
            "first_name": user_create.first_name,
            "last_name": user_create.last_name,
            "city": user_create.city,
            "timezone": user_create.timezone,
            "active": True,
            "state": FlowState.MENU.value,
            "created_at": datetime.now(timezone.utc),
        }
        await self.users.insert_one(user_doc)
        logger.info(f"Registered user {user_create.id} ({user_create.timezone})")

        return User.model_validate(user_doc)

    async def get_user(self, user_id: int) -> Optional[User]:
        """
        Get a user by id, or None.

        Served from the cache when possible; cache failures fall back to the
        database.
        """
        try:
            cached = await self.cache.get(self._key(user_id))
        except RedisError as e:
            logger.warning(f"User cache read failed: {e}")
            cached = None

        if cached is not None:
            return User.model_validate_json(cached)

        doc = await self.users.find_one({"_id": user_id})
        if not doc:
            return None

        user = User.model_validate(doc)
        try:
            await self.cache.set(self._key(user_id), user.model_dump_json(by_alias=True))
        except RedisError as e:
            logger.warning(f"User cache write failed: {e}")

        return user

    async def list_users(self) -> list[User]:
        """List all users ordered by id."""
        cursor = self.users.find({}).sort("_id", 1)
        docs = await cursor.to_list(length=None)
        return [User.model_validate(doc) for doc in docs]

    async def update_state(self, user_id: int, state: FlowState) -> None:
        """Move a user to another conversation flow."""
        await self.users.update_one(
            {"_id": user_id},
            {"$set": {"state": state.value}},
        )

        try:
            await self.cache.delete(self._key(user_id))
        except RedisError as e:
            logger.warning(f"User cache invalidation failed: {e}")
