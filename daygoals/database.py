"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from daygoals.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: AsyncIOMotorClient | None = None
        self.db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure the unique indexes exist."""
        # tz_aware so binding windows come back as UTC-aware datetimes
        self.client = AsyncIOMotorClient(self.settings.mongodb_url, tz_aware=True)
        self.db = self.client[self.settings.mongodb_db_name]
        await self.db["pending_ratings"].create_index("user_id", unique=True)
        await self.db["user_goals"].create_index(
            [("user_id", 1), ("type", 1), ("starts_at", 1)],
            unique=True,
        )
        await self.db["user_goals"].create_index("phase")
        logger.info(f"Connected to MongoDB: {self.settings.mongodb_db_name}")

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]
