# async mongodb client for the backend api
# uses motor for non-blocking operations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """async mongodb connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """establish connection to mongodb"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        # tz_aware so stored timestamps come back as utc datetimes
        self.client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
        self.db = self.client[settings.MONGODB_DATABASE]

        # verify connection
        await self.client.admin.command("ping")
        logger.info("MongoDB connection established")

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    async def ensure_indexes(self):
        """create the indexes the api queries rely on, safe to run repeatedly"""
        await self.users.create_index("email", unique=True)
        # per-user feeds are read newest first
        for collection, field in (
            (self.mood_entries, "timestamp"),
            (self.journal_entries, "timestamp"),
            (self.chat_sessions, "start_time"),
            (self.wellness_sessions, "start_time"),
        ):
            await collection.create_index([("user_id", 1), (field, -1)])
        await self.chat_messages.create_index([("session_id", 1), ("timestamp", 1)])
        await self.coping_strategies.create_index("type")
        await self.coping_strategies.create_index([("rating", -1)])
        logger.info("MongoDB indexes ensured")

    # collection accessors

    @property
    def users(self):
        return self.db["users"]

    @property
    def mood_entries(self):
        return self.db["mood_entries"]

    @property
    def journal_entries(self):
        return self.db["journal_entries"]

    @property
    def chat_sessions(self):
        return self.db["chat_sessions"]

    @property
    def chat_messages(self):
        return self.db["chat_messages"]

    @property
    def coping_strategies(self):
        return self.db["coping_strategies"]

    @property
    def wellness_sessions(self):
        return self.db["wellness_sessions"]


# singleton instance
db = Database()


async def get_db() -> Database:
    """dependency injection for database access"""
    return db
