# odesa/db/database.py
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from odesa.core.config import Settings

logger = logging.getLogger(__name__)

# Collection names
USERS = "users"
POSTCARDS = "postcards"
TEMPLATES = "templates"
EVENTS = "events"
LOCATIONS = "locations"
ORDERS = "orders"
SUBSCRIPTION_PLANS = "subscriptionPlans"
USER_PREFERENCES = "userPreferences"
USER_STATS = "userStats"
USER_ACHIEVEMENTS = "userAchievements"
SOCIAL_MEDIA_PREVIEWS = "socialMediaPreviews"
TRAVEL_STORIES = "travelStories"
STORY_PREFERENCES = "storyPreferences"
AI_RECOMMENDATIONS = "aiRecommendations"
ANALYTICS = "analytics"
NEWSLETTER_SUBSCRIBERS = "newsletterSubscribers"


class Database:
    """
    Owns the one client to the document store. Created by the app lifespan
    and handed to the repositories; nothing else opens connections.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncIOMotorClient] = None):
        self.settings = settings
        self._client = client
        self._db: Optional[AsyncIOMotorDatabase] = None
        if client is not None:
            self._db = client[settings.MONGODB_DB_NAME]

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise RuntimeError("Database not initialized. Call connect() first.")
        return self._db

    async def connect(self) -> AsyncIOMotorDatabase:
        if self._db is not None:
            return self._db

        uri = self.settings.MONGODB_URI
        if not uri:
            raise RuntimeError("MONGODB_URI environment variable is not set")

        self._client = AsyncIOMotorClient(
            uri, serverSelectionTimeoutMS=self.settings.DB_CONNECT_TIMEOUT_MS
        )
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.settings.DB_CONNECT_ATTEMPTS),
                wait=wait_exponential(multiplier=0.5, max=8),
                retry=retry_if_exception_type(PyMongoError),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    await self._client.admin.command("ping")
        except PyMongoError:
            logger.error("❌ MongoDB connection failed after %s attempts", self.settings.DB_CONNECT_ATTEMPTS)
            self._client.close()
            self._client = None
            raise

        self._db = self._client[self.settings.MONGODB_DB_NAME]
        logger.info("✅ MongoDB connected successfully (%s)", self.settings.MONGODB_DB_NAME)
        return self._db

    async def ping(self) -> bool:
        await self._client.admin.command("ping")
        return True

    async def ensure_indexes(self) -> None:
        db = self.db
        await db[USERS].create_index("email", unique=True)
        await db[USERS].create_index("referralCode", unique=True, sparse=True)
        await db[USERS].create_index("resetToken", sparse=True)
        await db[POSTCARDS].create_index([("userId", ASCENDING), ("createdAt", ASCENDING)])
        await db[POSTCARDS].create_index([("isPublic", ASCENDING), ("createdAt", ASCENDING)])
        await db[TEMPLATES].create_index("id", unique=True)
        await db[EVENTS].create_index([("isActive", ASCENDING), ("startDate", ASCENDING)])
        await db[ORDERS].create_index("userId")
        await db[SUBSCRIPTION_PLANS].create_index("id", unique=True)
        await db[USER_PREFERENCES].create_index("userId", unique=True)
        await db[USER_STATS].create_index("userId", unique=True)
        await db[STORY_PREFERENCES].create_index("userId", unique=True)
        await db[USER_ACHIEVEMENTS].create_index(
            [("userId", ASCENDING), ("achievementId", ASCENDING)], unique=True
        )
        await db[NEWSLETTER_SUBSCRIBERS].create_index("email", unique=True)
        await db[SOCIAL_MEDIA_PREVIEWS].create_index([("postcardId", ASCENDING), ("fingerprint", ASCENDING)])
        await db[TRAVEL_STORIES].create_index([("userId", ASCENDING), ("fingerprint", ASCENDING)])
        await db[AI_RECOMMENDATIONS].create_index("userId")

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("Disconnected from MongoDB")
        self._client = None
        self._db = None
