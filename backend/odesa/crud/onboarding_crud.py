# odesa/crud/onboarding_crud.py
# Preferences, stats and achievements. Stats are only ever changed with
# $inc / $addToSet / $set on single fields so concurrent activity from the
# same user cannot overwrite itself.
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from odesa.crud.base import DESC, BaseRepository, storage_operation
from odesa.db.database import USER_ACHIEVEMENTS, USER_PREFERENCES, USER_STATS
from odesa.models.onboarding import PreferencesIn, UserAchievement, UserPreferences, UserStats
from odesa.serialize import serialize_doc, utcnow

STATS_DEFAULTS = {
    "totalPoints": 0,
    "postcardsCreated": 0,
    "postcardsSent": 0,
    "socialShares": 0,
    "landmarksVisited": [],
    "streakDays": 0,
    "badges": [],
}


class PreferencesRepository(BaseRepository):
    collection_name = USER_PREFERENCES
    model = UserPreferences

    @storage_operation("fetch user preferences")
    async def get(self, user_id: str) -> Optional[UserPreferences]:
        return self._to_model(await self.collection.find_one({"userId": user_id}))

    @storage_operation("save user preferences")
    async def upsert(
        self,
        user_id: str,
        prefs: PreferencesIn,
        completed: Optional[bool] = None,
        progress: Optional[int] = None,
    ) -> UserPreferences:
        now = utcnow()
        update_set = {**prefs.model_dump(), "updatedAt": now}
        on_insert = {"createdAt": now}
        if completed is not None:
            update_set["completedOnboarding"] = completed
        else:
            on_insert["completedOnboarding"] = False
        if progress is not None:
            update_set["onboardingProgress"] = progress
        else:
            on_insert["onboardingProgress"] = 0
        doc = await self.collection.find_one_and_update(
            {"userId": user_id},
            {"$set": update_set, "$setOnInsert": on_insert},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)


class StatsRepository(BaseRepository):
    collection_name = USER_STATS
    model = UserStats

    def _to_model(self, doc):
        if doc is None:
            return None
        data = serialize_doc(doc)
        data.pop("id", None)
        return UserStats(**data)

    async def _ensure(self, user_id: str, now: datetime) -> None:
        await self.collection.update_one(
            {"userId": user_id},
            {"$setOnInsert": {**STATS_DEFAULTS, "createdAt": now, "updatedAt": now}},
            upsert=True,
        )

    @storage_operation("fetch user stats")
    async def get(self, user_id: str) -> UserStats:
        doc = await self.collection.find_one({"userId": user_id})
        return self._to_model(doc) if doc else UserStats(userId=user_id)

    @storage_operation("update user stats")
    async def record_activity(
        self,
        user_id: str,
        inc: Optional[Dict[str, int]] = None,
        add_to_set: Optional[Dict[str, str]] = None,
        now: Optional[datetime] = None,
    ) -> UserStats:
        """
        Bump counters and keep the daily streak. The streak case is picked by
        the update filter (active yesterday / already today / otherwise), so
        each branch is a single atomic update.
        """
        now = now or utcnow()
        today = datetime(now.year, now.month, now.day)
        yesterday = today - timedelta(days=1)
        await self._ensure(user_id, now)

        def build(extra_inc=None, extra_set=None):
            update = {"$set": {"lastActivityDate": now, "updatedAt": now, **(extra_set or {})}}
            incs = {**(inc or {}), **(extra_inc or {})}
            if incs:
                update["$inc"] = incs
            if add_to_set:
                update["$addToSet"] = dict(add_to_set)
            return update

        result = await self.collection.update_one(
            {"userId": user_id, "lastActivityDate": {"$gte": yesterday, "$lt": today}},
            build(extra_inc={"streakDays": 1}),
        )
        if result.matched_count == 0:
            result = await self.collection.update_one(
                {"userId": user_id, "lastActivityDate": {"$gte": today}},
                build(),
            )
        if result.matched_count == 0:
            await self.collection.update_one(
                {"userId": user_id},
                build(extra_set={"streakDays": 1}),
            )
        return self._to_model(await self.collection.find_one({"userId": user_id}))

    @storage_operation("award points")
    async def add_points(self, user_id: str, points: int, badge: Optional[str] = None) -> None:
        now = utcnow()
        await self._ensure(user_id, now)
        update = {"$inc": {"totalPoints": points}, "$set": {"updatedAt": now}}
        if badge:
            update["$addToSet"] = {"badges": badge}
        await self.collection.update_one({"userId": user_id}, update)


class AchievementRepository(BaseRepository):
    collection_name = USER_ACHIEVEMENTS
    model = UserAchievement

    @storage_operation("unlock achievement")
    async def unlock(self, user_id: str, definition: dict) -> bool:
        """Record the achievement once per user; True only for the first unlock."""
        try:
            result = await self.collection.update_one(
                {"userId": user_id, "achievementId": definition["id"]},
                {"$setOnInsert": {
                    "achievementName": definition["name"],
                    "description": definition["description"],
                    "icon": definition["icon"],
                    "points": definition["points"],
                    "unlockedAt": utcnow(),
                }},
                upsert=True,
            )
        except DuplicateKeyError:
            return False
        return result.upserted_id is not None

    @storage_operation("list achievements")
    async def list_by_user(self, user_id: str) -> List[UserAchievement]:
        return await self._find_many({"userId": user_id}, sort=[("unlockedAt", DESC)])
