# odesa/service/gamification_service.py
import logging
from typing import List

from odesa.crud.storage import Storage
from odesa.models.onboarding import UserStats

logger = logging.getLogger(__name__)

POINTS_PER_POSTCARD = 5
POINTS_PER_SHARE = 2
ONBOARDING_POINTS = 50

ACHIEVEMENTS = [
    {
        "id": "welcome",
        "name": "Welcome to Odesa",
        "description": "Completed onboarding",
        "icon": "🌊",
        "points": 0,
        "check": lambda s: False,   # unlocked explicitly by onboarding
    },
    {
        "id": "first_postcard",
        "name": "First Steps",
        "description": "Created your first postcard",
        "icon": "🎯",
        "points": 10,
        "check": lambda s: s.postcardsCreated >= 1,
    },
    {
        "id": "social_sharer",
        "name": "Social Butterfly",
        "description": "Shared 5 postcards on social media",
        "icon": "📱",
        "points": 25,
        "check": lambda s: s.socialShares >= 5,
    },
    {
        "id": "explorer",
        "name": "Odesa Explorer",
        "description": "Visited 10 different landmarks",
        "icon": "🗺️",
        "points": 50,
        "check": lambda s: len(s.landmarksVisited) >= 10,
    },
    {
        "id": "weekly_streak",
        "name": "Weekly Warrior",
        "description": "Created postcards for 7 days in a row",
        "icon": "🔥",
        "points": 75,
        "check": lambda s: s.streakDays >= 7,
    },
    {
        "id": "collector",
        "name": "Postcard Collector",
        "description": "Created 25 postcards",
        "icon": "📮",
        "points": 100,
        "check": lambda s: s.postcardsCreated >= 25,
    },
    {
        "id": "ambassador",
        "name": "Odesa Ambassador",
        "description": "Sent 50 physical postcards",
        "icon": "👑",
        "points": 200,
        "check": lambda s: s.postcardsSent >= 50,
    },
]

ACHIEVEMENTS_BY_ID = {a["id"]: a for a in ACHIEVEMENTS}


class GamificationService:
    def __init__(self, storage: Storage):
        self.storage = storage

    async def _unlock(self, user_id: str, definition: dict) -> bool:
        if not await self.storage.achievements.unlock(user_id, definition):
            return False
        await self.storage.stats.add_points(user_id, definition["points"], badge=definition["id"])
        logger.info("Achievement %s unlocked for %s", definition["id"], user_id)
        return True

    async def evaluate(self, user_id: str, stats: UserStats) -> List[str]:
        unlocked = []
        for definition in ACHIEVEMENTS:
            if definition["id"] in stats.badges or not definition["check"](stats):
                continue
            if await self._unlock(user_id, definition):
                unlocked.append(definition["id"])
        return unlocked

    async def postcard_created(self, user_id: str, location_id: str = None) -> List[str]:
        stats = await self.storage.stats.record_activity(
            user_id,
            inc={"postcardsCreated": 1, "totalPoints": POINTS_PER_POSTCARD},
            add_to_set={"landmarksVisited": location_id} if location_id else None,
        )
        return await self.evaluate(user_id, stats)

    async def postcard_shared(self, user_id: str) -> List[str]:
        stats = await self.storage.stats.record_activity(
            user_id, inc={"socialShares": 1, "totalPoints": POINTS_PER_SHARE}
        )
        return await self.evaluate(user_id, stats)

    async def order_placed(self, user_id: str, quantity: int) -> List[str]:
        stats = await self.storage.stats.record_activity(user_id, inc={"postcardsSent": quantity})
        return await self.evaluate(user_id, stats)

    async def onboarding_completed(self, user_id: str) -> int:
        """Returns the points earned (0 if onboarding was already rewarded)."""
        if not await self._unlock(user_id, ACHIEVEMENTS_BY_ID["welcome"]):
            return 0
        await self.storage.stats.add_points(user_id, ONBOARDING_POINTS)
        return ONBOARDING_POINTS
