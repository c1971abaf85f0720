# odesa/crud/generated_crud.py
import hashlib
import json
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from odesa.crud.base import DESC, BaseRepository, storage_operation
from odesa.db.database import (
    AI_RECOMMENDATIONS,
    SOCIAL_MEDIA_PREVIEWS,
    STORY_PREFERENCES,
    TRAVEL_STORIES,
)
from odesa.models.generated import (
    RecommendationSet,
    SocialMediaPreview,
    StoryPreferences,
    StoryPreferencesIn,
    TravelStory,
)
from odesa.serialize import serialize_doc, utcnow


def fingerprint(params: Dict[str, Any]) -> str:
    """Stable hash of generation inputs; key order does not matter."""
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class SocialPreviewRepository(BaseRepository):
    collection_name = SOCIAL_MEDIA_PREVIEWS
    model = SocialMediaPreview

    @storage_operation("fetch social media preview")
    async def find_cached(self, postcard_id: str, params: Dict[str, Any]) -> Optional[SocialMediaPreview]:
        doc = await self.collection.find_one(
            {"postcardId": postcard_id, "fingerprint": fingerprint(params)}
        )
        return self._to_model(doc)

    @storage_operation("save social media preview")
    async def create(
        self,
        postcard_id: str,
        params: Dict[str, Any],
        captions: Dict[str, Any],
        user_id: Optional[str] = None,
    ) -> SocialMediaPreview:
        data = {
            "postcardId": postcard_id,
            "userId": user_id,
            "fingerprint": fingerprint(params),
            "params": params,
            **captions,
        }
        return await self._insert(data, timestamps=("generatedAt",))


class TravelStoryRepository(BaseRepository):
    collection_name = TRAVEL_STORIES
    model = TravelStory

    @storage_operation("fetch travel story")
    async def find_cached(self, user_id: str, params: Dict[str, Any]) -> Optional[TravelStory]:
        doc = await self.collection.find_one(
            {"userId": user_id, "fingerprint": fingerprint(params), "isSaved": False}
        )
        return self._to_model(doc)

    @storage_operation("save travel story")
    async def create(
        self,
        user_id: str,
        story: Dict[str, Any],
        params: Optional[Dict[str, Any]] = None,
        saved: bool = False,
    ) -> TravelStory:
        data = {
            **story,
            "userId": user_id,
            "fingerprint": fingerprint(params) if params is not None else None,
            "isSaved": saved,
        }
        return await self._insert(data, timestamps=("createdAt",))

    @storage_operation("list travel stories")
    async def list_saved(self, user_id: str, limit: int = 100) -> List[TravelStory]:
        return await self._find_many(
            {"userId": user_id, "isSaved": True}, sort=[("createdAt", DESC)], limit=limit
        )


class StoryPreferencesRepository(BaseRepository):
    collection_name = STORY_PREFERENCES
    model = StoryPreferences

    def _to_model(self, doc):
        if doc is None:
            return None
        data = serialize_doc(doc)
        data.pop("id", None)
        return StoryPreferences(**data)

    @storage_operation("fetch story preferences")
    async def get(self, user_id: str) -> StoryPreferences:
        doc = await self.collection.find_one({"userId": user_id})
        return self._to_model(doc) if doc else StoryPreferences(userId=user_id)

    @storage_operation("save story preferences")
    async def upsert(self, user_id: str, prefs: StoryPreferencesIn) -> StoryPreferences:
        doc = await self.collection.find_one_and_update(
            {"userId": user_id},
            {"$set": {**prefs.model_dump(), "updatedAt": utcnow()}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)


class RecommendationRepository(BaseRepository):
    collection_name = AI_RECOMMENDATIONS
    model = RecommendationSet

    @storage_operation("fetch recommendations")
    async def find_cached(self, user_id: str, params: Dict[str, Any]) -> Optional[RecommendationSet]:
        doc = await self.collection.find_one({"userId": user_id, "fingerprint": fingerprint(params)})
        return self._to_model(doc)

    @storage_operation("save recommendations")
    async def replace(
        self, user_id: str, params: Dict[str, Any], recommendations: List[Dict[str, Any]]
    ) -> RecommendationSet:
        """One cached set per user; a new set replaces whatever was there."""
        doc = await self.collection.find_one_and_update(
            {"userId": user_id},
            {"$set": {
                "fingerprint": fingerprint(params),
                "recommendations": recommendations,
                "generatedAt": utcnow(),
            }},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    @storage_operation("invalidate recommendations")
    async def invalidate(self, user_id: str) -> None:
        await self.collection.delete_many({"userId": user_id})
