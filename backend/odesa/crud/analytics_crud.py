from typing import List, Optional

from pymongo import ReturnDocument

from odesa.crud.base import DESC, BaseRepository, storage_operation
from odesa.db.database import ANALYTICS, NEWSLETTER_SUBSCRIBERS
from odesa.models.analytics import AnalyticsEvent, NewsletterSubscriber
from odesa.serialize import utcnow


class AnalyticsRepository(BaseRepository):
    collection_name = ANALYTICS
    model = AnalyticsEvent

    @storage_operation("track analytics event")
    async def track(
        self,
        event_type: str,
        postcard_id: str,
        user_id: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> AnalyticsEvent:
        data = {
            "eventType": event_type,
            "postcardId": postcard_id,
            "userId": user_id,
            "platform": platform,
        }
        return await self._insert(data, timestamps=("createdAt",))

    @storage_operation("list analytics")
    async def list_by_user(self, user_id: str, limit: int = 500) -> List[AnalyticsEvent]:
        return await self._find_many({"userId": user_id}, sort=[("createdAt", DESC)], limit=limit)


class NewsletterRepository(BaseRepository):
    collection_name = NEWSLETTER_SUBSCRIBERS
    model = NewsletterSubscriber

    @storage_operation("fetch newsletter subscriber")
    async def get(self, email: str) -> Optional[NewsletterSubscriber]:
        return self._to_model(await self.collection.find_one({"email": email}))

    @storage_operation("subscribe to newsletter")
    async def subscribe(self, email: str, source: Optional[str] = None) -> NewsletterSubscriber:
        doc = await self.collection.find_one_and_update(
            {"email": email},
            {"$setOnInsert": {"isActive": True, "source": source, "createdAt": utcnow()}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)
