from datetime import datetime
from typing import List, Optional

from odesa.crud.base import ASC, BaseRepository, storage_operation
from odesa.db.database import EVENTS
from odesa.models.event import Event, EventCreate
from odesa.serialize import utcnow


class EventRepository(BaseRepository):
    collection_name = EVENTS
    model = Event

    @storage_operation("create event")
    async def create(self, event: EventCreate) -> Event:
        return await self._insert(event.model_dump())

    @storage_operation("fetch event")
    async def get(self, event_id: str) -> Optional[Event]:
        return await self._find_by_id(event_id)

    @storage_operation("list events")
    async def list(
        self,
        category: Optional[str] = None,
        location_id: Optional[str] = None,
        starts_after: Optional[datetime] = None,
        starts_before: Optional[datetime] = None,
    ) -> List[Event]:
        query = {"isActive": True}
        if category:
            query["category"] = category
        if location_id:
            query["locationId"] = location_id
        date_range = {}
        if starts_after:
            date_range["$gte"] = starts_after
        if starts_before:
            date_range["$lte"] = starts_before
        if date_range:
            query["startDate"] = date_range
        return await self._find_many(query, sort=[("startDate", ASC)])

    @storage_operation("list upcoming events")
    async def list_upcoming(self, limit: int = 10) -> List[Event]:
        return await self._find_many(
            {"isActive": True, "startDate": {"$gte": utcnow()}},
            sort=[("startDate", ASC)],
            limit=limit,
        )

    @storage_operation("count events")
    async def count(self) -> int:
        return await self._count()
