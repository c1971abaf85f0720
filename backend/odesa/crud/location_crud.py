from typing import List, Optional

from odesa.crud.base import ASC, BaseRepository, storage_operation
from odesa.db.database import LOCATIONS
from odesa.models.location import Location, LocationCreate


class LocationRepository(BaseRepository):
    collection_name = LOCATIONS
    model = Location

    @storage_operation("create location")
    async def create(self, location: LocationCreate) -> Location:
        return await self._insert(location.model_dump())

    @storage_operation("fetch location")
    async def get(self, location_id: str) -> Optional[Location]:
        return await self._find_by_id(location_id)

    @storage_operation("list locations")
    async def list(self, category: Optional[str] = None) -> List[Location]:
        query = {"category": category} if category else {}
        return await self._find_many(query, sort=[("name", ASC)])

    @storage_operation("list popular locations")
    async def list_popular(self, limit: int = 10) -> List[Location]:
        return await self._find_many({"isPopular": True}, sort=[("name", ASC)], limit=limit)

    @storage_operation("count locations")
    async def count(self) -> int:
        return await self._count()
