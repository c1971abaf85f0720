# odesa/crud/postcard_crud.py
from typing import List, Optional

from pymongo import ReturnDocument

from odesa.core.exceptions import NotFound
from odesa.crud.base import DESC, BaseRepository, storage_operation
from odesa.db.database import POSTCARDS
from odesa.models.postcard import STAT_FIELDS, Postcard, PostcardCreate
from odesa.serialize import to_object_id, utcnow


class PostcardRepository(BaseRepository):
    collection_name = POSTCARDS
    model = Postcard

    @storage_operation("create postcard")
    async def create(self, postcard: PostcardCreate) -> Postcard:
        data = postcard.model_dump()
        data["downloadCount"] = 0
        data["shareCount"] = 0
        return await self._insert(data)

    @storage_operation("fetch postcard")
    async def get(self, postcard_id: str) -> Optional[Postcard]:
        return await self._find_by_id(postcard_id)

    @storage_operation("list postcards")
    async def list_by_user(self, user_id: str, limit: int = 200) -> List[Postcard]:
        return await self._find_many({"userId": user_id}, sort=[("createdAt", DESC)], limit=limit)

    @storage_operation("list public postcards")
    async def list_public(self, limit: int = 20) -> List[Postcard]:
        if limit <= 0:
            return []
        return await self._find_many({"isPublic": True}, sort=[("createdAt", DESC)], limit=limit)

    @storage_operation("update postcard stats")
    async def increment_stat(self, postcard_id: str, stat: str) -> None:
        """Atomic +1 on downloadCount/shareCount. The only write path for counters."""
        field = STAT_FIELDS[stat]
        oid = to_object_id(postcard_id)
        result = None
        if oid is not None:
            result = await self.collection.update_one(
                {"_id": oid},
                {"$inc": {field: 1}, "$set": {"updatedAt": utcnow()}},
            )
        if result is None or result.matched_count == 0:
            raise NotFound("Postcard not found")

    @storage_operation("update postcard visibility")
    async def set_visibility(self, postcard_id: str, is_public: bool) -> Postcard:
        oid = to_object_id(postcard_id)
        doc = None
        if oid is not None:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": {"isPublic": is_public, "updatedAt": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFound("Postcard not found")
        return self._to_model(doc)

    @storage_operation("count postcards")
    async def count(self) -> int:
        return await self._count()

    @storage_operation("summarize postcards")
    async def created_since(self, since) -> List[Postcard]:
        return await self._find_many({"createdAt": {"$gte": since}})
