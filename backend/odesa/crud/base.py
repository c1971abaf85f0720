# odesa/crud/base.py
import functools
import logging
from typing import Any, List, Optional, Sequence, Tuple, Type

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from odesa.core.exceptions import StorageError
from odesa.serialize import serialize_doc, to_object_id, utcnow

logger = logging.getLogger(__name__)

ASC = 1
DESC = -1


def storage_operation(action: str):
    """
    Turn driver failures into a StorageError named after the operation.
    Domain errors raised inside the wrapped call pass through untouched.
    """
    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except PyMongoError as e:
                logger.error("Failed to %s: %s", action, e)
                raise StorageError(f"Failed to {action}") from e
        return wrapper
    return decorator


class BaseRepository:
    collection_name: str
    model: Type[BaseModel]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[self.collection_name]

    def _to_model(self, doc: Optional[dict]):
        if doc is None:
            return None
        return self.model(**serialize_doc(doc))

    async def _insert(self, data: dict, timestamps: Sequence[str] = ("createdAt", "updatedAt")):
        now = utcnow()
        doc = {**data}
        for field in timestamps:
            doc[field] = now
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._to_model(doc)

    async def _find_by_id(self, id: str):
        oid = to_object_id(id)
        if oid is None:
            return None
        return self._to_model(await self.collection.find_one({"_id": oid}))

    async def _find_many(
        self,
        query: dict,
        sort: Optional[List[Tuple[str, int]]] = None,
        limit: Optional[int] = None,
    ) -> List[Any]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=limit)
        return [self._to_model(d) for d in docs]

    async def _count(self, query: Optional[dict] = None) -> int:
        return await self.collection.count_documents(query or {})
