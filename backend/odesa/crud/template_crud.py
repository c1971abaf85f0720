# odesa/crud/template_crud.py
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from odesa.core.exceptions import Conflict, NotFound
from odesa.crud.base import ASC, DESC, BaseRepository, storage_operation
from odesa.db.database import TEMPLATES
from odesa.models.template import Template, TemplateCreate, TemplateUpdate
from odesa.serialize import utcnow


class TemplateRepository(BaseRepository):
    collection_name = TEMPLATES
    model = Template

    # Create template
    @storage_operation("create template")
    async def create(self, template: TemplateCreate) -> Template:
        if await self.collection.find_one({"id": template.id}):
            raise Conflict(f"Template '{template.id}' already exists")
        data = template.model_dump()
        data["usageCount"] = 0
        try:
            return await self._insert(data)
        except DuplicateKeyError:
            raise Conflict(f"Template '{template.id}' already exists")

    # Get template by its stable string id
    @storage_operation("fetch template")
    async def get(self, template_id: str) -> Optional[Template]:
        return self._to_model(await self.collection.find_one({"id": template_id}))

    # All templates, alphabetical
    @storage_operation("list templates")
    async def list(self, category: Optional[str] = None) -> List[Template]:
        query = {"category": category} if category else {}
        return await self._find_many(query, sort=[("name", ASC)])

    @storage_operation("list popular templates")
    async def list_popular(self, limit: int = 10) -> List[Template]:
        return await self._find_many({}, sort=[("usageCount", DESC), ("name", ASC)], limit=limit)

    @storage_operation("update template")
    async def update(self, template_id: str, changes: TemplateUpdate) -> Template:
        update_data = changes.model_dump(exclude_unset=True, exclude_none=True)
        update_data["updatedAt"] = utcnow()
        doc = await self.collection.find_one_and_update(
            {"id": template_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFound("Template not found")
        return self._to_model(doc)

    @storage_operation("delete template")
    async def delete(self, template_id: str) -> None:
        result = await self.collection.delete_one({"id": template_id})
        if result.deleted_count == 0:
            raise NotFound("Template not found")

    @storage_operation("update template usage")
    async def increment_usage(self, template_id: str) -> None:
        await self.collection.update_one({"id": template_id}, {"$inc": {"usageCount": 1}})

    @storage_operation("seed template")
    async def ensure(self, template: TemplateCreate) -> bool:
        """Insert if missing; returns True when a new template was written."""
        now = utcnow()
        result = await self.collection.update_one(
            {"id": template.id},
            {"$setOnInsert": {**template.model_dump(), "usageCount": 0, "createdAt": now, "updatedAt": now}},
            upsert=True,
        )
        return result.upserted_id is not None

    @storage_operation("count templates")
    async def count(self) -> int:
        return await self._count()
