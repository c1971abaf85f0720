from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from odesa.core.exceptions import Conflict
from odesa.crud.base import ASC, BaseRepository, storage_operation
from odesa.db.database import SUBSCRIPTION_PLANS
from odesa.models.subscription import SubscriptionPlan
from odesa.serialize import utcnow


class SubscriptionPlanRepository(BaseRepository):
    collection_name = SUBSCRIPTION_PLANS
    model = SubscriptionPlan

    @storage_operation("create subscription plan")
    async def create(self, plan: SubscriptionPlan) -> SubscriptionPlan:
        if await self.collection.find_one({"id": plan.id}):
            raise Conflict(f"Subscription plan '{plan.id}' already exists")
        try:
            return await self._insert(plan.model_dump(exclude={"createdAt"}), timestamps=("createdAt",))
        except DuplicateKeyError:
            raise Conflict(f"Subscription plan '{plan.id}' already exists")

    @storage_operation("fetch subscription plan")
    async def get(self, plan_id: str) -> Optional[SubscriptionPlan]:
        return self._to_model(await self.collection.find_one({"id": plan_id}))

    @storage_operation("list subscription plans")
    async def list(self) -> List[SubscriptionPlan]:
        return await self._find_many({}, sort=[("monthlyPrice", ASC)])

    @storage_operation("seed subscription plan")
    async def ensure(self, plan: SubscriptionPlan) -> bool:
        """Insert the plan unless one with the same id exists."""
        data = plan.model_dump(exclude={"createdAt"})
        result = await self.collection.update_one(
            {"id": plan.id},
            {"$setOnInsert": {**data, "createdAt": utcnow()}},
            upsert=True,
        )
        return result.upserted_id is not None
