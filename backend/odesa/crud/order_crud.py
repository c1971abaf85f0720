# odesa/crud/order_crud.py
from datetime import datetime
from typing import Dict, List, Optional

from pymongo import ReturnDocument

from odesa.core.exceptions import Conflict, NotFound
from odesa.crud.base import DESC, BaseRepository, storage_operation
from odesa.db.database import ORDERS
from odesa.models.order import (
    COMPLETED,
    ORDER_STATUSES,
    PENDING,
    PROCESSING,
    Order,
    OrderCreate,
    allowed_sources,
)
from odesa.serialize import to_object_id, utcnow

REVENUE_STATUSES = (PROCESSING, COMPLETED)


class OrderRepository(BaseRepository):
    collection_name = ORDERS
    model = Order

    @storage_operation("create order")
    async def create(self, order: OrderCreate) -> Order:
        data = order.model_dump()
        data["totalAmount"] = round(order.quantity * order.unitPrice, 2)
        data["status"] = PENDING
        data["stripePaymentIntentId"] = None
        return await self._insert(data)

    @storage_operation("fetch order")
    async def get(self, order_id: str) -> Optional[Order]:
        return await self._find_by_id(order_id)

    @storage_operation("list orders")
    async def list_by_user(self, user_id: str, limit: int = 200) -> List[Order]:
        return await self._find_many({"userId": user_id}, sort=[("createdAt", DESC)], limit=limit)

    @storage_operation("update order status")
    async def update_status(
        self, order_id: str, status: str, payment_intent_id: Optional[str] = None
    ) -> Order:
        """
        Move an order forward. The allowed source statuses go into the
        update filter, so a concurrent writer can never drag an order back.
        """
        if status not in ORDER_STATUSES:
            raise Conflict(f"Unknown order status '{status}'")
        oid = to_object_id(order_id)
        if oid is None:
            raise NotFound("Order not found")

        update = {"status": status, "updatedAt": utcnow()}
        if payment_intent_id:
            update["stripePaymentIntentId"] = payment_intent_id

        doc = await self.collection.find_one_and_update(
            {"_id": oid, "status": {"$in": allowed_sources(status)}},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
        if doc is not None:
            return self._to_model(doc)

        current = await self.collection.find_one({"_id": oid}, {"status": 1})
        if current is None:
            raise NotFound("Order not found")
        raise Conflict(f"Cannot move order from '{current['status']}' to '{status}'")

    @storage_operation("claim order for payment")
    async def claim_for_payment(self, order_id: str) -> Order:
        """Reserve a pending order so only one payment intent is created for it."""
        oid = to_object_id(order_id)
        if oid is None:
            raise NotFound("Order not found")
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "status": PENDING, "paymentClaimedAt": None},
            {"$set": {"paymentClaimedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is not None:
            return self._to_model(doc)

        current = await self.collection.find_one({"_id": oid}, {"status": 1})
        if current is None:
            raise NotFound("Order not found")
        if current["status"] == PENDING:
            raise Conflict("A payment is already being created for this order")
        raise Conflict(f"Order is already {current['status']}")

    @storage_operation("release order payment claim")
    async def release_payment_claim(self, order_id: str) -> None:
        oid = to_object_id(order_id)
        if oid is not None:
            await self.collection.update_one(
                {"_id": oid, "status": PENDING}, {"$set": {"paymentClaimedAt": None}}
            )

    @storage_operation("summarize revenue")
    async def revenue_since(self, since: datetime) -> float:
        orders = await self._find_many(
            {"createdAt": {"$gte": since}, "status": {"$in": list(REVENUE_STATUSES)}}
        )
        return round(sum(o.totalAmount for o in orders), 2)

    @storage_operation("summarize orders")
    async def monthly_summary(self, since: datetime) -> Dict[str, Dict[str, float]]:
        """Order count and revenue per YYYY-MM for orders placed since `since`."""
        summary: Dict[str, Dict[str, float]] = {}
        for order in await self._find_many({"createdAt": {"$gte": since}}):
            point = summary.setdefault(order.createdAt.strftime("%Y-%m"), {"orders": 0, "revenue": 0.0})
            point["orders"] += 1
            if order.status in REVENUE_STATUSES:
                point["revenue"] = round(point["revenue"] + order.totalAmount, 2)
        return summary

    @storage_operation("count orders")
    async def count(self) -> int:
        return await self._count()
