# odesa/models/order.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"
CANCELLED = "cancelled"

ORDER_STATUSES = (PENDING, PROCESSING, COMPLETED, FAILED, CANCELLED)

# status -> statuses it may move to; anything absent is terminal
ORDER_TRANSITIONS = {
    PENDING: (PROCESSING, CANCELLED, FAILED),
    PROCESSING: (COMPLETED, CANCELLED, FAILED),
}


def allowed_sources(target: str):
    """Statuses from which `target` can be reached."""
    return [src for src, targets in ORDER_TRANSITIONS.items() if target in targets]


class OrderCreate(BaseModel):
    userId: str
    postcardId: str
    quantity: int = Field(..., ge=1, le=1000)
    unitPrice: float = Field(..., gt=0)
    shippingAddress: str = Field(..., min_length=1)


class Order(OrderCreate):
    id: str
    totalAmount: float
    status: str = PENDING
    stripePaymentIntentId: Optional[str] = None
    # set while a payment intent is being created for this order
    paymentClaimedAt: Optional[datetime] = None
    createdAt: datetime
    updatedAt: datetime
