# schemas/orders.py
from pydantic import BaseModel, Field
from typing import Optional


class OrderCreateSchema(BaseModel):
    postcardId: str
    quantity: int = Field(1, ge=1, le=1000)
    unitPrice: Optional[float] = Field(None, gt=0)
    shippingAddress: str = Field(..., min_length=1)
    # ignored when a token is present
    userId: Optional[str] = None


class OrderStatusSchema(BaseModel):
    status: str


class PaymentIntentSchema(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    orderId: Optional[str] = None


class PaymentIntentResponse(BaseModel):
    clientSecret: str
    paymentIntentId: str
