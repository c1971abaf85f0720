# schemas/subscription.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class SubscriptionCreateSchema(BaseModel):
    planId: str


class SubscriptionStatus(BaseModel):
    isSubscribed: bool
    plan: Optional[dict] = None
    status: Optional[str] = None
    endDate: Optional[datetime] = None


class SubscriptionCreated(BaseModel):
    subscriptionId: str
    clientSecret: Optional[str] = None
    status: str
