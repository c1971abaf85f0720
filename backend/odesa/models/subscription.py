from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class SubscriptionPlan(BaseModel):
    id: str
    name: str
    description: str
    monthlyPrice: float
    features: List[str] = []
    stripePriceId: str
    createdAt: Optional[datetime] = None
