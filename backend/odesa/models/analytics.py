from pydantic import BaseModel
from typing import Optional
from datetime import datetime

EVENT_TYPES = ("view", "download", "share", "print_order")


class AnalyticsEvent(BaseModel):
    id: str
    userId: Optional[str] = None
    postcardId: str
    eventType: str
    platform: Optional[str] = None   # instagram | facebook | twitter | email
    createdAt: datetime


class NewsletterSubscriber(BaseModel):
    id: str
    email: str
    isActive: bool = True
    source: Optional[str] = None   # homepage | checkout | creator
    createdAt: datetime
