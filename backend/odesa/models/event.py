from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class EventBase(BaseModel):
    name: str
    description: str
    imageUrl: Optional[str] = None
    startDate: datetime
    endDate: Optional[datetime] = None
    locationId: Optional[str] = None
    organizer: str
    category: str
    ticketUrl: Optional[str] = None


class EventCreate(EventBase):
    createdBy: str
    isActive: bool = True


class Event(EventCreate):
    id: str
    createdAt: datetime
    updatedAt: datetime
