from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class LocationBase(BaseModel):
    name: str
    description: str
    address: str
    coordinates: Coordinates
    imageUrl: Optional[str] = None
    category: str
    isPopular: bool = False


class LocationCreate(LocationBase):
    createdBy: str


class Location(LocationCreate):
    id: str
    createdAt: datetime
    updatedAt: datetime
