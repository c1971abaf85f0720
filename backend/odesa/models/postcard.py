# odesa/models/postcard.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

STAT_FIELDS = {
    "download": "downloadCount",
    "share": "shareCount",
}


class PostcardContent(BaseModel):
    templateId: str
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., max_length=2000)
    customImageUrl: Optional[str] = None
    fontFamily: str = "Inter"
    backgroundColor: str = "#FFFFFF"
    textColor: str = "#000000"
    isPublic: bool = False
    eventId: Optional[str] = None
    locationId: Optional[str] = None


class PostcardCreate(PostcardContent):
    userId: str


class Postcard(PostcardCreate):
    id: str
    downloadCount: int = 0
    shareCount: int = 0
    createdAt: datetime
    updatedAt: datetime
