# odesa/models/generated.py
# Records of AI-produced content. Each keeps the inputs that produced it
# (`params`) and their `fingerprint`, so identical requests hit the cache.
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class SocialMediaPreview(BaseModel):
    id: str
    postcardId: str
    userId: Optional[str] = None
    fingerprint: str
    params: Dict[str, Any] = {}
    instagram: str = ""
    twitter: str = ""
    facebook: str = ""
    hashtags: List[str] = []
    generatedAt: datetime


class TravelStory(BaseModel):
    id: str
    userId: str
    location: str
    mood: str
    style: str
    userContext: Optional[str] = None
    title: str
    story: str
    instagramCaption: str
    hashtags: List[str] = []
    imageUrl: Optional[str] = None
    fingerprint: Optional[str] = None
    isSaved: bool = False
    createdAt: datetime


class StoryPreferencesIn(BaseModel):
    defaultMood: str = "happy"
    defaultStyle: str = "casual"
    maxHashtags: int = Field(10, ge=1, le=30)
    preferredHashtagStyle: str = "trendy"   # trendy | classic | niche


class StoryPreferences(StoryPreferencesIn):
    userId: str
    updatedAt: Optional[datetime] = None


class RecommendationSet(BaseModel):
    id: str
    userId: str
    fingerprint: str
    recommendations: List[Dict[str, Any]] = []
    generatedAt: datetime
