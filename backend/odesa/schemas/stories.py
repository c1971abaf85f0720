# schemas/stories.py
from pydantic import BaseModel, Field
from typing import List, Optional


class StoryGenerateSchema(BaseModel):
    location: str = Field(..., min_length=1, max_length=120)
    mood: Optional[str] = None
    style: Optional[str] = None
    userContext: Optional[str] = Field(None, max_length=1000)


class StorySaveSchema(BaseModel):
    location: str = Field(..., min_length=1)
    mood: str
    style: str
    userContext: Optional[str] = None
    title: str = Field(..., min_length=1)
    story: str = Field(..., min_length=1)
    instagramCaption: str = ""
    hashtags: List[str] = []
    imageUrl: Optional[str] = None
