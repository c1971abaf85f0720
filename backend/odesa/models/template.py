from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TemplateCreate(BaseModel):
    id: str = Field(..., min_length=1, pattern=r"^[a-z0-9][a-z0-9-]*$")   # stable slug, e.g. "opera-house-classic"
    name: str
    description: Optional[str] = None
    imageUrl: str
    category: str
    isPremium: bool = False


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    category: Optional[str] = None
    isPremium: Optional[bool] = None


class Template(TemplateCreate):
    usageCount: int = 0
    createdAt: datetime
    updatedAt: Optional[datetime] = None
