# schemas/admin.py
from pydantic import BaseModel, Field
from typing import List


class CreditsSchema(BaseModel):
    credits: float = Field(..., ge=0)


class RoleSchema(BaseModel):
    role: str


class AdminStats(BaseModel):
    totalUsers: int
    totalPostcards: int
    totalTemplates: int
    totalEvents: int
    totalLocations: int
    totalOrders: int
    revenue: float
    activeUsers: int
    postcardsToday: int


class MonthlyPoint(BaseModel):
    month: str   # YYYY-MM
    postcards: int
    orders: int
    revenue: float


class MonthlyAnalytics(BaseModel):
    months: List[MonthlyPoint]
