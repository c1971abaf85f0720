# odesa/models/onboarding.py
from pydantic import BaseModel, Field, computed_field
from typing import List, Optional
from datetime import datetime

POINTS_PER_LEVEL = 100


class PreferencesIn(BaseModel):
    interests: List[str] = []
    travelStyle: str = ""
    preferredActivities: List[str] = []
    timeOfYear: str = ""
    groupSize: str = ""
    postcardPurpose: List[str] = []
    timePreference: str = ""


class UserPreferences(PreferencesIn):
    id: str
    userId: str
    completedOnboarding: bool = False
    onboardingProgress: int = Field(0, ge=0, le=100)
    createdAt: datetime
    updatedAt: datetime


class UserStats(BaseModel):
    userId: str
    totalPoints: int = 0
    postcardsCreated: int = 0
    postcardsSent: int = 0
    socialShares: int = 0
    landmarksVisited: List[str] = []
    streakDays: int = 0
    lastActivityDate: Optional[datetime] = None
    badges: List[str] = []
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @computed_field
    @property
    def level(self) -> int:
        return 1 + self.totalPoints // POINTS_PER_LEVEL


class UserAchievement(BaseModel):
    id: str
    userId: str
    achievementId: str
    achievementName: str
    description: str
    icon: str
    points: int
    unlockedAt: datetime


class OnboardingQuestion(BaseModel):
    id: str
    question: str
    type: str   # multiple_choice | single_choice | text
    options: Optional[List[str]] = None
    category: str
