# schemas/ai.py
from pydantic import BaseModel, Field
from typing import Optional

from odesa.models.onboarding import PreferencesIn


class OnboardingCompleteSchema(PreferencesIn):
    pass


class PreferencesUpdateSchema(PreferencesIn):
    onboardingProgress: Optional[int] = Field(None, ge=0, le=100)


class SocialMediaSchema(BaseModel):
    postcardId: str
    mood: str = "happy"
    landmark: Optional[str] = None
