# odesa/routes/personalization.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from odesa.core.error_messages import ErrorResponses
from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_ai_service, get_current_user, get_gamification, get_storage
from odesa.models.generated import SocialMediaPreview
from odesa.models.onboarding import OnboardingQuestion, PreferencesIn, UserAchievement, UserPreferences, UserStats
from odesa.models.user import User
from odesa.schemas.ai import OnboardingCompleteSchema, PreferencesUpdateSchema, SocialMediaSchema
from odesa.service.ai_service import AIService, onboarding_questions
from odesa.service.gamification_service import GamificationService

logger = logging.getLogger(__name__)

onboarding_router = APIRouter(tags=["Onboarding"])
user_router = APIRouter(tags=["User"])
ai_router = APIRouter(tags=["AI"])


# ------------------------
# Onboarding
# ------------------------
@onboarding_router.get("/questions", response_model=List[OnboardingQuestion])
async def get_questions():
    return onboarding_questions()


@onboarding_router.post("/complete")
async def complete_onboarding(
    data: OnboardingCompleteSchema,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    gamification: GamificationService = Depends(get_gamification),
):
    prefs = await storage.preferences.upsert(
        current_user.id, PreferencesIn(**data.model_dump()), completed=True, progress=100
    )
    await storage.recommendations.invalidate(current_user.id)
    points = await gamification.onboarding_completed(current_user.id)
    return {"preferences": prefs, "pointsEarned": points}


# ------------------------
# Preferences / Stats
# ------------------------
@user_router.get("/preferences", response_model=Optional[UserPreferences])
async def get_preferences(
    current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)
):
    return await storage.preferences.get(current_user.id)


@user_router.put("/preferences", response_model=UserPreferences)
async def update_preferences(
    data: PreferencesUpdateSchema,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    prefs = await storage.preferences.upsert(
        current_user.id,
        PreferencesIn(**data.model_dump(exclude={"onboardingProgress"})),
        progress=data.onboardingProgress,
    )
    # cached recommendations were keyed on the old answers
    await storage.recommendations.invalidate(current_user.id)
    return prefs


@user_router.get("/stats", response_model=UserStats)
async def get_stats(current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return await storage.stats.get(current_user.id)


@user_router.get("/achievements", response_model=List[UserAchievement])
async def get_achievements(
    current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)
):
    return await storage.achievements.list_by_user(current_user.id)


# ------------------------
# AI
# ------------------------
async def _recommendations(user: User, storage: Storage, ai: AIService, refresh: bool = False):
    prefs = await storage.preferences.get(user.id)
    answers = PreferencesIn(**prefs.model_dump()) if prefs else PreferencesIn()
    stats = await storage.stats.get(user.id)
    params = {**answers.model_dump(), "history": sorted(stats.landmarksVisited)}

    if refresh:
        await storage.recommendations.invalidate(user.id)
    else:
        cached = await storage.recommendations.find_cached(user.id, params)
        if cached:
            return {"recommendations": cached.recommendations, "cached": True}

    recs = await ai.recommend_landmarks(answers, params["history"])
    saved = await storage.recommendations.replace(user.id, params, [r.model_dump() for r in recs])
    return {"recommendations": saved.recommendations, "cached": False}


@ai_router.get("/ai/recommendations")
async def get_recommendations(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    ai: AIService = Depends(get_ai_service),
):
    return await _recommendations(current_user, storage, ai)


@ai_router.post("/ai/recommendations/refresh")
async def refresh_recommendations(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    ai: AIService = Depends(get_ai_service),
):
    return await _recommendations(current_user, storage, ai, refresh=True)


@ai_router.post("/social-media/generate", response_model=SocialMediaPreview)
async def generate_social_media(
    data: SocialMediaSchema,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    ai: AIService = Depends(get_ai_service),
):
    postcard = await storage.postcards.get(data.postcardId)
    if not postcard:
        raise ErrorResponses.POSTCARD_NOT_FOUND
    template = await storage.templates.get(postcard.templateId)
    template_name = template.name if template else postcard.templateId
    landmark = data.landmark or ""

    params = {"mood": data.mood, "landmark": landmark, "message": postcard.message, "template": template_name}
    cached = await storage.social_previews.find_cached(postcard.id, params)
    if cached:
        return cached

    captions = await ai.generate_captions(template_name, postcard.message, landmark, data.mood)
    return await storage.social_previews.create(postcard.id, params, captions.model_dump(), user_id=current_user.id)
