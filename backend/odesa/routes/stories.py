# odesa/routes/stories.py
from typing import List

from fastapi import APIRouter, Depends, status

from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_current_user, get_storage, get_story_service
from odesa.models.generated import StoryPreferences, StoryPreferencesIn, TravelStory
from odesa.models.user import User
from odesa.schemas.stories import StoryGenerateSchema, StorySaveSchema
from odesa.service.story_service import StoryService

story_router = APIRouter(tags=["Stories"])


@story_router.post("/stories/generate", response_model=TravelStory)
async def generate_story(
    data: StoryGenerateSchema,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    stories: StoryService = Depends(get_story_service),
):
    prefs = await storage.story_preferences.get(current_user.id)
    params = {
        "location": data.location,
        "mood": data.mood or prefs.defaultMood,
        "style": data.style or prefs.defaultStyle,
        "userContext": data.userContext,
        "maxHashtags": prefs.maxHashtags,
        "hashtagStyle": prefs.preferredHashtagStyle,
    }
    cached = await storage.stories.find_cached(current_user.id, params)
    if cached:
        return cached

    story, generated = await stories.generate(
        data.location, params["mood"], params["style"], data.userContext, prefs
    )
    record = {**story, "location": data.location, "userContext": data.userContext}
    if not generated:
        # fallback output is not cached so the next request retries the model
        return await storage.stories.create(current_user.id, record)
    return await storage.stories.create(current_user.id, record, params=params)


@story_router.get("/stories", response_model=List[TravelStory])
async def list_stories(current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return await storage.stories.list_saved(current_user.id)


@story_router.post("/stories", status_code=status.HTTP_201_CREATED, response_model=TravelStory)
async def save_story(
    data: StorySaveSchema,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.stories.create(current_user.id, data.model_dump(), saved=True)


@story_router.get("/story-preferences", response_model=StoryPreferences)
async def get_story_preferences(
    current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)
):
    return await storage.story_preferences.get(current_user.id)


@story_router.put("/story-preferences", response_model=StoryPreferences)
async def update_story_preferences(
    data: StoryPreferencesIn,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.story_preferences.upsert(current_user.id, data)
