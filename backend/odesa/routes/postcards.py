# odesa/routes/postcards.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from odesa.core.error_messages import ErrorResponses
from odesa.core.exceptions import AppError
from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_current_user, get_gamification, get_optional_user, get_storage
from odesa.models.postcard import Postcard, PostcardCreate
from odesa.models.user import User
from odesa.schemas.postcards import PostcardActionSchema, PostcardCreateSchema, VisibilitySchema
from odesa.service.gamification_service import GamificationService

logger = logging.getLogger(__name__)

postcard_router = APIRouter(tags=["Postcards"])


def _actor(current_user: Optional[User], data: Optional[PostcardActionSchema]) -> Optional[str]:
    if current_user:
        return current_user.id
    return data.userId if data else None


async def _track(storage: Storage, event_type: str, postcard_id: str, user_id=None, platform=None):
    # analytics never fails the request that produced it
    try:
        await storage.analytics.track(event_type, postcard_id, user_id=user_id, platform=platform)
    except AppError as e:
        logger.warning("Dropped %s analytics for %s: %s", event_type, postcard_id, e.message)


# ------------------------
# Create / Read
# ------------------------
@postcard_router.post("", status_code=status.HTTP_201_CREATED, response_model=Postcard)
async def create_postcard(
    data: PostcardCreateSchema,
    current_user: Optional[User] = Depends(get_optional_user),
    storage: Storage = Depends(get_storage),
    gamification: GamificationService = Depends(get_gamification),
):
    owner_id = current_user.id if current_user else data.userId
    if not owner_id:
        raise HTTPException(status_code=400, detail="userId is required")

    if not await storage.templates.get(data.templateId):
        raise ErrorResponses.TEMPLATE_NOT_FOUND

    postcard = await storage.postcards.create(
        PostcardCreate(**data.model_dump(exclude={"userId"}), userId=owner_id)
    )
    await storage.templates.increment_usage(data.templateId)
    if current_user:
        await gamification.postcard_created(current_user.id, data.locationId)
    return postcard


@postcard_router.get("/public/gallery", response_model=List[Postcard])
async def public_gallery(
    limit: int = Query(20, ge=0, le=100), storage: Storage = Depends(get_storage)
):
    return await storage.postcards.list_public(limit)


@postcard_router.get("/user/{user_id}", response_model=List[Postcard])
async def user_postcards(user_id: str, storage: Storage = Depends(get_storage)):
    return await storage.postcards.list_by_user(user_id)


@postcard_router.get("/{postcard_id}", response_model=Postcard)
async def get_postcard(postcard_id: str, storage: Storage = Depends(get_storage)):
    postcard = await storage.postcards.get(postcard_id)
    if not postcard:
        raise ErrorResponses.POSTCARD_NOT_FOUND
    await _track(storage, "view", postcard_id)
    return postcard


# ------------------------
# Visibility / Stats
# ------------------------
@postcard_router.patch("/{postcard_id}/visibility", response_model=Postcard)
async def set_visibility(
    postcard_id: str,
    data: VisibilitySchema,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    postcard = await storage.postcards.get(postcard_id)
    if not postcard:
        raise ErrorResponses.POSTCARD_NOT_FOUND
    if postcard.userId != current_user.id:
        raise HTTPException(status_code=403, detail="Not your postcard")
    return await storage.postcards.set_visibility(postcard_id, data.isPublic)


@postcard_router.post("/{postcard_id}/download")
async def download_postcard(
    postcard_id: str,
    data: Optional[PostcardActionSchema] = None,
    current_user: Optional[User] = Depends(get_optional_user),
    storage: Storage = Depends(get_storage),
):
    await storage.postcards.increment_stat(postcard_id, "download")
    await _track(storage, "download", postcard_id, user_id=_actor(current_user, data))
    return {"success": True}


@postcard_router.post("/{postcard_id}/share")
async def share_postcard(
    postcard_id: str,
    data: Optional[PostcardActionSchema] = None,
    current_user: Optional[User] = Depends(get_optional_user),
    storage: Storage = Depends(get_storage),
    gamification: GamificationService = Depends(get_gamification),
):
    await storage.postcards.increment_stat(postcard_id, "share")
    await _track(
        storage, "share", postcard_id,
        user_id=_actor(current_user, data), platform=data.platform if data else None,
    )
    if current_user:
        await gamification.postcard_shared(current_user.id)
    return {"success": True}
