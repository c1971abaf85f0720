# odesa/routes/analytics.py
from collections import Counter
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_current_user, get_storage
from odesa.models.template import Template
from odesa.models.user import User
from odesa.schemas.newsletter import NewsletterSchema

analytics_router = APIRouter(tags=["Analytics"])
newsletter_router = APIRouter(tags=["Newsletter"])


@analytics_router.get("/user/{user_id}")
async def user_analytics(
    user_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized")
    events = await storage.analytics.list_by_user(user_id)
    return {
        "totalEvents": len(events),
        "byType": dict(Counter(e.eventType for e in events)),
        "events": events,
    }


@analytics_router.get("/popular-templates", response_model=List[Template])
async def popular_templates(
    limit: int = Query(10, ge=1, le=50), storage: Storage = Depends(get_storage)
):
    return await storage.templates.list_popular(limit)


@newsletter_router.post("/subscribe")
async def subscribe(data: NewsletterSchema, storage: Storage = Depends(get_storage)):
    subscriber = await storage.newsletter.subscribe(data.email.lower(), data.source)
    return {"message": "Successfully subscribed to newsletter", "subscriber": subscriber}
