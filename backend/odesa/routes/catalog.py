# odesa/routes/catalog.py
# Templates, events and locations: read freely, events/locations created by signed-in users.
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from odesa.core.error_messages import ErrorResponses
from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_current_user, get_storage
from odesa.models.event import Event, EventBase, EventCreate
from odesa.models.location import Location, LocationBase, LocationCreate
from odesa.models.template import Template
from odesa.models.user import User

template_router = APIRouter(tags=["Templates"])
event_router = APIRouter(tags=["Events"])
location_router = APIRouter(tags=["Locations"])


# ------------------------
# Templates
# ------------------------
@template_router.get("", response_model=List[Template])
async def list_templates(category: Optional[str] = None, storage: Storage = Depends(get_storage)):
    return await storage.templates.list(category)


@template_router.get("/{template_id}", response_model=Template)
async def get_template(template_id: str, storage: Storage = Depends(get_storage)):
    template = await storage.templates.get(template_id)
    if not template:
        raise ErrorResponses.TEMPLATE_NOT_FOUND
    return template


# ------------------------
# Events
# ------------------------
@event_router.get("", response_model=List[Event])
async def list_events(
    category: Optional[str] = None,
    locationId: Optional[str] = None,
    starts_after: Optional[datetime] = Query(None, alias="from"),
    starts_before: Optional[datetime] = Query(None, alias="to"),
    storage: Storage = Depends(get_storage),
):
    return await storage.events.list(
        category=category,
        location_id=locationId,
        starts_after=starts_after,
        starts_before=starts_before,
    )


@event_router.get("/upcoming", response_model=List[Event])
async def upcoming_events(
    limit: int = Query(10, ge=1, le=100), storage: Storage = Depends(get_storage)
):
    return await storage.events.list_upcoming(limit)


@event_router.get("/{event_id}", response_model=Event)
async def get_event(event_id: str, storage: Storage = Depends(get_storage)):
    event = await storage.events.get(event_id)
    if not event:
        raise ErrorResponses.EVENT_NOT_FOUND
    return event


@event_router.post("", status_code=status.HTTP_201_CREATED, response_model=Event)
async def create_event(
    data: EventBase,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.events.create(EventCreate(**data.model_dump(), createdBy=current_user.id))


# ------------------------
# Locations
# ------------------------
@location_router.get("", response_model=List[Location])
async def list_locations(category: Optional[str] = None, storage: Storage = Depends(get_storage)):
    return await storage.locations.list(category)


@location_router.get("/popular", response_model=List[Location])
async def popular_locations(
    limit: int = Query(10, ge=1, le=100), storage: Storage = Depends(get_storage)
):
    return await storage.locations.list_popular(limit)


@location_router.get("/{location_id}", response_model=Location)
async def get_location(location_id: str, storage: Storage = Depends(get_storage)):
    location = await storage.locations.get(location_id)
    if not location:
        raise ErrorResponses.LOCATION_NOT_FOUND
    return location


@location_router.post("", status_code=status.HTTP_201_CREATED, response_model=Location)
async def create_location(
    data: LocationBase,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.locations.create(LocationCreate(**data.model_dump(), createdBy=current_user.id))
