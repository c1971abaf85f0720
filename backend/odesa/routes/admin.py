# odesa/routes/admin.py
import logging
from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from odesa.core.error_messages import ErrorResponses
from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_storage, is_admin
from odesa.models.template import Template, TemplateCreate, TemplateUpdate
from odesa.models.user import ROLES, User
from odesa.schemas.admin import AdminStats, CreditsSchema, MonthlyAnalytics, MonthlyPoint, RoleSchema
from odesa.schemas.auth import UserOut
from odesa.serialize import utcnow

logger = logging.getLogger(__name__)

# every route here requires an admin token
admin_router = APIRouter(tags=["Admin"], dependencies=[Depends(is_admin)])

ACTIVE_USER_WINDOW = timedelta(days=30)


def _month_starts(now: datetime, months: int) -> List[datetime]:
    starts = []
    year, month = now.year, now.month
    for _ in range(months):
        starts.append(datetime(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


# ------------------------
# Dashboard
# ------------------------
@admin_router.get("/stats", response_model=AdminStats)
async def admin_stats(storage: Storage = Depends(get_storage)):
    now = utcnow()
    today = datetime(now.year, now.month, now.day)
    return AdminStats(
        totalUsers=await storage.users.count(),
        totalPostcards=await storage.postcards.count(),
        totalTemplates=await storage.templates.count(),
        totalEvents=await storage.events.count(),
        totalLocations=await storage.locations.count(),
        totalOrders=await storage.orders.count(),
        revenue=await storage.orders.revenue_since(datetime(1970, 1, 1)),
        activeUsers=await storage.users.count_active_since(now - ACTIVE_USER_WINDOW),
        postcardsToday=len(await storage.postcards.created_since(today)),
    )


@admin_router.get("/analytics/monthly", response_model=MonthlyAnalytics)
async def monthly_analytics(
    months: int = Query(6, ge=1, le=24), storage: Storage = Depends(get_storage)
):
    starts = _month_starts(utcnow(), months)
    buckets = {s.strftime("%Y-%m"): MonthlyPoint(month=s.strftime("%Y-%m"), postcards=0, orders=0, revenue=0)
               for s in starts}

    for postcard in await storage.postcards.created_since(starts[0]):
        buckets[postcard.createdAt.strftime("%Y-%m")].postcards += 1
    for month, summary in (await storage.orders.monthly_summary(starts[0])).items():
        if month in buckets:
            buckets[month].orders = int(summary["orders"])
            buckets[month].revenue = summary["revenue"]

    return MonthlyAnalytics(months=list(buckets.values()))


# ------------------------
# Users
# ------------------------
@admin_router.get("/users", response_model=List[UserOut])
async def list_users(storage: Storage = Depends(get_storage)):
    return [UserOut.from_user(u) for u in await storage.users.list_users()]


@admin_router.put("/users/{user_id}/credits", response_model=UserOut)
async def set_credits(user_id: str, data: CreditsSchema, storage: Storage = Depends(get_storage)):
    return UserOut.from_user(await storage.users.set_credits(user_id, data.credits))


@admin_router.put("/users/{user_id}/role", response_model=UserOut)
async def set_role(user_id: str, data: RoleSchema, storage: Storage = Depends(get_storage)):
    if data.role not in ROLES:
        raise HTTPException(status_code=400, detail=f"Role must be one of: {', '.join(ROLES)}")
    user = await storage.users.set_role(user_id, data.role)
    logger.info("Role of %s set to %s", user_id, data.role)
    return UserOut.from_user(user)


@admin_router.delete("/users/by-email/{email}")
async def delete_user(email: str, storage: Storage = Depends(get_storage)):
    if not await storage.users.delete_by_email(email.strip().lower()):
        raise ErrorResponses.USER_NOT_FOUND
    logger.info("Deleted user %s", email)
    return {"message": "User deleted"}


# ------------------------
# Templates
# ------------------------
@admin_router.get("/templates", response_model=List[Template])
async def admin_templates(storage: Storage = Depends(get_storage)):
    return await storage.templates.list()


@admin_router.post("/templates", status_code=status.HTTP_201_CREATED, response_model=Template)
async def create_template(data: TemplateCreate, storage: Storage = Depends(get_storage)):
    return await storage.templates.create(data)


@admin_router.put("/templates/{template_id}", response_model=Template)
async def update_template(template_id: str, data: TemplateUpdate, storage: Storage = Depends(get_storage)):
    return await storage.templates.update(template_id, data)


@admin_router.delete("/templates/{template_id}")
async def delete_template(template_id: str, storage: Storage = Depends(get_storage)):
    await storage.templates.delete(template_id)
    return {"message": "Template deleted"}
