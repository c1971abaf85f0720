# odesa/routes/subscription.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from odesa.core.error_messages import ErrorResponses
from odesa.core.exceptions import UpstreamServiceError
from odesa.crud.storage import Storage
from odesa.middleware.rbac import get_billing, get_current_user, get_optional_billing, get_storage
from odesa.models.subscription import SubscriptionPlan
from odesa.models.user import SubscriptionInfo, User
from odesa.schemas.subscription import SubscriptionCreated, SubscriptionCreateSchema, SubscriptionStatus
from odesa.serialize import utcnow
from odesa.service.billing_service import BillingService

logger = logging.getLogger(__name__)

subscription_router = APIRouter(tags=["Subscriptions"])


@subscription_router.get("/plans", response_model=List[SubscriptionPlan])
async def list_plans(storage: Storage = Depends(get_storage)):
    return await storage.plans.list()


@subscription_router.get("/status", response_model=SubscriptionStatus)
async def subscription_status(
    current_user: User = Depends(get_current_user),
    billing: Optional[BillingService] = Depends(get_optional_billing),
    storage: Storage = Depends(get_storage),
):
    sub = current_user.subscription
    if sub and billing and sub.stripeSubscriptionId and not sub.is_terminal:
        # payment confirmation happens client-side, so Stripe owns the status
        try:
            remote = await billing.get_subscription(sub.stripeSubscriptionId)
        except UpstreamServiceError as e:
            logger.warning("Using stored status for %s: %s", sub.stripeSubscriptionId, e.message)
        else:
            if remote["status"] != sub.status or (remote["endDate"] and remote["endDate"] != sub.endDate):
                refreshed = await storage.users.sync_subscription(
                    current_user.id, sub.stripeSubscriptionId, remote["status"], remote["endDate"]
                )
                if refreshed and refreshed.subscription:
                    sub = refreshed.subscription

    if sub is None or not sub.is_active:
        return SubscriptionStatus(isSubscribed=False, status=sub.status if sub else None)
    plan = await storage.plans.get(sub.planId)
    return SubscriptionStatus(
        isSubscribed=True,
        plan=plan.model_dump() if plan else None,
        status=sub.status,
        endDate=sub.endDate,
    )


@subscription_router.post("/create", response_model=SubscriptionCreated)
async def create_subscription(
    data: SubscriptionCreateSchema,
    current_user: User = Depends(get_current_user),
    billing: BillingService = Depends(get_billing),
    storage: Storage = Depends(get_storage),
):
    plan = await storage.plans.get(data.planId)
    if not plan:
        raise ErrorResponses.PLAN_NOT_FOUND

    customer_id = await billing.ensure_customer(current_user.email, current_user.stripeCustomerId)
    if customer_id != current_user.stripeCustomerId:
        await storage.users.set_stripe_customer(current_user.id, customer_id)

    created = await billing.create_subscription(customer_id, plan.stripePriceId)

    previous = current_user.subscription
    await storage.users.activate_subscription(current_user.id, SubscriptionInfo(
        planId=plan.id,
        stripeSubscriptionId=created["id"],
        status=created["status"],
        startDate=created["startDate"] or utcnow(),
        endDate=created["endDate"],
    ))
    # the new record replaced the old one; stop billing for it too
    if previous and previous.stripeSubscriptionId and not previous.is_terminal:
        await billing.cancel_subscription(previous.stripeSubscriptionId)
        logger.info("Subscription %s superseded by %s", previous.stripeSubscriptionId, created["id"])

    return SubscriptionCreated(
        subscriptionId=created["id"],
        clientSecret=created["clientSecret"],
        status=created["status"],
    )


@subscription_router.post("/cancel")
async def cancel_subscription(
    current_user: User = Depends(get_current_user),
    billing: BillingService = Depends(get_billing),
    storage: Storage = Depends(get_storage),
):
    sub = current_user.subscription
    if sub is None or sub.is_terminal:
        raise HTTPException(status_code=404, detail="No active subscription")
    if sub.stripeSubscriptionId:
        await billing.cancel_subscription(sub.stripeSubscriptionId)
    await storage.users.cancel_subscription(current_user.id)
    return {"message": "Subscription canceled"}
