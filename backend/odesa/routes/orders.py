# odesa/routes/orders.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from odesa.core.error_messages import ErrorResponses
from odesa.core.exceptions import UpstreamServiceError
from odesa.core.config import Settings
from odesa.crud.storage import Storage
from odesa.middleware.rbac import (
    get_billing,
    get_gamification,
    get_optional_user,
    get_settings_dep,
    get_storage,
    is_admin,
)
from odesa.models.order import PROCESSING, Order, OrderCreate
from odesa.models.user import User
from odesa.schemas.orders import (
    OrderCreateSchema,
    OrderStatusSchema,
    PaymentIntentResponse,
    PaymentIntentSchema,
)
from odesa.service.billing_service import BillingService
from odesa.service.gamification_service import GamificationService

logger = logging.getLogger(__name__)

order_router = APIRouter(tags=["Orders"])
payment_router = APIRouter(tags=["Payments"])


# ------------------------
# Orders
# ------------------------
@order_router.post("", status_code=status.HTTP_201_CREATED, response_model=Order)
async def create_order(
    data: OrderCreateSchema,
    current_user: Optional[User] = Depends(get_optional_user),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings_dep),
    gamification: GamificationService = Depends(get_gamification),
):
    owner_id = current_user.id if current_user else data.userId
    if not owner_id:
        raise HTTPException(status_code=400, detail="userId is required")
    if not await storage.postcards.get(data.postcardId):
        raise ErrorResponses.POSTCARD_NOT_FOUND

    order = await storage.orders.create(OrderCreate(
        userId=owner_id,
        postcardId=data.postcardId,
        quantity=data.quantity,
        unitPrice=data.unitPrice or settings.POSTCARD_UNIT_PRICE,
        shippingAddress=data.shippingAddress,
    ))
    logger.info("Order %s placed for %s postcard(s)", order.id, order.quantity)
    if current_user:
        await gamification.order_placed(current_user.id, order.quantity)
    return order


@order_router.get("/user/{user_id}", response_model=List[Order])
async def user_orders(user_id: str, storage: Storage = Depends(get_storage)):
    return await storage.orders.list_by_user(user_id)


@order_router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, storage: Storage = Depends(get_storage)):
    order = await storage.orders.get(order_id)
    if not order:
        raise ErrorResponses.ORDER_NOT_FOUND
    return order


@order_router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    data: OrderStatusSchema,
    admin: User = Depends(is_admin),
    storage: Storage = Depends(get_storage),
):
    order = await storage.orders.update_status(order_id, data.status)
    logger.info("Order %s moved to %s by %s", order_id, data.status, admin.id)
    return order


# ------------------------
# Payments
# ------------------------
@payment_router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    data: PaymentIntentSchema,
    billing: BillingService = Depends(get_billing),
    storage: Storage = Depends(get_storage),
):
    amount = data.amount
    if data.orderId:
        order = await storage.orders.claim_for_payment(data.orderId)
        amount = order.totalAmount
    if not amount:
        raise HTTPException(status_code=400, detail="amount or orderId is required")

    try:
        intent_id, client_secret = await billing.create_payment_intent(amount, data.orderId)
    except UpstreamServiceError:
        if data.orderId:
            await storage.orders.release_payment_claim(data.orderId)
        raise
    if data.orderId:
        await storage.orders.update_status(data.orderId, PROCESSING, payment_intent_id=intent_id)
    return PaymentIntentResponse(clientSecret=client_secret, paymentIntentId=intent_id)
