# odesa/service/billing_service.py
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

import stripe
from fastapi.concurrency import run_in_threadpool

from odesa.core.config import Settings
from odesa.core.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

CURRENCY = "usd"


def _to_datetime(ts) -> Optional[datetime]:
    if not ts:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)


def _period_bounds(subscription) -> Tuple[Optional[datetime], Optional[datetime]]:
    # newer API versions report the billing period per item
    items = (subscription.get("items") or {}).get("data") or []
    source = items[0] if items else subscription
    start = source.get("current_period_start") or subscription.get("start_date")
    end = source.get("current_period_end")
    return _to_datetime(start), _to_datetime(end)


def _client_secret(subscription) -> Optional[str]:
    invoice = subscription.get("latest_invoice")
    if not invoice or isinstance(invoice, str):
        return None
    secret = invoice.get("confirmation_secret")
    return secret.get("client_secret") if secret else None


class BillingService:
    """Thin wrapper over the Stripe client; every call runs off the event loop."""

    def __init__(self, client: stripe.StripeClient):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["BillingService"]:
        if not settings.billing_enabled:
            return None
        return cls(stripe.StripeClient(settings.STRIPE_SECRET_KEY))

    async def _call(self, action: str, fn, *args, **kwargs):
        try:
            return await run_in_threadpool(fn, *args, **kwargs)
        except stripe.StripeError as e:
            logger.error("Stripe failed to %s: %s", action, e)
            raise UpstreamServiceError(f"Payment provider failed to {action}: {e.user_message or e}")

    async def create_payment_intent(self, amount: float, order_id: Optional[str] = None) -> Tuple[str, str]:
        params = {
            "amount": int(round(amount * 100)),
            "currency": CURRENCY,
            "automatic_payment_methods": {"enabled": True},
        }
        if order_id:
            params["metadata"] = {"orderId": order_id}
        intent = await self._call("create payment intent", self.client.payment_intents.create, params=params)
        logger.info("Created payment intent %s (order=%s)", intent.id, order_id)
        return intent.id, intent.client_secret

    async def ensure_customer(self, email: str, existing_id: Optional[str] = None) -> str:
        if existing_id:
            return existing_id
        customer = await self._call("create customer", self.client.customers.create, params={"email": email})
        return customer.id

    async def create_subscription(self, customer_id: str, price_id: str) -> dict:
        subscription = await self._call(
            "create subscription",
            self.client.subscriptions.create,
            params={
                "customer": customer_id,
                "items": [{"price": price_id}],
                "payment_behavior": "default_incomplete",
                "expand": ["latest_invoice.confirmation_secret"],
            },
        )
        start, end = _period_bounds(subscription)
        return {
            "id": subscription.id,
            "status": subscription.status,
            "clientSecret": _client_secret(subscription),
            "startDate": start,
            "endDate": end,
        }

    async def get_subscription(self, subscription_id: str) -> dict:
        subscription = await self._call("fetch subscription", self.client.subscriptions.retrieve, subscription_id)
        start, end = _period_bounds(subscription)
        return {"id": subscription.id, "status": subscription.status, "startDate": start, "endDate": end}

    async def cancel_subscription(self, subscription_id: str) -> str:
        subscription = await self._call("cancel subscription", self.client.subscriptions.cancel, subscription_id)
        return subscription.status
