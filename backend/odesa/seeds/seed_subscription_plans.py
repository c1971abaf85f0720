import logging

from odesa.crud.storage import Storage
from odesa.models.subscription import SubscriptionPlan

logger = logging.getLogger(__name__)

# stripePriceId values are placeholders until real Stripe prices exist
DEFAULT_PLANS = [
    SubscriptionPlan(
        id="basic-monthly",
        name="Basic Plan",
        description="Perfect for occasional postcard senders",
        stripePriceId="price_basic_monthly",
        monthlyPrice=9.99,
        features=[
            "Unlimited digital postcards",
            "10 physical postcards per month",
            "Free worldwide shipping",
            "Standard templates",
        ],
    ),
    SubscriptionPlan(
        id="premium-monthly",
        name="Premium Plan",
        description="Best for frequent travelers and postcard enthusiasts",
        stripePriceId="price_premium_monthly",
        monthlyPrice=19.99,
        features=[
            "Unlimited digital postcards",
            "Unlimited physical postcards",
            "Free worldwide shipping",
            "Premium templates",
            "Priority customer support",
            "Custom postcard designs",
        ],
    ),
    SubscriptionPlan(
        id="family-monthly",
        name="Family Plan",
        description="Share the joy with your whole family",
        stripePriceId="price_family_monthly",
        monthlyPrice=29.99,
        features=[
            "Up to 5 family accounts",
            "Unlimited digital postcards",
            "Unlimited physical postcards",
            "Free worldwide shipping",
            "Premium templates",
            "Priority customer support",
            "Custom postcard designs",
            "Family photo albums",
        ],
    ),
]


async def seed_subscription_plans(storage: Storage) -> int:
    created = 0
    for plan in DEFAULT_PLANS:
        if await storage.plans.ensure(plan):
            created += 1
            logger.info("Created subscription plan: %s", plan.name)
        else:
            logger.debug("Subscription plan already exists: %s", plan.name)
    return created
