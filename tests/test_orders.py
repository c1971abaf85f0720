import asyncio
from datetime import datetime
from types import SimpleNamespace

import pytest

from conftest import ADMIN_EMAIL, auth, register
from odesa.core.exceptions import Conflict, NotFound, UpstreamServiceError
from odesa.models.order import OrderCreate
from odesa.models.subscription import SubscriptionPlan
from odesa.models.user import SubscriptionInfo
from odesa.service.billing_service import BillingService


class FakeBilling:
    def __init__(self, initial_status="active"):
        self.intents = []
        self.canceled = []
        self.created = 0
        self.initial_status = initial_status
        # what Stripe currently reports per subscription id
        self.remote = {}

    async def create_payment_intent(self, amount, order_id=None):
        self.intents.append((amount, order_id))
        return f"pi_{len(self.intents)}", f"pi_{len(self.intents)}_secret"

    async def ensure_customer(self, email, existing_id=None):
        return existing_id or "cus_1"

    async def create_subscription(self, customer_id, price_id):
        self.created += 1
        sub_id = f"sub_{self.created}"
        self.remote[sub_id] = self.initial_status
        return {
            "id": sub_id,
            "status": self.initial_status,
            "clientSecret": "seti_secret",
            "startDate": None,
            "endDate": None,
        }

    async def get_subscription(self, subscription_id):
        return {"id": subscription_id, "status": self.remote[subscription_id], "startDate": None, "endDate": None}

    async def cancel_subscription(self, subscription_id):
        self.canceled.append(subscription_id)
        self.remote[subscription_id] = "canceled"
        return "canceled"


@pytest.fixture
def billing(app):
    app.state.billing = FakeBilling()
    return app.state.billing


async def make_postcard(client, token):
    resp = await client.post(
        "/api/postcards",
        json={"templateId": "potemkin-steps", "title": "Hi", "message": "Hello"},
        headers=auth(token),
    )
    return resp.json()


async def place_order(client, token, postcard_id, **extra):
    body = {"postcardId": postcard_id, "quantity": 3, "shippingAddress": "1 Deribasovskaya St", **extra}
    resp = await client.post("/api/orders", json=body, headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


# ------------------------
# Repository
# ------------------------
async def test_order_status_only_moves_forward(storage):
    order = await storage.orders.create(OrderCreate(
        userId="u1", postcardId="p1", quantity=2, unitPrice=2.5, shippingAddress="Odesa"
    ))
    assert order.status == "pending"
    assert order.totalAmount == 5.0

    order = await storage.orders.update_status(order.id, "processing", payment_intent_id="pi_9")
    assert order.stripePaymentIntentId == "pi_9"
    order = await storage.orders.update_status(order.id, "completed")
    assert order.status == "completed"

    for status in ("pending", "processing", "cancelled"):
        with pytest.raises(Conflict):
            await storage.orders.update_status(order.id, status)
    assert (await storage.orders.get(order.id)).status == "completed"


async def test_order_status_unknown_order_or_status(storage):
    with pytest.raises(NotFound):
        await storage.orders.update_status("64b7f0c2a1b2c3d4e5f60718", "processing")
    with pytest.raises(Conflict):
        await storage.orders.update_status("64b7f0c2a1b2c3d4e5f60718", "shipped")


# ------------------------
# HTTP
# ------------------------
async def test_place_order_defaults_unit_price(client, settings):
    user, token = await register(client, "alice@example.com")
    postcard = await make_postcard(client, token)
    order = await place_order(client, token, postcard["id"])

    assert order["status"] == "pending"
    assert order["userId"] == user["id"]
    assert order["totalAmount"] == round(3 * settings.POSTCARD_UNIT_PRICE, 2)

    resp = await client.get(f"/api/orders/user/{user['id']}")
    assert [o["id"] for o in resp.json()] == [order["id"]]

    stats = (await client.get("/api/user/stats", headers=auth(token))).json()
    assert stats["postcardsSent"] == 3


async def test_order_for_unknown_postcard(client):
    _, token = await register(client, "bob@example.com")
    resp = await client.post(
        "/api/orders",
        json={"postcardId": "64b7f0c2a1b2c3d4e5f60718", "shippingAddress": "x"},
        headers=auth(token),
    )
    assert resp.status_code == 404


async def test_order_status_update_requires_admin(client):
    _, token = await register(client, "carol@example.com")
    _, admin_token = await register(client, ADMIN_EMAIL)
    order = await place_order(client, token, (await make_postcard(client, token))["id"])
    url = f"/api/orders/{order['id']}/status"

    resp = await client.patch(url, json={"status": "processing"}, headers=auth(token))
    assert resp.status_code == 403

    resp = await client.patch(url, json={"status": "processing"}, headers=auth(admin_token))
    assert resp.json()["status"] == "processing"
    resp = await client.patch(url, json={"status": "completed"}, headers=auth(admin_token))
    assert resp.json()["status"] == "completed"

    resp = await client.patch(url, json={"status": "pending"}, headers=auth(admin_token))
    assert resp.status_code == 409
    resp = await client.get(f"/api/orders/{order['id']}")
    assert resp.json()["status"] == "completed"


async def test_payment_intent_without_billing(client):
    resp = await client.post("/api/create-payment-intent", json={"amount": 10})
    assert resp.status_code == 503


async def test_payment_intent_moves_order_to_processing(client, billing):
    _, token = await register(client, "dave@example.com")
    order = await place_order(client, token, (await make_postcard(client, token))["id"])

    resp = await client.post("/api/create-payment-intent", json={"orderId": order["id"]})
    assert resp.status_code == 200
    assert resp.json() == {"clientSecret": "pi_1_secret", "paymentIntentId": "pi_1"}
    assert billing.intents == [(order["totalAmount"], order["id"])]

    stored = (await client.get(f"/api/orders/{order['id']}")).json()
    assert stored["status"] == "processing"
    assert stored["stripePaymentIntentId"] == "pi_1"

    resp = await client.post("/api/create-payment-intent", json={"orderId": order["id"]})
    assert resp.status_code == 409
    assert len(billing.intents) == 1


async def test_concurrent_payment_intents_create_one_intent(client, billing):
    _, token = await register(client, "paula@example.com")
    order = await place_order(client, token, (await make_postcard(client, token))["id"])

    results = await asyncio.gather(*[
        client.post("/api/create-payment-intent", json={"orderId": order["id"]}) for _ in range(5)
    ])
    assert sorted(r.status_code for r in results) == [200, 409, 409, 409, 409]
    assert len(billing.intents) == 1


async def test_failed_payment_intent_releases_order(client, billing):
    _, token = await register(client, "quinn@example.com")
    order = await place_order(client, token, (await make_postcard(client, token))["id"])

    async def declined(amount, order_id=None):
        raise UpstreamServiceError("Payment provider failed to create payment intent: card declined")

    billing.create_payment_intent, working = declined, billing.create_payment_intent
    resp = await client.post("/api/create-payment-intent", json={"orderId": order["id"]})
    assert resp.status_code == 500
    assert "card declined" in resp.json()["message"]
    assert (await client.get(f"/api/orders/{order['id']}")).json()["status"] == "pending"

    billing.create_payment_intent = working
    resp = await client.post("/api/create-payment-intent", json={"orderId": order["id"]})
    assert resp.status_code == 200


async def test_payment_intent_needs_amount(client, billing):
    resp = await client.post("/api/create-payment-intent", json={})
    assert resp.status_code == 400


# ------------------------
# Subscriptions
# ------------------------
async def test_subscription_plans_seeded(client):
    resp = await client.get("/api/subscription/plans")
    assert [p["id"] for p in resp.json()] == ["basic-monthly", "premium-monthly", "family-monthly"]


async def test_subscription_lifecycle(client, billing, storage):
    user, token = await register(client, "erin@example.com")
    status = (await client.get("/api/subscription/status", headers=auth(token))).json()
    assert status["isSubscribed"] is False

    resp = await client.post("/api/subscription/create", json={"planId": "basic-monthly"}, headers=auth(token))
    assert resp.json() == {"subscriptionId": "sub_1", "clientSecret": "seti_secret", "status": "active"}
    assert (await storage.users.get_by_id(user["id"])).stripeCustomerId == "cus_1"

    status = (await client.get("/api/subscription/status", headers=auth(token))).json()
    assert status["isSubscribed"] is True
    assert status["plan"]["id"] == "basic-monthly"

    # a second subscription supersedes the first
    await client.post("/api/subscription/create", json={"planId": "premium-monthly"}, headers=auth(token))
    stored = await storage.users.get_by_id(user["id"])
    assert stored.subscription.planId == "premium-monthly"
    assert stored.subscription.stripeSubscriptionId == "sub_2"
    assert billing.canceled == ["sub_1"]

    resp = await client.post("/api/subscription/cancel", headers=auth(token))
    assert resp.status_code == 200
    assert billing.canceled == ["sub_1", "sub_2"]
    status = (await client.get("/api/subscription/status", headers=auth(token))).json()
    assert status == {"isSubscribed": False, "plan": None, "status": "canceled", "endDate": None}


async def test_subscription_unknown_plan(client, billing):
    _, token = await register(client, "frank@example.com")
    resp = await client.post("/api/subscription/create", json={"planId": "gold"}, headers=auth(token))
    assert resp.status_code == 404


async def test_incomplete_subscription_activates_after_payment(client, app, storage):
    billing = app.state.billing = FakeBilling(initial_status="incomplete")
    user, token = await register(client, "gina@example.com")

    resp = await client.post("/api/subscription/create", json={"planId": "basic-monthly"}, headers=auth(token))
    assert resp.json()["status"] == "incomplete"
    status = (await client.get("/api/subscription/status", headers=auth(token))).json()
    assert status["isSubscribed"] is False
    assert status["status"] == "incomplete"

    # the client confirms the payment with Stripe
    billing.remote["sub_1"] = "active"
    status = (await client.get("/api/subscription/status", headers=auth(token))).json()
    assert status["isSubscribed"] is True
    assert status["plan"]["id"] == "basic-monthly"
    assert (await storage.users.get_by_id(user["id"])).subscription.status == "active"


async def test_resubscribing_cancels_unpaid_subscription(client, app, storage):
    billing = app.state.billing = FakeBilling(initial_status="incomplete")
    user, token = await register(client, "hank@example.com")

    await client.post("/api/subscription/create", json={"planId": "basic-monthly"}, headers=auth(token))
    await client.post("/api/subscription/create", json={"planId": "premium-monthly"}, headers=auth(token))
    assert billing.canceled == ["sub_1"]
    assert (await storage.users.get_by_id(user["id"])).subscription.stripeSubscriptionId == "sub_2"

    # paying the stale invoice later must not bring sub_1 back
    billing.remote["sub_1"] = "active"
    billing.remote["sub_2"] = "active"
    status = (await client.get("/api/subscription/status", headers=auth(token))).json()
    assert status["plan"]["id"] == "premium-monthly"


async def test_subscription_sync_ignores_superseded_id(storage, client):
    user, _ = await register(client, "ivy@example.com")
    await storage.users.activate_subscription(user["id"], SubscriptionInfo(
        planId="basic-monthly", stripeSubscriptionId="sub_new", status="incomplete", startDate=datetime(2024, 1, 1),
    ))
    assert await storage.users.sync_subscription(user["id"], "sub_old", "active") is None
    assert (await storage.users.get_by_id(user["id"])).subscription.status == "incomplete"


# ------------------------
# BillingService against a stubbed Stripe client
# ------------------------
class StripeLike(dict):
    __getattr__ = dict.__getitem__


async def test_billing_service_payment_intent_in_cents():
    seen = {}

    def create(params):
        seen.update(params)
        return SimpleNamespace(id="pi_42", client_secret="pi_42_secret")

    service = BillingService(SimpleNamespace(payment_intents=SimpleNamespace(create=create)))
    assert await service.create_payment_intent(8.97, "order-1") == ("pi_42", "pi_42_secret")
    assert seen["amount"] == 897
    assert seen["currency"] == "usd"
    assert seen["metadata"] == {"orderId": "order-1"}


async def test_billing_service_subscription_reads_period_from_items():
    def create(params):
        assert params["payment_behavior"] == "default_incomplete"
        assert params["expand"] == ["latest_invoice.confirmation_secret"]
        return StripeLike(
            id="sub_9",
            status="incomplete",
            items=StripeLike(data=[StripeLike(current_period_start=1700000000, current_period_end=1702592000)]),
            latest_invoice=StripeLike(confirmation_secret=StripeLike(client_secret="pi_secret")),
        )

    service = BillingService(SimpleNamespace(subscriptions=SimpleNamespace(create=create)))
    created = await service.create_subscription("cus_1", "price_basic_monthly")
    assert created["id"] == "sub_9"
    assert created["clientSecret"] == "pi_secret"
    assert created["startDate"].year == 2023
    assert created["endDate"] > created["startDate"]


async def test_billing_service_reads_current_status():
    def retrieve(subscription_id):
        return StripeLike(id=subscription_id, status="active", current_period_end=1702592000)

    service = BillingService(SimpleNamespace(subscriptions=SimpleNamespace(retrieve=retrieve)))
    remote = await service.get_subscription("sub_9")
    assert remote["status"] == "active"
    assert remote["endDate"].year == 2023


async def test_billing_service_maps_provider_errors():
    import stripe

    def create(params):
        raise stripe.StripeError("card declined")

    service = BillingService(SimpleNamespace(payment_intents=SimpleNamespace(create=create)))
    with pytest.raises(UpstreamServiceError):
        await service.create_payment_intent(5.0)


async def test_subscription_plan_create_rejects_duplicate_id(storage):
    plan = SubscriptionPlan(
        id="student-monthly", name="Student", description="Discounted", monthlyPrice=4.99,
        stripePriceId="price_student_monthly",
    )
    created = await storage.plans.create(plan)
    assert created.createdAt is not None
    with pytest.raises(Conflict):
        await storage.plans.create(plan)
    assert [p.id for p in await storage.plans.list()][0] == "student-monthly"


async def test_monthly_summary_counts_revenue_only_for_paid_orders(storage):
    from datetime import datetime

    paid = await storage.orders.create(OrderCreate(
        userId="u1", postcardId="p1", quantity=2, unitPrice=3.0, shippingAddress="Odesa"
    ))
    await storage.orders.update_status(paid.id, "processing")
    await storage.orders.create(OrderCreate(
        userId="u1", postcardId="p1", quantity=1, unitPrice=9.0, shippingAddress="Odesa"
    ))

    summary = await storage.orders.monthly_summary(datetime(2000, 1, 1))
    month = paid.createdAt.strftime("%Y-%m")
    assert summary[month] == {"orders": 2, "revenue": 6.0}
