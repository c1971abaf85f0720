import pytest

from conftest import ADMIN_EMAIL, auth, register
from odesa.core.config import Settings

NEW_TEMPLATE = {
    "id": "lanzheron-lighthouse",
    "name": "Lanzheron Lighthouse",
    "description": "Beacon over the bay",
    "imageUrl": "https://example.com/lighthouse.jpg",
    "category": "coastal",
}


@pytest.fixture
async def admin_token(client):
    _, token = await register(client, ADMIN_EMAIL)
    return token


async def test_admin_routes_reject_regular_users(client):
    _, token = await register(client, "alice@example.com")
    for path in ("/api/admin/stats", "/api/admin/users", "/api/admin/templates"):
        resp = await client.get(path, headers=auth(token))
        assert resp.status_code == 403, path
        assert resp.json()["message"] == "Admin access only"

    resp = await client.get("/api/admin/stats")
    assert resp.status_code == 401


async def test_admin_stats(client, admin_token):
    _, token = await register(client, "bob@example.com")
    await client.post(
        "/api/postcards",
        json={"templateId": "golden-domes", "title": "Domes", "message": "Shiny"},
        headers=auth(token),
    )
    stats = (await client.get("/api/admin/stats", headers=auth(admin_token))).json()
    assert stats["totalUsers"] == 2
    assert stats["totalPostcards"] == 1
    assert stats["postcardsToday"] == 1
    assert stats["totalTemplates"] == 8
    assert stats["totalEvents"] == 0
    assert stats["totalLocations"] == 0
    assert stats["revenue"] == 0


async def test_monthly_analytics_has_one_point_per_month(client, admin_token):
    resp = await client.get("/api/admin/analytics/monthly", params={"months": 3}, headers=auth(admin_token))
    months = resp.json()["months"]
    assert len(months) == 3
    assert months == sorted(months, key=lambda m: m["month"])


async def test_admin_manages_users(client, admin_token):
    user, _ = await register(client, "carol@example.com")

    resp = await client.put(
        f"/api/admin/users/{user['id']}/credits", json={"credits": 12.5}, headers=auth(admin_token)
    )
    assert resp.json()["credits"] == 12.5

    resp = await client.put(
        f"/api/admin/users/{user['id']}/role", json={"role": "superuser"}, headers=auth(admin_token)
    )
    assert resp.status_code == 400
    resp = await client.put(
        f"/api/admin/users/{user['id']}/role", json={"role": "admin"}, headers=auth(admin_token)
    )
    assert resp.json()["role"] == "admin"

    users = (await client.get("/api/admin/users", headers=auth(admin_token))).json()
    assert {u["email"] for u in users} == {ADMIN_EMAIL, "carol@example.com"}
    assert all("passwordHash" not in u for u in users)

    resp = await client.delete("/api/admin/users/by-email/carol@example.com", headers=auth(admin_token))
    assert resp.status_code == 200
    resp = await client.delete("/api/admin/users/by-email/carol@example.com", headers=auth(admin_token))
    assert resp.status_code == 404


async def test_admin_credits_unknown_user(client, admin_token):
    resp = await client.put(
        "/api/admin/users/64b7f0c2a1b2c3d4e5f60718/credits", json={"credits": 1}, headers=auth(admin_token)
    )
    assert resp.status_code == 404


async def test_admin_template_crud(client, admin_token):
    resp = await client.post("/api/admin/templates", json=NEW_TEMPLATE, headers=auth(admin_token))
    assert resp.status_code == 201
    assert resp.json()["usageCount"] == 0

    resp = await client.post("/api/admin/templates", json=NEW_TEMPLATE, headers=auth(admin_token))
    assert resp.status_code == 409

    resp = await client.put(
        f"/api/admin/templates/{NEW_TEMPLATE['id']}", json={"isPremium": True}, headers=auth(admin_token)
    )
    assert resp.json()["isPremium"] is True
    assert resp.json()["name"] == NEW_TEMPLATE["name"]

    resp = await client.get("/api/templates", params={"category": "coastal"})
    assert NEW_TEMPLATE["id"] in [t["id"] for t in resp.json()]

    resp = await client.delete(f"/api/admin/templates/{NEW_TEMPLATE['id']}", headers=auth(admin_token))
    assert resp.status_code == 200
    resp = await client.get(f"/api/templates/{NEW_TEMPLATE['id']}")
    assert resp.status_code == 404


# ------------------------
# Catalog
# ------------------------
async def test_events_and_locations(client):
    _, token = await register(client, "dave@example.com")
    location = (await client.post(
        "/api/locations",
        json={
            "name": "City Garden",
            "description": "Green heart of the city",
            "address": "Derybasivska St",
            "coordinates": {"lat": 46.485, "lng": 30.738},
            "category": "park",
            "isPopular": True,
        },
        headers=auth(token),
    )).json()

    resp = await client.post(
        "/api/events",
        json={
            "name": "Jazz in the Garden",
            "description": "Open-air concert",
            "startDate": "2099-07-01T18:00:00",
            "locationId": location["id"],
            "organizer": "Odesa Jazz Club",
            "category": "music",
        },
        headers=auth(token),
    )
    assert resp.status_code == 201

    popular = (await client.get("/api/locations/popular")).json()
    assert [l["id"] for l in popular] == [location["id"]]
    events = (await client.get("/api/events", params={"locationId": location["id"]})).json()
    assert [e["name"] for e in events] == ["Jazz in the Garden"]
    upcoming = (await client.get("/api/events/upcoming")).json()
    assert len(upcoming) == 1

    in_july = (await client.get(
        "/api/events", params={"from": "2099-07-01T00:00:00", "to": "2099-07-31T23:59:59"}
    )).json()
    assert [e["name"] for e in in_july] == ["Jazz in the Garden"]
    assert (await client.get("/api/events", params={"from": "2099-08-01T00:00:00"})).json() == []

    resp = await client.post("/api/events", json={})
    assert resp.status_code == 401


async def test_unknown_catalog_ids(client):
    assert (await client.get("/api/events/not-an-id")).status_code == 404
    assert (await client.get("/api/locations/64b7f0c2a1b2c3d4e5f60718")).status_code == 404


# ------------------------
# Config
# ------------------------
def test_production_requires_signing_secret():
    with pytest.raises(ValueError):
        Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY=None)


def test_development_generates_signing_secret():
    settings = Settings(_env_file=None, ENVIRONMENT="development", JWT_SECRET_KEY=None)
    assert settings.JWT_SECRET_KEY
    assert not settings.billing_enabled
    assert not settings.ai_enabled


async def test_root_and_request_timing(client, caplog):
    import logging

    caplog.set_level(logging.INFO, logger="odesa")
    resp = await client.get("/")
    assert resp.status_code == 200
    await client.get("/api/templates")
    assert any("GET /api/templates 200" in r.getMessage() for r in caplog.records)
