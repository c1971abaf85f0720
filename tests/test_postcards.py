import asyncio

from conftest import auth, register

TEMPLATE_ID = "opera-house-classic"


def postcard_body(**overrides):
    body = {
        "templateId": TEMPLATE_ID,
        "title": "Greetings from Odesa",
        "message": "Wish you were here!",
    }
    body.update(overrides)
    return body


async def create_postcard(client, token=None, **overrides):
    headers = auth(token) if token else {}
    resp = await client.post("/api/postcards", json=postcard_body(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_postcard_for_authenticated_user(client):
    user, token = await register(client, "alice@example.com")
    postcard = await create_postcard(client, token)
    assert postcard["userId"] == user["id"]
    assert postcard["downloadCount"] == 0
    assert postcard["shareCount"] == 0
    assert postcard["isPublic"] is False


async def test_create_postcard_needs_an_owner(client):
    resp = await client.post("/api/postcards", json=postcard_body())
    assert resp.status_code == 400

    postcard = await create_postcard(client, userId="guest-123")
    assert postcard["userId"] == "guest-123"


async def test_create_postcard_unknown_template(client):
    _, token = await register(client, "bob@example.com")
    resp = await client.post(
        "/api/postcards", json=postcard_body(templateId="no-such-template"), headers=auth(token)
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "Template not found"


async def test_template_usage_counts_postcards(client):
    _, token = await register(client, "carol@example.com")
    for _ in range(3):
        await create_postcard(client, token)

    resp = await client.get(f"/api/templates/{TEMPLATE_ID}")
    assert resp.json()["usageCount"] == 3

    resp = await client.get("/api/analytics/popular-templates", params={"limit": 1})
    assert [t["id"] for t in resp.json()] == [TEMPLATE_ID]


async def test_download_five_times(client):
    _, token = await register(client, "dave@example.com")
    postcard = await create_postcard(client, token)
    for _ in range(5):
        resp = await client.post(f"/api/postcards/{postcard['id']}/download")
        assert resp.json() == {"success": True}

    resp = await client.get(f"/api/postcards/{postcard['id']}")
    assert resp.json()["downloadCount"] == 5
    assert resp.json()["shareCount"] == 0


async def test_concurrent_downloads_are_not_lost(client):
    _, token = await register(client, "erin@example.com")
    postcard = await create_postcard(client, token)
    url = f"/api/postcards/{postcard['id']}/download"

    results = await asyncio.gather(*[client.post(url) for _ in range(20)])
    assert all(r.status_code == 200 for r in results)

    resp = await client.get(f"/api/postcards/{postcard['id']}")
    assert resp.json()["downloadCount"] == 20


async def test_download_unknown_postcard(client):
    resp = await client.post("/api/postcards/64b7f0c2a1b2c3d4e5f60718/download")
    assert resp.status_code == 404
    resp = await client.post("/api/postcards/not-an-id/share")
    assert resp.status_code == 404


async def test_share_records_analytics(client, storage):
    user, token = await register(client, "frank@example.com")
    postcard = await create_postcard(client, token)
    resp = await client.post(
        f"/api/postcards/{postcard['id']}/share", json={"platform": "instagram"}, headers=auth(token)
    )
    assert resp.json() == {"success": True}

    events = await storage.analytics.list_by_user(user["id"])
    assert [(e.eventType, e.platform) for e in events] == [("share", "instagram")]

    resp = await client.get(f"/api/analytics/user/{user['id']}", headers=auth(token))
    assert resp.json()["byType"] == {"share": 1}


async def test_public_gallery_only_public_and_limited(client):
    _, token = await register(client, "gina@example.com")
    for i in range(4):
        await create_postcard(client, token, title=f"public {i}", isPublic=True)
    await create_postcard(client, token, title="private")

    resp = await client.get("/api/postcards/public/gallery", params={"limit": 3})
    cards = resp.json()
    assert len(cards) == 3
    assert all(c["isPublic"] for c in cards)

    resp = await client.get("/api/postcards/public/gallery", params={"limit": 0})
    assert resp.json() == []


async def test_visibility_toggle_owner_only(client):
    _, owner_token = await register(client, "hank@example.com")
    _, other_token = await register(client, "ivy@example.com")
    postcard = await create_postcard(client, owner_token)

    url = f"/api/postcards/{postcard['id']}/visibility"
    resp = await client.patch(url, json={"isPublic": True}, headers=auth(other_token))
    assert resp.status_code == 403

    resp = await client.patch(url, json={"isPublic": True}, headers=auth(owner_token))
    assert resp.status_code == 200
    assert resp.json()["isPublic"] is True

    resp = await client.get("/api/postcards/public/gallery")
    assert [c["id"] for c in resp.json()] == [postcard["id"]]


async def test_user_postcards_newest_first(client):
    user, token = await register(client, "judy@example.com")
    first = await create_postcard(client, token, title="first")
    second = await create_postcard(client, token, title="second")

    resp = await client.get(f"/api/postcards/user/{user['id']}")
    ids = [c["id"] for c in resp.json()]
    assert set(ids) == {first["id"], second["id"]}


async def test_first_postcard_unlocks_achievement(client):
    _, token = await register(client, "kim@example.com")
    await create_postcard(client, token)

    stats = (await client.get("/api/user/stats", headers=auth(token))).json()
    assert stats["postcardsCreated"] == 1
    assert stats["streakDays"] == 1
    assert "first_postcard" in stats["badges"]
    assert stats["totalPoints"] == 15   # 5 for the postcard, 10 for the badge

    achievements = (await client.get("/api/user/achievements", headers=auth(token))).json()
    assert [a["achievementId"] for a in achievements] == ["first_postcard"]


async def test_anonymous_actions_attributed_to_body_user(client, storage):
    _, token = await register(client, "leo@example.com")
    postcard = await create_postcard(client, token)

    resp = await client.post(f"/api/postcards/{postcard['id']}/download", json={"userId": "guest-7"})
    assert resp.status_code == 200
    resp = await client.post(
        f"/api/postcards/{postcard['id']}/share", json={"userId": "guest-7", "platform": "facebook"}
    )
    assert resp.status_code == 200

    events = await storage.analytics.list_by_user("guest-7")
    assert sorted((e.eventType, e.platform) for e in events) == [("download", None), ("share", "facebook")]


async def test_token_wins_over_body_user(client, storage):
    user, token = await register(client, "mona@example.com")
    postcard = await create_postcard(client, token)
    await client.post(
        f"/api/postcards/{postcard['id']}/download", json={"userId": "someone-else"}, headers=auth(token)
    )
    assert await storage.analytics.list_by_user("someone-else") == []
    assert [e.eventType for e in await storage.analytics.list_by_user(user["id"])] == ["download"]
