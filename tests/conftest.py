import json
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from odesa.core.config import Settings
from odesa.crud.storage import Storage
from odesa.db.database import Database
from odesa.main import create_app
from odesa.run_seeders import seed_all
from odesa.service.story_service import StoryService

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "secret123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        JWT_SECRET_KEY="test-signing-secret",
        MONGODB_DB_NAME="odesa-test",
        EMAIL_LOG_PATH=str(tmp_path / "emails.log"),
        LOG_DIR=str(tmp_path / "logs"),
        ADMIN_EMAILS=[ADMIN_EMAIL],
    )


@pytest.fixture
async def storage(settings):
    database = Database(settings, client=AsyncMongoMockClient())
    await database.ensure_indexes()
    storage = Storage(database.db)
    await seed_all(storage)
    return storage


@pytest.fixture
def app(settings, storage):
    app = create_app(settings)
    app.state.storage = storage
    app.state.billing = None
    app.state.ai = None
    app.state.stories = StoryService()
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client, email: str, password: str = PASSWORD, **extra):
    resp = await client.post("/api/auth/register", json={"email": email, "password": password, **extra})
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["user"], body["token"]


def fake_openai(*contents):
    """Chat completions stub answering with the given contents in order."""
    calls = []
    replies = list(contents)

    async def create(**kwargs):
        calls.append(kwargs)
        content = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(content, Exception):
            raise content
        if not isinstance(content, str):
            content = json.dumps(content)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    client.calls = calls
    return client
