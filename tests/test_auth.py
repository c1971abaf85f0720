from datetime import timedelta

import pytest

from conftest import ADMIN_EMAIL, PASSWORD, auth, register
from odesa.core.exceptions import DuplicateEmail, InvalidCredentials, InvalidOrExpiredToken
from odesa.service.auth_service import AuthService
from odesa.utils.auth_utils import create_access_token, create_reset_token
from odesa.utils.hash_utils import hash_password, verify_password


@pytest.fixture
def service(storage, settings):
    return AuthService(storage.users, settings)


async def test_register_issues_token_that_resolves_to_user(service):
    user, token = await service.register("Alice@Example.com", "wonderland")
    assert user.email == "alice@example.com"
    assert user.passwordHash.startswith("$argon2")
    assert user.passwordHash != "wonderland"

    resolved = await service.verify_token(token)
    assert resolved.id == user.id


async def test_register_duplicate_email(service):
    await service.register("bob@example.com", "password1")
    with pytest.raises(DuplicateEmail):
        await service.register("BOB@example.com", "password2")


async def test_login_rejects_wrong_password(service):
    await service.register("carol@example.com", "password1")
    with pytest.raises(InvalidCredentials):
        await service.login("carol@example.com", "nope")
    with pytest.raises(InvalidCredentials):
        await service.login("nobody@example.com", "password1")


async def test_verify_token_rejects_garbage_and_reset_tokens(service, settings):
    user, _ = await service.register("dave@example.com", "password1")
    assert await service.verify_token("not-a-jwt") is None
    assert await service.verify_token(create_reset_token(user.id, settings)) is None
    expired = create_access_token(user.id, settings, expires_delta=timedelta(seconds=-5))
    assert await service.verify_token(expired) is None


async def test_reset_token_is_single_use(service, storage):
    user, _ = await service.register("erin@example.com", "oldpassword")
    await service.request_password_reset("erin@example.com")
    token = (await storage.users.get_by_id(user.id)).resetToken

    await service.reset_password(token, "newpassword")
    await service.login("erin@example.com", "newpassword")
    with pytest.raises(InvalidCredentials):
        await service.login("erin@example.com", "oldpassword")

    with pytest.raises(InvalidOrExpiredToken):
        await service.reset_password(token, "thirdpassword")


async def test_reset_rejected_after_stored_expiry(service, storage):
    user, _ = await service.register("frank@example.com", "oldpassword")
    await service.request_password_reset("frank@example.com")
    token = (await storage.users.get_by_id(user.id)).resetToken

    stored = await storage.users.get_by_id(user.id)
    await storage.users.store_reset_token(user.id, token, stored.resetTokenExpiry - timedelta(hours=2))

    with pytest.raises(InvalidOrExpiredToken):
        await service.reset_password(token, "newpassword")


async def test_expired_reset_jwt_rejected(service, settings):
    user, _ = await service.register("gina@example.com", "oldpassword")
    token = create_reset_token(user.id, settings, expires_delta=timedelta(seconds=-1))
    with pytest.raises(InvalidOrExpiredToken):
        await service.reset_password(token, "newpassword")


async def test_forgot_password_same_answer_for_unknown_email(service):
    await service.register("hank@example.com", "password1")
    known = await service.request_password_reset("hank@example.com")
    unknown = await service.request_password_reset("ghost@example.com")
    assert known == unknown


async def test_reset_email_goes_to_outbox(service, settings):
    import logging
    from odesa.core.logging import OUTBOX_LOGGER

    outbox = logging.getLogger(OUTBOX_LOGGER)
    handler = logging.FileHandler(settings.EMAIL_LOG_PATH)
    outbox.addHandler(handler)
    outbox.setLevel(logging.INFO)
    try:
        await service.register("ivy@example.com", "password1")
        await service.request_password_reset("ivy@example.com")
    finally:
        outbox.removeHandler(handler)
        handler.close()

    with open(settings.EMAIL_LOG_PATH) as f:
        logged = f.read()
    assert "ivy@example.com" in logged
    assert "/reset-password?token=" in logged


async def test_legacy_bcrypt_hash_upgraded_on_login(service, storage):
    from passlib.hash import bcrypt

    user, _ = await service.register("judy@example.com", "password1")
    await storage.users.set_password_hash(user.id, bcrypt.hash("password1"))

    await service.login("judy@example.com", "password1")
    upgraded = await storage.users.get_by_id(user.id)
    assert upgraded.passwordHash.startswith("$argon2")


def test_verify_password_flags():
    hashed = hash_password("pw123456")
    assert verify_password("pw123456", hashed) == (True, False)
    assert verify_password("wrong", hashed) == (False, False)
    assert verify_password("pw123456", "plaintext") == (False, False)


async def test_referral_credits_referrer(service, storage, settings):
    referrer, _ = await service.register("kim@example.com", "password1")
    await service.register("leo@example.com", "password1", referral_code=referrer.referralCode)
    updated = await storage.users.get_by_id(referrer.id)
    assert updated.credits == settings.REFERRAL_BONUS_CREDITS


# ------------------------
# HTTP
# ------------------------
async def test_register_and_me_over_http(client):
    user, token = await register(client, "alice@example.com", username="alice")
    assert "passwordHash" not in user
    assert user["role"] == "user"

    resp = await client.get("/api/auth/me", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"


async def test_me_requires_token(client):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Access token required"}

    resp = await client.get("/api/auth/me", headers=auth("bogus"))
    assert resp.status_code == 403


async def test_duplicate_registration_over_http(client):
    await register(client, "dup@example.com")
    resp = await client.post("/api/auth/register", json={"email": "dup@example.com", "password": PASSWORD})
    assert resp.status_code == 400
    assert resp.json()["message"] == "User already exists with this email"


async def test_invalid_payload_returns_400_with_errors(client):
    resp = await client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid data"
    assert body["errors"]


async def test_login_over_http(client):
    await register(client, "mia@example.com")
    resp = await client.post("/api/auth/login", json={"email": "mia@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["token"]

    resp = await client.post("/api/auth/login", json={"email": "mia@example.com", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


async def test_admin_email_gets_admin_role(client):
    user, _ = await register(client, ADMIN_EMAIL)
    assert user["role"] == "admin"


async def test_reset_password_over_http(client, storage):
    user, _ = await register(client, "nina@example.com")
    resp = await client.post("/api/auth/forgot-password", json={"email": "nina@example.com"})
    assert resp.status_code == 200
    token = (await storage.users.get_by_id(user["id"])).resetToken

    resp = await client.post("/api/auth/reset-password", json={"token": token, "password": "brandnew1"})
    assert resp.status_code == 200
    resp = await client.post("/api/auth/reset-password", json={"token": token, "password": "brandnew2"})
    assert resp.status_code == 400
