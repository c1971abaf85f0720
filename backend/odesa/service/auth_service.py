# odesa/service/auth_service.py
"""
Credential store: password hashing, bearer tokens and password resets.

Every "who are you" question in the API is answered here; routes and the
auth dependencies never touch tokens or hashes directly.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from odesa.core.config import Settings
from odesa.core.exceptions import DuplicateEmail, InvalidCredentials, InvalidOrExpiredToken
from odesa.crud.user_crud import UserRepository
from odesa.models.user import ROLE_ADMIN, ROLE_USER, User
from odesa.serialize import utcnow
from odesa.utils.auth_utils import (
    RESET,
    TokenError,
    create_access_token,
    create_reset_token,
    decode_token,
)
from odesa.utils.email_utils import send_password_reset_email
from odesa.utils.hash_utils import hash_password, verify_password

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_referral_code() -> str:
    return "REF" + secrets.token_hex(4).upper()


class AuthService:
    def __init__(self, users: UserRepository, settings: Settings):
        self.users = users
        self.settings = settings

    def issue_token(self, user: User) -> str:
        return create_access_token(user.id, self.settings)

    async def register(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
        referral_code: Optional[str] = None,
    ) -> Tuple[User, str]:
        email = normalize_email(email)
        if await self.users.get_by_email(email):
            raise DuplicateEmail()

        referrer = None
        if referral_code:
            referrer = await self.users.get_by_referral_code(referral_code.strip().upper())

        admin_emails = {normalize_email(e) for e in self.settings.ADMIN_EMAILS}
        role = ROLE_ADMIN if email in admin_emails else ROLE_USER

        password_hash = await run_in_threadpool(hash_password, password)
        user = await self.users.create(
            email=email,
            password_hash=password_hash,
            username=username,
            role=role,
            referral_code=generate_referral_code(),
            referred_by=referrer.id if referrer else None,
        )
        if referrer:
            await self.users.adjust_credits(referrer.id, self.settings.REFERRAL_BONUS_CREDITS)
            logger.info("Referral bonus credited to %s", referrer.id)

        logger.info("Registered user %s (role=%s)", user.id, role)
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.users.get_by_email(normalize_email(email))
        if not user:
            raise InvalidCredentials()

        valid, needs_upgrade = await run_in_threadpool(verify_password, password, user.passwordHash)
        if not valid:
            raise InvalidCredentials()

        if needs_upgrade:
            new_hash = await run_in_threadpool(hash_password, password)
            await self.users.set_password_hash(user.id, new_hash)
            logger.info("Upgraded legacy password hash for %s", user.id)

        await self.users.touch_last_login(user.id)
        return user, self.issue_token(user)

    async def verify_token(self, token: str) -> Optional[User]:
        """Resolve a bearer token to its user; any failure is just None."""
        try:
            payload = decode_token(token, self.settings)
        except TokenError as e:
            logger.debug("Token rejected: %s", e)
            return None
        return await self.users.get_by_id(payload["sub"])

    async def request_password_reset(self, email: str) -> str:
        user = await self.users.get_by_email(normalize_email(email))
        if user is None:
            return RESET_REQUESTED_MESSAGE

        expires_in = timedelta(minutes=self.settings.RESET_TOKEN_EXPIRE_MINUTES)
        token = create_reset_token(user.id, self.settings, expires_in)
        await self.users.store_reset_token(user.id, token, utcnow() + expires_in)

        try:
            await run_in_threadpool(send_password_reset_email, user.email, token, self.settings)
        except Exception:
            # the caller sees the same answer either way
            logger.exception("Password reset email to %s could not be sent", user.id)
        return RESET_REQUESTED_MESSAGE

    async def reset_password(self, token: str, new_password: str) -> User:
        try:
            payload = decode_token(token, self.settings, expected_type=RESET)
        except TokenError:
            raise InvalidOrExpiredToken()

        password_hash = await run_in_threadpool(hash_password, new_password)
        user = await self.users.consume_reset_token(payload["sub"], token, password_hash)
        if user is None:
            raise InvalidOrExpiredToken()
        logger.info("Password reset for %s", user.id)
        return user
