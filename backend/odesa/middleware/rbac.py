# odesa/middleware/rbac.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from odesa.core.config import Settings
from odesa.core.error_messages import ErrorResponses
from odesa.core.exceptions import ServiceUnavailable
from odesa.crud.storage import Storage
from odesa.models.user import User
from odesa.service.ai_service import AIService
from odesa.service.auth_service import AuthService
from odesa.service.billing_service import BillingService
from odesa.service.gamification_service import GamificationService
from odesa.service.story_service import StoryService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings_dep),
) -> AuthService:
    return AuthService(storage.users, settings)


def get_gamification(storage: Storage = Depends(get_storage)) -> GamificationService:
    return GamificationService(storage)


def get_billing(request: Request) -> BillingService:
    billing = getattr(request.app.state, "billing", None)
    if billing is None:
        raise ServiceUnavailable("Payment processing is currently unavailable. Please contact support.")
    return billing


def get_optional_billing(request: Request) -> Optional[BillingService]:
    return getattr(request.app.state, "billing", None)


def get_ai_service(request: Request) -> AIService:
    ai = getattr(request.app.state, "ai", None)
    if ai is None:
        raise ServiceUnavailable("AI features are currently unavailable.")
    return ai


def get_story_service(request: Request) -> StoryService:
    stories = getattr(request.app.state, "stories", None)
    return stories or StoryService()


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    if not token:
        raise ErrorResponses.TOKEN_REQUIRED
    user = await auth.verify_token(token)
    if user is None:
        raise ErrorResponses.INVALID_TOKEN
    return user


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    if not token:
        return None
    return await auth.verify_token(token)


def is_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ErrorResponses.ADMIN_ONLY
    return user
