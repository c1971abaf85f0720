# odesa/core/config.py
import logging
import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEV_ENVIRONMENTS = ("development", "test")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENVIRONMENT: str = "development"

    # Document store
    MONGODB_URI: Optional[str] = None
    MONGODB_DB_NAME: str = "odesa-holiday"
    DB_CONNECT_ATTEMPTS: int = 3
    DB_CONNECT_TIMEOUT_MS: int = 5000

    # Tokens
    JWT_SECRET_KEY: Optional[str] = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # External services
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_PUBLISHABLE_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"

    # Email
    SMTP_SERVER: Optional[str] = None
    SMTP_PORT: int = 465
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_LOG_PATH: str = "emails.log"

    # HTTP
    CLIENT_URL: str = "http://localhost:5000"
    PORT: int = 5001
    CORS_ORIGINS: List[str] = ["http://localhost:5000", "http://localhost:5173"]
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # Product
    ADMIN_EMAILS: List[str] = []
    POSTCARD_UNIT_PRICE: float = 2.99
    REFERRAL_BONUS_CREDITS: int = 5

    @model_validator(mode="after")
    def check_signing_secret(self):
        if self.JWT_SECRET_KEY:
            return self
        if self.ENVIRONMENT not in DEV_ENVIRONMENTS:
            raise ValueError(
                f"JWT_SECRET_KEY must be set when ENVIRONMENT={self.ENVIRONMENT}"
            )
        # Random per process, so tokens do not survive a restart.
        self.JWT_SECRET_KEY = secrets.token_urlsafe(32)
        logger.warning("JWT_SECRET_KEY not set, using a random development secret")
        return self

    @property
    def billing_enabled(self) -> bool:
        return bool(self.STRIPE_SECRET_KEY)

    @property
    def ai_enabled(self) -> bool:
        return bool(self.OPENAI_API_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()
