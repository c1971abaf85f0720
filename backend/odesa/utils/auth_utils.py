# odesa/utils/auth_utils.py
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from odesa.core.config import Settings

ACCESS = "access"
RESET = "reset"


class TokenError(Exception):
    pass


def _encode(data: dict, settings: Settings, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "iat": now,
        "exp": now + expires_delta,
        "type": token_type,
    })
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(user_id: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    return _encode({"sub": user_id}, settings, ACCESS, expires_delta)


def create_reset_token(user_id: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    # jti keeps two resets issued in the same second distinct
    return _encode({"sub": user_id, "jti": secrets.token_urlsafe(16)}, settings, RESET, expires_delta)


def decode_token(token: str, settings: Settings, expected_type: str = ACCESS) -> dict:
    try:
        decoded = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if decoded.get("type") != expected_type:
        raise TokenError(f"Invalid token type: expected {expected_type}")
    return decoded
