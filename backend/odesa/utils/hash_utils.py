# odesa/utils/hash_utils.py
from typing import Tuple

from passlib.hash import argon2


def hash_password(password: str) -> str:
    """Hash plain password with Argon2."""
    return argon2.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> Tuple[bool, bool]:
    """
    Returns (valid, needs_upgrade). Accounts carried over from the old
    bcrypt store still verify; the caller re-hashes them with Argon2.
    """
    if hashed_password.startswith("$argon2"):
        return argon2.verify(plain_password, hashed_password), False

    if hashed_password.startswith(("$2b$", "$2a$", "$2y$")):
        from passlib.hash import bcrypt

        if bcrypt.verify(plain_password, hashed_password):
            return True, True
    return False, False
