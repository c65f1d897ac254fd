from __future__ import annotations

import logging

from starlette.concurrency import run_in_threadpool

from ..errors import InvalidLogin, ValidationError
from ..models import UserEntity
from ..repositories import UserRepository
from ..security import BCRYPT_MAX_PASSWORD_BYTES, PasswordHasher

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
async def register_user(
    users: UserRepository, hasher: PasswordHasher, username: str, password: str
) -> UserEntity:
    """
    Create an account, storing only the bcrypt hash of the password.

    Raises:
        ValidationError: blank username, blank password or a password longer than 72 bytes.
        UsernameTaken: the username is already registered.
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")
    if not password:
        raise ValidationError("Password is required")
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")

    password_hash = await run_in_threadpool(hasher.hash, password)
    user = await users.create(username, password_hash)
    logger.info("Registered user %s (%s)", user["username"], user["id"])
    return user


# PUBLIC_INTERFACE
async def authenticate_user(
    users: UserRepository, hasher: PasswordHasher, username: str, password: str
) -> UserEntity:
    """Return the user if the password matches, else raise InvalidLogin."""
    user = await users.get_by_username((username or "").strip())
    if user is None or not password:
        raise InvalidLogin()
    if not await run_in_threadpool(hasher.verify, password, user["password_hash"]):
        logger.info("Failed login for user %s", user["username"])
        raise InvalidLogin()
    return user
