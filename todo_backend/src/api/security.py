from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from .errors import ExpiredCredential, InvalidCredential

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=1)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by a verified identity token."""

    user_id: str
    username: str
    issued_at: datetime
    expires_at: datetime


# PUBLIC_INTERFACE
class TokenService:
    """
    Issues and verifies signed, time-limited identity tokens.

    Tokens are HS256 JWTs with the claims `{id, username, iat, exp}`. Signing is
    deterministic for identical claims, secret and issue instant; verification
    has no side effects and needs no store lookup.
    """

    def __init__(self, secret: str, algorithm: str = ALGORITHM, ttl: timedelta = DEFAULT_TOKEN_TTL) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, user_id: str, username: str, issued_at: Optional[datetime] = None) -> str:
        """Return a signed token for the user, valid for the configured lifetime from issued_at."""
        iat = (issued_at or datetime.now(timezone.utc)).replace(microsecond=0)
        payload = {
            "id": user_id,
            "username": username,
            "iat": iat,
            "exp": iat + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            ExpiredCredential: the signature is valid but the token is past `exp`.
            InvalidCredential: bad signature, malformed token or missing claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredCredential() from e
        except jwt.InvalidTokenError as e:
            raise InvalidCredential() from e

        user_id = payload.get("id")
        username = payload.get("username")
        if not isinstance(user_id, str) or not isinstance(username, str):
            raise InvalidCredential()

        return TokenClaims(
            user_id=user_id,
            username=username,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


# PUBLIC_INTERFACE
class PasswordHasher:
    """Salted one-way password hashing with bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        secret = password.encode("utf-8")
        # Registration never accepts a longer password, so nothing stored can match
        if len(secret) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(secret, hashed.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
