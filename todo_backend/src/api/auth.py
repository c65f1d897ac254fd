from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Request, Response

from .errors import AuthenticationError, NoCredential, UnknownPrincipal
from .models import Identity
from .repositories import UserRepository
from .security import TokenService

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class AuthResult:
    """
    Outcome of running an AuthenticationStrategy against a request.

    `identity` is None for anonymous requests. `clear_cookie` is set when a token
    cookie was sent but could not be used; `apply()` removes it from a response.
    """

    identity: Optional[Identity] = None
    clear_cookie: bool = False

    def apply(self, response: Response) -> Response:
        if self.clear_cookie:
            response.delete_cookie(TOKEN_COOKIE)
        return response

    def rejection_headers(self) -> Dict[str, str]:
        """Headers for a 401 raised on behalf of this result (cookie clearing only)."""
        if not self.clear_cookie:
            return {}
        cleared = self.apply(Response())
        return {"set-cookie": cleared.headers["set-cookie"]}


# PUBLIC_INTERFACE
class AuthenticationStrategy(ABC):
    """
    Turns a request into an AuthResult.

    Subclasses decide where the token comes from and what happens when it is
    absent or unusable; verification and user resolution are shared.
    """

    def __init__(self, tokens: TokenService, users: UserRepository) -> None:
        self._tokens = tokens
        self._users = users

    @abstractmethod
    def extract_token(self, request: Request) -> Optional[str]:
        """Return the raw token carried by the request, or None."""

    @abstractmethod
    async def authenticate(self, request: Request) -> AuthResult:
        """Authenticate the request according to this strategy's failure policy."""

    async def resolve(self, token: str) -> Identity:
        """
        Verify the token and confirm the user it names still exists.

        Raises:
            InvalidCredential / ExpiredCredential: from the token service.
            UnknownPrincipal: the token is valid but its user is gone.
        """
        claims = self._tokens.verify(token)
        user = await self._users.get(claims.user_id)
        if user is None:
            raise UnknownPrincipal()
        return Identity(user_id=user["id"], username=user["username"])


# PUBLIC_INTERFACE
class BearerTokenStrategy(AuthenticationStrategy):
    """
    `Authorization: Bearer <token>` authentication for the JSON API.

    Fails closed: every failure raises an AuthenticationError (401).
    """

    def extract_token(self, request: Request) -> Optional[str]:
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2:
            return None

        scheme, token = parts
        if scheme.lower() != "bearer":
            return None
        return token

    async def authenticate(self, request: Request) -> AuthResult:
        token = self.extract_token(request)
        if not token:
            raise NoCredential()
        try:
            identity = await self.resolve(token)
        except AuthenticationError as e:
            logger.info("Rejected bearer token: %s", e.message)
            raise
        return AuthResult(identity=identity)


# PUBLIC_INTERFACE
class CookieTokenStrategy(AuthenticationStrategy):
    """
    `token` cookie authentication for the HTML frontend.

    Fails open: a missing token means anonymous, and an unusable one means
    anonymous plus a request to clear the cookie. Never raises for bad tokens.
    """

    def extract_token(self, request: Request) -> Optional[str]:
        return request.cookies.get(TOKEN_COOKIE) or None

    async def authenticate(self, request: Request) -> AuthResult:
        token = self.extract_token(request)
        if not token:
            return AuthResult()
        try:
            identity = await self.resolve(token)
        except AuthenticationError as e:
            logger.info("Clearing unusable token cookie: %s", e.message)
            return AuthResult(clear_cookie=True)
        return AuthResult(identity=identity)
