"""
FastAPI dependencies.

Everything is resolved from `request.app.state`, which the app factory and
lifespan populate; there is no module-level store or client.
"""

from __future__ import annotations

from fastapi import Depends, Request

from .auth import AuthResult, BearerTokenStrategy, CookieTokenStrategy
from .errors import Unauthorized
from .models import Identity
from .repositories import Stores, TodoRepository, UserRepository
from .security import PasswordHasher, TokenService
from .settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def get_todo_repository(stores: Stores = Depends(get_stores)) -> TodoRepository:
    return stores.todos


def get_user_repository(stores: Stores = Depends(get_stores)) -> UserRepository:
    return stores.users


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_bearer_strategy(
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> BearerTokenStrategy:
    return BearerTokenStrategy(tokens, users)


def get_cookie_strategy(
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> CookieTokenStrategy:
    return CookieTokenStrategy(tokens, users)


# PUBLIC_INTERFACE
async def require_identity(
    request: Request, strategy: BearerTokenStrategy = Depends(get_bearer_strategy)
) -> Identity:
    """Identity of the bearer-token caller; raises a 401-family error otherwise."""
    result = await strategy.authenticate(request)
    if result.identity is None:
        raise Unauthorized()
    return result.identity


# PUBLIC_INTERFACE
async def web_auth(
    request: Request, strategy: CookieTokenStrategy = Depends(get_cookie_strategy)
) -> AuthResult:
    """Cookie authentication result for HTML routes; anonymous on any failure."""
    return await strategy.authenticate(request)


# PUBLIC_INTERFACE
async def require_web_identity(auth: AuthResult = Depends(web_auth)) -> Identity:
    """
    Identity of the cookie-authenticated caller for the JSON mutation routes.

    Anonymous callers get 401 "Unauthorized" before the request body is read,
    and an unusable token cookie is cleared on that response.
    """
    if auth.identity is None:
        raise Unauthorized(headers=auth.rejection_headers())
    return auth.identity
