from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..dependencies import (
    get_password_hasher,
    get_token_service,
    get_user_repository,
    require_identity,
)
from ..models import Identity
from ..repositories import UserRepository
from ..schemas import Credentials, TokenOut, UserOut
from ..security import PasswordHasher, TokenService
from ..services import users as user_service

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account. The password is stored as a bcrypt hash.",
    responses={400: {"description": "Invalid input or username already exists"}},
)
async def register(
    payload: Credentials,
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserOut:
    user = await user_service.register_user(users, hasher, payload.username, payload.password)
    return UserOut(id=user["id"], username=user["username"])


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenOut,
    summary="Login",
    description="Exchange a username and password for a bearer token valid for one day.",
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    payload: Credentials,
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> TokenOut:
    """
    Verify credentials and issue a token for the Authorization header.
    """
    user = await user_service.authenticate_user(users, hasher, payload.username, payload.password)
    return TokenOut(
        token=tokens.issue(user["id"], user["username"]),
        expires_in=tokens.ttl_seconds,
        user=UserOut(id=user["id"], username=user["username"]),
    )


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserOut, summary="Current User")
async def me(identity: Identity = Depends(require_identity)) -> UserOut:
    """Return the account the bearer token belongs to."""
    return UserOut(id=identity.user_id, username=identity.username)
