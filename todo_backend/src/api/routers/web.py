"""
Server-rendered frontend.

Pages and form posts authenticate with the `token` cookie through
CookieTokenStrategy, which never rejects a request outright: an unusable cookie
is cleared and the visitor is treated as anonymous. The JSON mutation endpoints
return the same shapes as the bearer-token API and answer anonymous callers
with 401 before reading the body.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Type, TypeVar

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..auth import TOKEN_COOKIE, AuthResult
from ..dependencies import (
    get_app_settings,
    get_password_hasher,
    get_todo_repository,
    get_token_service,
    get_user_repository,
    require_web_identity,
    web_auth,
)
from ..errors import ApiError
from ..models import Identity
from ..repositories import TodoRepository, UserRepository
from ..schemas import MessageOut, TodoCreate, TodoOut, TodoUpdate
from ..security import PasswordHasher, TokenService
from ..services import todos as todo_service
from ..services import users as user_service
from ..settings import Settings
from ..utils import consume_flashes, flash

logger = logging.getLogger(__name__)

BodyT = TypeVar("BodyT", bound=BaseModel)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(tags=["web"], include_in_schema=False)


def _redirect(url: str, auth: AuthResult) -> Response:
    return auth.apply(RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER))


def _render(request: Request, name: str, auth: AuthResult, **context) -> Response:
    context.setdefault("user", auth.identity)
    context["messages"] = consume_flashes(request)
    return auth.apply(templates.TemplateResponse(request, name, context))


# PUBLIC_INTERFACE
@router.get("/")
async def index(
    request: Request,
    auth: AuthResult = Depends(web_auth),
    repo: TodoRepository = Depends(get_todo_repository),
) -> Response:
    """Todo list for the logged-in user; anonymous visitors go to the login page."""
    if auth.identity is None:
        return _redirect("/login", auth)
    todos = await todo_service.list_todos(repo, auth.identity)
    return _render(request, "index.html", auth, todos=todos)


@router.get("/login")
async def login_page(request: Request, auth: AuthResult = Depends(web_auth)) -> Response:
    if auth.identity is not None:
        return _redirect("/", auth)
    return _render(request, "login.html", auth)


@router.get("/register")
async def register_page(request: Request, auth: AuthResult = Depends(web_auth)) -> Response:
    if auth.identity is not None:
        return _redirect("/", auth)
    return _render(request, "register.html", auth)


# PUBLIC_INTERFACE
@router.post("/login")
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Verify the form credentials and set the httpOnly token cookie."""
    try:
        user = await user_service.authenticate_user(users, hasher, username, password)
    except ApiError as e:
        flash(request, "error", e.message)
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        TOKEN_COOKIE,
        tokens.issue(user["id"], user["username"]),
        max_age=tokens.ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    flash(request, "success", "Logged in successfully")
    return response


# PUBLIC_INTERFACE
@router.post("/register")
async def register(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> Response:
    try:
        await user_service.register_user(users, hasher, username, password)
    except ApiError as e:
        flash(request, "error", e.message)
        return RedirectResponse("/register", status_code=status.HTTP_303_SEE_OTHER)

    flash(request, "success", "Registration successful! Please log in.")
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/logout")
async def logout(request: Request) -> Response:
    response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(TOKEN_COOKIE)
    flash(request, "success", "Logged out successfully")
    return response


async def _read_body(request: Request, model: Type[BodyT]) -> BodyT:
    """
    Parse the JSON body into `model` once the caller is authenticated.

    An empty body is read as `{}`. Malformed JSON and type errors surface as the
    usual 400 "Request validation failed".
    """
    raw = await request.body()
    if not raw.strip():
        return model()
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


# PUBLIC_INTERFACE
@router.post("/todos", status_code=status.HTTP_201_CREATED, response_model=TodoOut)
async def create_todo(
    request: Request,
    identity: Identity = Depends(require_web_identity),
    repo: TodoRepository = Depends(get_todo_repository),
):
    payload = await _read_body(request, TodoCreate)
    created = await todo_service.create_todo(repo, identity, payload)
    return TodoOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put("/todos/{todo_id}", response_model=TodoOut)
async def update_todo(
    todo_id: str,
    request: Request,
    identity: Identity = Depends(require_web_identity),
    repo: TodoRepository = Depends(get_todo_repository),
):
    payload = await _read_body(request, TodoUpdate)
    updated = await todo_service.update_todo(repo, identity, todo_id, payload)
    return TodoOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete("/todos/{todo_id}", response_model=MessageOut)
async def delete_todo(
    todo_id: str,
    identity: Identity = Depends(require_web_identity),
    repo: TodoRepository = Depends(get_todo_repository),
):
    await todo_service.delete_todo(repo, identity, todo_id)
    return MessageOut(message="Todo deleted successfully")


# PUBLIC_INTERFACE
@router.patch("/todos/{todo_id}/read", response_model=TodoOut)
async def mark_todo_read(
    todo_id: str,
    identity: Identity = Depends(require_web_identity),
    repo: TodoRepository = Depends(get_todo_repository),
):
    updated = await todo_service.mark_read(repo, identity, todo_id)
    return TodoOut(**updated)  # type: ignore[arg-type]
