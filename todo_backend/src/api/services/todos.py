"""
Owner-scoped todo operations.

Each operation takes the todo store and the caller's Identity explicitly. The
store is only touched after the caller has been authenticated, and every
lookup by id is scoped to `identity.user_id`, so a todo owned by someone else
is reported exactly like one that does not exist.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..errors import InvalidIdentifier, NotFound, ValidationError
from ..models import Identity, TodoEntity, is_valid_id
from ..repositories import TodoRepository
from ..schemas import TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)


def _require_valid_id(todo_id: str) -> None:
    if not is_valid_id(todo_id):
        raise InvalidIdentifier()


def _clean_title(title: Any) -> str:
    s = (title or "").strip()
    if not s:
        raise ValidationError("Title is required")
    return s


# PUBLIC_INTERFACE
async def list_todos(repo: TodoRepository, identity: Identity) -> List[TodoEntity]:
    """Return every todo owned by the caller, newest first."""
    return await repo.list_for_owner(identity.user_id)


# PUBLIC_INTERFACE
async def create_todo(repo: TodoRepository, identity: Identity, data: TodoCreate) -> TodoEntity:
    """
    Create a todo owned by the caller.

    Raises:
        ValidationError: title is missing or blank.
    """
    title = _clean_title(data.title)
    todo = await repo.create(identity.user_id, title, data.description or "")
    logger.info("User %s created todo %s", identity.user_id, todo["id"])
    return todo


def _changes_from(data: TodoUpdate) -> Dict[str, Any]:
    # Only fields present in the request body are applied
    provided = data.model_fields_set
    changes: Dict[str, Any] = {}
    if "title" in provided and data.title is not None:
        changes["title"] = _clean_title(data.title)
    if "description" in provided:
        changes["description"] = data.description or ""
    if "completed" in provided and data.completed is not None:
        changes["completed"] = data.completed
    return changes


# PUBLIC_INTERFACE
async def update_todo(
    repo: TodoRepository, identity: Identity, todo_id: str, data: TodoUpdate
) -> TodoEntity:
    """
    Partially update one of the caller's todos. Absent fields are left untouched.

    Raises:
        InvalidIdentifier: todo_id is not a well-formed id.
        ValidationError: a provided title is blank.
        NotFound: no todo with this id belongs to the caller.
    """
    _require_valid_id(todo_id)
    changes = _changes_from(data)
    updated = await repo.update_owned(todo_id, identity.user_id, changes)
    if updated is None:
        raise NotFound()
    return updated


# PUBLIC_INTERFACE
async def delete_todo(repo: TodoRepository, identity: Identity, todo_id: str) -> None:
    """Delete one of the caller's todos, or raise NotFound / InvalidIdentifier."""
    _require_valid_id(todo_id)
    if not await repo.delete_owned(todo_id, identity.user_id):
        raise NotFound()
    logger.info("User %s deleted todo %s", identity.user_id, todo_id)


# PUBLIC_INTERFACE
async def mark_read(repo: TodoRepository, identity: Identity, todo_id: str) -> TodoEntity:
    """Set `read` on one of the caller's todos. Calling it again is a no-op success."""
    _require_valid_id(todo_id)
    updated = await repo.update_owned(todo_id, identity.user_id, {"read": True})
    if updated is None:
        raise NotFound()
    return updated
