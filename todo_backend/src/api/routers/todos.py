from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ..dependencies import get_todo_repository, require_identity
from ..models import Identity
from ..repositories import TodoRepository
from ..schemas import MessageOut, TodoCreate, TodoOut, TodoUpdate
from ..services import todos as todo_service

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
    responses={401: {"description": "Missing, invalid or expired bearer token"}},
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="List every todo owned by the caller, newest first.",
)
async def list_todos(
    identity: Identity = Depends(require_identity),
    repo: TodoRepository = Depends(get_todo_repository),
) -> List[TodoOut]:
    """
    List the caller's todos.
    """
    items = await todo_service.list_todos(repo, identity)
    return [TodoOut(**it) for it in items]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item owned by the caller and return it.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Title is required"},
    },
)
async def create_todo(
    payload: TodoCreate,
    identity: Identity = Depends(require_identity),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoOut:
    """
    Create a new Todo.
    """
    created = await todo_service.create_todo(repo, identity, payload)
    return TodoOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description=(
        "Update title, description and/or completed on one of the caller's todos. "
        "Fields omitted from the body are left unchanged."
    ),
    responses={
        200: {"description": "Todo updated"},
        400: {"description": "Malformed id or blank title"},
        404: {"description": "Todo not found"},
    },
)
async def update_todo(
    todo_id: str,
    payload: Optional[TodoUpdate] = None,
    identity: Identity = Depends(require_identity),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoOut:
    """
    Partial update of a Todo item. A request without a body changes nothing.
    """
    updated = await todo_service.update_todo(repo, identity, todo_id, payload or TodoUpdate())
    return TodoOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageOut,
    summary="Delete Todo",
    description="Delete one of the caller's todos.",
    responses={
        200: {"description": "Todo deleted"},
        400: {"description": "Malformed id"},
        404: {"description": "Todo not found"},
    },
)
async def delete_todo(
    todo_id: str,
    identity: Identity = Depends(require_identity),
    repo: TodoRepository = Depends(get_todo_repository),
) -> MessageOut:
    """
    Delete a Todo. Returns a confirmation message, 404 if not found.
    """
    await todo_service.delete_todo(repo, identity, todo_id)
    return MessageOut(message="Todo deleted successfully")


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}/read",
    response_model=TodoOut,
    summary="Mark Todo Read",
    description="Set the read flag on one of the caller's todos. Idempotent.",
    responses={
        200: {"description": "Todo marked as read"},
        400: {"description": "Malformed id"},
        404: {"description": "Todo not found"},
    },
)
async def mark_todo_read(
    todo_id: str,
    identity: Identity = Depends(require_identity),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoOut:
    updated = await todo_service.mark_read(repo, identity, todo_id)
    return TodoOut(**updated)  # type: ignore[arg-type]
