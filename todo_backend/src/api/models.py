from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TypedDict

from bson import ObjectId


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item, independent of the
    storage backend.

    Fields:
    - id: 24-character hex ObjectId string
    - title: Short title (non-empty, trimmed on input)
    - description: Detailed description, '' when not given
    - read: Boolean flag set by mark-as-read
    - completed: Boolean completion flag
    - owner_id: Id of the User that created the todo; never reassigned
    - created_at: UTC creation timestamp (datetime)
    - updated_at: UTC last update timestamp (datetime)
    """

    id: str
    title: str
    description: str
    read: bool
    completed: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """A registered account. Only the bcrypt hash of the password is kept."""

    id: str
    username: str
    password_hash: str
    created_at: datetime


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Identity:
    """The authenticated principal, passed explicitly into every todo operation."""

    user_id: str
    username: str


def new_id() -> str:
    return str(ObjectId())


def is_valid_id(value: str) -> bool:
    return ObjectId.is_valid(value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
