from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional

from .errors import UsernameTaken
from .models import TodoEntity, UserEntity, new_id, utcnow
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Fields a caller may overwrite through update_owned
MUTABLE_TODO_FIELDS = frozenset({"title", "description", "completed", "read"})


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """
    Abstract repository contract for todo storage backends.

    Every lookup matches on the todo id and the owner id jointly, so a record is
    never reachable through the wrong principal.
    """

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> List[TodoEntity]:
        """Return all todos owned by owner_id, newest first."""

    @abstractmethod
    async def create(self, owner_id: str, title: str, description: str) -> TodoEntity:
        """Create and return a new TodoEntity with read/completed unset."""

    @abstractmethod
    async def update_owned(
        self, todo_id: str, owner_id: str, changes: Dict[str, Any]
    ) -> Optional[TodoEntity]:
        """Apply `changes` to the matching todo. Return updated entity or None if no match."""

    @abstractmethod
    async def delete_owned(self, todo_id: str, owner_id: str) -> bool:
        """Delete the matching todo. Return True if deleted, False if no match."""


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract repository contract for user (credential) storage."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserEntity]:
        """Return the user with this id, or None."""

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[UserEntity]:
        """Return the user with this exact username, or None."""

    @abstractmethod
    async def create(self, username: str, password_hash: str) -> UserEntity:
        """Create a user. Raises UsernameTaken if the username is in use."""


def _newest_first(items: List[TodoEntity]) -> List[TodoEntity]:
    return sorted(items, key=lambda t: (t["created_at"], t["id"]), reverse=True)


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory todo store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}

    def _owned(self, todo_id: str, owner_id: str) -> Optional[TodoEntity]:
        item = self._items.get(todo_id)
        if item is None or item["owner_id"] != owner_id:
            return None
        return item

    async def list_for_owner(self, owner_id: str) -> List[TodoEntity]:
        with self._lock:
            owned = [t.copy() for t in self._items.values() if t["owner_id"] == owner_id]
        return _newest_first(owned)

    async def create(self, owner_id: str, title: str, description: str) -> TodoEntity:
        now = utcnow()
        entity: TodoEntity = {
            "id": new_id(),
            "title": title,
            "description": description,
            "read": False,
            "completed": False,
            "owner_id": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    async def update_owned(
        self, todo_id: str, owner_id: str, changes: Dict[str, Any]
    ) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._owned(todo_id, owner_id)
            if existing is None:
                return None

            updated = existing.copy()
            for key, value in changes.items():
                if key in MUTABLE_TODO_FIELDS:
                    updated[key] = value  # type: ignore[literal-required]
            updated["updated_at"] = utcnow()

            self._items[todo_id] = updated
            return updated.copy()

    async def delete_owned(self, todo_id: str, owner_id: str) -> bool:
        with self._lock:
            if self._owned(todo_id, owner_id) is None:
                return False
            del self._items[todo_id]
            return True


class InMemoryUserRepository(UserRepository):
    """In-memory credential store keyed by id, with a username index."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._by_id: Dict[str, UserEntity] = {}
        self._by_username: Dict[str, str] = {}

    async def get(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            user = self._by_id.get(user_id)
            return None if user is None else user.copy()

    async def get_by_username(self, username: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._by_username.get(username)
            return None if user_id is None else self._by_id[user_id].copy()

    async def create(self, username: str, password_hash: str) -> UserEntity:
        with self._lock:
            if username in self._by_username:
                raise UsernameTaken()
            user: UserEntity = {
                "id": new_id(),
                "username": username,
                "password_hash": password_hash,
                "created_at": utcnow(),
            }
            self._by_id[user["id"]] = user
            self._by_username[username] = user["id"]
            return user.copy()


# PUBLIC_INTERFACE
class Stores:
    """
    The store clients for one application instance.

    Constructed explicitly, opened by the app lifespan on startup and closed on
    shutdown.
    """

    backend = "memory"

    def __init__(self, todos: TodoRepository, users: UserRepository) -> None:
        self.todos = todos
        self.users = users

    async def open(self) -> None:
        logger.info("Using %s stores", self.backend)

    async def close(self) -> None:
        return None


def in_memory_stores() -> Stores:
    return Stores(todos=InMemoryTodoRepository(), users=InMemoryUserRepository())


# PUBLIC_INTERFACE
def build_stores(settings: Optional[Settings] = None) -> Stores:
    """
    Factory to return the configured stores based on settings.
    - memory: in-memory todo and user repositories
    - mongodb: MongoDB repositories sharing one motor client
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "mongodb":
        from .mongo import MongoStores

        return MongoStores.from_settings(settings)
    return in_memory_stores()
