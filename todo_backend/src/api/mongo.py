"""MongoDB-backed stores built on motor.

Documents use `_id` (ObjectId) plus camelCase field names:

    todos: {_id, title, description, read, completed, ownerId, createdAt, updatedAt}
    users: {_id, username, passwordHash, createdAt}

Every todo query filters on `_id` and `ownerId` together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from .errors import InternalError, UsernameTaken
from .models import TodoEntity, UserEntity, is_valid_id, utcnow
from .repositories import MUTABLE_TODO_FIELDS, Stores, TodoRepository, UserRepository
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Fields:
    todos: str = "todos"
    users: str = "users"
    id: str = "_id"
    title: str = "title"
    description: str = "description"
    read: str = "read"
    completed: str = "completed"
    owner_id: str = "ownerId"
    created_at: str = "createdAt"
    updated_at: str = "updatedAt"
    username: str = "username"
    password_hash: str = "passwordHash"


_F = _Fields()

# TodoEntity key -> document field
_TODO_FIELD_MAP = {
    "title": _F.title,
    "description": _F.description,
    "read": _F.read,
    "completed": _F.completed,
}


def _aware(value: Any) -> Any:
    # pymongo returns naive UTC datetimes unless tz_aware is set on the client
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _owned_filter(todo_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
    if not (is_valid_id(todo_id) and is_valid_id(owner_id)):
        return None
    return {_F.id: ObjectId(todo_id), _F.owner_id: ObjectId(owner_id)}


class MongoTodoRepository(TodoRepository):
    """Todo store backed by a MongoDB collection."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> TodoEntity:
        return {
            "id": str(doc[_F.id]),
            "title": str(doc[_F.title]),
            "description": doc.get(_F.description) or "",
            "read": bool(doc.get(_F.read, False)),
            "completed": bool(doc.get(_F.completed, False)),
            "owner_id": str(doc[_F.owner_id]),
            "created_at": _aware(doc[_F.created_at]),
            "updated_at": _aware(doc[_F.updated_at]),
        }

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([(_F.owner_id, ASCENDING), (_F.created_at, DESCENDING)])

    async def list_for_owner(self, owner_id: str) -> List[TodoEntity]:
        if not is_valid_id(owner_id):
            return []
        try:
            cursor = self._collection.find({_F.owner_id: ObjectId(owner_id)}).sort(
                [(_F.created_at, DESCENDING), (_F.id, DESCENDING)]
            )
            return [self.from_document(doc) async for doc in cursor]
        except PyMongoError as e:
            logger.exception("Failed to list todos for owner %s", owner_id)
            raise InternalError() from e

    async def create(self, owner_id: str, title: str, description: str) -> TodoEntity:
        now = utcnow()
        doc = {
            _F.title: title,
            _F.description: description,
            _F.read: False,
            _F.completed: False,
            _F.owner_id: ObjectId(owner_id),
            _F.created_at: now,
            _F.updated_at: now,
        }
        try:
            result = await self._collection.insert_one(doc)
        except PyMongoError as e:
            logger.exception("Failed to create todo for owner %s", owner_id)
            raise InternalError() from e
        doc[_F.id] = result.inserted_id
        return self.from_document(doc)

    async def update_owned(
        self, todo_id: str, owner_id: str, changes: Dict[str, Any]
    ) -> Optional[TodoEntity]:
        query = _owned_filter(todo_id, owner_id)
        if query is None:
            return None
        update = {_TODO_FIELD_MAP[k]: v for k, v in changes.items() if k in MUTABLE_TODO_FIELDS}
        update[_F.updated_at] = utcnow()
        try:
            doc = await self._collection.find_one_and_update(
                query, {"$set": update}, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            logger.exception("Failed to update todo %s", todo_id)
            raise InternalError() from e
        return None if doc is None else self.from_document(doc)

    async def delete_owned(self, todo_id: str, owner_id: str) -> bool:
        query = _owned_filter(todo_id, owner_id)
        if query is None:
            return False
        try:
            doc = await self._collection.find_one_and_delete(query)
        except PyMongoError as e:
            logger.exception("Failed to delete todo %s", todo_id)
            raise InternalError() from e
        return doc is not None


class MongoUserRepository(UserRepository):
    """Credential store backed by a MongoDB collection with a unique username index."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> UserEntity:
        return {
            "id": str(doc[_F.id]),
            "username": doc[_F.username],
            "password_hash": doc[_F.password_hash],
            "created_at": _aware(doc[_F.created_at]),
        }

    async def ensure_indexes(self) -> None:
        await self._collection.create_index(_F.username, unique=True)

    async def _find_one(self, query: Dict[str, Any]) -> Optional[UserEntity]:
        try:
            doc = await self._collection.find_one(query)
        except PyMongoError as e:
            logger.exception("User lookup failed")
            raise InternalError() from e
        return None if doc is None else self.from_document(doc)

    async def get(self, user_id: str) -> Optional[UserEntity]:
        if not is_valid_id(user_id):
            return None
        return await self._find_one({_F.id: ObjectId(user_id)})

    async def get_by_username(self, username: str) -> Optional[UserEntity]:
        return await self._find_one({_F.username: username})

    async def create(self, username: str, password_hash: str) -> UserEntity:
        doc = {
            _F.username: username,
            _F.password_hash: password_hash,
            _F.created_at: utcnow(),
        }
        try:
            result = await self._collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise UsernameTaken() from e
        except PyMongoError as e:
            logger.exception("Failed to create user %s", username)
            raise InternalError() from e
        doc[_F.id] = result.inserted_id
        return self.from_document(doc)


class MongoStores(Stores):
    """Todo and user repositories sharing one motor client."""

    backend = "mongodb"

    def __init__(self, client: AsyncIOMotorClient, database: str) -> None:
        db = client[database]
        self._client = client
        self._database = database
        self._todo_repo = MongoTodoRepository(db[_F.todos])
        self._user_repo = MongoUserRepository(db[_F.users])
        super().__init__(todos=self._todo_repo, users=self._user_repo)

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoStores":
        if not settings.mongodb_uri:
            raise ValueError("MONGODB_URI not configured. Set MONGODB_URI to use the mongodb backend.")
        return cls(AsyncIOMotorClient(settings.mongodb_uri), settings.mongodb_database)

    async def open(self) -> None:
        await self._todo_repo.ensure_indexes()
        await self._user_repo.ensure_indexes()
        logger.info("MongoDB connected (database '%s')", self._database)

    async def close(self) -> None:
        self._client.close()
        logger.info("MongoDB connection closed")
