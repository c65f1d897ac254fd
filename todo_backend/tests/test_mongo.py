"""
MongoDB integration tests. They run only when MONGODB_URI points at a
disposable database.
"""

import os
import uuid

import pytest
import pytest_asyncio
from bson import ObjectId

from src.api.errors import UsernameTaken
from src.api.mongo import MongoStores
from src.api.settings import Settings

pytestmark = pytest.mark.skipif(not os.getenv("MONGODB_URI"), reason="MONGODB_URI not set")


@pytest_asyncio.fixture
async def stores():
    settings = Settings(
        persistence_backend="mongodb",
        mongodb_uri=os.environ["MONGODB_URI"],
        mongodb_database=f"todo-test-{uuid.uuid4().hex[:8]}",
    )
    s = MongoStores.from_settings(settings)
    await s.open()
    yield s
    await s._client.drop_database(settings.mongodb_database)
    await s.close()


@pytest.mark.asyncio
async def test_owner_scoped_crud(stores):
    alice, bob = str(ObjectId()), str(ObjectId())
    todo = await stores.todos.create(alice, "Buy milk", "")
    assert todo["read"] is False

    assert await stores.todos.update_owned(todo["id"], bob, {"completed": True}) is None
    updated = await stores.todos.update_owned(todo["id"], alice, {"completed": True})
    assert updated["completed"] is True
    assert updated["title"] == "Buy milk"

    second = await stores.todos.create(alice, "Second", "")
    listed = await stores.todos.list_for_owner(alice)
    assert [t["id"] for t in listed] == [second["id"], todo["id"]]
    assert await stores.todos.list_for_owner(bob) == []

    assert await stores.todos.delete_owned(todo["id"], bob) is False
    assert await stores.todos.delete_owned(todo["id"], alice) is True
    assert await stores.todos.delete_owned(todo["id"], alice) is False


@pytest.mark.asyncio
async def test_unique_usernames(stores):
    user = await stores.users.create("alice", "hash")
    assert (await stores.users.get(user["id"]))["username"] == "alice"
    assert (await stores.users.get_by_username("alice"))["id"] == user["id"]
    with pytest.raises(UsernameTaken):
        await stores.users.create("alice", "other")
