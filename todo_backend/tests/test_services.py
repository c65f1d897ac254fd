import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from src.api.errors import InternalError, InvalidIdentifier, NotFound, ValidationError
from src.api.main import create_app
from src.api.models import Identity
from src.api.repositories import InMemoryTodoRepository, InMemoryUserRepository, Stores
from src.api.schemas import TodoCreate, TodoUpdate
from src.api.services import todos as todo_service

ALICE = Identity(user_id=str(ObjectId()), username="alice")
BOB = Identity(user_id=str(ObjectId()), username="bob")


@pytest.fixture
def repo():
    return InMemoryTodoRepository()


class TestTodoOperations:
    @pytest.mark.asyncio
    async def test_create_defaults(self, repo):
        todo = await todo_service.create_todo(repo, ALICE, TodoCreate(title="  Buy milk "))
        assert todo["title"] == "Buy milk"
        assert todo["description"] == ""
        assert todo["read"] is False
        assert todo["completed"] is False
        assert todo["owner_id"] == ALICE.user_id
        assert todo["created_at"] == todo["updated_at"]

    @pytest.mark.asyncio
    async def test_create_requires_title(self, repo):
        with pytest.raises(ValidationError):
            await todo_service.create_todo(repo, ALICE, TodoCreate(description="no title"))
        assert await todo_service.list_todos(repo, ALICE) == []

    @pytest.mark.asyncio
    async def test_update_is_partial(self, repo):
        todo = await todo_service.create_todo(repo, ALICE, TodoCreate(title="T", description="D"))
        updated = await todo_service.update_todo(repo, ALICE, todo["id"], TodoUpdate(completed=True))
        assert updated["completed"] is True
        assert updated["title"] == "T"
        assert updated["description"] == "D"
        assert updated["read"] is False
        assert updated["updated_at"] >= todo["updated_at"]

    @pytest.mark.asyncio
    async def test_explicit_null_description_clears_it(self, repo):
        todo = await todo_service.create_todo(repo, ALICE, TodoCreate(title="T", description="D"))
        update = TodoUpdate.model_validate({"description": None})
        updated = await todo_service.update_todo(repo, ALICE, todo["id"], update)
        assert updated["description"] == ""

    @pytest.mark.asyncio
    async def test_completed_does_not_imply_read(self, repo):
        todo = await todo_service.create_todo(repo, ALICE, TodoCreate(title="T"))
        updated = await todo_service.update_todo(repo, ALICE, todo["id"], TodoUpdate(completed=True))
        assert updated["read"] is False
        read = await todo_service.mark_read(repo, ALICE, todo["id"])
        assert read["completed"] is True
        unchecked = await todo_service.update_todo(repo, ALICE, todo["id"], TodoUpdate(completed=False))
        assert unchecked["read"] is True

    @pytest.mark.asyncio
    async def test_foreign_owner_is_not_found(self, repo):
        todo = await todo_service.create_todo(repo, ALICE, TodoCreate(title="mine"))
        with pytest.raises(NotFound):
            await todo_service.update_todo(repo, BOB, todo["id"], TodoUpdate(title="stolen"))
        with pytest.raises(NotFound):
            await todo_service.mark_read(repo, BOB, todo["id"])
        with pytest.raises(NotFound):
            await todo_service.delete_todo(repo, BOB, todo["id"])
        [still_there] = await todo_service.list_todos(repo, ALICE)
        assert still_there["title"] == "mine"
        assert still_there["read"] is False

    @pytest.mark.asyncio
    async def test_invalid_identifier(self, repo):
        with pytest.raises(InvalidIdentifier):
            await todo_service.delete_todo(repo, ALICE, "42")

    @pytest.mark.asyncio
    async def test_delete_then_delete_again(self, repo):
        todo = await todo_service.create_todo(repo, ALICE, TodoCreate(title="gone"))
        await todo_service.delete_todo(repo, ALICE, todo["id"])
        assert await todo_service.list_todos(repo, ALICE) == []
        with pytest.raises(NotFound):
            await todo_service.delete_todo(repo, ALICE, todo["id"])


class FailingTodoRepository(InMemoryTodoRepository):
    async def list_for_owner(self, owner_id):
        raise InternalError()


class TestStoreFailures:
    def test_store_failure_is_500(self, settings):
        stores = Stores(todos=FailingTodoRepository(), users=InMemoryUserRepository())
        with TestClient(create_app(settings, stores=stores)) as client:
            client.post("/api/auth/register", json={"username": "alice", "password": "pw"})
            token = client.post("/api/auth/login", json={"username": "alice", "password": "pw"}).json()["token"]
            res = client.get("/api/todos", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 500
        assert res.json() == {"error": "Server error"}
