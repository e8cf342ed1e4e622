"""
Test Generic Request Handler
"""

import json
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from crud_api.api.handlers import CrudHandler
from crud_api.common.errors import NotFoundError, StorageError, ValidationError
from crud_api.config import Settings
from crud_api.domain.query import PaginatedResult
from crud_api.domain.user import User
from crud_api.entities import USER_ENTITY


def _user(**overrides) -> User:
    now = datetime.now(timezone.utc)
    fields = {
        "id": uuid.uuid4(),
        "name": "Alice",
        "email": "alice@example.com",
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return User(**fields)


def _body(response) -> dict:
    return json.loads(response.body)


@pytest.fixture
def handler(settings) -> CrudHandler:
    return CrudHandler(USER_ENTITY, settings)


@pytest.fixture
def production_handler() -> CrudHandler:
    return CrudHandler(USER_ENTITY, Settings(_env_file=None, ENVIRONMENT="production"))


@pytest.mark.asyncio
async def test_create_returns_201_envelope(handler):
    user = _user()
    repo = AsyncMock()
    repo.create.return_value = user

    response = await handler.create(repo, {"name": "Alice", "email": "alice@example.com"})

    assert response.status_code == 201
    body = _body(response)
    assert body["success"] is True
    assert body["message"] == "Record created successfully"
    assert body["data"]["id"] == str(user.id)
    assert body["data"]["name"] == "Alice"
    assert "pagination" not in body
    repo.create.assert_awaited_once_with({"name": "Alice", "email": "alice@example.com"})


@pytest.mark.asyncio
@pytest.mark.parametrize("missing_id", ["", "   ", None])
async def test_missing_id_is_rejected_before_storage(handler, missing_id):
    repo = AsyncMock()

    responses = [
        await handler.get_by_id(repo, missing_id),
        await handler.update(repo, missing_id, {"name": "x"}),
        await handler.delete(repo, missing_id),
    ]

    for response in responses:
        assert response.status_code == 400
        assert _body(response) == {"success": False, "message": "ID parameter is required"}
    repo.find_by_id.assert_not_awaited()
    repo.update.assert_not_awaited()
    repo.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_absent_record_returns_404(handler):
    repo = AsyncMock()
    repo.find_by_id.return_value = None
    repo.update.return_value = None
    repo.delete.return_value = False

    for response in (
        await handler.get_by_id(repo, "some-id"),
        await handler.update(repo, "some-id", {}),
        await handler.delete(repo, "some-id"),
    ):
        assert response.status_code == 404
        assert _body(response) == {"success": False, "message": "Record not found"}


@pytest.mark.asyncio
async def test_update_and_delete_success(handler):
    user = _user(name="Alicia")
    repo = AsyncMock()
    repo.update.return_value = user
    repo.delete.return_value = True

    updated = await handler.update(repo, str(user.id), {"name": "Alicia"})
    deleted = await handler.delete(repo, str(user.id))

    assert updated.status_code == 200
    assert _body(updated)["data"]["name"] == "Alicia"
    assert _body(updated)["message"] == "Record updated successfully"
    assert deleted.status_code == 200
    assert _body(deleted) == {"success": True, "message": "Record deleted successfully"}


@pytest.mark.asyncio
async def test_get_all_builds_query_options(handler):
    users = [_user(email=f"u{i}@example.com") for i in range(2)]
    repo = AsyncMock()
    repo.find_all.return_value = PaginatedResult(data=users, total=12, page=3, limit=5, total_pages=3)

    response = await handler.get_all(
        repo, page=3, limit=5, order_by="name", order_direction="asc", filters={"name": "Alice"}
    )

    options = repo.find_all.await_args.args[0]
    assert options.limit == 5
    assert options.offset == 10
    assert options.order_by == "name"
    assert options.order_direction == "ASC"
    assert options.where == {"name": "Alice"}

    assert response.status_code == 200
    body = _body(response)
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 3, "limit": 5, "total": 12, "totalPages": 3}


@pytest.mark.asyncio
async def test_get_all_rejects_invalid_options(handler):
    repo = AsyncMock()

    response = await handler.get_all(repo, page=1, limit=0)

    assert response.status_code == 400
    assert _body(response)["success"] is False
    repo.find_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_repository_validation_error_keeps_status(handler):
    repo = AsyncMock()
    repo.find_all.side_effect = ValidationError(message="Unknown field 'age' for User", code="unknown_field")

    response = await handler.get_all(repo, filters={"age": "3"})

    assert response.status_code == 400
    assert _body(response) == {
        "success": False,
        "message": "Unknown field 'age' for User",
        "error": "unknown_field",
    }


@pytest.mark.asyncio
async def test_storage_failure_returns_500_with_detail_in_development(handler):
    repo = AsyncMock()
    repo.create.side_effect = StorageError(message="Error creating User record")

    response = await handler.create(repo, {"email": "x@example.com"})

    assert response.status_code == 500
    assert _body(response) == {
        "success": False,
        "message": "Failed to create record",
        "error": "Error creating User record",
    }


@pytest.mark.asyncio
async def test_storage_failure_exposes_driver_reason_in_development(handler):
    repo = AsyncMock()
    repo.create.side_effect = StorageError(
        message="Error creating User record",
        details={"reason": "UNIQUE constraint failed: users.email"},
    )

    response = await handler.create(repo, {"email": "x@example.com"})

    assert response.status_code == 500
    assert _body(response)["error"] == "UNIQUE constraint failed: users.email"


@pytest.mark.asyncio
async def test_storage_failure_reason_hidden_in_production(production_handler):
    repo = AsyncMock()
    repo.update.side_effect = StorageError(
        message="Error updating User record",
        details={"reason": "UNIQUE constraint failed: users.email"},
    )

    response = await production_handler.update(repo, "some-id", {"email": "x@example.com"})

    assert response.status_code == 500
    assert _body(response) == {
        "success": False,
        "message": "Failed to update record",
        "error": "Internal server error",
    }


@pytest.mark.asyncio
async def test_unexpected_failure_hidden_in_production(production_handler):
    repo = AsyncMock()
    repo.find_by_id.side_effect = RuntimeError("connection reset by peer")

    response = await production_handler.get_by_id(repo, "some-id")

    assert response.status_code == 500
    assert _body(response) == {
        "success": False,
        "message": "Failed to retrieve record",
        "error": "Internal server error",
    }


@pytest.mark.asyncio
async def test_repository_not_found_error_keeps_status(handler):
    repo = AsyncMock()
    repo.delete.side_effect = NotFoundError(message="User archived")

    response = await handler.delete(repo, "some-id")

    assert response.status_code == 404
    assert _body(response) == {"success": False, "message": "User archived", "error": "not_found"}
