"""Tests for the dict-backed data store used in development and tests."""

import pytest

from hoot.adapters.store.base import InFilter
from hoot.adapters.store.in_memory import InMemoryDataStore
from hoot.core.errors import DataStoreAppError


@pytest.fixture
def jobs_store() -> InMemoryDataStore:
    return InMemoryDataStore(
        {
            "user_jobs": [
                {"job_id": "a", "user_id": "u1", "successful_count": 3, "created_at": "2024-01-01"},
                {"job_id": "b", "user_id": "u1", "successful_count": 5, "created_at": "2024-01-03"},
                {"job_id": "c", "user_id": "u2", "successful_count": 7, "created_at": "2024-01-02"},
            ]
        }
    )


@pytest.mark.asyncio
async def test_select_filters_orders_and_projects(jobs_store: InMemoryDataStore):
    rows = await jobs_store.select(
        "user_jobs", "job_id", filters={"user_id": "u1"}, order_by="created_at", descending=True
    )

    assert rows == [{"job_id": "b"}, {"job_id": "a"}]


@pytest.mark.asyncio
async def test_select_in_filter_and_limit(jobs_store: InMemoryDataStore):
    rows = await jobs_store.select("user_jobs", in_filter=InFilter("job_id", ["a", "c"]), limit=1)

    assert len(rows) == 1
    assert rows[0]["job_id"] in {"a", "c"}


@pytest.mark.asyncio
async def test_select_returns_copies(jobs_store: InMemoryDataStore):
    row = await jobs_store.select_one("user_jobs", filters={"job_id": "a"})
    row["successful_count"] = 999

    again = await jobs_store.select_one("user_jobs", filters={"job_id": "a"})
    assert again["successful_count"] == 3


@pytest.mark.asyncio
async def test_upsert_updates_existing_then_inserts(jobs_store: InMemoryDataStore):
    await jobs_store.upsert("user_jobs", {"job_id": "a", "successful_count": 4}, on_conflict="job_id")
    inserted = await jobs_store.upsert("user_jobs", {"job_id": "d", "user_id": "u1"}, on_conflict="job_id")

    assert (await jobs_store.select_one("user_jobs", filters={"job_id": "a"}))["successful_count"] == 4
    assert inserted["id"]
    assert await jobs_store.count("user_jobs", filters={"user_id": "u1"}) == 3


@pytest.mark.asyncio
async def test_update_and_delete(jobs_store: InMemoryDataStore):
    updated = await jobs_store.update("user_jobs", {"status": "failed"}, filters={"user_id": "u2"})
    await jobs_store.delete("user_jobs", filters={"user_id": "u1"})

    assert [r["status"] for r in updated] == ["failed"]
    assert await jobs_store.count("user_jobs") == 1


@pytest.mark.asyncio
async def test_rpc_dispatch():
    store = InMemoryDataStore()

    async def add(s, params):
        return params["a"] + params["b"]

    store.register_rpc("add", add)
    store.register_rpc("echo", lambda s, params: dict(params))

    assert await store.rpc("add", {"a": 1, "b": 2}) == 3
    assert await store.rpc("echo", {"x": 1}) == {"x": 1}
    with pytest.raises(DataStoreAppError):
        await store.rpc("missing", {})


@pytest.mark.asyncio
async def test_get_user_and_delete_auth_user():
    store = InMemoryDataStore()
    store.add_user("token-1", "u1", "u1@example.com")

    user = await store.get_user("token-1")
    assert user.id == "u1"
    assert user.access_token == "token-1"

    await store.delete_auth_user("u1")
    assert await store.get_user("token-1") is None
    assert store.deleted_auth_users == ["u1"]
