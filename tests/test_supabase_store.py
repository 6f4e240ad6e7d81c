"""Tests for the Supabase REST data store (HTTP mocked with MockTransport)."""

import json

import httpx
import pytest

from hoot.adapters.store.base import InFilter
from hoot.adapters.store.supabase import SupabaseDataStore
from hoot.core.errors import DataStoreAppError

BASE_URL = "https://project.supabase.co"


def _store(handler) -> tuple[SupabaseDataStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    store = SupabaseDataStore(
        url=BASE_URL + "/",
        service_key="service-key",
        transport=httpx.MockTransport(recording),
    )
    return store, seen


class TestGetUser:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        store, seen = _store(
            lambda r: httpx.Response(200, json={"id": "u1", "email": "u1@example.com"})
        )

        user = await store.get_user("user-jwt")

        assert user.id == "u1"
        assert user.email == "u1@example.com"
        assert user.access_token == "user-jwt"
        assert seen[0].url.path == "/auth/v1/user"
        assert seen[0].headers["Authorization"] == "Bearer user-jwt"
        assert seen[0].headers["apikey"] == "service-key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_rejected_token_is_absent(self, status_code: int):
        store, _ = _store(lambda r: httpx.Response(status_code, json={"msg": "invalid JWT"}))

        assert await store.get_user("expired") is None

    @pytest.mark.asyncio
    async def test_outage_raises(self):
        store, _ = _store(lambda r: httpx.Response(503, text="unavailable"))

        with pytest.raises(DataStoreAppError) as exc_info:
            await store.get_user("user-jwt")

        assert exc_info.value.details == {"upstream_status": 503}


class TestTableAccess:
    @pytest.mark.asyncio
    async def test_select_builds_postgrest_query(self):
        store, seen = _store(lambda r: httpx.Response(200, json=[{"credits": 10}]))

        rows = await store.select(
            "user_credits",
            "credits",
            filters={"user_id": "u1", "is_active": True},
            order_by="created_at",
            descending=True,
            limit=5,
        )

        assert rows == [{"credits": 10}]
        params = seen[0].url.params
        assert seen[0].url.path == "/rest/v1/user_credits"
        assert params["user_id"] == "eq.u1"
        assert params["is_active"] == "eq.true"
        assert params["select"] == "credits"
        assert params["order"] == "created_at.desc"
        assert params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_select_in_filter(self):
        store, seen = _store(lambda r: httpx.Response(200, json=[]))

        await store.select("notifications", in_filter=InFilter("id", ["n1", "n2"]))

        assert seen[0].url.params["id"] == "in.(n1,n2)"

    @pytest.mark.asyncio
    async def test_count_reads_content_range(self):
        store, seen = _store(lambda r: httpx.Response(200, headers={"Content-Range": "0-9/42"}))

        assert await store.count("user_accounts", filters={"user_id": "u1"}) == 42
        assert seen[0].method == "HEAD"
        assert seen[0].headers["Prefer"] == "count=exact"

    @pytest.mark.asyncio
    async def test_count_without_rows(self):
        store, _ = _store(lambda r: httpx.Response(200, headers={"Content-Range": "*/0"}))

        assert await store.count("user_accounts") == 0

    @pytest.mark.asyncio
    async def test_upsert_merges_on_conflict(self):
        store, seen = _store(lambda r: httpx.Response(201, json=[json.loads(r.content)]))

        saved = await store.upsert("user_jobs", {"job_id": "j1", "status": "completed"}, on_conflict="job_id")

        assert saved == {"job_id": "j1", "status": "completed"}
        assert seen[0].url.params["on_conflict"] == "job_id"
        assert "resolution=merge-duplicates" in seen[0].headers["Prefer"]

    @pytest.mark.asyncio
    async def test_delete_requires_filters(self):
        store, seen = _store(lambda r: httpx.Response(204))

        with pytest.raises(ValueError):
            await store.delete("user_jobs", filters={})
        assert seen == []

    @pytest.mark.asyncio
    async def test_rpc_with_empty_body(self):
        store, seen = _store(lambda r: httpx.Response(204))

        assert await store.rpc("create_purchase", {"p_user_id": "u1"}) is None
        assert seen[0].url.path == "/rest/v1/rpc/create_purchase"
        assert json.loads(seen[0].content) == {"p_user_id": "u1"}

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        store, _ = _store(refuse)

        with pytest.raises(DataStoreAppError) as exc_info:
            await store.select("user_credits")

        assert exc_info.value.code == "data_store_unavailable"

    @pytest.mark.asyncio
    async def test_delete_auth_user_uses_admin_endpoint(self):
        store, seen = _store(lambda r: httpx.Response(200, json={}))

        await store.delete_auth_user("u1")

        assert seen[0].method == "DELETE"
        assert seen[0].url.path == "/auth/v1/admin/users/u1"


class TestMalformedResponses:
    """Gateway pages and unexpected shapes surface as DataStoreAppError."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>gateway</html>", headers={"Content-Type": "text/html"}),
            httpx.Response(200, json=[{"id": "u1"}]),
        ],
    )
    async def test_get_user(self, response: httpx.Response):
        store, _ = _store(lambda r: response)

        with pytest.raises(DataStoreAppError) as exc_info:
            await store.get_user("user-jwt")

        assert exc_info.value.code == "data_store_bad_response"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>gateway</html>"),
            httpx.Response(200, json={"is_admin": True}),
            httpx.Response(200, json=["is_admin"]),
        ],
    )
    async def test_select(self, response: httpx.Response):
        store, _ = _store(lambda r: response)

        with pytest.raises(DataStoreAppError) as exc_info:
            await store.select_one("user_profiles", "is_admin", filters={"user_id": "u1"})

        assert exc_info.value.code == "data_store_bad_response"

    @pytest.mark.asyncio
    async def test_rpc_scalar_result_is_accepted(self):
        store, _ = _store(lambda r: httpx.Response(200, json=12))

        assert await store.rpc("send_notification_to_all_users", {"p_notification_id": "n1"}) == 12
