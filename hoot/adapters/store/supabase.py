"""Supabase data store over its REST endpoints.

Table access goes through PostgREST (``/rest/v1``) and identity lookups
through GoTrue (``/auth/v1``), both authenticated with the service key.
Filters are sent as PostgREST query operators (``col=eq.value``).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from hoot.adapters.store.base import (
    AbstractDataStore,
    Filters,
    InFilter,
    Row,
    SessionUser,
)
from hoot.core.errors import DataStoreAppError

logger = logging.getLogger(__name__)


def _encode_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _build_params(
    filters: Filters | None,
    in_filter: InFilter | None = None,
) -> dict[str, str]:
    params = {column: _encode_value(value) for column, value in (filters or {}).items()}
    if in_filter is not None:
        joined = ",".join(str(v) for v in in_filter.values)
        params[in_filter.column] = f"in.({joined})"
    return params


def _parse_content_range(header: str | None) -> int:
    """Extract the total from a ``Content-Range: 0-9/42`` header."""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


def _decode(response: httpx.Response, operation: str, expected: type) -> Any:
    """Parse a JSON body of the expected top-level type.

    Raises:
        DataStoreAppError: If the body is not JSON or has the wrong shape.
    """
    try:
        data = response.json()
    except ValueError as exc:
        logger.error(
            "store.bad_response",
            extra={"operation": operation, "content_type": response.headers.get("content-type")},
        )
        raise DataStoreAppError(
            code="data_store_bad_response",
            message=f"Data store {operation} failed",
        ) from exc

    valid = isinstance(data, expected)
    if valid and expected is list:
        valid = all(isinstance(row, dict) for row in data)
    if not valid:
        logger.error(
            "store.bad_response",
            extra={"operation": operation, "body_type": type(data).__name__},
        )
        raise DataStoreAppError(
            code="data_store_bad_response",
            message=f"Data store {operation} failed",
        )
    return data


class SupabaseDataStore(AbstractDataStore):
    """PostgREST/GoTrue client using httpx."""

    def __init__(
        self,
        *,
        url: str,
        service_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            url: Supabase project URL.
            service_key: Service role key (bypasses row-level security).
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._base_url = url.rstrip("/")
        self._service_key = service_key
        self._timeout = timeout_seconds
        self._transport = transport

    def _headers(self, bearer: str | None = None, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {bearer or self._service_key}",
        }
        headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=headers or self._headers(),
                )
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as exc:
            logger.error(
                "store.request_failed",
                extra={
                    "operation": operation,
                    "upstream_status": exc.response.status_code,
                    "upstream_body": exc.response.text[:500],
                },
            )
            raise DataStoreAppError(
                code="data_store_error",
                message=f"Data store {operation} failed",
                details={"upstream_status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "store.request_failed",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise DataStoreAppError(
                code="data_store_unavailable",
                message=f"Data store {operation} failed",
            ) from exc

    async def get_user(self, access_token: str) -> SessionUser | None:
        try:
            response = await self._request(
                "GET",
                "/auth/v1/user",
                operation="get_user",
                headers=self._headers(bearer=access_token),
            )
        except DataStoreAppError as exc:
            # A rejected token is an absent session, not an outage
            cause = exc.__cause__
            if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code in (401, 403):
                return None
            raise

        data = _decode(response, "get_user", dict)
        if not data.get("id"):
            return None
        return SessionUser(id=data["id"], email=data.get("email"), access_token=access_token)

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Filters | None = None,
        in_filter: InFilter | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        params = _build_params(filters, in_filter)
        params["select"] = columns
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._request(
            "GET", f"/rest/v1/{table}", operation=f"select:{table}", params=params
        )
        return _decode(response, f"select:{table}", list)

    async def count(self, table: str, *, filters: Filters | None = None) -> int:
        response = await self._request(
            "HEAD",
            f"/rest/v1/{table}",
            operation=f"count:{table}",
            params={**_build_params(filters), "select": "*"},
            headers=self._headers(Prefer="count=exact"),
        )
        return _parse_content_range(response.headers.get("content-range"))

    async def insert(self, table: str, row: Row) -> Row:
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            operation=f"insert:{table}",
            json=row,
            headers=self._headers(Prefer="return=representation"),
        )
        rows = _decode(response, f"insert:{table}", list)
        return rows[0] if rows else dict(row)

    async def upsert(self, table: str, row: Row, *, on_conflict: str) -> Row:
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            operation=f"upsert:{table}",
            params={"on_conflict": on_conflict},
            json=row,
            headers=self._headers(Prefer="resolution=merge-duplicates,return=representation"),
        )
        rows = _decode(response, f"upsert:{table}", list)
        return rows[0] if rows else dict(row)

    async def update(
        self,
        table: str,
        values: Row,
        *,
        filters: Filters,
        in_filter: InFilter | None = None,
    ) -> list[Row]:
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            operation=f"update:{table}",
            params=_build_params(filters, in_filter),
            json=values,
            headers=self._headers(Prefer="return=representation"),
        )
        return _decode(response, f"update:{table}", list)

    async def delete(self, table: str, *, filters: Filters) -> None:
        if not filters:
            raise ValueError("refusing to delete without filters")
        await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            operation=f"delete:{table}",
            params=_build_params(filters),
        )

    async def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        response = await self._request(
            "POST",
            f"/rest/v1/rpc/{function}",
            operation=f"rpc:{function}",
            json=dict(params),
        )
        if not response.content:
            return None
        return _decode(response, f"rpc:{function}", object)

    async def delete_auth_user(self, user_id: str) -> None:
        await self._request(
            "DELETE",
            f"/auth/v1/admin/users/{user_id}",
            operation="delete_auth_user",
        )
