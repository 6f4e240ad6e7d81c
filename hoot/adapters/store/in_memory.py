"""Dict-backed data store for local development and tests.

Not thread-safe and not persistent. Selected with ``STORE_BACKEND=memory``.
"""

from __future__ import annotations

import copy
import inspect
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping

from hoot.adapters.store.base import (
    AbstractDataStore,
    Filters,
    InFilter,
    Row,
    SessionUser,
)
from hoot.core.errors import DataStoreAppError

RpcHandler = Callable[["InMemoryDataStore", Mapping[str, Any]], Awaitable[Any] | Any]


def _matches(row: Row, filters: Filters | None, in_filter: InFilter | None) -> bool:
    if filters:
        for column, value in filters.items():
            if row.get(column) != value:
                return False
    if in_filter is not None and row.get(in_filter.column) not in set(in_filter.values):
        return False
    return True


def _project(row: Row, columns: str) -> Row:
    if columns.strip() == "*":
        return copy.deepcopy(row)
    wanted = [c.strip() for c in columns.split(",") if c.strip()]
    return {c: copy.deepcopy(row.get(c)) for c in wanted}


class InMemoryDataStore(AbstractDataStore):
    """Tables are lists of dicts; users are looked up by access token."""

    def __init__(self, tables: Mapping[str, list[Row]] | None = None) -> None:
        self.tables: dict[str, list[Row]] = {
            name: [dict(r) for r in rows] for name, rows in (tables or {}).items()
        }
        self._users_by_token: dict[str, SessionUser] = {}
        self._rpc_handlers: dict[str, RpcHandler] = {}
        self.deleted_auth_users: list[str] = []

    # Test/dev helpers -----------------------------------------------------

    def add_user(self, access_token: str, user_id: str, email: str | None = None) -> SessionUser:
        user = SessionUser(id=user_id, email=email)
        self._users_by_token[access_token] = user
        return user

    def register_rpc(self, function: str, handler: RpcHandler) -> None:
        self._rpc_handlers[function] = handler

    def rows(self, table: str) -> list[Row]:
        return self.tables.setdefault(table, [])

    # AbstractDataStore ----------------------------------------------------

    async def get_user(self, access_token: str) -> SessionUser | None:
        user = self._users_by_token.get(access_token)
        if user is None:
            return None
        return SessionUser(id=user.id, email=user.email, access_token=access_token)

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
        matched = [r for r in self.rows(table) if _matches(r, filters, in_filter)]
        if order_by:
            matched.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        if limit is not None:
            matched = matched[:limit]
        return [_project(r, columns) for r in matched]

    async def count(self, table: str, *, filters: Filters | None = None) -> int:
        return sum(1 for r in self.rows(table) if _matches(r, filters, None))

    async def insert(self, table: str, row: Row) -> Row:
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self.rows(table).append(stored)
        return copy.deepcopy(stored)

    async def upsert(self, table: str, row: Row, *, on_conflict: str) -> Row:
        key = row.get(on_conflict)
        for existing in self.rows(table):
            if key is not None and existing.get(on_conflict) == key:
                existing.update(row)
                return copy.deepcopy(existing)
        return await self.insert(table, row)

    async def update(
        self,
        table: str,
        values: Row,
        *,
        filters: Filters,
        in_filter: InFilter | None = None,
    ) -> list[Row]:
        updated = []
        for existing in self.rows(table):
            if _matches(existing, filters, in_filter):
                existing.update(values)
                updated.append(copy.deepcopy(existing))
        return updated

    async def delete(self, table: str, *, filters: Filters) -> None:
        self.tables[table] = [r for r in self.rows(table) if not _matches(r, filters, None)]

    async def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        handler = self._rpc_handlers.get(function)
        if handler is None:
            raise DataStoreAppError(
                code="rpc_not_found",
                message=f"Unknown function: {function}",
            )
        result = handler(self, params)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def delete_auth_user(self, user_id: str) -> None:
        self._users_by_token = {
            token: user for token, user in self._users_by_token.items() if user.id != user_id
        }
        self.deleted_auth_users.append(user_id)
