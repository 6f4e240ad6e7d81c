"""Data store interface.

Route handlers only ever touch one table per call: filter by primary or
foreign key, read, write, count. This interface covers exactly that, plus the
auth-provider lookups the session gate needs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

Row = dict[str, Any]
Filters = Mapping[str, Any]


@dataclass(frozen=True)
class SessionUser:
    """Authenticated identity resolved by the auth provider."""

    id: str
    email: str | None = None
    access_token: str | None = None


@dataclass(frozen=True)
class InFilter:
    """``column IN (values)`` condition."""

    column: str
    values: Sequence[Any]


class AbstractDataStore(ABC):
    """Single-table operations against the hosted database."""

    @abstractmethod
    async def get_user(self, access_token: str) -> SessionUser | None:
        """Resolve an access token to a user, or None if it is not valid.

        Raises:
            DataStoreAppError: If the auth provider cannot be reached.
        """

    @abstractmethod
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
        """Return rows matching all equality filters."""

    async def select_one(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Filters | None = None,
    ) -> Row | None:
        rows = await self.select(table, columns, filters=filters, limit=1)
        return rows[0] if rows else None

    @abstractmethod
    async def count(self, table: str, *, filters: Filters | None = None) -> int:
        """Return the number of rows matching the filters."""

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """Insert one row and return it as stored."""

    @abstractmethod
    async def upsert(self, table: str, row: Row, *, on_conflict: str) -> Row:
        """Insert or merge one row keyed on ``on_conflict`` and return it."""

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Row,
        *,
        filters: Filters,
        in_filter: InFilter | None = None,
    ) -> list[Row]:
        """Update matching rows and return them."""

    @abstractmethod
    async def delete(self, table: str, *, filters: Filters) -> None:
        """Delete matching rows."""

    @abstractmethod
    async def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        """Call a stored procedure and return its result."""

    @abstractmethod
    async def delete_auth_user(self, user_id: str) -> None:
        """Remove the identity from the auth provider."""
