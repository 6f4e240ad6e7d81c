"""Per-user row bootstrap and teardown."""

from __future__ import annotations

import logging

from hoot.adapters.store.base import AbstractDataStore
from hoot.core.errors import DataStoreAppError
from hoot.core.logging import hash_identifier

logger = logging.getLogger(__name__)

# Child tables first; user_profiles goes last
USER_OWNED_TABLES: tuple[str, ...] = (
    "user_notifications",
    "user_jobs",
    "user_accounts",
    "purchases",
    "user_credits",
    "user_stats",
)

_DEFAULT_ROWS: dict[str, dict] = {
    "user_credits": {"credits": 0},
    "user_stats": {
        "business_centers": 0,
        "requested": 0,
        "successful": 0,
        "failures": 0,
    },
}


async def ensure_user_rows(store: AbstractDataStore, user_id: str) -> None:
    """Create the user's credits and stats rows if they are missing.

    Errors are logged and swallowed: reads that follow will surface a real
    outage on their own.
    """
    for table, defaults in _DEFAULT_ROWS.items():
        try:
            existing = await store.select_one(table, "user_id", filters={"user_id": user_id})
            if existing is None:
                await store.insert(table, {"user_id": user_id, **defaults})
                logger.info(
                    "users.row_initialized",
                    extra={"table": table, "user_hash": hash_identifier(user_id)},
                )
        except DataStoreAppError as exc:
            logger.warning(
                "users.row_init_failed",
                extra={"table": table, "error_code": exc.code},
            )


async def delete_user_data(store: AbstractDataStore, user_id: str) -> str | None:
    """Delete every row owned by the user, then the auth identity.

    Returns:
        None on full success, or a warning when only the auth identity could
        not be removed (the data itself is gone).

    Raises:
        DataStoreAppError: If the profile row cannot be deleted.
    """
    for table in USER_OWNED_TABLES:
        await store.delete(table, filters={"user_id": user_id})
    await store.delete("user_profiles", filters={"user_id": user_id})

    try:
        await store.delete_auth_user(user_id)
    except DataStoreAppError as exc:
        logger.error(
            "users.auth_delete_failed",
            extra={"user_hash": hash_identifier(user_id), "error_code": exc.code},
        )
        return "Auth record may require manual cleanup."

    logger.info("users.deleted", extra={"user_hash": hash_identifier(user_id)})
    return None
