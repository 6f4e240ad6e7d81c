"""The signed-in user's notification inbox."""

from datetime import datetime, timezone

from fastapi import Depends

from hoot.adapters.store.base import AbstractDataStore, InFilter, SessionUser
from hoot.core.auth import protected_router, validate_session
from hoot.core.dependencies import get_data_store
from hoot.core.errors import ValidationAppError
from hoot.schemas.notification import (
    MarkReadRequest,
    MessageResponse,
    UnreadCountResponse,
    UserNotificationsResponse,
)

router = protected_router(tags=["Notifications"])

_NOTIFICATION_FIELDS = ("id", "title", "message", "type", "created_at")


@router.get("/notifications", response_model=UserNotificationsResponse)
async def list_notifications(
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
) -> UserNotificationsResponse:
    """Inbox entries, newest first, each joined with its notification."""
    entries = await store.select(
        "user_notifications",
        "id,notification_id,is_read,read_at,created_at",
        filters={"user_id": user.id},
        order_by="created_at",
        descending=True,
    )

    notification_ids = sorted({e["notification_id"] for e in entries if e.get("notification_id")})
    by_id = {}
    if notification_ids:
        notifications = await store.select(
            "notifications",
            ",".join(_NOTIFICATION_FIELDS),
            in_filter=InFilter("id", notification_ids),
        )
        by_id = {n["id"]: n for n in notifications}

    inbox = [
        {
            "id": entry["id"],
            "is_read": bool(entry.get("is_read")),
            "read_at": entry.get("read_at"),
            "created_at": entry.get("created_at"),
            "notification": by_id.get(entry.get("notification_id")),
        }
        for entry in entries
    ]
    unread = sum(1 for item in inbox if not item["is_read"])
    return UserNotificationsResponse(notifications=inbox, unread_count=unread)


@router.patch("/notifications", response_model=MessageResponse)
async def mark_notifications_read(
    payload: MarkReadRequest,
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
) -> MessageResponse:
    values = {"is_read": True, "read_at": datetime.now(timezone.utc).isoformat()}

    if payload.mark_all:
        await store.update(
            "user_notifications", values, filters={"user_id": user.id, "is_read": False}
        )
        return MessageResponse(message="All notifications marked as read")

    if not payload.notification_ids:
        raise ValidationAppError(
            code="notification_ids_required",
            message="notification_ids array is required",
        )

    await store.update(
        "user_notifications",
        values,
        filters={"user_id": user.id},
        in_filter=InFilter("id", payload.notification_ids),
    )
    return MessageResponse(message="Notifications marked as read")


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
) -> UnreadCountResponse:
    count = await store.count(
        "user_notifications", filters={"user_id": user.id, "is_read": False}
    )
    return UnreadCountResponse(unread_count=count)
