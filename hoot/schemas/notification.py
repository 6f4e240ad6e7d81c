from typing import Any

from pydantic import BaseModel, Field


class UserNotificationsResponse(BaseModel):
    notifications: list[dict[str, Any]]
    unread_count: int


class MarkReadRequest(BaseModel):
    notification_ids: list[str] | None = None
    mark_all: bool = False


class UnreadCountResponse(BaseModel):
    unread_count: int


class NotificationCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    type: str | None = Field(None, description="Unknown types fall back to 'announcement'.")
    is_welcome_notification: bool = False
    send_to_all: bool = False


class MessageResponse(BaseModel):
    message: str
    warning: str | None = None
