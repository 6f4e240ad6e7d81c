"""Admin-only management endpoints.

Every route here sits on ``admin_router``; the admin check runs before the
handler body and its result (user + store handle) is reused by the handler.
"""

import logging
import uuid

from fastapi import Depends

from hoot.core.auth import AdminContext, admin_router, require_admin
from hoot.core.errors import (
    AuthorizationAppError,
    ConflictAppError,
    NotFoundAppError,
    ValidationAppError,
)
from hoot.schemas.notification import MessageResponse, NotificationCreateRequest
from hoot.schemas.referral import ReferralCodeCreateRequest
from hoot.services.referrals import validate_new_referral_code
from hoot.services.users import delete_user_data

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {"announcement", "welcome", "system", "promotion"}

router = admin_router(prefix="/admin", tags=["Admin"])


@router.get("/referral-codes")
async def list_referral_codes(ctx: AdminContext = Depends(require_admin)) -> dict:
    codes = await ctx.store.select(
        "referral_codes", order_by="created_at", descending=True
    )
    for code in codes:
        code["usage_count"] = await ctx.store.count(
            "user_profiles", filters={"referral_code": code["code"]}
        )
    return {"referralCodes": codes}


@router.post("/referral-codes")
async def create_referral_code(
    payload: ReferralCodeCreateRequest,
    ctx: AdminContext = Depends(require_admin),
) -> dict:
    normalized = validate_new_referral_code(payload.code)

    existing = await ctx.store.select_one(
        "referral_codes", "id", filters={"code": normalized}
    )
    if existing:
        raise ConflictAppError(
            code="referral_code_exists",
            message="Referral code already exists",
        )

    created = await ctx.store.insert(
        "referral_codes",
        {
            "code": normalized,
            "description": (payload.description or "").strip() or None,
            "is_active": True,
            "created_by": ctx.user.id,
        },
    )
    logger.info("admin.referral_code_created", extra={"referral_code": normalized})
    return {"referralCode": created, "message": "Referral code created successfully"}


@router.get("/notifications")
async def list_notifications(ctx: AdminContext = Depends(require_admin)) -> dict:
    notifications = await ctx.store.select(
        "notifications", order_by="created_at", descending=True
    )
    for notification in notifications:
        notification["sent_count"] = await ctx.store.count(
            "user_notifications", filters={"notification_id": notification["id"]}
        )
        notification["read_count"] = await ctx.store.count(
            "user_notifications",
            filters={"notification_id": notification["id"], "is_read": True},
        )
    return {"notifications": notifications}


@router.post("/notifications")
async def create_notification(
    payload: NotificationCreateRequest,
    ctx: AdminContext = Depends(require_admin),
) -> dict:
    title = payload.title.strip()
    message = payload.message.strip()
    if not title:
        raise ValidationAppError(code="title_required", message="Title is required")
    if not message:
        raise ValidationAppError(code="message_required", message="Message is required")

    notification_type = payload.type if payload.type in NOTIFICATION_TYPES else "announcement"
    created = await ctx.store.insert(
        "notifications",
        {
            "title": title,
            "message": message,
            "type": notification_type,
            "is_welcome_notification": payload.is_welcome_notification,
            "send_to_all": payload.send_to_all,
            "is_active": True,
            "created_by": ctx.user.id,
        },
    )

    sent_count = 0
    if payload.send_to_all:
        sent_count = await ctx.store.rpc(
            "send_notification_to_all_users", {"p_notification_id": created["id"]}
        ) or 0

    return {
        "notification": created,
        "sent_count": sent_count,
        "message": (
            f"Notification created and sent to {sent_count} users"
            if payload.send_to_all
            else "Notification created successfully"
        ),
    }


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    ctx: AdminContext = Depends(require_admin),
) -> MessageResponse:
    """Remove a non-admin user and everything they own."""
    target = str(user_id)
    if target == ctx.user.id:
        raise ValidationAppError(
            code="cannot_delete_self",
            message="You cannot delete your own account",
        )

    profile = await ctx.store.select_one(
        "user_profiles", "user_id,is_admin", filters={"user_id": target}
    )
    if not profile:
        raise NotFoundAppError(code="user_not_found", message="User not found")
    if profile.get("is_admin"):
        raise AuthorizationAppError(
            code="cannot_delete_admin",
            message="Cannot delete admin users",
        )

    warning = await delete_user_data(ctx.store, target)

    if warning:
        return MessageResponse(
            message="User data deleted successfully. Auth record may require manual cleanup.",
            warning=warning,
        )
    return MessageResponse(message="User deleted successfully")
