"""Signed-in user's stats, credits and credit purchases."""

import logging
from datetime import datetime, timezone

from fastapi import Depends, Request

from hoot.adapters.payments.base import AbstractPaymentGateway
from hoot.adapters.payments.stripe_gateway import to_cents
from hoot.adapters.store.base import AbstractDataStore, SessionUser
from hoot.core.auth import protected_router, validate_session
from hoot.core.config import settings
from hoot.core.dependencies import get_data_store, get_payment_gateway
from hoot.core.errors import DataStoreAppError, NotFoundAppError
from hoot.core.logging import hash_identifier
from hoot.schemas.account import (
    CheckoutRequest,
    CheckoutResponse,
    CreditsResponse,
    JobUpsertRequest,
    JobUpsertResponse,
    StatsResponse,
)
from hoot.services.stats import get_user_stats
from hoot.services.users import ensure_user_rows

logger = logging.getLogger(__name__)

router = protected_router(tags=["Account"])


@router.get("/stats", response_model=StatsResponse)
async def read_stats(
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
) -> StatsResponse:
    """Aggregate the user's job counts and vault size."""
    await ensure_user_rows(store, user.id)
    return await get_user_stats(store, user.id)


@router.patch("/stats", response_model=JobUpsertResponse)
async def upsert_job_result(
    payload: JobUpsertRequest,
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
) -> JobUpsertResponse:
    """Create or update one of the user's job rows, keyed by job_id.

    The store runs with the service key, so ownership is checked here: a
    job_id that belongs to someone else is reported as not found.
    """
    existing = await store.select_one(
        "user_jobs", "user_id", filters={"job_id": payload.job_id}
    )
    if existing is not None and existing.get("user_id") != user.id:
        logger.warning(
            "stats.job_owner_mismatch",
            extra={"user_hash": hash_identifier(user.id)},
        )
        raise NotFoundAppError(code="job_not_found", message="Job not found")

    row = {"user_id": user.id, "job_id": payload.job_id, "status": payload.status or "completed"}
    for field in ("requested_count", "successful_count", "failed_count"):
        value = getattr(payload, field)
        if value is not None:
            row[field] = value
    # Only an explicit completion is timestamped
    if payload.status == "completed":
        row["completed_at"] = datetime.now(timezone.utc).isoformat()

    saved = await store.upsert("user_jobs", row, on_conflict="job_id")
    return JobUpsertResponse(
        job_id=saved["job_id"],
        requested_count=saved.get("requested_count"),
        successful_count=saved.get("successful_count"),
        failed_count=saved.get("failed_count"),
        status=saved["status"],
    )


@router.get("/credits", response_model=CreditsResponse)
async def read_credits(
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
) -> CreditsResponse:
    await ensure_user_rows(store, user.id)
    row = await store.select_one("user_credits", "credits", filters={"user_id": user.id})
    return CreditsResponse(credits=(row or {}).get("credits") or 0)


@router.post("/stripe/create-checkout", response_model=CheckoutResponse, tags=["Payments"])
async def create_checkout(
    payload: CheckoutRequest,
    request: Request,
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
    payments: AbstractPaymentGateway = Depends(get_payment_gateway),
) -> CheckoutResponse:
    """Open a hosted checkout for a credit package and record it as pending."""
    origin = (request.headers.get("origin") or settings.app.site_url).rstrip("/")
    session = await payments.create_checkout_session(
        user=user,
        credits=payload.credits,
        price=payload.price,
        package_id=payload.package_id,
        success_url=f"{origin}/dashboard/credits?success=true&session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{origin}/dashboard/credits?canceled=true",
    )

    try:
        await store.rpc(
            "create_purchase",
            {
                "p_user_id": user.id,
                "p_stripe_checkout_session_id": session.id,
                "p_credits": payload.credits,
                "p_amount_paid_cents": to_cents(payload.price),
            },
        )
    except DataStoreAppError as exc:
        # The payment flow still works; the purchase row can be reconciled later
        logger.error(
            "checkout.purchase_record_failed",
            extra={"checkout_session_id": session.id, "error_code": exc.code},
        )

    logger.info(
        "checkout.session_created",
        extra={"checkout_session_id": session.id, "credits": payload.credits},
    )
    return CheckoutResponse(session_id=session.id, url=session.url)
