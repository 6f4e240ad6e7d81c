"""Endpoints reachable without a session (still rate-limited)."""

from fastapi import APIRouter, Depends, Query

from hoot.adapters.backend.client import JobBackendClient
from hoot.adapters.store.base import AbstractDataStore
from hoot.core.dependencies import get_data_store, get_job_backend
from hoot.core.errors import ValidationAppError
from hoot.schemas.referral import ReferralValidationResponse
from hoot.services.referrals import normalize_referral_code

router = APIRouter(tags=["Public"])


@router.get("/referral-codes/validate", response_model=ReferralValidationResponse)
async def validate_referral_code(
    code: str | None = Query(None, max_length=64),
    store: AbstractDataStore = Depends(get_data_store),
) -> ReferralValidationResponse:
    """Tell a signup form whether a referral code is active."""
    if not code:
        raise ValidationAppError(code="code_required", message="Code is required")

    normalized = normalize_referral_code(code)
    if not normalized:
        return ReferralValidationResponse(valid=False)

    found = await store.select_one(
        "referral_codes",
        "id,code,is_active",
        filters={"code": normalized, "is_active": True},
    )
    if not found:
        return ReferralValidationResponse(valid=False)
    return ReferralValidationResponse(valid=True, code=found["code"])


@router.get("/regions")
async def list_regions(backend: JobBackendClient = Depends(get_job_backend)) -> dict:
    """Regions the job backend can create accounts in."""
    return await backend.get_regions()
