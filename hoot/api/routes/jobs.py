"""Account-creation jobs, forwarded to the external job backend."""

import logging

from fastapi import Depends, Path

from hoot.adapters.backend.client import JobBackendClient
from hoot.adapters.store.base import AbstractDataStore, SessionUser
from hoot.core.auth import protected_router, validate_session
from hoot.core.dependencies import get_data_store, get_job_backend
from hoot.core.errors import BackendAppError, ValidationAppError
from hoot.schemas.account import CreateJobRequest, CreateJobResponse, JobStatusResponse

logger = logging.getLogger(__name__)

JOB_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"

router = protected_router(tags=["Jobs"])


@router.post("/jobs", response_model=CreateJobResponse)
async def create_job(
    payload: CreateJobRequest,
    user: SessionUser = Depends(validate_session),
    store: AbstractDataStore = Depends(get_data_store),
    backend: JobBackendClient = Depends(get_job_backend),
) -> CreateJobResponse:
    """Start a job after checking the user can pay for every account.

    The backend deducts credits as accounts are saved; this only refuses
    jobs the balance could never cover.
    """
    row = await store.select_one("user_credits", "credits", filters={"user_id": user.id})
    current = (row or {}).get("credits") or 0
    if current < payload.accounts:
        raise ValidationAppError(
            code="insufficient_credits",
            message=(
                f"Insufficient credits. You have {current} credits, "
                f"but need {payload.accounts}."
            ),
            details={"current_credits": current, "required_credits": payload.accounts},
        )

    result = await backend.create_accounts_job(
        payload.accounts,
        payload.region,
        payload.currency,
        access_token=user.access_token,
    )
    if not result.get("job_id"):
        raise BackendAppError(
            code="backend_no_job_id",
            message="Job creation failed - no job ID returned",
        )
    return CreateJobResponse(
        job_id=result["job_id"],
        status=result.get("status"),
        message=result.get("message"),
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def read_job_status(
    job_id: str = Path(..., pattern=JOB_ID_PATTERN),
    backend: JobBackendClient = Depends(get_job_backend),
) -> JobStatusResponse:
    return JobStatusResponse(**await backend.get_job_status(job_id))
