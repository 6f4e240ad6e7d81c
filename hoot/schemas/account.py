"""Schemas for the signed-in user's stats, credits and checkout."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StatsResponse(BaseModel):
    business_centers: int = Field(0, description="Accounts stored in the user's vault.")
    requested: int = Field(0, description="Accounts requested across all jobs.")
    successful: int = Field(0, description="Accounts created successfully across all jobs.")
    failures: int = Field(0, description="Accounts that failed across all jobs.")


class JobUpsertRequest(BaseModel):
    """Job result reported back after a backend run."""

    job_id: str = Field(..., min_length=1, max_length=64)
    requested_count: int | None = Field(None, ge=0)
    successful_count: int | None = Field(None, ge=0)
    failed_count: int | None = Field(None, ge=0)
    status: str | None = Field(None, description="Defaults to 'completed'.")


class JobUpsertResponse(BaseModel):
    job_id: str
    requested_count: int | None = None
    successful_count: int | None = None
    failed_count: int | None = None
    status: str


class CreditsResponse(BaseModel):
    credits: int


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    credits: int = Field(..., gt=0, description="Credits in the package.")
    price: float = Field(..., gt=0, description="Package price in dollars.")
    package_id: str = Field(..., alias="packageId", min_length=1)


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    url: str | None = None


class CreateJobRequest(BaseModel):
    accounts: int = Field(..., ge=1, le=10_000)
    region: str = Field(..., min_length=1, max_length=16)
    currency: str = Field(..., min_length=1, max_length=8)


class CreateJobResponse(BaseModel):
    job_id: str
    status: str | None = None
    message: str | None = None


class JobAccount(BaseModel):
    email: str
    password: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: Literal["pending", "running", "completed", "failed"]
    total_requested: int = 0
    total_created: int = 0
    accounts: list[JobAccount] | None = None
    error: str | None = None
    logs: list[str] | None = None
