from typing import Iterable

from hoot.adapters.store.base import AbstractDataStore, Row
from hoot.schemas.account import StatsResponse


def sum_job_counts(jobs: Iterable[Row]) -> tuple[int, int, int]:
    """Sum (requested, successful, failed) over job rows; nulls count as 0."""
    requested = successful = failed = 0
    for job in jobs:
        requested += job.get("requested_count") or 0
        successful += job.get("successful_count") or 0
        failed += job.get("failed_count") or 0
    return requested, successful, failed


async def get_user_stats(store: AbstractDataStore, user_id: str) -> StatsResponse:
    jobs = await store.select(
        "user_jobs",
        "requested_count,successful_count,failed_count",
        filters={"user_id": user_id},
    )
    requested, successful, failures = sum_job_counts(jobs)
    business_centers = await store.count("user_accounts", filters={"user_id": user_id})
    return StatsResponse(
        business_centers=business_centers,
        requested=requested,
        successful=successful,
        failures=failures,
    )
