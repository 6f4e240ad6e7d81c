"""Client for the external account-creation job backend.

Every call carries the shared ``X-API-Key``. Job creation additionally
forwards the caller's access token so the backend can attribute the job.
Failures are logged with the upstream payload and re-raised as a
:class:`BackendAppError` whose message is safe to show to users.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hoot.core.errors import BackendAppError

logger = logging.getLogger(__name__)


def _error_text(response: httpx.Response) -> str:
    """Pull a readable error out of a failed backend response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


class JobBackendClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or ""
        self._timeout = timeout_seconds
        self._transport = transport
        if not self.api_key:
            logger.warning("backend.api_key_missing")

    async def _call(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
    ) -> Any:
        request_headers = dict(headers or {})
        if authenticated:
            request_headers["X-API-Key"] = self.api_key

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=json, headers=request_headers)
        except httpx.HTTPError as exc:
            logger.error(
                "backend.request_failed",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise BackendAppError(
                code="backend_unavailable",
                message=f"Job backend {operation} failed",
            ) from exc

        if response.is_error:
            logger.error(
                "backend.request_failed",
                extra={
                    "operation": operation,
                    "upstream_status": response.status_code,
                    "upstream_error": _error_text(response)[:500],
                },
            )
            raise BackendAppError(
                code="backend_error",
                message=f"Job backend {operation} failed",
                details={"upstream_status": response.status_code},
            )

        return response.json()

    async def create_accounts_job(
        self,
        accounts: int,
        region: str,
        currency: str,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
        result = await self._call(
            "POST",
            "/api/create-accounts",
            operation="create_accounts_job",
            json={"accounts": accounts, "region": region, "currency": currency},
            headers=headers,
        )
        logger.info(
            "backend.job_created",
            extra={"job_id": result.get("job_id"), "accounts": accounts, "region": region},
        )
        return result

    async def get_job_status(self, job_id: str) -> dict[str, Any]:
        return await self._call("GET", f"/api/job/{job_id}", operation="get_job_status")

    async def get_regions(self) -> dict[str, Any]:
        return await self._call(
            "GET", "/api/regions", operation="get_regions", authenticated=False
        )

    async def check_health(self) -> dict[str, Any]:
        return await self._call(
            "GET", "/api/health", operation="check_health", authenticated=False
        )
