"""Application factory for the Hoot API."""

from __future__ import annotations

from fastapi import Depends, FastAPI

from hoot.api.routes import (
    account_router,
    admin_router,
    health_router,
    jobs_router,
    notifications_router,
    public_router,
)
from hoot.core.config import settings
from hoot.core.exception_handlers import setup_exception_handlers
from hoot.core.logging import configure_logging
from hoot.core.middleware import request_id_middleware
from hoot.core.openapi import apply_openapi_customizations
from hoot.core.rate_limit import enforce_rate_limit


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Every ``/api`` router is wrapped in the rate limiter, which runs before
    the routers' own session/admin gates.
    """
    configure_logging(settings.log)

    app = FastAPI(
        title="Hoot API",
        description=(
            "Backend for the Hoot dashboard: credit purchases, account-creation "
            "jobs, notifications and admin management. Sessions come from the "
            "hosted auth provider; public endpoints are rate-limited per client."
        ),
        version="0.1.0",
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    rate_limited = [Depends(enforce_rate_limit)]
    for router in (
        public_router,
        account_router,
        jobs_router,
        notifications_router,
        admin_router,
    ):
        app.include_router(router, prefix="/api", dependencies=rate_limited)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
