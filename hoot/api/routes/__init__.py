from __future__ import annotations

from hoot.api.routes.account import router as account_router
from hoot.api.routes.admin import router as admin_router
from hoot.api.routes.health import router as health_router
from hoot.api.routes.jobs import router as jobs_router
from hoot.api.routes.notifications import router as notifications_router
from hoot.api.routes.public import router as public_router

__all__ = [
    "account_router",
    "admin_router",
    "health_router",
    "jobs_router",
    "notifications_router",
    "public_router",
]
