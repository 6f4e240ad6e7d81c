"""Session and admin authorization gate.

Two checks, composed:

1. Session check: resolve the ambient credential (``Authorization: Bearer``
   header, else the access-token cookie) to a user through the auth
   provider. Absence is a value (``None``), never an exception.
2. Admin check: session check plus one lookup of ``user_profiles.is_admin``.
   A missing profile, a false flag and a failed lookup all produce the same
   403 outcome (fail closed).

Routes do not call these by hand. They are registered on routers built by
:func:`protected_router` or :func:`admin_router`, whose router-level
dependencies run the gate before any handler code, so a route on those
routers cannot skip it. Handlers that need the user declare
``Depends(validate_session)`` / ``Depends(require_admin)`` again; FastAPI
caches dependencies per request, so the provider is queried once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, Request

from hoot.adapters.store.base import AbstractDataStore, SessionUser
from hoot.core.config import settings
from hoot.core.dependencies import get_data_store
from hoot.core.errors import (
    AppError,
    AuthenticationAppError,
    AuthorizationAppError,
    DataStoreAppError,
)
from hoot.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Authentication required"
FORBIDDEN_MESSAGE = "Admin access required"


@dataclass(frozen=True)
class AdminContext:
    """Successful admin check: the caller and a store handle for its queries."""

    user: SessionUser
    store: AbstractDataStore


@dataclass(frozen=True)
class AuthDenial:
    """Failed check, carrying exactly what the client may see."""

    error: str
    message: str
    status_code: int

    def to_app_error(self) -> AppError:
        if self.status_code == 401:
            return AuthenticationAppError(code="unauthorized", message=self.message)
        return AuthorizationAppError(code="forbidden", message=self.message)


UNAUTHENTICATED = AuthDenial(error="Unauthorized", message=UNAUTHORIZED_MESSAGE, status_code=401)
FORBIDDEN = AuthDenial(error="Forbidden", message=FORBIDDEN_MESSAGE, status_code=403)


def extract_access_token(request: Request) -> str | None:
    """Return the bearer token or the auth cookie value, if any."""
    authorization = request.headers.get("authorization") or ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    cookie = request.cookies.get(settings.auth.access_token_cookie)
    return cookie or None


async def get_session_user(
    request: Request,
    store: AbstractDataStore = Depends(get_data_store),
) -> SessionUser | None:
    """Resolve the current user, or None when there is no valid session."""
    token = extract_access_token(request)
    if not token:
        return None

    try:
        return await store.get_user(token)
    except DataStoreAppError as exc:
        logger.warning(
            "auth.session_lookup_failed",
            extra={"error_code": exc.code, "request_path": request.url.path},
        )
        return None


async def validate_session(
    user: SessionUser | None = Depends(get_session_user),
) -> SessionUser:
    """Dependency for protected routes: the user, or a 401.

    Raises:
        AuthenticationAppError: When no session is present.
    """
    if user is None:
        raise UNAUTHENTICATED.to_app_error()
    return user


async def validate_admin(
    request: Request,
    store: AbstractDataStore,
) -> AdminContext | AuthDenial:
    """Run the two-tier admin check and return its outcome."""
    user = await get_session_user(request, store)
    if user is None:
        return UNAUTHENTICATED

    try:
        profile = await store.select_one(
            "user_profiles", "is_admin", filters={"user_id": user.id}
        )
    except DataStoreAppError as exc:
        logger.warning(
            "auth.admin_lookup_failed",
            extra={"user_hash": hash_identifier(user.id), "error_code": exc.code},
        )
        return FORBIDDEN

    if not profile or profile.get("is_admin") is not True:
        logger.warning(
            "auth.admin_denied",
            extra={"user_hash": hash_identifier(user.id), "request_path": request.url.path},
        )
        return FORBIDDEN

    return AdminContext(user=user, store=store)


async def require_admin(
    request: Request,
    store: AbstractDataStore = Depends(get_data_store),
) -> AdminContext:
    """Dependency for admin routes.

    Raises:
        AuthenticationAppError: No session (401).
        AuthorizationAppError: Session without admin flag (403).
    """
    outcome = await validate_admin(request, store)
    if isinstance(outcome, AuthDenial):
        raise outcome.to_app_error()
    return outcome


def protected_router(**kwargs: Any) -> APIRouter:
    """APIRouter whose every route requires a session."""
    dependencies = [Depends(validate_session), *kwargs.pop("dependencies", [])]
    return APIRouter(dependencies=dependencies, **kwargs)


def admin_router(**kwargs: Any) -> APIRouter:
    """APIRouter whose every route requires an admin session."""
    dependencies = [Depends(require_admin), *kwargs.pop("dependencies", [])]
    return APIRouter(dependencies=dependencies, **kwargs)
