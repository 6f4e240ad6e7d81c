"""OpenAPI security schemes and tag metadata.

Operations require a session by default (bearer header or auth cookie);
public endpoints are exempted by setting ``security: []`` on them.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from hoot.core.config import settings

PUBLIC_PATH_SUFFIXES = ("/health", "/referral-codes/validate", "/regions")

TAGS_METADATA = [
    {"name": "Account", "description": "Stats, credits and job results for the signed-in user."},
    {"name": "Payments", "description": "Credit package checkout."},
    {"name": "Jobs", "description": "Account-creation jobs forwarded to the job backend."},
    {"name": "Notifications", "description": "The signed-in user's inbox."},
    {"name": "Public", "description": "Rate-limited endpoints that need no session."},
    {"name": "Admin", "description": "Admin-only management. Requires the admin flag."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Auth provider access token.",
            },
        )
        security_schemes.setdefault(
            "CookieAuth",
            {
                "type": "apiKey",
                "in": "cookie",
                "name": settings.auth.access_token_cookie,
                "description": "Access token cookie set by the dashboard.",
            },
        )
        schema.setdefault("security", [{"BearerAuth": []}, {"CookieAuth": []}])

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith(PUBLIC_PATH_SUFFIXES):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
