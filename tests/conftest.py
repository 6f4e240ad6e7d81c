"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``hoot`` import so the global
settings object picks them up.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hoot.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from hoot.adapters.store.in_memory import InMemoryDataStore
from hoot.core.app_factory import create_app
from hoot.core.dependencies import get_data_store
from hoot.core.rate_limit import get_rate_limiter

USER_ID = "11111111-1111-4111-8111-111111111111"
ADMIN_ID = "22222222-2222-4222-8222-222222222222"
OTHER_ID = "33333333-3333-4333-8333-333333333333"

USER_HEADERS = {"Authorization": "Bearer user-token"}
ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


@pytest.fixture
def store() -> InMemoryDataStore:
    """Store with one regular user, one admin and one extra user."""
    data = InMemoryDataStore(
        {
            "user_profiles": [
                {"user_id": USER_ID, "is_admin": False, "referral_code": None},
                {"user_id": ADMIN_ID, "is_admin": True, "referral_code": None},
                {"user_id": OTHER_ID, "is_admin": False, "referral_code": "WELCOME"},
            ],
        }
    )
    data.add_user("user-token", USER_ID, "user@example.com")
    data.add_user("admin-token", ADMIN_ID, "admin@example.com")
    data.add_user("other-token", OTHER_ID, "other@example.com")
    return data


@pytest.fixture
def limiter() -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=60, window_seconds=60)


@pytest.fixture
def app(store: InMemoryDataStore, limiter: InMemoryFixedWindowRateLimiter) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_data_store] = lambda: store
    application.dependency_overrides[get_rate_limiter] = lambda: limiter
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
