"""Process-wide adapter instances exposed as FastAPI dependencies.

Each getter builds its adapter on first use from settings and caches it.
Tests swap them out through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from hoot.adapters.backend.client import JobBackendClient
from hoot.adapters.payments.base import AbstractPaymentGateway
from hoot.adapters.payments.stripe_gateway import StripePaymentGateway
from hoot.adapters.store.base import AbstractDataStore
from hoot.adapters.store.factory import create_data_store
from hoot.core.config import settings
from hoot.core.errors import PaymentAppError


@lru_cache(maxsize=1)
def get_data_store() -> AbstractDataStore:
    return create_data_store()


@lru_cache(maxsize=1)
def get_payment_gateway() -> AbstractPaymentGateway:
    if not settings.stripe.secret_key:
        raise PaymentAppError(
            code="payments_not_configured",
            message="STRIPE_SECRET_KEY is not set",
        )
    return StripePaymentGateway(
        api_key=settings.stripe.secret_key,
        currency=settings.stripe.currency,
    )


@lru_cache(maxsize=1)
def get_job_backend() -> JobBackendClient:
    return JobBackendClient(
        base_url=settings.backend.base_url,
        api_key=settings.backend.api_key,
        timeout_seconds=settings.backend.timeout_seconds,
    )
