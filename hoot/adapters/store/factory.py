"""Factory for the configured data store backend."""

from hoot.adapters.store.base import AbstractDataStore
from hoot.adapters.store.in_memory import InMemoryDataStore
from hoot.adapters.store.supabase import SupabaseDataStore
from hoot.core.config import settings
from hoot.core.errors import ValidationAppError


def create_data_store() -> AbstractDataStore:
    """Instantiate the data store named by ``STORE_BACKEND``.

    Raises:
        ValidationAppError: If the backend is unknown or misconfigured.
    """
    backend = settings.store.backend.lower()

    if backend == "supabase":
        if not settings.store.supabase_url or not settings.store.supabase_service_key:
            raise ValidationAppError(
                code="store_not_configured",
                message="Supabase backend requires STORE_SUPABASE_URL and STORE_SUPABASE_SERVICE_KEY",
            )
        return SupabaseDataStore(
            url=settings.store.supabase_url,
            service_key=settings.store.supabase_service_key,
            timeout_seconds=settings.store.timeout_seconds,
        )

    if backend == "memory":
        return InMemoryDataStore()

    raise ValidationAppError(
        code="store_unknown_backend",
        message=f"Unknown data store backend: '{backend}'. Supported: supabase, memory",
    )
