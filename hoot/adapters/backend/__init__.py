"""Job backend adapter."""

from hoot.adapters.backend.client import JobBackendClient

__all__ = ["JobBackendClient"]
