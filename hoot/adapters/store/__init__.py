"""Data store adapters for the hosted database and auth provider."""

from hoot.adapters.store.base import AbstractDataStore, InFilter, SessionUser
from hoot.adapters.store.factory import create_data_store
from hoot.adapters.store.in_memory import InMemoryDataStore
from hoot.adapters.store.supabase import SupabaseDataStore

__all__ = [
    "AbstractDataStore",
    "InFilter",
    "InMemoryDataStore",
    "SessionUser",
    "SupabaseDataStore",
    "create_data_store",
]
