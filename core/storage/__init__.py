"""
Storage for investor preferences and property listings.
"""

from __future__ import annotations

from core.storage.base import DataStore, Record
from core.storage.memory import InMemoryDataStore
from core.storage.supabase import SupabaseDataStore


def build_data_store(config) -> DataStore:
    """
    Pick the data store for a configuration.

    Supabase when credentials are configured, otherwise an in-memory store
    persisted under the data directory.
    """
    if config.supabase_url and config.supabase_service_role_key:
        return SupabaseDataStore(
            url=config.supabase_url,
            service_role_key=config.supabase_service_role_key,
            timeout=config.request_timeout,
        )
    return InMemoryDataStore(persist_path=f"{config.data_dir}/matching_store.json")


__all__ = [
    "DataStore",
    "Record",
    "InMemoryDataStore",
    "SupabaseDataStore",
    "build_data_store",
]
