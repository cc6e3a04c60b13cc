"""
Storage Services Package

Provides the abstract storage interface and its implementations.
Supabase is the production backend; the in-memory store backs tests
and the offline demo mode.
"""

from src.services.storage.interface import (
    DuplicateError,
    FetchError,
    FnaStorageInterface,
    NotFoundError,
    SaveError,
    StorageConnectionError,
    StorageError,
)
from src.services.storage.memory_store import InMemoryFnaStorage
from src.services.storage.supabase_store import SupabaseClient, SupabaseFnaStorage

__all__ = [
    # Interface
    "FnaStorageInterface",
    # Exceptions
    "DuplicateError",
    "FetchError",
    "NotFoundError",
    "SaveError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryFnaStorage",
    "SupabaseClient",
    "SupabaseFnaStorage",
]
