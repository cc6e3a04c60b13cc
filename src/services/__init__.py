"""Services package."""

from src.services.documents import (
    FnaPdfRenderer,
    RenderedDocument,
    RenderError,
)
from src.services.storage import (
    DuplicateError,
    FetchError,
    FnaStorageInterface,
    InMemoryFnaStorage,
    NotFoundError,
    SaveError,
    StorageConnectionError,
    StorageError,
    SupabaseClient,
    SupabaseFnaStorage,
)

__all__ = [
    # Document services
    "FnaPdfRenderer",
    "RenderedDocument",
    "RenderError",
    # Storage services
    "DuplicateError",
    "FetchError",
    "FnaStorageInterface",
    "InMemoryFnaStorage",
    "NotFoundError",
    "SaveError",
    "StorageConnectionError",
    "StorageError",
    "SupabaseClient",
    "SupabaseFnaStorage",
]
