"""
Abstract Storage Interface

DESIGN DECISION: Business logic talks to an abstract interface, not to
the hosted backend directly. This allows us to:
1. Use in-memory storage for testing
2. Keep the form controller free of query-builder details
3. Put the load-or-create upsert in ONE place

The interface is intentionally small. It covers the three tables the
intake flow touches and nothing else.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from src.models.client import Client, FnaSession
from src.models.fna import FnaHeader


class FnaStorageInterface(ABC):
    """
    Abstract interface for FNA storage operations.

    Any storage implementation (Supabase, in-memory, ...) must implement
    these methods.
    """

    @abstractmethod
    async def list_clients(self) -> list[Client]:
        """
        List all client records, newest registration first.

        Raises:
            FetchError: If the backend rejects the query
        """
        pass

    @abstractmethod
    async def get_header_by_client(self, client_id: str) -> Optional[FnaHeader]:
        """
        Find the FNA header for a client.

        Returns:
            The header if one exists, None otherwise

        Raises:
            FetchError: If the backend rejects the query
        """
        pass

    @abstractmethod
    async def get_or_create_header(self, client_id: str) -> tuple[FnaHeader, bool]:
        """
        Load the client's FNA header, creating it if none exists.

        Must be atomic per client id: concurrent calls for the same client
        all return the same header and at most one of them creates it.

        Returns:
            (header, created)

        Raises:
            FetchError: If the lookup fails
            SaveError: If the insert fails for a reason other than a lost race
        """
        pass

    @abstractmethod
    async def update_header(self, header_id: str, payload: dict[str, Any]) -> FnaHeader:
        """
        Full-row update of an FNA header, keyed by its id.

        Args:
            header_id: Identity of the header
            payload: Flat column -> JSON value mapping (see FnaHeader.to_row)

        Returns:
            The header as stored

        Raises:
            NotFoundError: If no header has this id
            SaveError: If the backend rejects the update
        """
        pass

    @abstractmethod
    async def list_sessions(self) -> list[FnaSession]:
        """
        List FNA sessions for the dashboard, newest first.

        Raises:
            FetchError: If the backend rejects the query
        """
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[FnaSession]:
        """
        Get one FNA session.

        Returns:
            The session if found, None otherwise
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations. The message is shown to the user as-is."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class FetchError(StorageError):
    """A list or load query failed."""
    pass


class NotFoundError(FetchError):
    """Entity not found in storage."""
    pass


class SaveError(StorageError):
    """An insert or update failed."""
    pass


class DuplicateError(SaveError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not construct a client for the storage backend."""
    pass
