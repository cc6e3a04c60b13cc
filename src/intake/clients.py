"""
Client Selector

Lists clients, filters them as the user types, and makes one of them
the active client. Selecting a client is the ONLY thing that loads
(or creates) an FNA header.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.audit import AuditLogger
from src.intake.controller import FnaFormController
from src.models.client import Client
from src.models.fna import FnaHeader
from src.services.storage import FnaStorageInterface, StorageError


class ListingState(str, Enum):
    """Why a filtered listing looks the way it does."""
    MATCHES = "matches"
    NO_MATCHES = "no_matches"          # clients exist, none match the query
    EMPTY_DATASET = "empty_dataset"    # there are no clients at all


class FilterResult(BaseModel):
    """Clients matching a search query."""

    query: str
    clients: list[Client] = Field(default_factory=list)
    state: ListingState

    @property
    def empty_message(self) -> Optional[str]:
        if self.state == ListingState.NO_MATCHES:
            return "No matching clients found."
        if self.state == ListingState.EMPTY_DATASET:
            return "No clients in database yet."
        return None


class ClientSelector:
    """Client list, search and selection."""

    def __init__(
        self,
        storage: FnaStorageInterface,
        controller: FnaFormController,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._controller = controller
        self._audit_logger = audit_logger or AuditLogger()

        self._clients: list[Client] = []
        self._loaded = False
        self.load_error: Optional[str] = None
        self.active_client: Optional[Client] = None

    @property
    def clients(self) -> list[Client]:
        return list(self._clients)

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(
        self,
        force: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> list[Client]:
        """
        Fetch all clients once, newest first.

        Later calls return the same list unless force=True. On failure
        the error is kept in load_error for inline display and the list
        is empty.
        """
        if self._loaded and not force:
            return self.clients

        try:
            clients = await self._storage.list_clients()
        except StorageError as e:
            self.load_error = e.message
            self._audit_logger.log_clients_load_failed(e.message, correlation_id)
            return []

        self._clients = clients
        self._loaded = True
        self.load_error = None
        self._audit_logger.log_clients_loaded(len(clients), correlation_id)
        return self.clients

    def filter(self, query: str) -> FilterResult:
        """
        Case-insensitive search on first name, last name or phone.

        An empty query returns every client.
        """
        query = (query or "").strip()
        if not self._clients:
            return FilterResult(query=query, clients=[], state=ListingState.EMPTY_DATASET)

        matches = [client for client in self._clients if client.matches(query)]
        state = ListingState.MATCHES if matches else ListingState.NO_MATCHES
        return FilterResult(query=query, clients=matches, state=state)

    def find(self, client_id: str) -> Optional[Client]:
        for client in self._clients:
            if client.id == client_id:
                return client
        return None

    async def select(
        self,
        client: Client,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[FnaHeader]:
        """
        Make a client active and load (or create) their FNA header.

        Re-selecting the active client whose header is already loaded is
        a no-op that returns the current header.

        Returns:
            The header, or None if another selection replaced this one
            before it finished.
        """
        controller = self._controller
        if (
            self.active_client is not None
            and self.active_client.id == client.id
            and controller.is_loaded
            and controller.client_id == client.id
        ):
            return controller.header

        self.active_client = client
        return await controller.initialize(client.id, correlation_id)
