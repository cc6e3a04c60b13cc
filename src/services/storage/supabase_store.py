"""
Supabase Storage Implementation

The hosted backend exposes the three tables over PostgREST:
- clientregistrations: read-only client records
- fna_header: one row per client, updated in place
- fna_sessions: dashboard listing

TRADEOFFS:
- The supabase client is synchronous; calls block the event loop
  for their duration. Every action site has at most one call in flight,
  so this is acceptable for an intake tool.
- Load-or-create relies on a UNIQUE constraint on fna_header.client_id.
  Without it two racing inserts would both succeed.
"""

from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client as SupabaseSDKClient
from supabase import create_client

from src.config import SupabaseSettings, get_settings
from src.models.client import Client, FnaSession
from src.models.fna import FnaHeader
from src.services.storage.interface import (
    DuplicateError,
    FetchError,
    FnaStorageInterface,
    NotFoundError,
    SaveError,
    StorageConnectionError,
)


# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

CLIENT_COLUMNS = "id, firstname, lastname, phone, email, createdat"
SESSION_COLUMNS = "id, created_at, household_income, dependents"


def _error_message(e: Exception) -> str:
    """Backend message, verbatim when there is one."""
    if isinstance(e, APIError) and e.message:
        return e.message
    return str(e)


def _error_code(e: Exception) -> Optional[str]:
    if isinstance(e, APIError):
        return e.code
    return None


class SupabaseClient:
    """
    Low-level Supabase client wrapper.

    Builds the SDK client lazily and applies the signed-in user's access
    token so row-level security sees the right user.
    """

    def __init__(self, settings: Optional[SupabaseSettings] = None):
        self._client: Optional[SupabaseSDKClient] = None
        self._settings = settings or get_settings().supabase
        self._access_token: Optional[str] = None

    @property
    def settings(self) -> SupabaseSettings:
        return self._settings

    def connect(self) -> SupabaseSDKClient:
        """Create the SDK client on first use."""
        if self._client is None:
            try:
                self._client = create_client(self._settings.url, self._settings.anon_key)
            except Exception as e:
                raise StorageConnectionError(f"Failed to create Supabase client: {e}") from e
            if self._access_token:
                self._client.postgrest.auth(self._access_token)
        return self._client

    def set_access_token(self, access_token: Optional[str]) -> None:
        """Run subsequent table queries as the signed-in user."""
        self._access_token = access_token
        if self._client is not None and access_token:
            self._client.postgrest.auth(access_token)

    def table(self, name: str):
        return self.connect().table(name)


class SupabaseFnaStorage(FnaStorageInterface):
    """
    Supabase implementation of FNA storage.

    Rows are converted to models at this boundary; nothing above it
    sees raw PostgREST responses.
    """

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()
        self._settings = self._client.settings

    def _first_header(self, rows: Optional[list[dict[str, Any]]]) -> Optional[FnaHeader]:
        if not rows:
            return None
        return FnaHeader.from_row(rows[0])

    async def list_clients(self) -> list[Client]:
        """List clients, newest registration first."""
        try:
            response = (
                self._client.table(self._settings.clients_table)
                .select(CLIENT_COLUMNS)
                .order("createdat", desc=True)
                .execute()
            )
            return [Client.model_validate(row) for row in response.data or []]
        except Exception as e:
            raise FetchError(_error_message(e), code=_error_code(e)) from e

    async def get_header_by_client(self, client_id: str) -> Optional[FnaHeader]:
        """Retrieve the header for a client, if any."""
        try:
            response = (
                self._client.table(self._settings.header_table)
                .select("*")
                .eq("client_id", client_id)
                .limit(1)
                .execute()
            )
            return self._first_header(response.data)
        except Exception as e:
            raise FetchError(_error_message(e), code=_error_code(e)) from e

    async def get_or_create_header(self, client_id: str) -> tuple[FnaHeader, bool]:
        """
        Load or create the client's header.

        If another writer inserts between our lookup and our insert, the
        unique constraint rejects our row and we adopt theirs.
        """
        existing = await self.get_header_by_client(client_id)
        if existing is not None:
            return existing, False

        try:
            response = (
                self._client.table(self._settings.header_table)
                .insert({"client_id": client_id})
                .execute()
            )
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                winner = await self.get_header_by_client(client_id)
                if winner is not None:
                    return winner, False
                raise DuplicateError(_error_message(e), code=e.code) from e
            raise SaveError(_error_message(e), code=_error_code(e)) from e
        except Exception as e:
            raise SaveError(_error_message(e)) from e

        created = self._first_header(response.data)
        if created is None:
            raise SaveError("Backend did not return the new FNA header")
        return created, True

    async def update_header(self, header_id: str, payload: dict[str, Any]) -> FnaHeader:
        """Full-row update keyed by id."""
        try:
            response = (
                self._client.table(self._settings.header_table)
                .update(payload)
                .eq("id", header_id)
                .execute()
            )
        except Exception as e:
            raise SaveError(_error_message(e), code=_error_code(e)) from e

        updated = self._first_header(response.data)
        if updated is None:
            raise NotFoundError(f"FNA header not found: {header_id}")
        return updated

    async def list_sessions(self) -> list[FnaSession]:
        """List dashboard sessions, newest first."""
        try:
            response = (
                self._client.table(self._settings.sessions_table)
                .select(SESSION_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
            return [FnaSession.model_validate(row) for row in response.data or []]
        except Exception as e:
            raise FetchError(_error_message(e), code=_error_code(e)) from e

    async def get_session(self, session_id: str) -> Optional[FnaSession]:
        """Get one dashboard session."""
        try:
            response = (
                self._client.table(self._settings.sessions_table)
                .select(SESSION_COLUMNS)
                .eq("id", session_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise FetchError(_error_message(e), code=_error_code(e)) from e

        rows = response.data or []
        return FnaSession.model_validate(rows[0]) if rows else None
