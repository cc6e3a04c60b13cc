"""
In-Memory Storage Implementation

Used by the test suite and by the app's offline demo mode
(create_app_components(use_storage=False)). Behaves like the hosted
backend as far as the intake flow can tell: same ordering, same
load-or-create guarantee, same errors.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Iterable, Optional
from uuid import uuid4

from src.models.client import Client, FnaSession
from src.models.fna import FnaHeader
from src.services.storage.interface import FnaStorageInterface, NotFoundError


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InMemoryFnaStorage(FnaStorageInterface):
    """Dictionary-backed storage. Header rows are kept flat, like the real table."""

    def __init__(
        self,
        clients: Iterable[Client] = (),
        sessions: Iterable[FnaSession] = (),
    ):
        self.clients: list[Client] = list(clients)
        self.sessions: list[FnaSession] = list(sessions)
        self.header_rows: dict[str, dict[str, Any]] = {}
        self.update_count = 0
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._create_lock: Optional[asyncio.Lock] = None

    def _lock(self) -> asyncio.Lock:
        # Streamlit runs each action on a fresh event loop; a lock must not outlive its loop.
        loop = asyncio.get_running_loop()
        if self._create_lock is None or self._lock_loop is not loop:
            self._lock_loop = loop
            self._create_lock = asyncio.Lock()
        return self._create_lock

    def _row_for_client(self, client_id: str) -> Optional[dict[str, Any]]:
        for row in self.header_rows.values():
            if row["client_id"] == client_id:
                return row
        return None

    async def list_clients(self) -> list[Client]:
        return sorted(self.clients, key=lambda c: _created_key(c.createdat), reverse=True)

    async def get_header_by_client(self, client_id: str) -> Optional[FnaHeader]:
        row = self._row_for_client(client_id)
        return FnaHeader.from_row(row) if row else None

    async def get_or_create_header(self, client_id: str) -> tuple[FnaHeader, bool]:
        async with self._lock():
            row = self._row_for_client(client_id)
            if row is not None:
                return FnaHeader.from_row(row), False

            header_id = str(uuid4())
            row = {"id": header_id, "client_id": client_id, "updated_at": None}
            self.header_rows[header_id] = row
            return FnaHeader.from_row(row), True

    async def update_header(self, header_id: str, payload: dict[str, Any]) -> FnaHeader:
        row = self.header_rows.get(header_id)
        if row is None:
            raise NotFoundError(f"FNA header not found: {header_id}")
        updated = FnaHeader.from_row({**row, **payload})
        row.update(payload)
        self.update_count += 1
        return updated

    async def list_sessions(self) -> list[FnaSession]:
        return sorted(self.sessions, key=lambda s: _created_key(s.created_at), reverse=True)

    async def get_session(self, session_id: str) -> Optional[FnaSession]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None
