"""
Form State Controller

Holds the in-memory draft of ONE client's FNA header and mediates
between the form and storage.

Lifecycle:
1. initialize(client_id) -> load-or-create the header, adopt its fields
2. set_field(name, raw)  -> edit the draft only, never touches storage
3. save()                -> coerce the whole draft, stamp updated_at,
                            full-row update keyed by the header id

CRITICAL RULES:
- A response for an older selection never overwrites a newer one.
- Saves are serialized; each save writes the draft as it is when the
  save actually starts, so the latest draft wins.
- A failed save leaves the draft untouched so the user can retry.
"""

import asyncio
from typing import Any, Hashable, Optional
from uuid import UUID

from pydantic import ValidationError

from src.audit import AuditLogger
from src.models.fna import (
    FNA_FIELDS,
    FnaHeader,
    SaveResult,
    blank_draft,
    describe_validation_error,
    utc_now,
)
from src.services.storage import FnaStorageInterface, StorageError


SAVE_SUCCESS_MESSAGE = "Saved successfully!"
NO_HEADER_MESSAGE = "Select a client before saving."


class FnaFormController:
    """In-memory state of one FNA form."""

    def __init__(
        self,
        storage: FnaStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()

        self._generation = 0
        self._client_id: Optional[str] = None
        self._header: Optional[FnaHeader] = None
        self._draft: dict[str, Any] = blank_draft()

        # Transient indicators for the UI
        self.status_message: Optional[str] = None
        self.last_save_ok: Optional[bool] = None
        self.load_error: Optional[str] = None
        self.is_saving = False

        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._locks: dict[Hashable, asyncio.Lock] = {}

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def client_id(self) -> Optional[str]:
        return self._client_id

    @property
    def header(self) -> Optional[FnaHeader]:
        return self._header

    @property
    def header_id(self) -> Optional[str]:
        return self._header.id if self._header else None

    @property
    def is_loaded(self) -> bool:
        return self._header is not None

    @property
    def draft(self) -> dict[str, Any]:
        """A copy of the draft; edit through set_field."""
        return dict(self._draft)

    def value(self, name: str) -> Any:
        return self._draft[name]

    def _lock_for(self, key: Hashable) -> asyncio.Lock:
        # Locks belong to one event loop; Streamlit actions each get a fresh loop.
        loop = asyncio.get_running_loop()
        if self._lock_loop is not loop:
            self._lock_loop = loop
            self._locks = {}
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    async def initialize(
        self,
        client_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[FnaHeader]:
        """
        Load the client's header, creating it on first selection.

        Returns:
            The adopted header, or None if a newer selection superseded
            this one while it was in flight.

        Raises:
            StorageError: if the load or create failed for the current selection
        """
        self._generation += 1
        generation = self._generation

        self._client_id = client_id
        self._header = None
        self._draft = blank_draft()
        self.status_message = None
        self.last_save_ok = None
        self.load_error = None

        try:
            async with self._lock_for(("client", client_id)):
                header, created = await self._storage.get_or_create_header(client_id)
        except StorageError as e:
            self._audit_logger.log_load_failed(client_id, e.message, correlation_id)
            if generation != self._generation:
                return None
            self.load_error = e.message
            raise

        if generation != self._generation:
            self._audit_logger.log_stale_response(client_id, correlation_id)
            return None

        self._header = header
        self._draft = header.to_draft()
        self._audit_logger.log_header_loaded(header.id, client_id, created, correlation_id)
        return header

    # -------------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------------

    def set_field(self, name: str, raw_value: Any) -> None:
        """
        Update one field of the draft.

        Only the basic type is checked (text vs yes/no vs number vs date);
        numbers stay raw until save.

        Raises:
            KeyError: unknown field
            TypeError: value of the wrong basic type for the field
        """
        spec = FNA_FIELDS.get(name)
        if spec is None:
            raise KeyError(f"Unknown FNA field: {name}")
        if not spec.accepts(raw_value):
            raise TypeError(
                f"{name} expects a {spec.kind.value} value, got {type(raw_value).__name__}"
            )
        self._draft[name] = raw_value
        self._audit_logger.log_field_edited(self.header_id, name)

    # -------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------

    async def save(self, correlation_id: Optional[UUID] = None) -> SaveResult:
        """
        Coerce the draft and write the full header back.

        Never raises for backend or validation failures; they come back
        as an unsuccessful SaveResult carrying the message verbatim.
        """
        async with self._lock_for("save"):
            if self._header is None:
                result = SaveResult(success=False, message=NO_HEADER_MESSAGE)
                self._set_status(result)
                return result

            generation = self._generation
            header_id = self._header.id
            client_id = self._header.client_id
            draft = dict(self._draft)
            saved_at = utc_now()

            self.is_saving = True
            try:
                try:
                    header = FnaHeader.from_draft(header_id, client_id, draft, updated_at=saved_at)
                except ValidationError as e:
                    return self._save_failed(header_id, describe_validation_error(e), correlation_id, generation)

                try:
                    stored = await self._storage.update_header(header_id, header.to_row())
                except StorageError as e:
                    return self._save_failed(header_id, e.message, correlation_id, generation)
                except ValidationError as e:
                    return self._save_failed(header_id, describe_validation_error(e), correlation_id, generation)
            finally:
                self.is_saving = False

            self._audit_logger.log_saved(header_id, correlation_id)
            result = SaveResult(success=True, message=SAVE_SUCCESS_MESSAGE, saved_at=saved_at)
            if generation == self._generation:
                self._header = stored
                self._set_status(result)
            return result

    def _save_failed(
        self,
        header_id: str,
        message: str,
        correlation_id: Optional[UUID],
        generation: int,
    ) -> SaveResult:
        self._audit_logger.log_save_failed(header_id, message, correlation_id)
        result = SaveResult(success=False, message=message)
        if generation == self._generation:
            self._set_status(result)
        return result

    def _set_status(self, result: SaveResult) -> None:
        self.status_message = result.message
        self.last_save_ok = result.success
