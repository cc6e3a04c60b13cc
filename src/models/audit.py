"""
Audit Models for FNA Intake

Every significant action is recorded as an AuditEvent:
client list fetches, header load-or-create, saves, document renders
and auth redirects.

DESIGN DECISION: Events are structured, not free text. The audit logger
decides where they go; the models only describe what happened.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Client selection
    CLIENTS_LOADED = "clients_loaded"
    CLIENTS_LOAD_FAILED = "clients_load_failed"

    # Header lifecycle
    FNA_HEADER_LOADED = "fna_header_loaded"
    FNA_HEADER_CREATED = "fna_header_created"
    FNA_LOAD_FAILED = "fna_load_failed"
    STALE_RESPONSE_DISCARDED = "stale_response_discarded"
    FNA_FIELD_EDITED = "fna_field_edited"
    FNA_SAVED = "fna_saved"
    FNA_SAVE_FAILED = "fna_save_failed"

    # Dashboard
    SESSIONS_LOADED = "sessions_loaded"
    SESSIONS_LOAD_FAILED = "sessions_load_failed"

    # Documents
    PDF_RENDERED = "pdf_rendered"
    PDF_RENDER_FAILED = "pdf_render_failed"

    # Auth
    AUTH_REDIRECT = "auth_redirect"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clip(value: object, limit: int = 80) -> str:
    """Shorten caller-supplied ids for descriptions; the full id stays in entity_id."""
    text = str(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'client', 'fna_header', 'fna_session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one client selection)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.header_created(header_id, client_id, correlation_id)
        event = AuditEventBuilder.save_failed(header_id, message, correlation_id)
    """

    @staticmethod
    def clients_loaded(count: int, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLIENTS_LOADED,
            entity_type="client",
            correlation_id=correlation_id,
            description=f"Loaded {count} clients",
            details={"count": count},
        )

    @staticmethod
    def clients_load_failed(error_message: str, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLIENTS_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="client",
            correlation_id=correlation_id,
            description="Could not load clients",
            error_message=error_message,
        )

    @staticmethod
    def header_loaded(
        header_id: str,
        client_id: str,
        created: bool,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.FNA_HEADER_CREATED if created
                else AuditEventType.FNA_HEADER_LOADED
            ),
            entity_type="fna_header",
            entity_id=header_id,
            correlation_id=correlation_id,
            description=(
                f"FNA header {'created' if created else 'loaded'} for client {_clip(client_id)}"
            ),
            details={"client_id": client_id},
            is_user_action=True,
        )

    @staticmethod
    def load_failed(
        client_id: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FNA_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="client",
            entity_id=client_id,
            correlation_id=correlation_id,
            description=f"Could not load or create FNA for client {_clip(client_id)}",
            error_message=error_message,
        )

    @staticmethod
    def stale_response_discarded(
        client_id: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_RESPONSE_DISCARDED,
            severity=AuditSeverity.WARNING,
            entity_type="client",
            entity_id=client_id,
            correlation_id=correlation_id,
            description=f"Discarded FNA response for client {_clip(client_id)}; a newer selection is active",
        )

    @staticmethod
    def field_edited(header_id: Optional[str], field: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FNA_FIELD_EDITED,
            severity=AuditSeverity.DEBUG,
            entity_type="fna_header",
            entity_id=header_id,
            description=f"Draft field edited: {_clip(field)}",
            details={"field": field},
            is_user_action=True,
        )

    @staticmethod
    def saved(header_id: str, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FNA_SAVED,
            entity_type="fna_header",
            entity_id=header_id,
            correlation_id=correlation_id,
            description="FNA saved",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        header_id: Optional[str],
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FNA_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="fna_header",
            entity_id=header_id,
            correlation_id=correlation_id,
            description="FNA save failed",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def sessions_loaded(count: int, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSIONS_LOADED,
            entity_type="fna_session",
            correlation_id=correlation_id,
            description=f"Loaded {count} FNA sessions",
            details={"count": count},
        )

    @staticmethod
    def sessions_load_failed(error_message: str, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSIONS_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="fna_session",
            correlation_id=correlation_id,
            description="Could not load FNA sessions",
            error_message=error_message,
        )

    @staticmethod
    def pdf_rendered(session_id: str, size_bytes: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PDF_RENDERED,
            entity_type="fna_session",
            entity_id=session_id,
            description=f"Rendered PDF for session {_clip(session_id)}",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def pdf_render_failed(session_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PDF_RENDER_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="fna_session",
            entity_id=session_id,
            description=f"PDF render failed for session {_clip(session_id)}",
            error_message=error_message,
        )

    @staticmethod
    def auth_redirect(target: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_REDIRECT,
            severity=AuditSeverity.INFO,
            description=f"Redirected to {_clip(target)}",
            details={"reason": reason},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {_clip(error_type)}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
