"""
Audit Logger

Every significant action in the intake flow is logged as a structured
event: which client was selected, whether a header was created or
loaded, every save and its outcome, every rendered document.

The audit logger:
- Never raises into the caller (a logging failure must not break a save)
- Supports correlation IDs to trace one user action end to end
"""

import logging
import sys
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route stdlib logging (and therefore structlog) to stderr."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """Central audit logging service. Events go to the structured local log."""

    def __init__(self, logger_name: str = "fna.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).warning("Failed to write audit event: %s", e)
            return False
        return True

    def _emit(self, build: Callable[..., AuditEvent], *args, **kwargs) -> bool:
        """Build an event and log it; a bad event is dropped, never raised."""
        try:
            event = build(*args, **kwargs)
        except Exception as e:
            logging.getLogger(__name__).warning(
                "Failed to build audit event %s: %s", build.__name__, e
            )
            return False
        return self.log(event)

    def log_clients_loaded(self, count: int, correlation_id: Optional[UUID] = None) -> None:
        self._emit(AuditEventBuilder.clients_loaded, count, correlation_id)

    def log_clients_load_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._emit(AuditEventBuilder.clients_load_failed, error_message, correlation_id)

    def log_header_loaded(
        self,
        header_id: str,
        client_id: str,
        created: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log header load (or creation on first selection)."""
        self._emit(
            AuditEventBuilder.header_loaded,
            header_id=header_id,
            client_id=client_id,
            created=created,
            correlation_id=correlation_id,
        )

    def log_load_failed(
        self,
        client_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._emit(AuditEventBuilder.load_failed, client_id, error_message, correlation_id)

    def log_stale_response(
        self,
        client_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._emit(AuditEventBuilder.stale_response_discarded, client_id, correlation_id)

    def log_field_edited(self, header_id: Optional[str], field: str) -> None:
        self._emit(AuditEventBuilder.field_edited, header_id, field)

    def log_saved(self, header_id: str, correlation_id: Optional[UUID] = None) -> None:
        self._emit(AuditEventBuilder.saved, header_id, correlation_id)

    def log_save_failed(
        self,
        header_id: Optional[str],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._emit(AuditEventBuilder.save_failed, header_id, error_message, correlation_id)

    def log_sessions_loaded(self, count: int, correlation_id: Optional[UUID] = None) -> None:
        self._emit(AuditEventBuilder.sessions_loaded, count, correlation_id)

    def log_sessions_load_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._emit(AuditEventBuilder.sessions_load_failed, error_message, correlation_id)

    def log_pdf_rendered(self, session_id: str, size_bytes: int) -> None:
        self._emit(AuditEventBuilder.pdf_rendered, session_id, size_bytes)

    def log_pdf_render_failed(self, session_id: str, error_message: str) -> None:
        self._emit(AuditEventBuilder.pdf_render_failed, session_id, error_message)

    def log_auth_redirect(self, target: str, reason: str) -> None:
        self._emit(AuditEventBuilder.auth_redirect, target, reason)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self._emit(
            AuditEventBuilder.system_error,
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., selecting a client).
    Pass it through all subsequent operations.
    """
    return uuid4()
