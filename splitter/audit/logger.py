"""
Audit Logger

DESIGN DECISION: Every change to a room is logged.
This provides:
1. Traceability of who changed which item
2. Debugging capability
3. A session history the UI can display

The audit logger:
- Writes structured JSON lines through structlog
- Keeps an in-memory, append-only trail for the current session
- Supports correlation IDs to trace the events of one receipt scan
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from splitter.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output to stderr at the given level.

    structlog filters through the stdlib logger, so the level set
    here is the one that decides what gets rendered.
    """
    root = logging.getLogger()
    if not any(getattr(h, "_splitter_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._splitter_handler = True
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The in-memory session trail (for display)
    """

    def __init__(self, room_name: Optional[str] = None):
        """
        Initialize audit logger.

        Args:
            room_name: Bound into every log line when given.
        """
        self._room_name = room_name
        self._events: list[AuditEvent] = []
        self._logger = structlog.get_logger(__name__)
        if room_name:
            self._logger = self._logger.bind(room_name=room_name)

    @property
    def events(self) -> list[AuditEvent]:
        """Events recorded so far, oldest first."""
        return list(self._events)

    def events_for(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def log(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Always appended to the trail; rendered at the event's severity.
        """
        if event.room_name is None and self._room_name:
            event = event.model_copy(update={"room_name": self._room_name})
        self._events.append(event)

        log_dict = event.to_log_dict()
        log_dict.pop("room_name", None)

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a receipt scan and pass it through
    every step of that scan.
    """
    return uuid4()
