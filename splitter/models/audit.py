"""
Audit Models for Receipt Splitter

Every change to a room is recorded as an event so the session can
show what happened and in which order ("who unassigned the milk?").

DESIGN DECISION: The trail is append-only and lives only as long as the
session. Nothing is written to disk.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each room transition and each recognition step has its own type.
    """
    # Room lifecycle
    ROOM_JOINED = "room_joined"
    ROOM_JOIN_REJECTED = "room_join_rejected"

    # Membership
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    MEMBER_CHANGE_REJECTED = "member_change_rejected"

    # Ledger
    ITEMS_SEEDED = "items_seeded"
    ITEM_ADDED = "item_added"
    ITEM_UPDATED = "item_updated"
    ITEM_REMOVED = "item_removed"
    ITEM_CHANGE_REJECTED = "item_change_rejected"

    # Assignment
    ASSIGNMENT_TOGGLED = "assignment_toggled"

    # Recognition
    UPLOAD_REJECTED = "upload_rejected"
    SCAN_STARTED = "scan_started"
    SCAN_COMPLETED = "scan_completed"
    SCAN_FAILED = "scan_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the session trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
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

    # Context
    room_name: Optional[str] = Field(
        default=None,
        description="Room the event belongs to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'member', 'item', 'upload')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Item id, member name or upload id"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one scan)"
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
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "room_name": self.room_name,
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
        event = AuditEventBuilder.member_added("Grocery Gang", "Alex")
        event = AuditEventBuilder.scan_completed("Grocery Gang", upload_id, 5, correlation_id)
    """

    @staticmethod
    def room_joined(room_name: str, member_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROOM_JOINED,
            room_name=room_name,
            entity_type="room",
            entity_id=room_name,
            description=f"Joined room: {room_name}",
            details={"member_count": member_count},
            is_user_action=True,
        )

    @staticmethod
    def room_join_rejected(errors: dict[str, str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROOM_JOIN_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="room",
            description=f"Room join rejected with {len(errors)} issues",
            details={"errors": errors},
            is_user_action=True,
        )

    @staticmethod
    def member_added(room_name: str, member: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_ADDED,
            room_name=room_name,
            entity_type="member",
            entity_id=member,
            description=f"Member added: {member}",
            is_user_action=True,
        )

    @staticmethod
    def member_removed(
        room_name: str,
        member: str,
        unassigned_items: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_REMOVED,
            room_name=room_name,
            entity_type="member",
            entity_id=member,
            description=f"Member removed: {member}",
            details={"unassigned_items": unassigned_items},
            is_user_action=True,
        )

    @staticmethod
    def member_change_rejected(
        room_name: str,
        member: str,
        action: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_CHANGE_REJECTED,
            severity=AuditSeverity.DEBUG,
            room_name=room_name,
            entity_type="member",
            entity_id=member,
            description=f"Member {action} ignored: {member!r}",
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def items_seeded(
        room_name: str,
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEMS_SEEDED,
            room_name=room_name,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger replaced with {item_count} items",
            details={"item_count": item_count},
        )

    @staticmethod
    def item_added(room_name: str, item_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            room_name=room_name,
            entity_type="item",
            entity_id=str(item_id),
            description=f"Item added: {name}",
            is_user_action=True,
        )

    @staticmethod
    def item_updated(
        room_name: str,
        item_id: UUID,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_UPDATED,
            room_name=room_name,
            entity_type="item",
            entity_id=str(item_id),
            description=f"Item updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def item_removed(room_name: str, item_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_REMOVED,
            room_name=room_name,
            entity_type="item",
            entity_id=str(item_id),
            description="Item removed",
            is_user_action=True,
        )

    @staticmethod
    def item_change_rejected(
        room_name: str,
        action: str,
        item_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_CHANGE_REJECTED,
            severity=AuditSeverity.DEBUG,
            room_name=room_name,
            entity_type="item",
            entity_id=str(item_id) if item_id else None,
            description=f"Item {action} ignored",
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def assignment_toggled(
        room_name: str,
        item_id: UUID,
        member: str,
        assigned: bool,
    ) -> AuditEvent:
        verb = "assigned to" if assigned else "unassigned from"
        return AuditEvent(
            event_type=AuditEventType.ASSIGNMENT_TOGGLED,
            room_name=room_name,
            entity_type="item",
            entity_id=str(item_id),
            description=f"{member} {verb} item",
            details={"member": member, "assigned": assigned},
            is_user_action=True,
        )

    @staticmethod
    def upload_rejected(
        room_name: str,
        filename: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UPLOAD_REJECTED,
            severity=AuditSeverity.WARNING,
            room_name=room_name,
            entity_type="upload",
            correlation_id=correlation_id,
            description=f"Receipt upload rejected: {filename}",
            error_message=reason,
            details={"filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def scan_started(
        room_name: str,
        upload_id: UUID,
        filename: str,
        file_size: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCAN_STARTED,
            room_name=room_name,
            entity_type="upload",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Receipt scan started: {filename}",
            details={
                "filename": filename,
                "file_size_bytes": file_size,
            },
            is_user_action=True,
        )

    @staticmethod
    def scan_completed(
        room_name: str,
        upload_id: UUID,
        item_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCAN_COMPLETED,
            room_name=room_name,
            entity_type="upload",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Receipt scan found {item_count} items",
            details={"item_count": item_count},
        )

    @staticmethod
    def scan_failed(
        room_name: str,
        upload_id: UUID,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCAN_FAILED,
            severity=AuditSeverity.WARNING,
            room_name=room_name,
            entity_type="upload",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description="Receipt scan failed",
            error_message=error_message,
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
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
