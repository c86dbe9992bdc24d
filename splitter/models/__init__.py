"""
Data Models Package

This package contains all Pydantic models used in Receipt Splitter.
Everything passed between the recognizer, the room and the UI
conforms to these schemas.
"""

from splitter.models.room import (
    ExtractedItem,
    Item,
    ItemPatch,
    MemberItemShare,
    ReceiptUpload,
    RoomCredentials,
    ScanStatus,
    SplitSummary,
)
from splitter.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Room models
    "ExtractedItem",
    "Item",
    "ItemPatch",
    "MemberItemShare",
    "ReceiptUpload",
    "RoomCredentials",
    "ScanStatus",
    "SplitSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
