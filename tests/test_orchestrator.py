"""
Integration tests for the room flows.

Recognition always goes through fakes; nothing here calls a real API.
"""

import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest

from splitter.audit import AuditLogger
from splitter.models.audit import AuditEventType, AuditSeverity
from splitter.models.room import ExtractedItem, ScanStatus
from splitter.orchestrator import (
    ReceiptScanFlow,
    create_app_components,
    create_recognizer,
    join_room,
)
from splitter.services.recognition import (
    MindeeReceiptRecognizer,
    PlaceholderRecognizer,
    ReceiptRecognizer,
    RecognitionFailedError,
    UnsupportedUploadError,
)


class FailingRecognizer(ReceiptRecognizer):
    name = "failing"

    def __init__(self, error: Exception):
        self.error = error

    async def recognize(self, image_bytes, filename):
        raise self.error


@pytest.fixture
def session():
    session, errors = join_room("Grocery Gang", "1234", members=["Alex", "Sam"])
    assert errors == {}
    return session


@pytest.fixture
def instant_flow():
    return ReceiptScanFlow(PlaceholderRecognizer(latency_seconds=0))


def event_types(session):
    return [event.event_type for event in session.audit.events]


class TestJoinRoom:
    """Tests for the join form."""

    def test_join_opens_session(self):
        session, errors = join_room("  Grocery Gang ", "1234")
        assert errors == {}
        assert session.room_name == "Grocery Gang"
        assert session.members == ["Alex", "Sam", "Riley"]
        assert session.items == []
        assert session.scan_status == ScanStatus.IDLE
        assert event_types(session) == [AuditEventType.ROOM_JOINED]

    def test_blank_form_reports_both_fields(self):
        session, errors = join_room("", "")
        assert session is None
        assert errors == {
            "room_name": "Room name is required.",
            "pin": "PIN is required.",
        }

    def test_bad_formats(self):
        session, errors = join_room("A", "12a4")
        assert session is None
        assert errors["room_name"] == "Room name must be 2-30 characters."
        assert errors["pin"] == "PIN must be exactly 4 digits."

    def test_none_values_are_treated_as_blank(self):
        _, errors = join_room(None, None)
        assert set(errors) == {"room_name", "pin"}

    def test_rejection_is_audited(self):
        audit = AuditLogger()
        join_room("Grocery Gang", "12", audit_logger=audit)
        (event,) = audit.events
        assert event.event_type == AuditEventType.ROOM_JOIN_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert "pin" in event.details["errors"]


class TestRoomSession:
    """Every change to a joined room lands in the audit trail."""

    def test_member_changes_are_audited(self, session):
        assert session.add_member(" Jordan ") is True
        assert session.add_member("Alex") is False

        added, rejected = session.audit.events[-2:]
        assert added.event_type == AuditEventType.MEMBER_ADDED
        assert added.entity_id == "Jordan"
        assert added.room_name == "Grocery Gang"
        assert rejected.event_type == AuditEventType.MEMBER_CHANGE_REJECTED
        assert rejected.severity == AuditSeverity.DEBUG

    def test_remove_member_records_cascade(self, session):
        milk = session.add_item("Milk", "3.99")
        eggs = session.add_item("Eggs", "4.49")
        session.toggle_assignment(milk.id, "Sam")
        session.toggle_assignment(eggs.id, "Sam")

        assert session.remove_member("Sam") is True
        event = session.audit.events[-1]
        assert event.event_type == AuditEventType.MEMBER_REMOVED
        assert event.details["unassigned_items"] == 2
        assert milk.assignees == [] and eggs.assignees == []

    def test_item_changes_are_audited(self, session):
        item = session.add_item("Milk", "3.99")
        assert session.update_item(item.id, {"quantity": "2", "price": "4.10"}) is True
        assert session.toggle_assignment(item.id, "Alex") is True
        assert session.toggle_assignment(item.id, "Alex") is True
        assert session.remove_item(item.id) is True

        events = session.audit.events[1:]
        assert [e.event_type for e in events] == [
            AuditEventType.ITEM_ADDED,
            AuditEventType.ITEM_UPDATED,
            AuditEventType.ASSIGNMENT_TOGGLED,
            AuditEventType.ASSIGNMENT_TOGGLED,
            AuditEventType.ITEM_REMOVED,
        ]
        assert events[1].details["fields"] == ["price", "quantity"]
        assert events[2].details["assigned"] is True
        assert events[3].details["assigned"] is False

    def test_typed_input_is_cleaned(self, session):
        """Only digits and dots reach the price; only digits reach the quantity."""
        item = session.add_item("Milk", "$3.50", "1,000")
        assert item.price_text == "3.50"
        assert item.unit_price == Decimal("3.50")
        assert item.quantity == 1000

        session.update_item(item.id, {"price": "$4.10", "quantity": "x2"})
        assert item.price_text == "4.10"
        assert item.quantity == 2

    def test_price_of_only_symbols_is_rejected(self, session):
        assert session.add_item("Milk", "$") is None
        assert session.items == []

    def test_rejected_item_changes(self, session):
        missing = uuid4()
        assert session.add_item("", "1.00") is None
        assert session.update_item(missing, {"name": "x"}) is False
        assert session.remove_item(missing) is False
        assert session.toggle_assignment(missing, "Alex") is False

        rejected = session.audit.events[1:]
        assert all(e.event_type == AuditEventType.ITEM_CHANGE_REJECTED for e in rejected)
        assert [e.details["action"] for e in rejected] == ["add", "update", "remove", "assign"]

    def test_views_delegate_to_state(self, session):
        item = session.add_item("Pizza", "12.00")
        session.toggle_assignment(item.id, "Alex")
        session.toggle_assignment(item.id, "Sam")
        assert session.summary().member_totals == {"Alex": Decimal("6"), "Sam": Decimal("6")}
        assert session.items_for_member("Sam")[0].share_count == 2


class TestReceiptScanFlow:
    """Tests for the upload -> recognize -> seed flow."""

    def test_scan_seeds_ledger(self, session, instant_flow):
        correlation_id = uuid4()
        items, message = asyncio.run(instant_flow.scan_receipt(
            session, b"fake image", "receipt.jpg", "image/jpeg",
            correlation_id=correlation_id,
        ))

        assert [item.name for item in items] == [
            "Bananas", "Whole Milk 1gal", "Eggs (dozen)", "Sourdough Bread", "Chicken Breast",
        ]
        assert session.items == items
        assert all(item.assignees == [] for item in items)
        assert message == "Found 5 items. Review them before assigning."
        assert session.scan_status == ScanStatus.DONE
        assert session.summary().grand_total == Decimal("48.22")

        trail = [e.event_type for e in session.audit.events_for(correlation_id)]
        assert trail == [
            AuditEventType.SCAN_STARTED,
            AuditEventType.ITEMS_SEEDED,
            AuditEventType.SCAN_COMPLETED,
        ]

    def test_rescan_replaces_items(self, session, instant_flow):
        session.add_item("Leftover", "1.00")
        asyncio.run(instant_flow.scan_receipt(session, b"img", "r.png", "image/png"))
        assert "Leftover" not in [item.name for item in session.items]
        assert len(session.items) == 5

    def test_empty_batch(self, session):
        flow = ReceiptScanFlow(PlaceholderRecognizer(items=[], latency_seconds=0))
        session.add_item("Leftover", "1.00")
        items, message = asyncio.run(flow.scan_receipt(session, b"img", "r.png", "image/png"))
        assert items == []
        assert session.items == []
        assert message == "No items were found on this receipt. You can add them by hand."
        assert session.scan_status == ScanStatus.DONE

    def test_custom_batch(self, session):
        batch = [ExtractedItem(name="Coffee", price="3.50", quantity=2)]
        flow = ReceiptScanFlow(PlaceholderRecognizer(items=batch, latency_seconds=0))
        (item,), _ = asyncio.run(flow.scan_receipt(session, b"img", "r.png", "image/png"))
        assert item.price_text == "3.50"
        assert item.subtotal == Decimal("7.00")

    def test_recognizer_failure(self, session):
        """A failed scan leaves the ledger as it was."""
        existing = session.add_item("Milk", "3.99")
        flow = ReceiptScanFlow(FailingRecognizer(RuntimeError("connection reset")))

        with pytest.raises(RecognitionFailedError, match="connection reset"):
            asyncio.run(flow.scan_receipt(session, b"img", "r.jpg", "image/jpeg"))

        assert session.items == [existing]
        assert session.scan_status == ScanStatus.FAILED
        assert event_types(session)[-2:] == [
            AuditEventType.SCAN_FAILED,
            AuditEventType.EXTERNAL_SERVICE_ERROR,
        ]
        assert session.audit.events[-1].details["service"] == "failing"

    def test_recognition_error_passes_through(self, session):
        error = RecognitionFailedError("unreadable")
        flow = ReceiptScanFlow(FailingRecognizer(error))
        with pytest.raises(RecognitionFailedError) as exc_info:
            asyncio.run(flow.scan_receipt(session, b"img", "r.jpg", "image/jpeg"))
        assert exc_info.value is error

    def test_rejects_non_image(self, session, instant_flow):
        with pytest.raises(UnsupportedUploadError, match="PNG, JPG, WEBP or HEIC"):
            asyncio.run(instant_flow.scan_receipt(session, b"%PDF", "r.pdf", "application/pdf"))
        assert session.scan_status == ScanStatus.IDLE
        assert event_types(session)[-1] == AuditEventType.UPLOAD_REJECTED

    def test_rejects_empty_file(self, session, instant_flow):
        with pytest.raises(UnsupportedUploadError, match="empty"):
            asyncio.run(instant_flow.scan_receipt(session, b"", "r.jpg", "image/jpeg"))

    def test_rejects_oversize_file(self, session, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "1")
        flow = ReceiptScanFlow(PlaceholderRecognizer(latency_seconds=0))
        with pytest.raises(UnsupportedUploadError) as exc_info:
            flow.check_upload("big.jpg", 1024 * 1024 + 1, "image/jpeg")
        assert str(exc_info.value) == "Images must be smaller than 1 MB."
        assert exc_info.value.filename == "big.jpg"
        assert flow.check_upload("ok.jpg", 1024 * 1024, "image/jpeg").file_size_bytes == 1024 * 1024


class TestFactories:
    """Tests for component construction from settings."""

    def test_default_backend_is_placeholder(self):
        assert isinstance(create_recognizer(), PlaceholderRecognizer)

    def test_mindee_backend(self, monkeypatch):
        monkeypatch.setenv("RECOGNITION_BACKEND", "mindee")
        assert isinstance(create_recognizer(), MindeeReceiptRecognizer)

    def test_create_app_components(self):
        flow = create_app_components()
        assert isinstance(flow, ReceiptScanFlow)
        assert flow.recognizer.name == "placeholder"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
