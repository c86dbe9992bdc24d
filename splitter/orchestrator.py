"""
Main Orchestrator for Receipt Splitter

This module ties the room core to its collaborators and defines the
end-to-end flows for:
1. Joining a room (name + PIN format check)
2. Scanning a receipt (upload check → recognizer → seed the ledger)
3. Editing the room (members, items, assignments), audited

DESIGN DECISION: The core never logs user intent and never talks to a
recognizer. RoomSession wraps it so every change lands in the audit
trail, and ReceiptScanFlow is the only place that awaits recognition.
"""

from typing import Iterable, Optional, Union
from uuid import UUID

from pydantic import ValidationError

from splitter.audit import AuditLogger, configure_logging, create_correlation_id
from splitter.config import get_settings
from splitter.core import RoomState
from splitter.models.audit import AuditEventBuilder
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
from splitter.services.recognition import (
    MindeeReceiptRecognizer,
    PlaceholderRecognizer,
    ReceiptRecognizer,
    RecognitionError,
    RecognitionFailedError,
    UnsupportedUploadError,
)
from splitter.validation.coercion import (
    PriceInput,
    QuantityInput,
    clean_price_text,
    clean_quantity_text,
)


def _validation_messages(error: ValidationError) -> dict[str, str]:
    """Map a pydantic error to {field: first message}."""
    messages = {}
    for err in error.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        ctx_error = err.get("ctx", {}).get("error")
        message = str(ctx_error) if ctx_error is not None else err["msg"]
        messages.setdefault(field, message)
    return messages


def _clean_patch(patch: ItemPatch) -> ItemPatch:
    """Strip characters the price and quantity boxes would not accept."""
    update = {}
    if patch.price is not None:
        update["price"] = clean_price_text(patch.price)
    if isinstance(patch.quantity, str):
        update["quantity"] = clean_quantity_text(patch.quantity)
    return patch.model_copy(update=update)


class RoomSession:
    """
    A joined room: credentials, state and audit trail.

    Mutations return the same bool/None results as RoomState and are
    audited; rejected ones are recorded at debug severity.
    """

    def __init__(
        self,
        credentials: RoomCredentials,
        state: Optional[RoomState] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.credentials = credentials
        self.state = state or RoomState()
        self.audit = audit_logger or AuditLogger(room_name=credentials.room_name)
        self.scan_status = ScanStatus.IDLE

    @property
    def room_name(self) -> str:
        return self.credentials.room_name

    @property
    def members(self) -> list[str]:
        return self.state.members

    @property
    def items(self) -> list[Item]:
        return self.state.items

    def add_member(self, name: str) -> bool:
        added = self.state.add_member(name)
        if added:
            self.audit.log(AuditEventBuilder.member_added(self.room_name, name.strip()))
        else:
            self.audit.log(AuditEventBuilder.member_change_rejected(self.room_name, name, "add"))
        return added

    def remove_member(self, name: str) -> bool:
        affected = sum(1 for item in self.state.items if name in item.assignees)
        removed = self.state.remove_member(name)
        if removed:
            self.audit.log(AuditEventBuilder.member_removed(self.room_name, name, affected))
        else:
            self.audit.log(AuditEventBuilder.member_change_rejected(self.room_name, name, "remove"))
        return removed

    def seed_items(
        self,
        records: Iterable[Union[ExtractedItem, dict]],
        correlation_id: Optional[UUID] = None,
    ) -> list[Item]:
        items = self.state.seed_items(records)
        self.audit.log(AuditEventBuilder.items_seeded(self.room_name, len(items), correlation_id))
        return items

    def add_item(
        self,
        name: str,
        price: PriceInput,
        quantity: QuantityInput = 1,
    ) -> Optional[Item]:
        """Add a hand-entered item; typed text is cleaned the way the input boxes clean it."""
        if isinstance(price, str):
            price = clean_price_text(price)
        if isinstance(quantity, str):
            quantity = clean_quantity_text(quantity)
        item = self.state.add_item(name, price, quantity)
        if item is None:
            self.audit.log(AuditEventBuilder.item_change_rejected(self.room_name, "add"))
        else:
            self.audit.log(AuditEventBuilder.item_added(self.room_name, item.id, item.name))
        return item

    def update_item(self, item_id: UUID, patch: Union[ItemPatch, dict]) -> bool:
        if not isinstance(patch, ItemPatch):
            patch = ItemPatch.model_validate(patch)
        patch = _clean_patch(patch)
        updated = self.state.update_item(item_id, patch)
        if updated:
            fields = sorted(patch.model_dump(exclude_none=True))
            self.audit.log(AuditEventBuilder.item_updated(self.room_name, item_id, fields))
        else:
            self.audit.log(AuditEventBuilder.item_change_rejected(self.room_name, "update", item_id))
        return updated

    def remove_item(self, item_id: UUID) -> bool:
        removed = self.state.remove_item(item_id)
        if removed:
            self.audit.log(AuditEventBuilder.item_removed(self.room_name, item_id))
        else:
            self.audit.log(AuditEventBuilder.item_change_rejected(self.room_name, "remove", item_id))
        return removed

    def toggle_assignment(self, item_id: UUID, member_name: str) -> bool:
        toggled = self.state.toggle_assignment(item_id, member_name)
        if toggled:
            item = self.state.get_item(item_id)
            self.audit.log(AuditEventBuilder.assignment_toggled(
                self.room_name,
                item_id,
                member_name,
                assigned=member_name in item.assignees,
            ))
        else:
            self.audit.log(AuditEventBuilder.item_change_rejected(self.room_name, "assign", item_id))
        return toggled

    def summary(self) -> SplitSummary:
        return self.state.summary()

    def items_for_member(self, member_name: str) -> list[MemberItemShare]:
        return self.state.items_for_member(member_name)


def join_room(
    room_name: str,
    pin: str,
    members: Optional[Iterable[str]] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[Optional[RoomSession], dict[str, str]]:
    """
    Validate the join form and open a session.

    Returns:
        (session, errors) - session is None and errors maps field
        name to a user-facing message when the form is invalid.
    """
    try:
        credentials = RoomCredentials(room_name=room_name or "", pin=pin or "")
    except ValidationError as e:
        errors = _validation_messages(e)
        (audit_logger or AuditLogger()).log(AuditEventBuilder.room_join_rejected(errors))
        return None, errors

    session = RoomSession(
        credentials,
        state=RoomState(members),
        audit_logger=audit_logger,
    )
    session.audit.log(AuditEventBuilder.room_joined(session.room_name, len(session.members)))
    return session, {}


class ReceiptScanFlow:
    """
    Orchestrates a receipt scan.

    Flow:
    1. Upload → validate type and size
    2. Recognize → await the injected recognizer for the whole batch
    3. Seed → replace the room's ledger with the extracted items

    The ledger is only touched once the full batch has arrived.
    """

    def __init__(self, recognizer: Optional[ReceiptRecognizer] = None):
        self._recognizer = recognizer or create_recognizer()
        self._app_settings = get_settings().app

    @property
    def recognizer(self) -> ReceiptRecognizer:
        return self._recognizer

    def check_upload(
        self,
        filename: str,
        file_size: int,
        mime_type: str,
    ) -> ReceiptUpload:
        """
        Validate an upload before recognition.

        Raises:
            UnsupportedUploadError: wrong type, empty or too large
        """
        try:
            upload = ReceiptUpload(
                original_filename=filename,
                file_size_bytes=file_size,
                mime_type=mime_type or "",
            )
        except ValidationError as e:
            raise UnsupportedUploadError(
                filename,
                "Please choose a PNG, JPG, WEBP or HEIC image of the receipt.",
            ) from e

        if upload.file_size_bytes == 0:
            raise UnsupportedUploadError(filename, "The selected file is empty.")
        if upload.file_size_bytes > self._app_settings.max_upload_size_bytes:
            raise UnsupportedUploadError(
                filename,
                f"Images must be smaller than {self._app_settings.max_upload_size_mb} MB.",
            )
        return upload

    async def scan_receipt(
        self,
        session: RoomSession,
        image_bytes: bytes,
        filename: str,
        mime_type: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[list[Item], str]:
        """
        Scan a receipt image into the session's ledger.

        Returns:
            (items, message_for_user)

        Raises:
            UnsupportedUploadError: If the upload is rejected
            RecognitionError: If the recognizer fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            upload = self.check_upload(filename, len(image_bytes), mime_type)
        except UnsupportedUploadError as e:
            session.audit.log(AuditEventBuilder.upload_rejected(
                session.room_name, filename, str(e), correlation_id,
            ))
            raise

        session.scan_status = ScanStatus.RUNNING
        session.audit.log(AuditEventBuilder.scan_started(
            session.room_name,
            upload.upload_id,
            filename,
            upload.file_size_bytes,
            correlation_id,
        ))

        try:
            extracted = await self._recognizer.recognize(image_bytes, filename)
        except Exception as e:
            session.scan_status = ScanStatus.FAILED
            session.audit.log(AuditEventBuilder.scan_failed(
                session.room_name, upload.upload_id, str(e), correlation_id,
            ))
            session.audit.log_external_service_error(
                service=self._recognizer.name,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            if isinstance(e, RecognitionError):
                raise
            raise RecognitionFailedError(f"Failed to read receipt: {e}") from e

        items = session.seed_items(extracted, correlation_id=correlation_id)
        session.scan_status = ScanStatus.DONE
        session.audit.log(AuditEventBuilder.scan_completed(
            session.room_name, upload.upload_id, len(items), correlation_id,
        ))

        if items:
            message = f"Found {len(items)} items. Review them before assigning."
        else:
            message = "No items were found on this receipt. You can add them by hand."
        return items, message


def create_recognizer() -> ReceiptRecognizer:
    """Build the recognizer selected in settings."""
    if get_settings().recognition.backend == "mindee":
        return MindeeReceiptRecognizer()
    return PlaceholderRecognizer()


def create_app_components() -> ReceiptScanFlow:
    """
    Factory function to create application components.

    Configures logging from settings and returns the scan flow with
    the configured recognizer.
    """
    configure_logging(get_settings().app.log_level)
    return ReceiptScanFlow(create_recognizer())
