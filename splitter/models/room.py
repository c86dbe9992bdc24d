"""
Core Data Models for Receipt Splitter

These models define the schemas for everything flowing between the
recognizer, the room state and the presentation layer.

DESIGN DECISION: Item prices are kept as raw text (the edit buffer)
and re-parsed whenever a number is needed. A half-typed price never
breaks the totals, and what the user typed is never silently rewritten.
"""

import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from splitter.config import get_settings
from splitter.validation.coercion import parse_price, parse_quantity, price_to_text


# =============================================================================
# ENUMS
# =============================================================================

class ScanStatus(str, Enum):
    """Receipt recognition progress for a room."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


# =============================================================================
# ITEM MODELS
# =============================================================================

class ExtractedItem(BaseModel):
    """
    A single line item as delivered by a recognizer.

    Recognizers are external and sloppy, so price and quantity are
    coerced rather than rejected.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        default="Item",
        description="Line item description"
    )
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Unit price"
    )
    quantity: int = Field(
        default=1,
        ge=1,
        description="Number of units"
    )

    @field_validator('name', mode='before')
    @classmethod
    def default_blank_name(cls, v) -> str:
        if v is None or not str(v).strip():
            return "Item"
        return str(v)

    @field_validator('price', mode='before')
    @classmethod
    def coerce_price(cls, v) -> Decimal:
        return parse_price(v)

    @field_validator('quantity', mode='before')
    @classmethod
    def coerce_quantity(cls, v) -> int:
        return parse_quantity(v)


class Item(BaseModel):
    """
    A line item in a room's ledger.

    `assignees` keeps insertion order for display but never holds the
    same member twice.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable item identifier"
    )
    name: str = Field(
        ...,
        description="Display name, editable and not unique"
    )
    price_text: str = Field(
        default="",
        description="Raw price edit buffer"
    )
    quantity: int = Field(
        default=1,
        ge=1
    )
    assignees: list[str] = Field(default_factory=list)

    @field_validator('assignees')
    @classmethod
    def dedupe_assignees(cls, v: list[str]) -> list[str]:
        unique = []
        for name in v:
            if name not in unique:
                unique.append(name)
        return unique

    @property
    def unit_price(self) -> Decimal:
        """Committed numeric price; unparsable text counts as zero."""
        return parse_price(self.price_text)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignees)

    @classmethod
    def from_extracted(cls, record: ExtractedItem) -> "Item":
        return cls(
            name=record.name,
            price_text=price_to_text(record.price),
            quantity=record.quantity,
        )


class ItemPatch(BaseModel):
    """
    Partial update for an item.

    Unset fields are left untouched. Price is carried as raw text.
    """

    name: Optional[str] = None
    price: Optional[str] = None
    quantity: Optional[Union[int, float, str]] = None

    @field_validator('price', mode='before')
    @classmethod
    def price_as_text(cls, v) -> Optional[str]:
        if v is None:
            return None
        return price_to_text(v)


# =============================================================================
# DERIVED / VIEW MODELS
# =============================================================================

class MemberItemShare(BaseModel):
    """One row of the "items for member" drill-down."""

    item_id: UUID
    name: str
    quantity: int
    unit_price: Decimal
    share_count: int = Field(ge=1)
    per_person_share: Decimal


class SplitSummary(BaseModel):
    """
    Snapshot of the room's totals.

    All amounts are unrounded; round only when displaying.
    """

    member_totals: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Per-member total in registry order"
    )
    grand_total: Decimal = Field(
        default=Decimal("0"),
        description="Sum of every item subtotal"
    )
    unallocated_total: Decimal = Field(
        default=Decimal("0"),
        description="Sum of subtotals of items nobody is assigned to"
    )

    @property
    def allocated_total(self) -> Decimal:
        return sum(self.member_totals.values(), Decimal("0"))


# =============================================================================
# COLLABORATOR BOUNDARY MODELS
# =============================================================================

class RoomCredentials(BaseModel):
    """
    Room name and PIN supplied when joining.

    Only a format check; the PIN protects nothing.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    room_name: str = Field(
        ...,
        description="Room name, 2-30 characters after trimming"
    )
    pin: str = Field(
        ...,
        description="Numeric room PIN"
    )

    @field_validator('room_name')
    @classmethod
    def validate_room_name(cls, v: str) -> str:
        room = get_settings().room
        if not v:
            raise ValueError("Room name is required.")
        if not room.room_name_min_length <= len(v) <= room.room_name_max_length:
            raise ValueError(
                f"Room name must be {room.room_name_min_length}-"
                f"{room.room_name_max_length} characters."
            )
        return v

    @field_validator('pin')
    @classmethod
    def validate_pin(cls, v: str) -> str:
        length = get_settings().room.pin_length
        if not v:
            raise ValueError("PIN is required.")
        if not re.fullmatch(rf"\d{{{length}}}", v):
            raise ValueError(f"PIN must be exactly {length} digits.")
        return v


class ReceiptUpload(BaseModel):
    """Represents an uploaded receipt image before recognition."""

    upload_id: UUID = Field(
        default_factory=uuid4,
        description="Unique upload identifier"
    )
    uploaded_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    original_filename: str
    file_size_bytes: int = Field(ge=0)
    mime_type: str

    @field_validator('mime_type')
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        """Only allow image types."""
        allowed = {'image/jpeg', 'image/png', 'image/webp', 'image/heic'}
        if v.lower() not in allowed:
            raise ValueError(f"Unsupported image type: {v}. Allowed: {sorted(allowed)}")
        return v.lower()
