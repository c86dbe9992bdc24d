"""
Placeholder recognizer.

Waits a configurable moment, then returns the same small grocery
receipt regardless of the image. Lets the whole flow run without a
recognition API key.
"""

import asyncio
from decimal import Decimal
from typing import Optional, Sequence

from splitter.config import get_settings
from splitter.models.room import ExtractedItem
from splitter.services.recognition.interface import ReceiptRecognizer

SAMPLE_RECEIPT: tuple[ExtractedItem, ...] = (
    ExtractedItem(name="Bananas", price=Decimal("2.39"), quantity=2),
    ExtractedItem(name="Whole Milk 1gal", price=Decimal("3.99"), quantity=1),
    ExtractedItem(name="Eggs (dozen)", price=Decimal("4.49"), quantity=1),
    ExtractedItem(name="Sourdough Bread", price=Decimal("5.29"), quantity=1),
    ExtractedItem(name="Chicken Breast", price=Decimal("9.89"), quantity=3),
)


class PlaceholderRecognizer(ReceiptRecognizer):
    """Returns a canned receipt after a short delay."""

    name = "placeholder"

    def __init__(
        self,
        items: Optional[Sequence[ExtractedItem]] = None,
        latency_seconds: Optional[float] = None,
    ):
        self._items = tuple(SAMPLE_RECEIPT if items is None else items)
        if latency_seconds is None:
            latency_seconds = get_settings().recognition.mock_latency_seconds
        self._latency = latency_seconds

    async def recognize(self, image_bytes: bytes, filename: str) -> list[ExtractedItem]:
        if self._latency:
            await asyncio.sleep(self._latency)
        return [item.model_copy() for item in self._items]
