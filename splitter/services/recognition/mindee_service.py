"""
Receipt recognition using Mindee

DESIGN DECISION: We use Mindee's receipt API because:
1. It returns structured line items, not just raw text
2. It already separates description, quantity and amounts
3. It copes with crumpled, skewed phone photos

This service handles:
1. Sending the image bytes to Mindee (with retries)
2. Converting Mindee line items to our ExtractedItem model

Weighed goods ("1.35 kg") have a fractional quantity. Those become a
single unit priced at the line total, so the subtotal still matches
the receipt.
"""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog
from mindee import Client, PredictResponse
from mindee.product import ReceiptV5
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from splitter.config import get_settings
from splitter.models.room import ExtractedItem
from splitter.services.recognition.interface import (
    ReceiptRecognizer,
    RecognitionFailedError,
)

logger = structlog.get_logger(__name__)


class MindeeReceiptRecognizer(ReceiptRecognizer):
    """
    Receipt recognizer backed by Mindee ReceiptV5.

    IMPORTANT BOUNDARIES:
    1. This service ONLY extracts items - it never touches a room
    2. Lines without any amount are skipped, not guessed
    """

    name = "mindee"

    def __init__(
        self,
        client: Optional[Client] = None,
        retry_wait: Any = None,
    ):
        self._client = client
        self._attempts = get_settings().recognition.retry_attempts
        self._wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)

    def _get_client(self) -> Client:
        """Get or create Mindee client."""
        if self._client is None:
            self._client = Client(api_key=get_settings().mindee.api_key)
        return self._client

    def _safe_decimal(self, value) -> Optional[Decimal]:
        """Safely convert a value to Decimal."""
        if value is None:
            return None
        try:
            # Mindee returns float/None
            return Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            return None

    def _convert_line_item(self, line) -> Optional[ExtractedItem]:
        description = getattr(line, "description", None) or "Item"
        quantity = self._safe_decimal(getattr(line, "quantity", None))
        unit_price = self._safe_decimal(getattr(line, "unit_price", None))
        total = self._safe_decimal(getattr(line, "total_amount", None))

        if unit_price is None and total is None:
            return None

        whole_quantity = (
            quantity is not None
            and quantity >= 1
            and quantity == quantity.to_integral_value()
        )

        if whole_quantity:
            count = int(quantity)
            if unit_price is None:
                unit_price = total / count
        elif total is not None:
            count = 1
            unit_price = total
        else:
            count = 1

        return ExtractedItem(
            name=str(description)[:200],
            price=unit_price.quantize(Decimal("0.01")),
            quantity=count,
        )

    def _extract_line_items(self, mindee_items) -> list[ExtractedItem]:
        """Extract line items from Mindee response."""
        items = []

        for line in mindee_items or []:
            try:
                item = self._convert_line_item(line)
            except (ArithmeticError, ValueError) as e:
                logger.warning("mindee_line_item_skipped", error=str(e))
                continue
            if item is not None:
                items.append(item)

        return items

    def _parse(self, image_bytes: bytes, filename: str) -> PredictResponse:
        client = self._get_client()
        input_source = client.source_from_bytes(image_bytes, filename)
        return client.parse(ReceiptV5, input_source)

    async def recognize(self, image_bytes: bytes, filename: str) -> list[ExtractedItem]:
        """
        Extract receipt line items using Mindee.

        Raises:
            RecognitionFailedError: If every attempt fails
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._attempts),
                wait=self._wait,
                reraise=True,
            ):
                with attempt:
                    response = await asyncio.to_thread(self._parse, image_bytes, filename)
        except Exception as e:
            raise RecognitionFailedError(f"Failed to read receipt: {e}") from e

        prediction = response.document.inference.prediction
        items = self._extract_line_items(getattr(prediction, "line_items", None))
        logger.info("mindee_receipt_read", filename=filename, item_count=len(items))
        return items
