"""
Item Ledger

The editable list of receipt line items. Items are created either in
bulk from a recognizer's output or one at a time by hand, and edited in
place while the user reviews them.

Nothing here raises on bad input: prices and quantities are coerced,
and operations on unknown ids are no-ops.
"""

from typing import Iterable, Iterator, Optional, Union
from uuid import UUID

import structlog

from splitter.models.room import ExtractedItem, Item, ItemPatch
from splitter.validation.coercion import (
    PriceInput,
    QuantityInput,
    parse_quantity,
    price_to_text,
)

logger = structlog.get_logger(__name__)

ItemRecord = Union[ExtractedItem, dict]


class ItemLedger:
    """Ordered collection of items keyed by id."""

    def __init__(self, items: Optional[Iterable[Item]] = None):
        self._items: list[Item] = list(items or [])

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return self.get(item_id) is not None

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    def get(self, item_id) -> Optional[Item]:
        """Look up an item by id; None when absent."""
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def seed_items(self, records: Iterable[ItemRecord]) -> list[Item]:
        """
        Replace the whole ledger with fresh items.

        Every record gets a new id and no assignees. Calling this again
        discards the previous items entirely, and an empty batch leaves
        an empty ledger.
        """
        fresh = []
        for record in records:
            if not isinstance(record, ExtractedItem):
                record = ExtractedItem.model_validate(record)
            fresh.append(Item.from_extracted(record))
        self._items = fresh
        return list(fresh)

    def add_item(
        self,
        name: str,
        price: PriceInput,
        quantity: QuantityInput = 1,
    ) -> Optional[Item]:
        """
        Append a hand-entered item.

        Returns None without changing anything when the name or the
        price text is blank.
        """
        name = (name or "").strip()
        price_text = price_to_text(price).strip()
        if not name or not price_text:
            logger.debug("item_add_skipped", name=name, price=price_text)
            return None

        item = Item(
            name=name,
            price_text=price_text,
            quantity=parse_quantity(quantity),
        )
        self._items.append(item)
        return item

    def update_item(self, item_id: UUID, patch: Union[ItemPatch, dict]) -> bool:
        """
        Apply a partial update.

        The price is stored exactly as typed so an in-progress edit like
        "3." survives; it is re-parsed whenever a number is needed.
        """
        item = self.get(item_id)
        if item is None:
            logger.debug("item_update_skipped", item_id=str(item_id))
            return False

        if not isinstance(patch, ItemPatch):
            patch = ItemPatch.model_validate(patch)

        if patch.name is not None:
            item.name = patch.name
        if patch.price is not None:
            item.price_text = patch.price
        if patch.quantity is not None:
            item.quantity = parse_quantity(patch.quantity)
        return True

    def remove_item(self, item_id: UUID) -> bool:
        item = self.get(item_id)
        if item is None:
            return False
        self._items.remove(item)
        return True
