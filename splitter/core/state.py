"""
Room State

One object per room owning the member registry and the item ledger.
Every transition goes through here so that removing a member always
cascades to the item assignments before the call returns.
"""

from typing import Iterable, Optional, Union
from uuid import UUID

from splitter.config import RoomSettings
from splitter.core import assignments, calculator
from splitter.core.ledger import ItemLedger, ItemRecord
from splitter.core.registry import MemberRegistry
from splitter.models.room import Item, ItemPatch, MemberItemShare, SplitSummary
from splitter.validation.coercion import PriceInput, QuantityInput


class RoomState:
    """Members, items and the links between them for a single room."""

    def __init__(
        self,
        members: Optional[Iterable[str]] = None,
        items: Optional[Iterable[Item]] = None,
        settings: Optional[RoomSettings] = None,
    ):
        self.registry = MemberRegistry(members, settings=settings)
        self.ledger = ItemLedger(items)

    def __repr__(self) -> str:
        return f"<RoomState members={len(self.registry)} items={len(self.ledger)}>"

    @property
    def members(self) -> list[str]:
        return self.registry.members

    @property
    def items(self) -> list[Item]:
        return self.ledger.items

    def get_item(self, item_id: UUID) -> Optional[Item]:
        return self.ledger.get(item_id)

    # -- members --------------------------------------------------------

    def add_member(self, name: str) -> bool:
        return self.registry.add_member(name)

    def remove_member(self, name: str) -> bool:
        if not self.registry.remove_member(name):
            return False
        assignments.cascade_member_removal(self.ledger, name)
        return True

    # -- items ----------------------------------------------------------

    def seed_items(self, records: Iterable[ItemRecord]) -> list[Item]:
        return self.ledger.seed_items(records)

    def add_item(
        self,
        name: str,
        price: PriceInput,
        quantity: QuantityInput = 1,
    ) -> Optional[Item]:
        return self.ledger.add_item(name, price, quantity)

    def update_item(self, item_id: UUID, patch: Union[ItemPatch, dict]) -> bool:
        return self.ledger.update_item(item_id, patch)

    def remove_item(self, item_id: UUID) -> bool:
        return self.ledger.remove_item(item_id)

    # -- assignments ----------------------------------------------------

    def toggle_assignment(self, item_id: UUID, member_name: str) -> bool:
        return assignments.toggle_assignment(self.ledger, item_id, member_name)

    def assign_all(self, item_id: UUID) -> bool:
        return assignments.assign_all(self.ledger, item_id, self.registry.members)

    def clear_assignment(self, item_id: UUID) -> bool:
        return assignments.clear_assignment(self.ledger, item_id)

    # -- derived --------------------------------------------------------

    def summary(self) -> SplitSummary:
        return calculator.compute_split(self.registry.members, self.ledger.items)

    def items_for_member(self, member_name: str) -> list[MemberItemShare]:
        return calculator.items_for_member(self.ledger.items, member_name)
