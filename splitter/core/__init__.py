"""Allocation core: members, items, assignments and the split calculator."""

from splitter.core.calculator import compute_split, grand_total, item_share, items_for_member
from splitter.core.ledger import ItemLedger
from splitter.core.registry import MemberRegistry
from splitter.core.state import RoomState

__all__ = [
    "ItemLedger",
    "MemberRegistry",
    "RoomState",
    "compute_split",
    "grand_total",
    "item_share",
    "items_for_member",
]
