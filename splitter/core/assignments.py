"""
Assignment Engine

Links between items and the members who share them.

toggle_assignment does not check the name against the registry; the UI
only offers current members. What keeps every assignee a real member is
cascade_member_removal, run whenever someone leaves the room.
"""

from typing import Iterable
from uuid import UUID

from splitter.core.ledger import ItemLedger


def toggle_assignment(ledger: ItemLedger, item_id: UUID, member_name: str) -> bool:
    """
    Add the member to the item's assignees, or remove them if present.

    Returns False only when the item does not exist.
    """
    item = ledger.get(item_id)
    if item is None:
        return False

    if member_name in item.assignees:
        item.assignees = [a for a in item.assignees if a != member_name]
    else:
        item.assignees = [*item.assignees, member_name]
    return True


def assign_all(ledger: ItemLedger, item_id: UUID, members: Iterable[str]) -> bool:
    """Split an item between all the given members."""
    item = ledger.get(item_id)
    if item is None:
        return False
    item.assignees = list(members)
    return True


def clear_assignment(ledger: ItemLedger, item_id: UUID) -> bool:
    """Leave an item unallocated."""
    item = ledger.get(item_id)
    if item is None:
        return False
    item.assignees = []
    return True


def cascade_member_removal(ledger: ItemLedger, member_name: str) -> int:
    """
    Strip a departing member from every item.

    Returns how many items lost the member.
    """
    touched = 0
    for item in ledger:
        if member_name in item.assignees:
            item.assignees = [a for a in item.assignees if a != member_name]
            touched += 1
    return touched
