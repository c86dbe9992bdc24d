"""
Split Calculator

Pure functions from (members, items) to totals. Nothing here mutates
its inputs, so the calculator can be called at any time for a
consistent snapshot.

Each assigned item is divided evenly between its assignees with plain
Decimal division; no cent is redistributed. An item nobody is assigned
to still counts toward the grand total but toward no member.
"""

from decimal import Decimal
from typing import Iterable

from splitter.models.room import Item, MemberItemShare, SplitSummary

ZERO = Decimal("0")


def item_share(item: Item) -> Decimal:
    """Per-person share of an item; zero when nobody is assigned."""
    if not item.assignees:
        return ZERO
    return item.subtotal / len(item.assignees)


def compute_split(members: Iterable[str], items: Iterable[Item]) -> SplitSummary:
    """
    Derive per-member totals and the grand total.

    Every member appears in the result, even with nothing assigned.
    An assignee that is no longer a member still counts in the divisor
    but its share is not reported.
    """
    totals = {name: ZERO for name in members}
    grand_total = ZERO
    unallocated = ZERO

    for item in items:
        subtotal = item.subtotal
        grand_total += subtotal

        if not item.assignees:
            unallocated += subtotal
            continue

        share = subtotal / len(item.assignees)
        for name in item.assignees:
            if name in totals:
                totals[name] += share

    return SplitSummary(
        member_totals=totals,
        grand_total=grand_total,
        unallocated_total=unallocated,
    )


def grand_total(items: Iterable[Item]) -> Decimal:
    """Sum of every item's subtotal, whatever the assignments."""
    return sum((item.subtotal for item in items), ZERO)


def items_for_member(items: Iterable[Item], member_name: str) -> list[MemberItemShare]:
    """Drill-down rows for one member, in ledger order."""
    rows = []
    for item in items:
        if member_name not in item.assignees:
            continue
        rows.append(MemberItemShare(
            item_id=item.id,
            name=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            share_count=len(item.assignees),
            per_person_share=item_share(item),
        ))
    return rows
