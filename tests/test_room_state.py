"""
Tests for the room core: member registry, item ledger and assignments.

Every rejected operation must leave the state exactly as it was.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from splitter.config import RoomSettings
from splitter.core import ItemLedger, MemberRegistry, RoomState
from splitter.models.room import ExtractedItem, ItemPatch


class TestMemberRegistry:
    """Tests for MemberRegistry."""

    def test_default_membership(self):
        """A new room starts with the configured members."""
        registry = MemberRegistry()
        assert registry.members == ["Alex", "Sam", "Riley"]

    def test_default_membership_from_env(self, monkeypatch):
        monkeypatch.setenv("ROOM_DEFAULT_MEMBERS", "Kim, Lee,,Kim")
        assert MemberRegistry().members == ["Kim", "Lee"]

    def test_add_appends_trimmed_name(self):
        registry = MemberRegistry(["Alex"])
        assert registry.add_member("  Jordan ") is True
        assert registry.members == ["Alex", "Jordan"]

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_add_blank_is_noop(self, name):
        registry = MemberRegistry(["Alex"])
        assert registry.add_member(name) is False
        assert registry.members == ["Alex"]

    def test_add_duplicate_is_noop(self):
        """Duplicates are detected after trimming; matching is case-sensitive."""
        registry = MemberRegistry(["Alex"])
        assert registry.add_member(" Alex ") is False
        assert registry.add_member("alex") is True
        assert registry.members == ["Alex", "alex"]

    def test_add_too_long_name_is_noop(self):
        registry = MemberRegistry(["Alex"])
        assert registry.add_member("x" * 31) is False
        assert registry.add_member("x" * 30) is True

    def test_add_at_capacity_is_noop(self):
        """The eighth member is refused."""
        registry = MemberRegistry([f"M{i}" for i in range(7)])
        assert len(registry) == 7
        assert registry.can_add() is False
        assert registry.add_member("Eighth") is False
        assert len(registry) == 7

    def test_seed_is_capped_at_capacity(self):
        registry = MemberRegistry([f"M{i}" for i in range(10)])
        assert len(registry) == 7

    def test_remove_at_floor_is_noop(self):
        """A room always keeps one member."""
        registry = MemberRegistry(["Alex"])
        assert registry.can_remove() is False
        assert registry.remove_member("Alex") is False
        assert registry.members == ["Alex"]

    def test_remove_unknown_is_noop(self):
        registry = MemberRegistry(["Alex", "Sam"])
        assert registry.remove_member("Riley") is False
        assert registry.members == ["Alex", "Sam"]

    def test_remove_keeps_order(self):
        registry = MemberRegistry(["Alex", "Sam", "Riley"])
        assert registry.remove_member("Sam") is True
        assert registry.members == ["Alex", "Riley"]

    @pytest.mark.parametrize("seed", [[], ["", "   "]])
    def test_empty_seed_falls_back_to_defaults(self, seed):
        """A room never starts below one member."""
        assert MemberRegistry(seed).members == ["Alex", "Sam", "Riley"]
        assert RoomState(members=seed).members == ["Alex", "Sam", "Riley"]

    def test_custom_limits(self):
        settings = RoomSettings(min_members=2, max_members=3)
        registry = MemberRegistry(["A", "B"], settings=settings)
        assert registry.remove_member("A") is False
        assert registry.add_member("C") is True
        assert registry.add_member("D") is False


class TestItemLedger:
    """Tests for ItemLedger."""

    def test_seed_assigns_fresh_ids(self):
        ledger = ItemLedger()
        items = ledger.seed_items([
            {"name": "Bananas", "price": 2.39, "quantity": 2},
            {"name": "Bananas", "price": 2.39, "quantity": 2},
        ])
        assert len(ledger) == 2
        assert items[0].id != items[1].id
        assert all(item.assignees == [] for item in items)
        assert items[0].unit_price == Decimal("2.39")

    def test_seed_replaces_previous_ledger(self):
        """Seeding twice keeps only the second batch."""
        ledger = ItemLedger()
        first = ledger.seed_items([ExtractedItem(name="Eggs", price="4.49")])
        second = ledger.seed_items([ExtractedItem(name="Eggs", price="4.49")])
        assert len(ledger) == 1
        assert ledger.get(first[0].id) is None
        assert ledger.get(second[0].id) is not None

    def test_seed_empty_batch(self):
        ledger = ItemLedger()
        ledger.add_item("Bread", "5.29")
        assert ledger.seed_items([]) == []
        assert len(ledger) == 0

    def test_seed_coerces_bad_records(self):
        ledger = ItemLedger()
        (item,) = ledger.seed_items([{"name": "  ", "price": "n/a", "quantity": 0}])
        assert item.name == "Item"
        assert item.unit_price == Decimal("0")
        assert item.quantity == 1

    def test_seed_keeps_long_names(self):
        """Recognizer names of any length are accepted as-is."""
        ledger = ItemLedger()
        (item,) = ledger.seed_items([{"name": "x" * 201, "price": 1.0}])
        assert item.name == "x" * 201
        assert item.unit_price == Decimal("1")

    def test_seed_exponent_prices_keep_their_value(self):
        ledger = ItemLedger()
        (item,) = ledger.seed_items([{"name": "Camera", "price": Decimal("5E+1")}])
        assert item.price_text == "50"
        assert item.unit_price == Decimal("50")

    @pytest.mark.parametrize("price, text", [
        (Decimal("1E+2"), "100"),
        (1e16, "10000000000000000"),
    ])
    def test_add_item_exponent_prices_keep_their_value(self, price, text):
        ledger = ItemLedger()
        item = ledger.add_item("TV", price)
        assert item.price_text == text
        assert item.unit_price == Decimal(text)

    def test_add_item(self):
        ledger = ItemLedger()
        item = ledger.add_item("  Sourdough Bread ", "5.29", "1")
        assert item.name == "Sourdough Bread"
        assert item.price_text == "5.29"
        assert item.quantity == 1
        assert item.assignees == []
        assert ledger.items == [item]

    @pytest.mark.parametrize("name, price", [("", "1.00"), ("Milk", ""), ("Milk", "   ")])
    def test_add_item_requires_name_and_price(self, name, price):
        ledger = ItemLedger()
        assert ledger.add_item(name, price) is None
        assert len(ledger) == 0

    def test_add_item_coerces_values(self):
        """Unparsable price becomes 0 and a bad quantity becomes 1."""
        ledger = ItemLedger()
        item = ledger.add_item("Mystery", "abc", "-3")
        assert item is not None
        assert item.unit_price == Decimal("0")
        assert item.quantity == 1

    def test_update_item_partial(self):
        ledger = ItemLedger()
        item = ledger.add_item("Milk", "3.99", 1)
        assert ledger.update_item(item.id, {"quantity": "2"}) is True
        assert item.name == "Milk"
        assert item.price_text == "3.99"
        assert item.quantity == 2

    def test_update_item_keeps_raw_price_text(self):
        """A half-typed price is stored as typed and read as its numeric value."""
        ledger = ItemLedger()
        item = ledger.add_item("Milk", "3.99")
        ledger.update_item(item.id, ItemPatch(price="3."))
        assert item.price_text == "3."
        assert item.unit_price == Decimal("3")

    def test_update_item_price_abc_reads_as_zero(self):
        ledger = ItemLedger()
        item = ledger.add_item("Milk", "3.99")
        ledger.update_item(item.id, {"price": "abc"})
        assert item.unit_price == Decimal("0")
        assert item.subtotal == Decimal("0")

    def test_update_item_bad_quantity(self):
        ledger = ItemLedger()
        item = ledger.add_item("Milk", "3.99", 4)
        ledger.update_item(item.id, {"quantity": "0"})
        assert item.quantity == 1

    def test_update_unknown_item_is_noop(self):
        ledger = ItemLedger()
        ledger.add_item("Milk", "3.99")
        assert ledger.update_item(uuid4(), {"name": "Cream"}) is False
        assert ledger.items[0].name == "Milk"

    def test_remove_item(self):
        ledger = ItemLedger()
        milk = ledger.add_item("Milk", "3.99")
        eggs = ledger.add_item("Eggs", "4.49")
        assert ledger.remove_item(milk.id) is True
        assert ledger.items == [eggs]
        assert ledger.remove_item(milk.id) is False


class TestAssignments:
    """Tests for toggling and the member-removal cascade."""

    def test_toggle_adds_then_removes(self):
        state = RoomState(["Alex", "Sam"])
        item = state.add_item("Milk", "3.99")
        assert state.toggle_assignment(item.id, "Alex") is True
        assert item.assignees == ["Alex"]
        assert state.toggle_assignment(item.id, "Sam") is True
        assert item.assignees == ["Alex", "Sam"]
        assert state.toggle_assignment(item.id, "Alex") is True
        assert item.assignees == ["Sam"]

    def test_toggle_unknown_item_is_noop(self):
        state = RoomState(["Alex"])
        assert state.toggle_assignment(uuid4(), "Alex") is False

    def test_toggle_accepts_stale_name(self):
        """Names are not checked against the registry when toggling."""
        state = RoomState(["Alex"])
        item = state.add_item("Milk", "3.99")
        assert state.toggle_assignment(item.id, "Ghost") is True
        assert item.assignees == ["Ghost"]

    def test_remove_member_cascades(self):
        """After removal no item lists the departed member."""
        state = RoomState(["Alex", "Sam", "Riley"])
        milk = state.add_item("Milk", "3.99")
        eggs = state.add_item("Eggs", "4.49")
        for item in (milk, eggs):
            state.toggle_assignment(item.id, "Sam")
        state.toggle_assignment(eggs.id, "Riley")

        assert state.remove_member("Sam") is True
        assert all("Sam" not in item.assignees for item in state.items)
        assert milk.assignees == []
        assert eggs.assignees == ["Riley"]

    def test_rejected_removal_keeps_assignments(self):
        state = RoomState(["Alex"])
        item = state.add_item("Milk", "3.99")
        state.toggle_assignment(item.id, "Alex")
        assert state.remove_member("Alex") is False
        assert item.assignees == ["Alex"]

    def test_rename_discards_assignments(self):
        """Rename is remove + add; the new name starts unassigned."""
        state = RoomState(["Alex", "Sam"])
        item = state.add_item("Milk", "3.99")
        state.toggle_assignment(item.id, "Sam")
        state.remove_member("Sam")
        state.add_member("Samantha")
        assert item.assignees == []

    def test_assign_all_and_clear(self):
        state = RoomState(["Alex", "Sam", "Riley"])
        item = state.add_item("Pizza", "18.00")
        assert state.assign_all(item.id) is True
        assert item.assignees == ["Alex", "Sam", "Riley"]
        assert state.clear_assignment(item.id) is True
        assert item.assignees == []
        assert state.clear_assignment(uuid4()) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
