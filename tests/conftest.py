"""Shared fixtures for Receipt Splitter tests."""

from decimal import Decimal

import pytest

from splitter.config import get_settings
from splitter.core import RoomState


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate every test from the caller's environment and settings cache."""
    for var in (
        "ROOM_MIN_MEMBERS",
        "ROOM_MAX_MEMBERS",
        "ROOM_DEFAULT_MEMBERS",
        "ROOM_PIN_LENGTH",
        "RECOGNITION_BACKEND",
        "RECOGNITION_MOCK_LATENCY_SECONDS",
        "RECOGNITION_RETRY_ATTEMPTS",
        "MINDEE_API_KEY",
        "MAX_UPLOAD_SIZE_MB",
    ):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def room() -> RoomState:
    """Two members, two items, matching the worked example."""
    state = RoomState(members=["Alex", "Sam"])
    bananas = state.add_item("Bananas", "2.39", 2)
    milk = state.add_item("Whole Milk 1gal", "3.99", 1)
    state.toggle_assignment(bananas.id, "Alex")
    state.toggle_assignment(milk.id, "Alex")
    state.toggle_assignment(milk.id, "Sam")
    return state


def _assert_conserved(state: RoomState):
    """Grand total and member totals must both account for every item."""
    summary = state.summary()
    subtotals = sum((item.subtotal for item in state.items), Decimal("0"))
    unassigned = sum(
        (item.subtotal for item in state.items if not item.assignees),
        Decimal("0"),
    )
    assert summary.grand_total == subtotals
    assert summary.unallocated_total == unassigned
    drift = summary.allocated_total - (summary.grand_total - unassigned)
    assert abs(drift) < Decimal("1e-20")


@pytest.fixture
def assert_conserved():
    return _assert_conserved
