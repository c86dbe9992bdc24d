"""
Member Registry

The ordered set of people sharing a receipt. A member is identified by
their name alone; insertion order is the display order.

Precondition failures (blank or duplicate name, registry full, registry
at its floor) leave the registry unchanged and return False. The UI is
expected to have disabled the control already, so there is nothing more
to report.
"""

from typing import Iterable, Iterator, Optional

import structlog

from splitter.config import RoomSettings, get_settings

logger = structlog.get_logger(__name__)


class MemberRegistry:
    """Ordered, duplicate-free collection of member names."""

    def __init__(
        self,
        members: Optional[Iterable[str]] = None,
        settings: Optional[RoomSettings] = None,
    ):
        self._settings = settings or get_settings().room
        self._members: list[str] = []

        if members is not None:
            self._seed(members)
        if not self._members:
            # a room is never empty
            self._seed(self._settings.default_members_list)

    def _seed(self, names: Iterable[str]) -> None:
        for name in names:
            name = (name or "").strip()
            if self._is_valid_name(name) and name not in self._members:
                self._members.append(name)
            if len(self._members) >= self._settings.max_members:
                break

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._members))

    def __len__(self) -> int:
        return len(self._members)

    @property
    def members(self) -> list[str]:
        """Member names in display order."""
        return list(self._members)

    @property
    def max_members(self) -> int:
        return self._settings.max_members

    @property
    def min_members(self) -> int:
        return self._settings.min_members

    def _is_valid_name(self, name: str) -> bool:
        return 0 < len(name) <= self._settings.max_member_name_length

    def can_add(self, name: Optional[str] = None) -> bool:
        """
        Whether add_member would succeed.

        Without a name, only checks capacity.
        """
        if len(self._members) >= self._settings.max_members:
            return False
        if name is None:
            return True
        name = name.strip()
        return self._is_valid_name(name) and name not in self._members

    def can_remove(self, name: Optional[str] = None) -> bool:
        """Whether remove_member would succeed. Without a name, only checks the floor."""
        if len(self._members) <= self._settings.min_members:
            return False
        return name is None or name in self._members

    def add_member(self, name: str) -> bool:
        """Append a member. Returns False and changes nothing on a precondition failure."""
        trimmed = (name or "").strip()
        if not self.can_add(trimmed):
            logger.debug(
                "member_add_skipped",
                name=trimmed,
                member_count=len(self._members),
            )
            return False
        self._members.append(trimmed)
        return True

    def remove_member(self, name: str) -> bool:
        """
        Drop a member from the registry.

        Does not touch item assignments; callers go through RoomState,
        which cascades the removal to the ledger.
        """
        if not self.can_remove(name):
            logger.debug(
                "member_remove_skipped",
                name=name,
                member_count=len(self._members),
            )
            return False
        self._members.remove(name)
        return True
