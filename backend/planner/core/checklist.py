"""Multi-user checklist merge.

Each item key maps to the set of users who checked it, keyed by username so
toggles and membership tests are O(1) and a user can never appear twice.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from backend.planner.models.checklist import CheckedBy, ChecklistState
from backend.planner.models.common import TravelNoticeItem

ESSENTIAL = "essential"
PREPARATION = "prep"


def notice_item_key(kind: str, item: TravelNoticeItem) -> str:
    """Stable checklist key for a travel notice item."""
    return f"{kind}_{item.icon}_{item.text}"


class ChecklistMerger:
    """Per-item sets of checking users."""

    def __init__(self, states: Iterable[ChecklistState] = ()) -> None:
        self._items: dict[str, dict[str, CheckedBy]] = {}
        self.load(states)

    def load(self, states: Iterable[ChecklistState]) -> None:
        """Replace everything with a full remote snapshot."""
        self._items = {}
        for state in states:
            users: dict[str, CheckedBy] = {}
            for user in state.checked_by:
                users.setdefault(user.username, user)
            self._items[state.id] = users

    def toggle(self, item_key: str, user: CheckedBy) -> list[CheckedBy]:
        """Check the item for ``user`` if unchecked, uncheck it otherwise.

        Returns the full updated list for the key, which is what gets persisted.
        """
        users = self._items.setdefault(item_key, {})
        if user.username in users:
            del users[user.username]
        else:
            users[user.username] = user
        return list(users.values())

    def checked_by(self, item_key: str) -> list[CheckedBy]:
        return list(self._items.get(item_key, {}).values())

    def is_checked_by_user(self, item_key: str, username: str) -> bool:
        return username in self._items.get(item_key, {})

    def is_checked_by_anyone(self, item_key: str) -> bool:
        return bool(self._items.get(item_key))

    def is_checked_by_all(self, item_key: str, known_usernames: Iterable[str]) -> bool:
        """True when every known user has checked the item."""
        users = self._items.get(item_key)
        if not users:
            return False
        return all(name in users for name in set(known_usernames))

    def state(self, item_key: str) -> ChecklistState:
        return ChecklistState(
            id=item_key,
            checked_by=self.checked_by(item_key),
            updated_at=datetime.now(timezone.utc),
        )

    def states(self) -> list[ChecklistState]:
        return [ChecklistState(id=key, checked_by=list(users.values())) for key, users in self._items.items()]
