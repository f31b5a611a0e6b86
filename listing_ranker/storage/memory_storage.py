"""
In-memory storage implementation.

Keeps every user's log and order in one immutable per-user state object,
so a commit is a single reference swap and readers see either the old or
the new state, never a mix.
"""

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass

from typing_extensions import override

from ..interfaces import Storage
from ..logging_config import get_logger
from ..models import Comparison, UserOrder
from ..transaction import StagedWrites

# Module-level logger
logger = get_logger("memory_storage")


@dataclass(frozen=True)
class _UserState:
    comparisons: tuple[Comparison, ...] = ()
    order: UserOrder | None = None


def _copy_order(order: UserOrder | None) -> UserOrder | None:
    if order is None:
        return None
    return dataclasses.replace(order, ordered_item_ids=list(order.ordered_item_ids))


class InMemoryStorage(Storage):
    """Dict-backed storage, suitable for tests and single-process use."""

    def __init__(self) -> None:
        super().__init__()
        self._group_items = dict[str, list[str]]()
        self._group_members = dict[str, list[str]]()
        self._user_groups = dict[str, str]()
        self._users = dict[str, _UserState]()

    def save_group(self, group_id: str, items: Iterable[str], members: Iterable[str]) -> None:
        """Create or replace a group and link its members to it."""
        self._group_items[group_id] = list(items)
        self._group_members[group_id] = list(members)
        for user_id in self._group_members[group_id]:
            self._user_groups[user_id] = group_id
        logger.debug(
            f"Saved group {group_id}: {len(self._group_items[group_id])} items, {len(self._group_members[group_id])} members"
        )

    @override
    def load_comparisons(self, user_id: str) -> list[Comparison]:
        return list(self._users.get(user_id, _UserState()).comparisons)

    @override
    def load_user_order(self, user_id: str) -> UserOrder | None:
        return _copy_order(self._users.get(user_id, _UserState()).order)

    @override
    def load_group_items(self, group_id: str) -> list[str]:
        return list(self._group_items.get(group_id, []))

    @override
    def load_group_members(self, group_id: str) -> list[str]:
        return list(self._group_members.get(group_id, []))

    @override
    def load_user_group(self, user_id: str) -> str | None:
        return self._user_groups.get(user_id)

    @override
    def _commit(self, user_id: str, staged: StagedWrites) -> None:
        current = _UserState() if staged.delete_all else self._users.get(user_id, _UserState())

        comparisons = current.comparisons
        if staged.replaced_comparisons is not None:
            comparisons = tuple(staged.replaced_comparisons)
        comparisons = comparisons + tuple(staged.appended)

        order = _copy_order(staged.order) if staged.order_written else current.order

        if not comparisons and order is None:
            _ = self._users.pop(user_id, None)
        else:
            self._users[user_id] = _UserState(comparisons=comparisons, order=order)
