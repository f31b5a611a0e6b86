"""
Core dataclasses for the listing ranker.

Defines Comparison, UserOrder and GroupRankingEntry models with validation.
"""

import math
import time
import uuid
from collections.abc import Collection
from dataclasses import dataclass, field

from .exceptions import ValidationError


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _new_comparison_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Comparison:
    """A user's recorded preference of one item over another."""

    winner_id: str
    loser_id: str
    comparison_id: str = field(default_factory=_new_comparison_id)
    compared_at: int = field(default_factory=now_ms)

    def __post_init__(self) -> None:
        """Validate comparison data."""
        if not self.winner_id:
            raise ValidationError("winner_id cannot be empty")
        if not self.loser_id:
            raise ValidationError("loser_id cannot be empty")
        if not self.comparison_id:
            raise ValidationError("comparison_id cannot be empty")

    def involves(self, item_a: str, item_b: str) -> bool:
        """Return True if this comparison is between item_a and item_b, in either direction."""
        return {self.winner_id, self.loser_id} == {item_a, item_b}

    def references_any(self, item_ids: set[str]) -> bool:
        return self.winner_id in item_ids or self.loser_id in item_ids


@dataclass
class UserOrder:
    """
    A user's best-to-worst order over the items of their group.

    Derived state: always re-derivable from the comparison log and the
    group's item set, but persisted for cheap reads.
    """

    user_id: str
    ordered_item_ids: list[str] = field(default_factory=list)
    last_updated: int = field(default_factory=now_ms)
    is_complete: bool = False
    total_item_count: int = 0

    def __post_init__(self) -> None:
        """Validate order data."""
        if not self.user_id:
            raise ValidationError("user_id cannot be empty")
        if len(set(self.ordered_item_ids)) != len(self.ordered_item_ids):
            raise ValidationError(
                f"ordered_item_ids contains duplicates for user {self.user_id}"
            )
        if self.total_item_count < 0:
            raise ValidationError("total_item_count cannot be negative")

    @classmethod
    def build(
        cls, user_id: str, ordered_item_ids: list[str], group_item_ids: Collection[str]
    ) -> "UserOrder":
        """
        Create an order stamped now, with completeness derived from the group's items.

        Entries for items no longer in the group are kept but do not count
        as ranked.
        """
        current = set(group_item_ids)
        ranked = sum(1 for item_id in ordered_item_ids if item_id in current)
        return cls(
            user_id=user_id,
            ordered_item_ids=list(ordered_item_ids),
            last_updated=now_ms(),
            is_complete=ranked == len(current),
            total_item_count=len(current),
        )

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.ordered_item_ids

    def __len__(self) -> int:
        return len(self.ordered_item_ids)


@dataclass(frozen=True)
class GroupRankingEntry:
    """One row of a group-wide ranking."""

    item_id: str
    rank: int
    total_score: float
    contributing_users: int
    total_users: int

    @property
    def is_unranked(self) -> bool:
        """True when no member with a complete order has ranked this item."""
        return self.contributing_users == 0 or math.isinf(self.total_score)

    @property
    def is_unanimous(self) -> bool:
        """True when every group member contributed a rank for this item."""
        return self.total_users > 0 and self.contributing_users == self.total_users

    @property
    def average_position(self) -> float:
        if self.is_unranked:
            return math.inf
        return self.total_score / self.contributing_users
