"""
Abstract base classes defining the interfaces for the listing ranker.

All interfaces are synchronous; callers that need concurrency run them in
their own threads. Writers of the same user are serialized by the storage
layer, different users never contend.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing_extensions import TypedDict

from .logging_config import get_logger
from .models import Comparison, GroupRankingEntry, UserOrder
from .transaction import StagedWrites, UserLockRegistry, UserTransaction

logger = get_logger("storage")


class ComparisonRecord(TypedDict):
    """Stored shape of a Comparison."""
    comparison_id: str
    winner_id: str
    loser_id: str
    compared_at: int


class UserOrderRecord(TypedDict):
    """Stored shape of a UserOrder."""
    user_id: str
    ordered_item_ids: list[str]
    last_updated: int
    is_complete: bool
    total_item_count: int


class GroupRecord(TypedDict):
    """Stored shape of a group: canonical item order and member list."""
    items: list[str]
    members: list[str]


class UserGroupRecord(TypedDict):
    """Stored link from a user to their group."""
    group_id: str


class PendingCommitRecord(TypedDict):
    """Write-ahead record of a staged batch that has not finished applying."""
    delete_all: bool
    replaced_comparisons: list[ComparisonRecord] | None
    appended: list[ComparisonRecord]
    order: UserOrderRecord | None
    order_written: bool


class Storage(ABC):
    """
    Persistence contract consumed by the ranking engine.

    Reads are plain methods. Writes only happen through
    ``user_transaction``, which holds the user's lock and hands the staged
    batch to ``_commit`` for an all-or-nothing apply.
    """

    def __init__(self) -> None:
        self._user_locks: UserLockRegistry = UserLockRegistry()

    @abstractmethod
    def load_comparisons(self, user_id: str) -> list[Comparison]:
        """Return the user's comparison log, oldest first."""
        pass

    @abstractmethod
    def load_user_order(self, user_id: str) -> UserOrder | None:
        """Return the user's stored order, or None if they have none."""
        pass

    @abstractmethod
    def load_group_items(self, group_id: str) -> list[str]:
        """Return the group's item IDs in canonical, deterministic order."""
        pass

    @abstractmethod
    def load_group_members(self, group_id: str) -> list[str]:
        """Return the group's member user IDs."""
        pass

    @abstractmethod
    def load_user_group(self, user_id: str) -> str | None:
        """Return the ID of the group the user ranks items in."""
        pass

    @abstractmethod
    def _commit(self, user_id: str, staged: StagedWrites) -> None:
        """
        Apply a staged batch atomically.

        Called with the user's lock held. Must apply every staged write or
        none of them.
        """
        pass

    @contextmanager
    def user_transaction(self, user_id: str) -> Iterator[UserTransaction]:
        """
        Serialize and stage writes for one user.

        The staged batch is committed when the block exits cleanly and
        discarded if it raises.
        """
        with self._user_locks.lock_for(user_id):
            tx = UserTransaction(
                user_id,
                committed_comparisons=lambda: self.load_comparisons(user_id),
                committed_order=lambda: self.load_user_order(user_id),
            )
            yield tx
            if tx.staged.is_empty:
                return
            self._commit(user_id, tx.staged)
            logger.debug(f"Committed staged writes for user {user_id}")

    def append_comparison(self, user_id: str, comparison: Comparison) -> None:
        """Append one comparison in its own transaction."""
        with self.user_transaction(user_id) as tx:
            tx.append_comparison(comparison)

    def save_user_order(self, user_id: str, order: UserOrder) -> None:
        """Replace the user's order in its own transaction."""
        with self.user_transaction(user_id) as tx:
            tx.save_user_order(order)

    def delete_all_user_data(self, user_id: str) -> None:
        """Clear the user's comparisons and order together."""
        with self.user_transaction(user_id) as tx:
            tx.delete_all()


class PairSelector(ABC):
    """Interface for choosing the next pair of items a user should compare."""

    @abstractmethod
    def next_pair(self, user_id: str) -> tuple[str, str] | None:
        """
        Select the next comparison for a user.

        Returns:
            Two item IDs to show the user, or None when nothing is left to ask
        """
        pass


class RankAggregator(ABC):
    """Interface for combining members' orders into one group ranking."""

    @abstractmethod
    def aggregate(self, group_id: str) -> list[GroupRankingEntry]:
        """Return the group ranking, most preferred first."""
        pass


class Voter(ABC):
    """Interface for anything that answers a pairwise preference question."""

    @abstractmethod
    def choose(self, user_id: str, item_a: str, item_b: str) -> str:
        """Return whichever of item_a and item_b the user prefers."""
        pass
