"""
Per-user write staging and mutual exclusion.

A UserTransaction collects the writes of one logical operation (append a
comparison, replace the user's order, ...) so a storage backend can apply
them all-or-nothing. The UserLockRegistry serializes writers of the same
user while leaving different users fully independent.
"""

import threading
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field

from .exceptions import ValidationError
from .models import Comparison, UserOrder


class UserLockRegistry:
    """
    Lazily created re-entrant lock per user ID.

    Locks are held weakly: a user's lock lives only while some caller holds
    a reference to it, so the registry does not grow with every user seen.
    """

    def __init__(self) -> None:
        self._guard: threading.Lock = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, threading.RLock] = weakref.WeakValueDictionary()

    def lock_for(self, user_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


@dataclass
class StagedWrites:
    """
    Writes staged by one transaction, applied by a backend in this order:

    1. ``delete_all`` wipes the user's comparisons and order
    2. ``replaced_comparisons`` (when not None) becomes the whole log
    3. ``appended`` comparisons are added to the end of the log
    4. ``order`` replaces the stored order when ``order_written``
    """

    delete_all: bool = False
    replaced_comparisons: list[Comparison] | None = None
    appended: list[Comparison] = field(default_factory=list)
    order: UserOrder | None = None
    order_written: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.delete_all
            or self.replaced_comparisons is not None
            or self.appended
            or self.order_written
        )


class UserTransaction:
    """
    Staging area for one user's writes.

    Reads see committed state overlaid with the writes staged so far, so a
    read-modify-write inside one transaction observes its own changes.
    """

    def __init__(
        self,
        user_id: str,
        committed_comparisons: Callable[[], list[Comparison]],
        committed_order: Callable[[], UserOrder | None],
    ):
        self.user_id: str = user_id
        self._committed_comparisons = committed_comparisons
        self._committed_order = committed_order
        self.staged: StagedWrites = StagedWrites()

    def load_comparisons(self) -> list[Comparison]:
        if self.staged.delete_all:
            base = list[Comparison]()
        elif self.staged.replaced_comparisons is not None:
            base = list(self.staged.replaced_comparisons)
        else:
            base = list(self._committed_comparisons())
        return base + self.staged.appended

    def load_user_order(self) -> UserOrder | None:
        if self.staged.order_written:
            return self.staged.order
        if self.staged.delete_all:
            return None
        return self._committed_order()

    def append_comparison(self, comparison: Comparison) -> None:
        self.staged.appended.append(comparison)

    def save_user_order(self, order: UserOrder) -> None:
        if order.user_id != self.user_id:
            raise ValidationError(
                f"Order for {order.user_id} cannot be saved in a transaction for {self.user_id}"
            )
        self.staged.order = order
        self.staged.order_written = True

    def replace_comparisons(self, comparisons: list[Comparison]) -> None:
        """Rewrite the whole log. Only used to prune items removed from a group."""
        self.staged.replaced_comparisons = list(comparisons)
        self.staged.appended = []

    def delete_all(self) -> None:
        self.staged = StagedWrites(delete_all=True)
