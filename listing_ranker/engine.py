"""
Ranking engine facade.

Coordinates storage, recorder, pair selector and aggregator components
behind the operations a request-handling layer calls.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .aggregators.sum_of_ranks import SumOfRanksAggregator
from .exceptions import ConfigurationError, NotInGroupError
from .inference import PairwiseMatrix, compute_matrix
from .interfaces import PairSelector, RankAggregator, Storage
from .logging_config import get_logger
from .models import Comparison, GroupRankingEntry, UserOrder
from .pair_selectors.adaptive_selector import AdaptiveInsertionSelector
from .recorder import ComparisonRecorder
from .validation import validate_group_id, validate_item_id, validate_user_id


@dataclass
class EngineConfig:
    """Configuration for the ranking engine."""

    max_group_items: int = 300  # O(n^2) matrix work beyond this is logged as a warning
    max_group_members: int = 300  # aggregation ceiling, logged not enforced

    def __post_init__(self):
        """Validate configuration."""
        if self.max_group_items < 2:
            raise ConfigurationError(f"max_group_items must be at least 2, got {self.max_group_items}")
        if self.max_group_members < 1:
            raise ConfigurationError(f"max_group_members must be positive, got {self.max_group_members}")


class RankingEngine:
    """Main entry point for pairwise ranking of a group's items."""

    def __init__(
        self,
        storage: Storage,
        config: EngineConfig | None = None,
        selector: PairSelector | None = None,
        aggregator: RankAggregator | None = None,
    ):
        """Initialize engine, building default components where none are given."""
        self.storage: Storage = storage
        self.config: EngineConfig = config or EngineConfig()
        self.recorder: ComparisonRecorder = ComparisonRecorder(storage)
        self.selector: PairSelector = selector or AdaptiveInsertionSelector(
            storage, max_group_items=self.config.max_group_items
        )
        self.aggregator: RankAggregator = aggregator or SumOfRanksAggregator(
            storage,
            max_group_members=self.config.max_group_members,
            max_group_items=self.config.max_group_items,
        )

        # Setup logger
        self.logger: "Logger" = get_logger("engine")

    def _group_of(self, user_id: str) -> str:
        group_id = self.storage.load_user_group(user_id)
        if not group_id:
            raise NotInGroupError(f"User {user_id} is not in a group")
        return group_id

    def next_pair(self, user_id: str) -> tuple[str, str] | None:
        """Next pair of items for the user to compare, or None when done."""
        return self.selector.next_pair(user_id)

    def record_comparison(self, user_id: str, winner_id: str, loser_id: str) -> UserOrder:
        """Record the user's choice and return their updated order."""
        return self.recorder.record(user_id, winner_id, loser_id)

    def current_order(self, user_id: str) -> UserOrder | None:
        _ = validate_user_id(user_id)
        return self.storage.load_user_order(user_id)

    def pairwise_relations(self, user_id: str) -> PairwiseMatrix:
        """Direct / inferred / unknown matrix over the user's current group items."""
        _ = validate_user_id(user_id)
        items = self.storage.load_group_items(self._group_of(user_id))
        return compute_matrix(self.storage.load_comparisons(user_id), items)

    def group_rankings(self, group_id: str) -> list[GroupRankingEntry]:
        return self.aggregator.aggregate(group_id)

    def comparison_between(self, user_id: str, item_a: str, item_b: str) -> Comparison | None:
        """Most recent direct comparison between two items, in either direction."""
        _ = validate_user_id(user_id)
        _ = validate_item_id(item_a)
        _ = validate_item_id(item_b)
        for comparison in reversed(self.storage.load_comparisons(user_id)):
            if comparison.involves(item_a, item_b):
                return comparison
        return None

    def estimated_total_comparisons(self, group_id: str) -> int:
        """Rough upper estimate of comparisons a user needs: n * log2(n)."""
        _ = validate_group_id(group_id)
        n = len(self.storage.load_group_items(group_id))
        if n < 2:
            return 0
        return math.ceil(n * math.log2(n))

    def reset_user(self, user_id: str) -> None:
        """Delete the user's comparisons and order together."""
        _ = validate_user_id(user_id)
        self.storage.delete_all_user_data(user_id)
        self.logger.info(f"Reset comparisons and order for user {user_id}")

    def refresh_group_orders(self, group_id: str) -> int:
        """
        Re-derive completeness of every member's order after the group's items changed.

        Only members of this group are touched and their orders are kept;
        newly added items simply show up as unranked.

        Returns:
            Number of orders rewritten
        """
        _ = validate_group_id(group_id)
        items = self.storage.load_group_items(group_id)
        updated = 0
        for user_id in self.storage.load_group_members(group_id):
            with self.storage.user_transaction(user_id) as tx:
                order = tx.load_user_order()
                if order is None:
                    continue
                refreshed = UserOrder.build(user_id, order.ordered_item_ids, group_item_ids=items)
                if (refreshed.is_complete, refreshed.total_item_count) == (
                    order.is_complete,
                    order.total_item_count,
                ):
                    continue
                tx.save_user_order(refreshed)
                updated += 1

        self.logger.info(f"Refreshed {updated} orders in group {group_id} ({len(items)} items)")
        return updated

    def prune_items(self, group_id: str, removed_item_ids: list[str]) -> int:
        """
        Remove deleted items from every member's order and comparison log.

        Each member is pruned in their own transaction.

        Returns:
            Number of users whose data changed
        """
        _ = validate_group_id(group_id)
        removed = {validate_item_id(item_id) for item_id in removed_item_ids}
        items = self.storage.load_group_items(group_id)
        touched = 0
        for user_id in self.storage.load_group_members(group_id):
            with self.storage.user_transaction(user_id) as tx:
                comparisons = tx.load_comparisons()
                kept = [c for c in comparisons if not c.references_any(removed)]
                order = tx.load_user_order()
                in_order = order is not None and any(i in removed for i in order.ordered_item_ids)
                if len(kept) == len(comparisons) and not in_order:
                    continue

                tx.replace_comparisons(kept)
                if order is not None:
                    remaining = [i for i in order.ordered_item_ids if i not in removed]
                    tx.save_user_order(UserOrder.build(user_id, remaining, group_item_ids=items))
                touched += 1

        self.logger.info(f"Pruned {len(removed)} items from {touched} users in group {group_id}")
        return touched
