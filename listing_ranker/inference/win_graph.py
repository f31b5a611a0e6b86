"""
Win graph built from a user's comparison log.

Edges point from winner to loser. Reachability is the transitive
"preferred over" relation used for inference.
"""

from collections.abc import Collection, Iterable, Iterator

from ..logging_config import get_logger
from ..models import Comparison

logger = get_logger("win_graph")


class WinGraph:
    """
    Directed "A beats B" graph for one user.

    A pure snapshot of the comparison log: building it has no side effects
    and later log appends do not change an existing graph.
    """

    def __init__(self, edges: dict[str, set[str]] | None = None):
        self._edges: dict[str, set[str]] = {
            winner: set(losers) for winner, losers in (edges or {}).items()
        }

    @classmethod
    def build(
        cls,
        comparisons: Iterable[Comparison],
        item_ids: Collection[str] | None = None,
    ) -> "WinGraph":
        """
        Build the graph from a comparison log.

        Args:
            comparisons: The user's comparisons, in any order
            item_ids: When given, comparisons touching an item outside this
                set are skipped (stale references after item removal)

        Returns:
            WinGraph mapping each winner to the items it directly beat
        """
        allowed = set(item_ids) if item_ids is not None else None
        graph = cls()
        skipped = 0
        for comparison in comparisons:
            if comparison.winner_id == comparison.loser_id:
                logger.warning(
                    f"Skipping self-comparison {comparison.comparison_id} on {comparison.winner_id}"
                )
                continue
            if allowed is not None and (
                comparison.winner_id not in allowed or comparison.loser_id not in allowed
            ):
                skipped += 1
                continue
            graph.add_edge(comparison.winner_id, comparison.loser_id)

        if skipped:
            logger.warning(f"Skipped {skipped} comparisons referencing unknown items")
        return graph

    def add_edge(self, winner_id: str, loser_id: str) -> None:
        self._edges.setdefault(winner_id, set()).add(loser_id)

    def with_edge(self, winner_id: str, loser_id: str) -> "WinGraph":
        """Return a copy of this graph with one more edge."""
        graph = WinGraph(self._edges)
        graph.add_edge(winner_id, loser_id)
        return graph

    def beats(self, item_id: str) -> frozenset[str]:
        """Items that item_id was directly recorded as beating."""
        return frozenset(self._edges.get(item_id, ()))

    def can_reach(self, start: str, target: str) -> bool:
        """
        Return True if start transitively beats target.

        ``start == target`` is trivially True; callers that need "strictly
        preferred" must special-case identity. Uses an explicit stack and a
        visited set, so it terminates on cyclic logs and deep chains alike.
        """
        if start == target:
            return True

        visited = {start}
        stack = [start]
        while stack:
            node = stack.pop()
            for loser in self._edges.get(node, ()):
                if loser == target:
                    return True
                if loser not in visited:
                    visited.add(loser)
                    stack.append(loser)
        return False

    def reachable_from(self, start: str) -> set[str]:
        """All items start transitively beats, start excluded unless on a cycle."""
        reached = set[str]()
        stack = [start]
        while stack:
            node = stack.pop()
            for loser in self._edges.get(node, ()):
                if loser not in reached:
                    reached.add(loser)
                    stack.append(loser)
        return reached

    def nodes(self) -> set[str]:
        found = set(self._edges)
        for losers in self._edges.values():
            found.update(losers)
        return found

    def edge_count(self) -> int:
        return sum(len(losers) for losers in self._edges.values())

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for winner, losers in self._edges.items():
            for loser in losers:
                yield winner, loser

    def __contains__(self, edge: object) -> bool:
        if not isinstance(edge, tuple) or len(edge) != 2:
            return False
        winner, loser = edge
        return loser in self._edges.get(winner, ())
