"""
Pairwise relation matrix.

For a user and an item set, classifies every ordered pair of items as
directly compared, inferable through the win graph, or unknown. Backed by
dense numpy arrays indexed through an item ID -> index mapping, so every
pair always has exactly one classification.
"""

from collections.abc import Iterable, Sequence
from enum import IntEnum

import numpy as np
import numpy.typing as npt

from ..exceptions import InvalidInputError
from ..logging_config import get_logger
from ..models import Comparison
from .win_graph import WinGraph

logger = get_logger("pairwise_matrix")


class Relation(IntEnum):
    """How the relative order of two items is known."""

    UNKNOWN = 0
    INFERRED = 1
    DIRECT = 2

    @property
    def label(self) -> str:
        return self.name.lower()


BoolMatrix = npt.NDArray[np.bool_]


def _classify(direct: BoolMatrix, reach: BoolMatrix) -> npt.NDArray[np.int8]:
    """Apply the direct > inferred > unknown priority to every ordered pair."""
    known = reach | reach.T
    relations = np.where(
        direct,
        np.int8(Relation.DIRECT),
        np.where(known, np.int8(Relation.INFERRED), np.int8(Relation.UNKNOWN)),
    ).astype(np.int8)
    np.fill_diagonal(relations, np.int8(Relation.DIRECT))
    return relations


class PairwiseMatrix:
    """
    Relation of every ordered item pair for one user.

    ``reach[i, j]`` is True when item i transitively beats item j (reflexive
    on the diagonal). ``direct[i, j]`` is symmetric and True when a
    comparison between i and j exists in either direction.
    """

    def __init__(self, item_ids: Sequence[str], direct: BoolMatrix, reach: BoolMatrix):
        self.item_ids: tuple[str, ...] = tuple(item_ids)
        self.index: dict[str, int] = {item_id: i for i, item_id in enumerate(self.item_ids)}
        self.direct: BoolMatrix = direct
        self.reach: BoolMatrix = reach
        self.relations: npt.NDArray[np.int8] = _classify(direct, reach)

    def _idx(self, item_id: str) -> int:
        try:
            return self.index[item_id]
        except KeyError:
            raise InvalidInputError(f"Item {item_id!r} is not part of this matrix") from None

    def relation(self, item_a: str, item_b: str) -> Relation:
        return Relation(int(self.relations[self._idx(item_a), self._idx(item_b)]))

    def __getitem__(self, pair: tuple[str, str]) -> Relation:
        return self.relation(*pair)

    def __len__(self) -> int:
        return len(self.item_ids)

    def prefers(self, item_a: str, item_b: str) -> bool:
        """True when item_a is known, directly or transitively, to beat item_b."""
        if item_a == item_b:
            return False
        return bool(self.reach[self._idx(item_a), self._idx(item_b)])

    def _unknown_mask(self) -> BoolMatrix:
        return self.relations == np.int8(Relation.UNKNOWN)

    def count_unknown(self) -> int:
        """Number of ordered pairs (a, b), a != b, still classified unknown."""
        return int(self._unknown_mask().sum())

    def unknown_pairs(self) -> list[tuple[str, str]]:
        """Unordered unknown pairs as (a, b) with a before b in item order."""
        rows, cols = np.nonzero(np.triu(self._unknown_mask(), k=1))
        return [(self.item_ids[i], self.item_ids[j]) for i, j in zip(rows.tolist(), cols.tolist())]

    def is_fully_resolved(self) -> bool:
        return self.count_unknown() == 0

    def _closure_with_edge(self, wi: int, lo: int) -> BoolMatrix:
        # New paths all run x -> ... -> wi -> lo -> ... -> y.
        return self.reach | np.outer(self.reach[:, wi], self.reach[lo, :])

    def simulate(self, winner_id: str, loser_id: str) -> "PairwiseMatrix":
        """
        Return the matrix that would result from one more direct comparison.

        The input matrix is not modified. Used for planning only.
        """
        if winner_id == loser_id:
            raise InvalidInputError("Cannot simulate an item beating itself")
        wi, lo = self._idx(winner_id), self._idx(loser_id)
        direct = self.direct.copy()
        direct[wi, lo] = direct[lo, wi] = True
        return PairwiseMatrix(self.item_ids, direct, self._closure_with_edge(wi, lo))

    def resolved_by(self, winner_id: str, loser_id: str) -> int:
        """
        Count currently unknown ordered pairs that ``winner beats loser`` would resolve.

        Same result as comparing ``count_unknown`` before and after
        ``simulate``, without materializing the simulated matrix.
        """
        wi, lo = self._idx(winner_id), self._idx(loser_id)
        gained = np.outer(self.reach[:, wi], self.reach[lo, :])
        return int((self._unknown_mask() & (gained | gained.T)).sum())

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Nested ``{a: {b: label}}`` form, e.g. for JSON output."""
        return {
            a: {b: Relation(int(self.relations[i, j])).label for j, b in enumerate(self.item_ids)}
            for i, a in enumerate(self.item_ids)
        }


def _dedupe(item_ids: Iterable[str]) -> list[str]:
    seen = set[str]()
    ordered = list[str]()
    for item_id in item_ids:
        if item_id in seen:
            logger.warning(f"Duplicate item {item_id} in item set, ignoring repeat")
            continue
        seen.add(item_id)
        ordered.append(item_id)
    return ordered


def compute_matrix(comparisons: Iterable[Comparison], item_ids: Iterable[str]) -> PairwiseMatrix:
    """
    Classify every ordered pair of item_ids against a comparison log.

    Comparisons referencing items outside item_ids are skipped with a warning.
    """
    items = _dedupe(item_ids)
    n = len(items)
    index = {item_id: i for i, item_id in enumerate(items)}
    graph = WinGraph.build(comparisons, items)

    direct = np.zeros((n, n), dtype=np.bool_)
    for winner, loser in graph:
        wi, lo = index[winner], index[loser]
        direct[wi, lo] = direct[lo, wi] = True

    reach = np.zeros((n, n), dtype=np.bool_)
    for i, item_id in enumerate(items):
        reach[i, i] = True
        for reached in graph.reachable_from(item_id):
            reach[i, index[reached]] = True

    matrix = PairwiseMatrix(items, direct, reach)
    logger.debug(
        f"Computed pairwise matrix over {n} items: {graph.edge_count()} edges, {matrix.count_unknown()} unknown ordered pairs"
    )
    return matrix
