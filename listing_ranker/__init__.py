"""
Listing Ranker - Pairwise Preference Ranking Engine

Ranks a group's shared items (rental listings) from members' pairwise
choices, using binary insertion with transitive inference to ask fewer
questions, and combines members' orders into one group ranking.
"""

from .engine import EngineConfig, RankingEngine
from .exceptions import InvalidInputError, NotInGroupError, RankingError
from .inference import PairwiseMatrix, Relation, WinGraph, compute_matrix, plan_insertion
from .interfaces import PairSelector, RankAggregator, Storage, Voter
from .models import Comparison, GroupRankingEntry, UserOrder

__version__ = "0.1.0"
__all__ = [
    "Comparison",
    "UserOrder",
    "GroupRankingEntry",
    "Storage",
    "PairSelector",
    "RankAggregator",
    "Voter",
    "WinGraph",
    "PairwiseMatrix",
    "Relation",
    "compute_matrix",
    "plan_insertion",
    "RankingEngine",
    "EngineConfig",
    "RankingError",
    "InvalidInputError",
    "NotInGroupError",
]
