"""
Preference inference.

Pure functions of a user's comparison log:
- WinGraph: transitive "A beats B" reachability
- PairwiseMatrix: direct / inferred / unknown classification of item pairs
- plan_insertion: adaptive binary insertion that skips inferable probes
- reconcile_order: restore an order that contradicts the known facts
"""

from .insertion_planner import InsertionPlan, plan_insertion
from .order_consistency import find_violation, reconcile_order
from .pairwise_matrix import PairwiseMatrix, Relation, compute_matrix
from .win_graph import WinGraph

__all__ = [
    "InsertionPlan",
    "PairwiseMatrix",
    "Relation",
    "WinGraph",
    "compute_matrix",
    "find_violation",
    "plan_insertion",
    "reconcile_order",
]
