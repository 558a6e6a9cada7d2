from __future__ import annotations

from .edge_contraction import (
    AlwaysValidContraction,
    EdgeContractor,
    EdgeLengthCost,
    EdgeProfile,
    FirstVertexPlacement,
    LinkConditionValidContraction,
    MiddlePlacement,
    link,
)
from .strong_collapse import CollapseConfig, CollapseResult, FlagComplexMatrix, collapse_simplex_tree

__all__ = [
    "CollapseConfig",
    "CollapseResult",
    "FlagComplexMatrix",
    "collapse_simplex_tree",
    "EdgeProfile",
    "FirstVertexPlacement",
    "MiddlePlacement",
    "LinkConditionValidContraction",
    "AlwaysValidContraction",
    "EdgeLengthCost",
    "EdgeContractor",
    "link",
]
