from __future__ import annotations

"""
Public API re-exports for simplicial_filtrations.

Import style:
    from simplicial_filtrations.api import SimplexTree, AlphaComplex, WitnessComplex, FlagComplexMatrix, ...

Notes
-----
- Curated: internal helpers stay in their modules.
- Export adapters (gudhi / networkx) live in :mod:`simplicial_filtrations.complex.export`.
"""

# ----------------------------
# Errors
# ----------------------------
from .errors import (
    SimplicialError,
    InvalidArgumentError,
    PreconditionViolation,
    SimplexNotFoundError,
    VertexNotFoundError,
    UnsupportedFamilyError,
)

# ----------------------------
# Filtered complex
# ----------------------------
from .complex import (
    UNDEFINED,
    SimplexTree,
    ComplexSummary,
    summarize_simplex_tree,
    canon_simplex,
)
from .complex.export import (
    to_gudhi,
    to_networkx,
    graph_to_simplex_tree,
)

# ----------------------------
# Geometry
# ----------------------------
from .geometry import (
    GeometricKernel,
    KernelConfig,
    EuclideanKernel,
    Triangulation,
    VertexArena,
    delaunay_triangulation,
)

# ----------------------------
# Builders
# ----------------------------
from .builders import (
    AlphaConfig,
    AlphaComplex,
    WitnessConfig,
    WitnessComplex,
    EuclideanWitnessComplex,
    nearest_landmark_table,
    choose_n_farthest_points,
    pick_n_random_points,
)

# ----------------------------
# Reduction
# ----------------------------
from .reduction import (
    CollapseConfig,
    CollapseResult,
    FlagComplexMatrix,
    collapse_simplex_tree,
    EdgeProfile,
    FirstVertexPlacement,
    MiddlePlacement,
    LinkConditionValidContraction,
    AlwaysValidContraction,
    EdgeLengthCost,
    EdgeContractor,
)

__all__ = [
    # errors
    "SimplicialError",
    "InvalidArgumentError",
    "PreconditionViolation",
    "SimplexNotFoundError",
    "VertexNotFoundError",
    "UnsupportedFamilyError",
    # complex
    "UNDEFINED",
    "SimplexTree",
    "ComplexSummary",
    "summarize_simplex_tree",
    "canon_simplex",
    "to_gudhi",
    "to_networkx",
    "graph_to_simplex_tree",
    # geometry
    "GeometricKernel",
    "KernelConfig",
    "EuclideanKernel",
    "Triangulation",
    "VertexArena",
    "delaunay_triangulation",
    # builders
    "AlphaConfig",
    "AlphaComplex",
    "WitnessConfig",
    "WitnessComplex",
    "EuclideanWitnessComplex",
    "nearest_landmark_table",
    "choose_n_farthest_points",
    "pick_n_random_points",
    # reduction
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
]
