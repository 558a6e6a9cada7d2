from __future__ import annotations

from .combinatorics import (
    Edge,
    Simplex,
    boundary_faces,
    canon_edge,
    canon_simplex,
    faces_of_dimension,
    is_face,
    iter_subfaces,
    opposite_vertex,
    simplex_dim,
)
from .simplex_tree import UNDEFINED, SimplexTree
from .summary import ComplexSummary, summarize_simplex_tree

__all__ = [
    "Edge",
    "Simplex",
    "boundary_faces",
    "canon_edge",
    "canon_simplex",
    "faces_of_dimension",
    "is_face",
    "iter_subfaces",
    "opposite_vertex",
    "simplex_dim",
    "UNDEFINED",
    "SimplexTree",
    "ComplexSummary",
    "summarize_simplex_tree",
]
