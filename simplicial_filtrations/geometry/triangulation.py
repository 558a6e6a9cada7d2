# simplicial_filtrations/geometry/triangulation.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np
from scipy.spatial import Delaunay, QhullError

from ..errors import InvalidArgumentError, PreconditionViolation, VertexNotFoundError

logger = logging.getLogger(__name__)

__all__ = ["VertexArena", "Triangulation", "delaunay_triangulation"]


def _as_2d_points(X: np.ndarray, *, name: str = "points") -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        return X.reshape(-1, 1)
    if X.ndim == 2:
        return X
    raise InvalidArgumentError(f"{name} must be 1D or 2D. Got shape {X.shape}.")


# ----------------------------
# Vertex arena
# ----------------------------

class VertexArena:
    """
    Dense handles 0..n-1 for a set of external vertex ids, with the reverse lookup.

    Handles are assigned in the order the external ids are given; the arena
    never reuses or moves a handle.
    """

    def __init__(self, external_ids: Iterable[int], points: Optional[np.ndarray] = None):
        self._external: List[int] = []
        self._handle: Dict[int, int] = {}
        for x in external_ids:
            x = int(x)
            if x in self._handle:
                raise InvalidArgumentError(f"Duplicate external id {x} in arena.")
            self._handle[x] = len(self._external)
            self._external.append(x)
        self._points = None if points is None else _as_2d_points(points)

    def __len__(self) -> int:
        return len(self._external)

    def __contains__(self, external_id) -> bool:
        return int(external_id) in self._handle

    def handles(self) -> range:
        return range(len(self._external))

    def handle_of(self, external_id: int) -> int:
        try:
            return self._handle[int(external_id)]
        except KeyError:
            raise VertexNotFoundError(f"External vertex {external_id} has no handle.") from None

    def external_of(self, handle: int) -> int:
        h = int(handle)
        if h < 0 or h >= len(self._external):
            raise VertexNotFoundError(f"Vertex handle {handle} is out of range (n={len(self._external)}).")
        return self._external[h]

    def point_of(self, handle: int) -> np.ndarray:
        if self._points is None:
            raise VertexNotFoundError("This arena carries no point coordinates.")
        return self._points[self.external_of(handle)]


# ----------------------------
# Triangulation container
# ----------------------------

@dataclass
class Triangulation:
    """
    Maximal cells of a triangulation over a point set.

    Parameters
    ----------
    points :
        Array of shape ``(n_points, d)``. One-dimensional input is read as
        ``(n_points, 1)``.
    cells :
        Integer array of shape ``(n_cells, k)``, each row the external ids
        (row indices into ``points``) of one maximal cell. All cells have the
        same number of vertices.

    Notes
    -----
    Points that appear in no cell (duplicates dropped by the triangulator,
    for instance) are not vertices of the triangulation.
    """
    points: np.ndarray
    cells: np.ndarray
    dropped: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))

    def __post_init__(self):
        self.points = _as_2d_points(self.points, name="triangulation.points")
        C = np.asarray(self.cells, dtype=int)
        if C.size == 0:
            C = C.reshape(0, 0)
        if C.ndim != 2:
            raise InvalidArgumentError(f"cells must be (n_cells, k). Got shape {C.shape}.")
        if C.size:
            if C.min() < 0 or C.max() >= self.points.shape[0]:
                raise InvalidArgumentError(
                    f"cells reference ids outside [0, {self.points.shape[0]})."
                )
            for row in C:
                if len(set(row.tolist())) != len(row):
                    raise InvalidArgumentError(f"Cell {row.tolist()} repeats a vertex.")
        self.cells = C
        self.dropped = np.asarray(self.dropped, dtype=int).reshape(-1)

    @property
    def n_cells(self) -> int:
        return int(self.cells.shape[0])

    @property
    def dimension(self) -> int:
        """Dimension of the maximal cells; -1 without cells."""
        return int(self.cells.shape[1]) - 1 if self.n_cells else -1

    @property
    def ambient_dimension(self) -> int:
        return int(self.points.shape[1])

    def vertex_ids(self) -> np.ndarray:
        """Sorted external ids appearing in at least one cell."""
        if not self.n_cells:
            return np.zeros(0, dtype=int)
        return np.unique(self.cells)

    def arena(self) -> VertexArena:
        return VertexArena(self.vertex_ids().tolist(), self.points)

    def point_of(self, vertex_id: int) -> np.ndarray:
        v = int(vertex_id)
        if v < 0 or v >= self.points.shape[0] or v in set(self.dropped.tolist()):
            raise VertexNotFoundError(f"Vertex {vertex_id} is not a vertex of the triangulation.")
        return self.points[v]


# ----------------------------
# Delaunay
# ----------------------------

def _interval_triangulation(P: np.ndarray) -> Triangulation:
    x = P[:, 0]
    order = np.argsort(x, kind="stable")
    keep: List[int] = [int(order[0])]
    dropped: List[int] = []
    for i in order[1:]:
        if x[i] == x[keep[-1]]:
            dropped.append(int(i))
        else:
            keep.append(int(i))
    if len(keep) == 1:
        cells = np.array([[keep[0]]], dtype=int)
    else:
        cells = np.array([[a, b] for a, b in zip(keep[:-1], keep[1:])], dtype=int)
    return Triangulation(points=P, cells=cells, dropped=np.array(dropped, dtype=int))


def delaunay_triangulation(points: np.ndarray, *, qhull_options: Optional[str] = None) -> Triangulation:
    """
    Delaunay triangulation of a point cloud.

    Parameters
    ----------
    points : (n, d) array
    qhull_options : optional str
        Passed to :class:`scipy.spatial.Delaunay`.

    Returns
    -------
    Triangulation
        For d = 1 the cells are the intervals between consecutive distinct
        values; a single point yields one 0-dimensional cell.

    Raises
    ------
    InvalidArgumentError
        Empty point set.
    PreconditionViolation
        Qhull could not triangulate (too few or affinely dependent points).
    """
    P = _as_2d_points(points)
    if P.shape[0] == 0:
        raise InvalidArgumentError("Cannot triangulate an empty point set.")

    if P.shape[1] == 1:
        tri = _interval_triangulation(P)
    elif P.shape[0] == 1:
        tri = Triangulation(points=P, cells=np.array([[0]], dtype=int))
    else:
        try:
            dt = Delaunay(P, qhull_options=qhull_options)
        except QhullError as e:
            raise PreconditionViolation(f"Delaunay triangulation failed: {e}") from e
        used = np.unique(dt.simplices)
        dropped = np.setdiff1d(np.arange(P.shape[0]), used)
        tri = Triangulation(points=P, cells=dt.simplices, dropped=dropped)

    if tri.dropped.size:
        logger.warning(
            "Delaunay triangulation dropped %d of %d input points (duplicates or coplanar).",
            tri.dropped.size,
            P.shape[0],
        )
    return tri
