# simplicial_filtrations/builders/alpha.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..complex.combinatorics import Simplex, opposite_vertex
from ..complex.simplex_tree import UNDEFINED, SimplexTree
from ..errors import InvalidArgumentError, PreconditionViolation
from ..geometry.kernel import EuclideanKernel, GeometricKernel
from ..geometry.triangulation import Triangulation, delaunay_triangulation

logger = logging.getLogger(__name__)

__all__ = ["AlphaConfig", "AlphaComplex"]


@dataclass(frozen=True)
class AlphaConfig:
    """
    Settings of the Alpha filtration.

    max_alpha_square :
        Simplices with a squared radius above this value are pruned from the
        final complex. Default +inf keeps the whole triangulation.
    """
    max_alpha_square: float = math.inf

    def __post_init__(self):
        if math.isnan(float(self.max_alpha_square)):
            raise InvalidArgumentError("max_alpha_square must not be NaN.")


class AlphaComplex:
    """
    Alpha filtration of a triangulated point set.

    The triangulation's maximal cells are inserted with all their faces, then
    simplices are visited from the top dimension down. A simplex still
    undefined when reached gets its squared circumradius (0 for a vertex);
    its value is then pushed to its facets: a facet with a value keeps the
    minimum of both, an undefined facet (of a simplex with at least three
    vertices) takes the simplex's value when the opposite vertex lies
    strictly inside the facet's smallest circumsphere, i.e. when the facet
    is not Gabriel. Other facets get their own radius when their dimension
    is reached.

    Parameters
    ----------
    points :
        ``(n, d)`` point cloud, triangulated with :func:`delaunay_triangulation`.
    triangulation :
        A ready-made :class:`Triangulation`. Exactly one of ``points`` and
        ``triangulation`` must be given.
    kernel :
        Geometric predicates; defaults to :class:`EuclideanKernel`.
    config :
        :class:`AlphaConfig`.

    Notes
    -----
    Complex vertices are dense handles assigned in increasing order of the
    triangulation's vertex ids; :meth:`get_point` maps a handle back to its
    point.
    """

    def __init__(
        self,
        points: Optional[np.ndarray] = None,
        *,
        triangulation: Optional[Triangulation] = None,
        kernel: Optional[GeometricKernel] = None,
        config: Optional[AlphaConfig] = None,
    ):
        if (points is None) == (triangulation is None):
            raise InvalidArgumentError("Pass exactly one of `points` or `triangulation`.")

        if triangulation is None:
            P = np.asarray(points, dtype=float)
            if P.size == 0:
                raise InvalidArgumentError("AlphaComplex needs a non-empty point set.")
            triangulation = delaunay_triangulation(P)

        self.triangulation = triangulation
        self.kernel = EuclideanKernel() if kernel is None else kernel
        self.config = AlphaConfig() if config is None else config
        self._arena = triangulation.arena()

    # ----------------------------
    # vertex <-> point
    # ----------------------------

    def get_point(self, vertex: int) -> np.ndarray:
        """Point of a complex vertex. Raises VertexNotFoundError for unknown handles."""
        return self._arena.point_of(vertex)

    def _points_of(self, sig: Simplex) -> np.ndarray:
        return np.stack([self._arena.point_of(v) for v in sig], axis=0)

    # ----------------------------
    # construction
    # ----------------------------

    def _check_preconditions(self, tree: SimplexTree) -> None:
        if len(self._arena) < 1:
            raise PreconditionViolation("Cannot build an Alpha complex from a triangulation without vertices.")
        if self.triangulation.dimension < 1:
            raise PreconditionViolation("Cannot build an Alpha complex from a zero-dimensional triangulation.")
        if tree.num_vertices() > 0:
            raise PreconditionViolation("Target complex is not empty; an Alpha complex can be built only once.")

    def create_simplex_tree(
        self,
        tree: Optional[SimplexTree] = None,
        *,
        max_alpha_square: Optional[float] = None,
    ) -> SimplexTree:
        """
        Build the Alpha filtration.

        Parameters
        ----------
        tree :
            Empty complex to fill. A new one is created when omitted.
        max_alpha_square :
            Overrides ``config.max_alpha_square``.

        Returns
        -------
        SimplexTree
            Monotone complex with its filtration order finalized.
        """
        tree = SimplexTree() if tree is None else tree
        self._check_preconditions(tree)
        threshold = self.config.max_alpha_square if max_alpha_square is None else float(max_alpha_square)
        if math.isnan(threshold):
            raise InvalidArgumentError("max_alpha_square must not be NaN.")

        for cell in self.triangulation.cells:
            tree.insert_with_subfaces([self._arena.handle_of(x) for x in cell], UNDEFINED)

        for dim in range(tree.dimension(), -1, -1):
            for sigma in tree.skeleton(dim):
                if math.isnan(tree.filtration(sigma)):
                    value = 0.0 if dim == 0 else float(self.kernel.squared_circumradius(self._points_of(sigma)))
                    tree.assign_filtration(sigma, value)
                self._propagate(tree, sigma, dim)
            logger.debug("alpha: dimension %d done (%d simplices)", dim, len(tree.skeleton(dim)))

        # radii are floating point approximations; a second pass may be needed
        if tree.enforce_monotonicity():
            logger.debug("alpha: monotonicity pass modified filtration values")
            tree.finalize_order()

        tree.prune_above(threshold)
        tree.finalize_order()

        logger.info(
            "Alpha complex: %d vertices, %d simplices, dimension %d",
            tree.num_vertices(),
            tree.num_simplices(),
            tree.dimension(),
        )
        return tree

    def _propagate(self, tree: SimplexTree, sigma: Simplex, dim: int) -> None:
        f_sigma = tree.filtration(sigma)
        for tau in tree.faces(sigma):
            f_tau = tree.filtration(tau)
            if not math.isnan(f_tau):
                tree.assign_filtration(tau, min(f_tau, f_sigma))
            elif dim > 1:
                # vertices of an edge are always Gabriel; only test larger facets
                v = opposite_vertex(sigma, tau)
                if self.kernel.is_inside_open_sphere(self._points_of(tau), self._arena.point_of(v)):
                    tree.assign_filtration(tau, f_sigma)
