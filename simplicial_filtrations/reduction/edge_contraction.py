# simplicial_filtrations/reduction/edge_contraction.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol, Set, Tuple, Union

import numpy as np

from ..complex.combinatorics import Edge, Simplex, canon_edge, canon_simplex
from ..complex.simplex_tree import SimplexTree
from ..errors import InvalidArgumentError, SimplexNotFoundError, VertexNotFoundError

logger = logging.getLogger(__name__)

__all__ = [
    "EdgeProfile",
    "PlacementPolicy",
    "ValidContractionPolicy",
    "CostPolicy",
    "FirstVertexPlacement",
    "MiddlePlacement",
    "LinkConditionValidContraction",
    "AlwaysValidContraction",
    "EdgeLengthCost",
    "EdgeContractor",
    "link",
]


# ============================================================
# Edge profile
# ============================================================

@dataclass(frozen=True)
class EdgeProfile:
    """
    An edge ``(v0, v1)`` of ``complex`` (``v0 < v1``) with the positions of its endpoints.

    Contracting the edge keeps ``v0`` and removes ``v1``.
    """
    complex: SimplexTree
    edge: Edge
    points: Mapping[int, np.ndarray]

    @property
    def v0(self) -> int:
        return self.edge[0]

    @property
    def v1(self) -> int:
        return self.edge[1]

    @property
    def p0(self) -> np.ndarray:
        return self.points[self.v0]

    @property
    def p1(self) -> np.ndarray:
        return self.points[self.v1]

    @property
    def squared_length(self) -> float:
        d = self.p1 - self.p0
        return float(d @ d)

    @property
    def length(self) -> float:
        return math.sqrt(self.squared_length)


# ============================================================
# Policies
# ============================================================

class PlacementPolicy(Protocol):
    def compute_placement(self, profile: EdgeProfile) -> Optional[np.ndarray]:
        ...


class ValidContractionPolicy(Protocol):
    def is_valid(self, profile: EdgeProfile, placement: Optional[np.ndarray]) -> bool:
        ...


class CostPolicy(Protocol):
    def compute_cost(self, profile: EdgeProfile, placement: Optional[np.ndarray]) -> Optional[float]:
        ...


class FirstVertexPlacement:
    """The contracted vertex stays where ``v0`` is."""

    def compute_placement(self, profile: EdgeProfile) -> Optional[np.ndarray]:
        return np.array(profile.p0, dtype=float, copy=True)


class MiddlePlacement:
    def compute_placement(self, profile: EdgeProfile) -> Optional[np.ndarray]:
        return 0.5 * (profile.p0 + profile.p1)


def link(tree: SimplexTree, simplex) -> Set[Simplex]:
    """Simplices tau disjoint from ``simplex`` such that tau ∪ simplex is in ``tree``."""
    sig = canon_simplex(simplex)
    if sig not in tree:
        return set()
    sv = set(sig)
    out: Set[Simplex] = set()
    for s in tree.cofaces(sig, codimension=0):
        out.add(tuple(v for v in s if v not in sv))
    return out


class LinkConditionValidContraction:
    """
    Accept the contraction of ``ab`` only when lk(a) ∩ lk(b) = lk(ab).

    Under this condition contracting the edge preserves the homotopy type.
    """

    def is_valid(self, profile: EdgeProfile, placement: Optional[np.ndarray]) -> bool:
        tree = profile.complex
        a, b = profile.v0, profile.v1
        common = link(tree, (a,)) & link(tree, (b,))
        return common == link(tree, profile.edge)


class AlwaysValidContraction:
    def is_valid(self, profile: EdgeProfile, placement: Optional[np.ndarray]) -> bool:
        return True


class EdgeLengthCost:
    """Squared length of the edge; placement is ignored."""

    def compute_cost(self, profile: EdgeProfile, placement: Optional[np.ndarray]) -> Optional[float]:
        return profile.squared_length


# ============================================================
# Contractor
# ============================================================

PointsLike = Union[np.ndarray, Mapping[int, np.ndarray]]


class EdgeContractor:
    """
    Contract edges of a simplex tree in order of increasing cost.

    Parameters
    ----------
    tree :
        Complex modified in place.
    points :
        Coordinates of the vertices: an ``(n, d)`` array indexed by vertex id,
        or a mapping vertex -> point. Every vertex of ``tree`` needs one.
    cost, placement, valid :
        Policies; defaults are :class:`EdgeLengthCost`,
        :class:`FirstVertexPlacement` and
        :class:`LinkConditionValidContraction`.

    Notes
    -----
    Contracting ``(v0, v1)`` replaces v1 by v0 in every simplex of the star
    of v1. A simplex reached from several simplices keeps the smallest of
    their values, so a monotone filtration stays monotone. The surviving
    vertex moves to the placement.
    """

    def __init__(
        self,
        tree: SimplexTree,
        points: PointsLike,
        *,
        cost: Optional[CostPolicy] = None,
        placement: Optional[PlacementPolicy] = None,
        valid: Optional[ValidContractionPolicy] = None,
    ):
        self.tree = tree
        self.cost = EdgeLengthCost() if cost is None else cost
        self.placement = FirstVertexPlacement() if placement is None else placement
        self.valid = LinkConditionValidContraction() if valid is None else valid

        if isinstance(points, Mapping):
            pts = {int(v): np.asarray(p, dtype=float).reshape(-1) for v, p in points.items()}
        else:
            P = np.asarray(points, dtype=float)
            if P.ndim == 1:
                P = P.reshape(-1, 1)
            if P.ndim != 2:
                raise InvalidArgumentError(f"points must be (n, d). Got shape {P.shape}.")
            pts = {i: P[i].copy() for i in range(P.shape[0])}
        missing = [v for v in tree.vertices() if v not in pts]
        if missing:
            raise VertexNotFoundError(f"No point given for vertices {missing[:10]}.")
        self.points: Dict[int, np.ndarray] = pts

    def profile(self, edge) -> EdgeProfile:
        a, b = edge
        e = canon_edge(int(a), int(b))
        if e not in self.tree:
            raise SimplexNotFoundError(f"Edge {e} is not in the complex.")
        return EdgeProfile(complex=self.tree, edge=e, points=self.points)

    def get_point(self, vertex: int) -> np.ndarray:
        try:
            return self.points[int(vertex)]
        except KeyError:
            raise VertexNotFoundError(f"Vertex {vertex} has no point.") from None

    # ----------------------------
    # contraction
    # ----------------------------

    def _merge(self, v0: int, v1: int) -> None:
        tree = self.tree
        star = tree.star((v1,))
        images: Dict[Simplex, float] = {}
        for s in star:
            t = canon_simplex([v0 if x == v1 else x for x in s])
            f = tree.filtration(s)
            images[t] = min(images[t], f) if t in images else f

        for s in sorted(star, key=len, reverse=True):
            tree.remove_maximal_simplex(s)

        for t in sorted(images, key=lambda s: (len(s), s)):
            f = images[t]
            sig, inserted = tree.insert_with_subfaces(t, f)
            if not inserted:
                cur = tree.filtration(sig)
                if math.isnan(cur) or f < cur:
                    tree.assign_filtration(sig, f)

    def contract_edge(self, edge) -> bool:
        """
        Contract ``edge`` if a placement exists and the validity policy accepts it.

        Returns True when the edge was contracted.
        """
        prof = self.profile(edge)
        place = self.placement.compute_placement(prof)
        if place is None or not self.valid.is_valid(prof, place):
            return False
        v0, v1 = prof.edge
        self._merge(v0, v1)
        self.points[v0] = np.asarray(place, dtype=float).reshape(-1)
        del self.points[v1]
        logger.debug("edge contraction: %d merged into %d", v1, v0)
        return True

    def _next_edge(self) -> Optional[Tuple[float, Edge]]:
        best: Optional[Tuple[float, Edge]] = None
        for e in self.tree.edges():
            prof = EdgeProfile(complex=self.tree, edge=e, points=self.points)
            place = self.placement.compute_placement(prof)
            if place is None:
                continue
            c = self.cost.compute_cost(prof, place)
            if c is None:
                continue
            if best is not None and (c, e) >= best:
                continue
            if not self.valid.is_valid(prof, place):
                continue
            best = (float(c), e)
        return best

    def contract_edges(self, num_max: Optional[int] = None) -> int:
        """
        Repeatedly contract the cheapest valid edge.

        Stops after ``num_max`` contractions or when no edge is contractible.
        Returns the number of contractions.
        """
        if num_max is not None and int(num_max) < 0:
            raise InvalidArgumentError(f"num_max must be >= 0. Got {num_max}.")
        n_before = self.tree.num_vertices()
        n = 0
        while num_max is None or n < int(num_max):
            nxt = self._next_edge()
            if nxt is None:
                break
            self.contract_edge(nxt[1])
            n += 1

        n_undef = self.tree.num_undefined()
        if n and n_undef == 0:
            self.tree.finalize_order()
        elif n_undef:
            logger.warning("Edge contraction: %d simplices have an undefined filtration value; order not finalized", n_undef)
        logger.info(
            "Edge contraction: %d edges contracted, %d -> %d vertices",
            n,
            n_before,
            self.tree.num_vertices(),
        )
        return n
