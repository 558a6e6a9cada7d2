# simplicial_filtrations/complex/simplex_tree.py
from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..errors import InvalidArgumentError, PreconditionViolation, SimplexNotFoundError
from .combinatorics import (
    Edge,
    Simplex,
    boundary_faces,
    canon_edge,
    canon_simplex,
    iter_subfaces,
)

logger = logging.getLogger(__name__)

__all__ = ["SimplexTree", "UNDEFINED"]

# Filtration value of a simplex whose value has not been computed yet.
UNDEFINED = float("nan")


def _is_undefined(value: float) -> bool:
    return math.isnan(value)


class SimplexTree:
    """
    Filtered simplicial complex.

    Simplices are addressed by their canonical handle: the sorted tuple of
    their vertex ids (see :func:`canon_simplex`). Any iterable of ints is
    accepted wherever a simplex is expected and is canonicalized first.

    The complex is always closed under taking faces: inserting a simplex
    inserts every missing face with an undefined (NaN) filtration value.
    Values can be overwritten freely during construction; monotonicity
    (face value <= coface value) is restored by :meth:`enforce_monotonicity`
    and the filtration order is computed by :meth:`finalize_order`.

    Notes
    -----
    - Each simplex keeps the set of its codimension-1 cofaces, so both
      boundary and coboundary traversals are local.
    - Any mutation invalidates the cached filtration order.
    """

    def __init__(self) -> None:
        self._filtration: Dict[Simplex, float] = {}
        self._cofaces: Dict[Simplex, Set[Simplex]] = {}
        self._by_dim: Dict[int, Set[Simplex]] = defaultdict(set)
        self._order: Optional[List[Simplex]] = None
        self._order_index: Optional[Dict[Simplex, int]] = None

    # ----------------------------
    # construction
    # ----------------------------

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Sequence[int]],
        *,
        weights: Optional[Sequence[float]] = None,
        vertices: Optional[Iterable[int]] = None,
    ) -> "SimplexTree":
        """
        1-skeleton from an edge list. Vertices get 0, edges get their weight (or 0).
        Duplicate edges keep the smallest weight.
        """
        edges = [tuple(int(x) for x in e) for e in edges]
        if weights is not None and len(weights) != len(edges):
            raise InvalidArgumentError(f"Got {len(weights)} weights for {len(edges)} edges.")

        st = cls()
        if vertices is not None:
            for v in vertices:
                st.insert_with_subfaces([v], 0.0)

        for idx, (a, b) in enumerate(edges):
            w = 0.0 if weights is None else float(weights[idx])
            st.insert_with_subfaces([a], 0.0)
            st.insert_with_subfaces([b], 0.0)
            if a == b:
                continue
            e = canon_edge(a, b)
            if e in st._filtration:
                st._filtration[e] = min(st._filtration[e], w)
            else:
                st.insert_with_subfaces(e, w)
        return st

    def _add(self, sig: Simplex, value: float) -> None:
        # facets are present by construction (callers add by increasing size)
        self._filtration[sig] = value
        self._cofaces[sig] = set()
        self._by_dim[len(sig) - 1].add(sig)
        for f in boundary_faces(sig):
            self._cofaces[f].add(sig)

    def _discard(self, sig: Simplex) -> None:
        del self._filtration[sig]
        del self._cofaces[sig]
        self._by_dim[len(sig) - 1].discard(sig)
        if not self._by_dim[len(sig) - 1]:
            del self._by_dim[len(sig) - 1]
        for f in boundary_faces(sig):
            cof = self._cofaces.get(f)
            if cof is not None:
                cof.discard(sig)

    def _invalidate(self) -> None:
        self._order = None
        self._order_index = None

    def insert_with_subfaces(
        self,
        vertices: Iterable[int],
        filtration: float = UNDEFINED,
    ) -> Tuple[Simplex, bool]:
        """
        Insert a simplex and every missing face.

        Parameters
        ----------
        vertices :
            Vertex ids of the simplex (any order, duplicates ignored).
        filtration :
            Value of the simplex itself. Faces created on the way get
            :data:`UNDEFINED`; faces that already exist are left untouched.

        Returns
        -------
        (handle, inserted) :
            ``inserted`` is False when the simplex was already present. An
            existing simplex with a defined value is not modified; an existing
            simplex whose value is still undefined receives ``filtration``.
        """
        sig = canon_simplex(vertices)
        value = float(filtration)

        current = self._filtration.get(sig)
        if current is not None:
            if _is_undefined(current) and not _is_undefined(value):
                self._filtration[sig] = value
                self._invalidate()
            return sig, False

        missing = [f for f in iter_subfaces(sig) if f not in self._filtration]
        missing.sort(key=len)
        for f in missing:
            self._add(f, UNDEFINED)
        self._filtration[sig] = value
        self._invalidate()
        return sig, True

    def remove_maximal_simplex(self, vertices: Iterable[int]) -> None:
        """Remove a simplex that has no cofaces."""
        sig = self._require(vertices)
        if self._cofaces[sig]:
            raise PreconditionViolation(f"{sig} is not maximal; it has {len(self._cofaces[sig])} cofaces.")
        self._discard(sig)
        self._invalidate()

    def expansion(self, max_dimension: int) -> int:
        """
        Flag expansion of the 1-skeleton up to ``max_dimension``.

        Every clique of the graph becomes a simplex whose value is the max of
        its facets' values. Returns the number of inserted simplices.
        """
        max_dimension = int(max_dimension)
        if max_dimension < 0:
            raise InvalidArgumentError(f"max_dimension must be >= 0. Got {max_dimension}.")

        nbrs: Dict[int, Set[int]] = defaultdict(set)
        for a, b in self._by_dim.get(1, ()):
            nbrs[a].add(b)
            nbrs[b].add(a)

        n_new = 0
        for k in range(2, max_dimension + 1):
            prev = sorted(self._by_dim.get(k - 1, ()))
            if not prev:
                break
            for sig in prev:
                common = set.intersection(*(nbrs[v] for v in sig))
                for v in sorted(common):
                    if v <= sig[-1]:
                        continue
                    coface = sig + (v,)
                    if coface in self._filtration:
                        continue
                    value = max(self._filtration[f] for f in boundary_faces(coface))
                    self._add(coface, value)
                    n_new += 1
        if n_new:
            self._invalidate()
        return n_new

    # ----------------------------
    # lookup
    # ----------------------------

    def _require(self, vertices: Iterable[int]) -> Simplex:
        sig = canon_simplex(vertices)
        if sig not in self._filtration:
            raise SimplexNotFoundError(f"Simplex {sig} is not in the complex.")
        return sig

    def find(self, vertices: Iterable[int]) -> Optional[Simplex]:
        """Handle of the simplex, or None when absent."""
        try:
            sig = canon_simplex(vertices)
        except InvalidArgumentError:
            return None
        return sig if sig in self._filtration else None

    def __contains__(self, vertices) -> bool:
        return self.find(vertices) is not None

    def __len__(self) -> int:
        return len(self._filtration)

    def __iter__(self) -> Iterator[Simplex]:
        return iter(sorted(self._filtration, key=lambda s: (len(s), s)))

    def __repr__(self) -> str:
        return f"SimplexTree(num_vertices={self.num_vertices()}, num_simplices={self.num_simplices()}, dimension={self.dimension()})"

    def filtration(self, vertices: Iterable[int]) -> float:
        return self._filtration[self._require(vertices)]

    def assign_filtration(self, vertices: Iterable[int], value: float) -> None:
        """Overwrite the value of a simplex. No ordering check is made here."""
        sig = self._require(vertices)
        self._filtration[sig] = float(value)
        self._invalidate()

    def reset_filtration(self, value: float, *, min_dim: int = 0) -> None:
        """Set every simplex of dimension >= ``min_dim`` to ``value``."""
        value = float(value)
        for sig in self._filtration:
            if len(sig) - 1 >= min_dim:
                self._filtration[sig] = value
        self._invalidate()

    def num_vertices(self) -> int:
        return len(self._by_dim.get(0, ()))

    def num_simplices(self) -> int:
        return len(self._filtration)

    def dimension(self) -> int:
        """Size of the largest simplex minus one; -1 for the empty complex."""
        return max(self._by_dim) if self._by_dim else -1

    def vertices(self) -> List[int]:
        return sorted(s[0] for s in self._by_dim.get(0, ()))

    def upper_bound_filtration(self) -> float:
        """Largest defined value, -inf for a complex without defined values."""
        vals = [v for v in self._filtration.values() if not _is_undefined(v)]
        return max(vals) if vals else -math.inf

    def num_undefined(self) -> int:
        return sum(1 for v in self._filtration.values() if _is_undefined(v))

    # ----------------------------
    # traversal
    # ----------------------------

    def faces(self, vertices: Iterable[int]) -> List[Simplex]:
        """Codimension-1 faces (the boundary). Empty for a vertex."""
        return boundary_faces(self._require(vertices))

    boundary = faces

    def cofaces(self, vertices: Iterable[int], codimension: int = 1) -> List[Simplex]:
        """
        Cofaces of exactly ``codimension`` more dimensions, or of any positive
        codimension when ``codimension == 0``. Sorted by (dimension, vertices).
        """
        sig = self._require(vertices)
        codimension = int(codimension)
        if codimension < 0:
            raise InvalidArgumentError(f"codimension must be >= 0. Got {codimension}.")
        if codimension == 1:
            return sorted(self._cofaces[sig])

        found: Set[Simplex] = set()
        stack: List[Simplex] = [sig]
        while stack:
            cur = stack.pop()
            for c in self._cofaces[cur]:
                if c in found:
                    continue
                if codimension and len(c) - len(sig) > codimension:
                    continue
                found.add(c)
                stack.append(c)
        out = [c for c in found if codimension == 0 or len(c) - len(sig) == codimension]
        return sorted(out, key=lambda s: (len(s), s))

    def star(self, vertices: Iterable[int]) -> List[Simplex]:
        """The simplex and all of its cofaces."""
        sig = self._require(vertices)
        return [sig] + self.cofaces(sig, codimension=0)

    def skeleton(self, dimension: int) -> List[Simplex]:
        """Simplices of exactly ``dimension``, sorted lexicographically."""
        return sorted(self._by_dim.get(int(dimension), ()))

    def edges(self) -> List[Edge]:
        return self.skeleton(1)  # type: ignore[return-value]

    # ----------------------------
    # filtration maintenance
    # ----------------------------

    def enforce_monotonicity(self) -> bool:
        """
        Lower every face to the minimum value of its cofaces where it exceeds it.

        Dimensions are swept from the top down so that a lowered simplex has
        already been compared to all of its cofaces before its own faces are
        visited; one sweep reaches the fixed point. Undefined values are
        neither lowered nor used to lower.

        Returns
        -------
        changed :
            True when at least one value was modified.
        """
        changed = False
        for d in sorted(self._by_dim, reverse=True):
            for sig in self._by_dim[d]:
                cof_vals = [
                    self._filtration[c]
                    for c in self._cofaces[sig]
                    if not _is_undefined(self._filtration[c])
                ]
                if not cof_vals:
                    continue
                lowest = min(cof_vals)
                if lowest < self._filtration[sig]:
                    self._filtration[sig] = lowest
                    changed = True
        if changed:
            self._invalidate()
        return changed

    def is_monotone(self) -> bool:
        for sig, cof in self._cofaces.items():
            v = self._filtration[sig]
            for c in cof:
                if v > self._filtration[c]:
                    return False
        return True

    def finalize_order(self) -> List[Simplex]:
        """
        Sort all simplices by (filtration value, dimension, vertices).

        On a monotone complex every face comes before each of its cofaces.

        Raises
        ------
        PreconditionViolation
            If some simplex still has an undefined value.
        """
        n_undef = self.num_undefined()
        if n_undef:
            raise PreconditionViolation(
                f"Cannot order the filtration: {n_undef} simplices have an undefined value."
            )
        order = sorted(self._filtration, key=lambda s: (self._filtration[s], len(s), s))
        self._order = order
        self._order_index = {s: i for i, s in enumerate(order)}
        return list(order)

    def order_index(self, vertices: Iterable[int]) -> int:
        """Position of the simplex in the finalized order."""
        sig = self._require(vertices)
        if self._order_index is None:
            self.finalize_order()
        return self._order_index[sig]  # type: ignore[index]

    def get_filtration(self) -> List[Tuple[Simplex, float]]:
        """``(simplex, value)`` pairs in filtration order."""
        if self._order is None:
            self.finalize_order()
        return [(s, self._filtration[s]) for s in self._order]  # type: ignore[union-attr]

    def prune_above(self, threshold: float) -> bool:
        """
        Remove every simplex whose value exceeds ``threshold`` together with all
        of its cofaces. Undefined values are never pruned.

        Returns
        -------
        modified :
            True when something was removed.
        """
        threshold = float(threshold)
        if math.isinf(threshold) and threshold > 0:
            return False

        doomed: Set[Simplex] = set()
        for sig, v in self._filtration.items():
            if v > threshold and sig not in doomed:
                doomed.add(sig)
                doomed.update(self.cofaces(sig, codimension=0))
        if not doomed:
            return False

        for sig in sorted(doomed, key=len, reverse=True):
            self._discard(sig)
        self._invalidate()
        logger.debug("prune_above(%g) removed %d simplices", threshold, len(doomed))
        return True

    # ----------------------------
    # conversions
    # ----------------------------

    def to_edge_list(self) -> List[Tuple[float, int, int]]:
        """Filtered edge list ``(value, u, v)`` sorted by value, for the collapse engine."""
        out = [(self._filtration[e], e[0], e[1]) for e in self._by_dim.get(1, ())]
        out.sort()
        return out

    def copy(self) -> "SimplexTree":
        st = SimplexTree()
        for sig in sorted(self._filtration, key=len):
            st._add(sig, self._filtration[sig])
        return st

    def summarize(self):
        from .summary import summarize_simplex_tree
        return summarize_simplex_tree(self)
