# simplicial_filtrations/reduction/strong_collapse.py
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np
import scipy.sparse as sp

from ..complex.combinatorics import Edge, canon_edge
from ..complex.simplex_tree import SimplexTree
from ..errors import InvalidArgumentError, PreconditionViolation, VertexNotFoundError

logger = logging.getLogger(__name__)

__all__ = [
    "CollapseConfig",
    "CollapseResult",
    "FlagComplexMatrix",
    "collapse_simplex_tree",
]


@dataclass(frozen=True)
class CollapseConfig:
    """
    compact :
        Resolve chains of the reduction map (x -> y -> z becomes x -> z)
        once the collapse has run. Without it the map holds the immediate
        dominator of each removed vertex.
    """
    compact: bool = True


@dataclass
class CollapseResult:
    """Core of a strong collapse: surviving vertices, their edges, and where each removed vertex went."""
    vertices: List[int]
    edges: List[Edge]
    reduction_map: Dict[int, int] = field(default_factory=dict)
    n_removed: int = 0

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)


def _is_sorted_subset(small: Sequence[int], big: Sequence[int]) -> bool:
    """``small`` ⊆ ``big`` for sorted sequences, one merge pass."""
    j = 0
    n = len(big)
    for x in small:
        while j < n and big[j] < x:
            j += 1
        if j == n or big[j] != x:
            return False
        j += 1
    return True


class FlagComplexMatrix:
    """
    Flag complex stored as a row-major sparse adjacency matrix.

    Every vertex owns one row; the diagonal entry is set so that the non-zero
    columns of a row are the vertex's closed neighbourhood. Strong collapse
    removes dominated vertices (closed neighbourhood contained in the one of
    another vertex) until none is left and records, for each removed vertex,
    the vertex it collapsed onto.

    Parameters
    ----------
    edges :
        Iterable of ``(u, v)`` pairs, or ``(value, u, v)`` triples for a
        filtered edge list. Self-loops insert the vertex only; repeated edges
        keep the smallest value.
    vertices :
        Extra vertices (possibly isolated), inserted before the edges.
    config :
        :class:`CollapseConfig`.

    Notes
    -----
    Rows are numbered in vertex insertion order. When two vertices have the
    same closed neighbourhood, the one whose row is examined first is kept.
    """

    def __init__(
        self,
        edges: Iterable[Sequence] = (),
        *,
        vertices: Iterable[int] = (),
        config: Optional[CollapseConfig] = None,
    ):
        self.config = CollapseConfig() if config is None else config

        self._adj = sp.lil_matrix((8, 8), dtype=np.int8)
        self._rows = 0
        self._vertex_to_row: Dict[int, int] = {}
        self._row_to_vertex: Dict[int, int] = {}
        self._vertices: Set[int] = set()

        self._dominated: List[bool] = []
        self._queued: List[bool] = []
        self._contracted: List[bool] = []
        self._queue: Deque[int] = deque()

        self._edges: List[Edge] = []
        self._edge_value: Dict[Edge, float] = {}
        self._reduction: Dict[int, int] = {}
        self._result: Optional[CollapseResult] = None
        self._collapsed: Optional[sp.csr_matrix] = None

        for v in vertices:
            self.insert_vertex(v)
        for e in edges:
            e = tuple(e)
            if len(e) == 2:
                self.insert_edge(e[0], e[1])
            elif len(e) == 3:
                self.insert_edge(e[1], e[2], e[0])
            else:
                raise InvalidArgumentError(f"Edges must be (u, v) or (value, u, v). Got {e!r}.")

    @classmethod
    def from_networkx(cls, G, *, weight: Optional[str] = None, config: Optional[CollapseConfig] = None) -> "FlagComplexMatrix":
        """Nodes of ``G`` (ints) become vertices; ``weight`` names the edge attribute holding the filtration."""
        edges = []
        for u, v, data in G.edges(data=True):
            if weight is None:
                edges.append((u, v))
            else:
                edges.append((float(data.get(weight, 0.0)), u, v))
        return cls(edges, vertices=list(G.nodes()), config=config)

    @classmethod
    def from_simplex_tree(cls, tree: SimplexTree, *, config: Optional[CollapseConfig] = None) -> "FlagComplexMatrix":
        """1-skeleton of ``tree`` with its edge filtration values."""
        return cls(tree.to_edge_list(), vertices=tree.vertices(), config=config)

    # ----------------------------
    # insertion
    # ----------------------------

    def _grow(self) -> None:
        cap = self._adj.shape[0]
        if self._rows >= cap:
            self._adj.resize((2 * cap, 2 * cap))

    def _enqueue(self, row: int) -> None:
        if not self._dominated[row] and not self._queued[row]:
            self._queue.append(row)
            self._queued[row] = True

    def insert_vertex(self, vertex: int) -> bool:
        """Add ``vertex`` with its own row; False if it is already a member."""
        v = int(vertex)
        if v < 0:
            raise InvalidArgumentError(f"Vertex ids must be non-negative. Got {vertex}.")
        if v in self._vertex_to_row:
            return False
        # a vertex removed by an earlier collapse comes back as a survivor
        if self._reduction.pop(v, None) is not None:
            logger.debug("strong collapse: %d re-inserted after removal", v)
        self._grow()
        rw = self._rows
        self._adj[rw, rw] = 1
        self._dominated.append(False)
        self._queued.append(False)
        self._contracted.append(False)
        self._vertex_to_row[v] = rw
        self._row_to_vertex[rw] = v
        self._vertices.add(v)
        self._rows += 1
        self._enqueue(rw)
        self._result = None
        return True

    def insert_edge(self, u: int, v: int, filtration: float = 0.0) -> None:
        """Add the edge ``{u, v}`` (and missing endpoints). Self-loops only add the vertex."""
        u, v = int(u), int(v)
        self.insert_vertex(u)
        if u == v:
            return
        self.insert_vertex(v)
        e = canon_edge(u, v)
        value = float(filtration)
        if e in self._edge_value:
            self._edge_value[e] = min(self._edge_value[e], value)
        else:
            self._edges.append(e)
            self._edge_value[e] = value
        ru, rv = self._vertex_to_row[u], self._vertex_to_row[v]
        # an endpoint re-inserted after a collapse owns a fresh row
        if self._adj[ru, rv]:
            return
        self._adj[ru, rv] = 1
        self._adj[rv, ru] = 1
        self._enqueue(ru)
        self._enqueue(rv)
        self._result = None

    # ----------------------------
    # row access
    # ----------------------------

    def _live(self, row: int) -> bool:
        return not self._dominated[row] and row in self._row_to_vertex

    def _row_index(self, row: int) -> List[int]:
        """Sorted non-dominated columns of ``row``; empty for a dominated row."""
        if not self._live(row):
            return []
        return [c for c in self._adj.rows[row] if self._live(c)]

    def _row(self, vertex: int) -> int:
        try:
            return self._vertex_to_row[int(vertex)]
        except KeyError:
            raise VertexNotFoundError(f"Vertex {vertex} is not a member of the flag complex.") from None

    # ----------------------------
    # collapse
    # ----------------------------

    def _pair_domination(self, i: int, j: int) -> int:
        """1 if row i is dominated by row j, -1 if j is dominated by i, else 0."""
        if i == j or not (self._live(i) and self._live(j)):
            return 0
        li = self._row_index(i)
        lj = self._row_index(j)
        if len(lj) <= len(li):
            if _is_sorted_subset(lj, li):
                return -1
        elif _is_sorted_subset(li, lj):
            return 1
        return 0

    def _set_dominated(self, dominated: int, dominating: int) -> None:
        v = self._row_to_vertex[dominated]
        w = self._row_to_vertex[dominating]
        self._dominated[dominated] = True
        self._reduction[v] = w
        logger.debug("strong collapse: %d dominated by %d", v, w)

        del self._vertex_to_row[v]
        del self._row_to_vertex[dominated]
        self._vertices.discard(v)

        for c in self._adj.rows[dominated]:
            self._enqueue(c)

    def _domination_pass(self) -> None:
        while self._queue:
            k = self._queue.popleft()
            self._queued[k] = False
            if self._dominated[k]:
                continue
            for other in self._row_index(k):
                # rows removed earlier in this scan
                if self._dominated[other]:
                    continue
                check = self._pair_domination(k, other)
                if check == 1:
                    self._set_dominated(k, other)
                    break
                if check == -1:
                    self._set_dominated(other, k)

    def _compact(self) -> None:
        red = self._reduction
        for x in list(red):
            chain = [x]
            y = red[x]
            while y in red:
                chain.append(y)
                y = red[y]
            for z in chain:
                red[z] = y

    def _rebuild(self) -> CollapseResult:
        rows: List[int] = []
        cols: List[int] = []
        edges: List[Edge] = []
        for rw in range(self._rows):
            if not self._live(rw):
                continue
            for c in self._row_index(rw):
                rows.append(rw)
                cols.append(c)
                if rw < c:
                    edges.append(canon_edge(self._row_to_vertex[rw], self._row_to_vertex[c]))
        data = np.ones(len(rows), dtype=np.int8)
        self._collapsed = sp.coo_matrix((data, (rows, cols)), shape=(self._rows, self._rows)).tocsr()
        return CollapseResult(
            vertices=sorted(self._vertices),
            edges=sorted(edges),
            reduction_map=dict(self._reduction),
            n_removed=len(self._reduction),
        )

    def strong_collapse(self) -> CollapseResult:
        """
        Remove dominated vertices until none is left.

        Pops rows from a FIFO work queue. A popped row is compared with each
        row of its closed neighbourhood; the first neighbour that dominates
        it wins, and any neighbour it dominates is removed on the way. Every
        removal re-queues the live neighbours of the removed vertex.

        Returns
        -------
        CollapseResult
            Stored; calling again without inserting returns the same result.
        """
        if self._result is not None:
            return self._result

        n_before = len(self._vertices)
        self._domination_pass()
        if self.config.compact:
            self._compact()
        self._result = self._rebuild()

        logger.info(
            "Strong collapse: %d -> %d vertices, %d -> %d edges",
            n_before,
            len(self._result.vertices),
            len(self._edges),
            len(self._result.edges),
        )
        return self._result

    def _require_collapsed(self) -> CollapseResult:
        if self._result is None:
            raise PreconditionViolation("Strong collapse has not been run (call strong_collapse() first).")
        return self._result

    # ----------------------------
    # queries
    # ----------------------------

    def reduction_map(self) -> Dict[int, int]:
        return dict(self._require_collapsed().reduction_map)

    def collapsed_edges(self) -> List[Edge]:
        return list(self._require_collapsed().edges)

    def collapsed_matrix(self) -> sp.csr_matrix:
        self._require_collapsed()
        return self._collapsed

    def uncollapsed_matrix(self) -> sp.csr_matrix:
        n = self._rows
        return self._adj[:n, :n].tocsr()

    def vertex_set(self) -> Set[int]:
        return set(self._vertices)

    def all_edges(self) -> List[Edge]:
        """Every inserted edge, in insertion order."""
        return list(self._edges)

    def edge_filtration(self, u: int, v: int) -> float:
        e = canon_edge(int(u), int(v))
        if e not in self._edge_value:
            raise VertexNotFoundError(f"Edge {e} was never inserted.")
        return self._edge_value[e]

    def num_vertices(self) -> int:
        return len(self._vertices)

    def membership(self, vertex: int) -> bool:
        return int(vertex) in self._vertex_to_row

    def edge_membership(self, u: int, v: int) -> bool:
        if not (self.membership(u) and self.membership(v)):
            return False
        ru, rv = self._vertex_to_row[int(u)], self._vertex_to_row[int(v)]
        return ru in self._row_index(rv)

    def neighbors(self, vertex: int) -> List[int]:
        """Sorted non-dominated closed neighbourhood of ``vertex``."""
        rw = self._row(vertex)
        return sorted(self._row_to_vertex[c] for c in self._row_index(rw))

    def active_neighbors(self, vertex: int) -> List[int]:
        """Sorted closed neighbourhood restricted to vertices not marked contracted."""
        rw = self._row(vertex)
        return sorted(
            self._row_to_vertex[c]
            for c in self._adj.rows[rw]
            if not self._contracted[c] and c in self._row_to_vertex
        )

    def active_relative_neighbors(self, v: int, w: int) -> List[int]:
        """Active neighbours of ``v`` that are not active neighbours of ``w``."""
        nw = set(self.active_neighbors(w))
        return [x for x in self.active_neighbors(v) if x not in nw]

    def is_dominated(self, vertex: int) -> bool:
        """True when another member's closed neighbourhood contains the one of ``vertex``."""
        rw = self._row(vertex)
        mine = self._row_index(rw)
        for other in mine:
            if other != rw and _is_sorted_subset(mine, self._row_index(other)):
                return True
        return False

    def dominated_vertices(self) -> List[int]:
        return sorted(v for v in self._vertices if self.is_dominated(v))

    # ----------------------------
    # contraction
    # ----------------------------

    def contraction(self, delete: int, keep: int) -> None:
        """
        Merge ``delete`` into ``keep``: ``keep`` inherits the neighbours of
        ``delete``. If ``keep`` is not a member, ``delete`` is renamed.
        """
        delete, keep = int(delete), int(keep)
        if delete == keep:
            return
        if not self.membership(delete):
            raise VertexNotFoundError(f"Cannot contract {delete}: not a member of the flag complex.")
        row_del = self._vertex_to_row[delete]
        if self.membership(keep):
            row_keep = self._vertex_to_row[keep]
            keep_cols = set(self._row_index(row_keep))
            for c in self._row_index(row_del):
                if c != row_del and c not in keep_cols:
                    self._adj[row_keep, c] = 1
                    self._adj[c, row_keep] = 1
            del self._vertex_to_row[delete]
            del self._row_to_vertex[row_del]
            self._vertices.discard(delete)
            # every row whose closed neighbourhood changed
            self._enqueue(row_keep)
            for c in self._row_index(row_keep):
                self._enqueue(c)
        else:
            self.relabel(delete, keep)
        self._result = None

    def relabel(self, v: int, w: int) -> None:
        """Rename member ``v`` as ``w``; no-op when ``v`` is not a member or equals ``w``."""
        v, w = int(v), int(w)
        if not self.membership(v) or v == w:
            return
        rw = self._vertex_to_row.pop(v)
        self._row_to_vertex[rw] = w
        self._vertex_to_row[w] = rw
        self._vertices.discard(v)
        self._vertices.add(w)
        self._reduction.pop(w, None)
        for x, y in self._reduction.items():
            if y == v:
                self._reduction[x] = w
        self._result = None

    def _swap_rows(self, v: int, w: int) -> None:
        rv, rw = self._vertex_to_row[v], self._vertex_to_row[w]
        self._vertex_to_row[v], self._vertex_to_row[w] = rw, rv
        self._row_to_vertex[rv], self._row_to_vertex[rw] = w, v

    def active_strong_expansion(self, v: int, w: int, filtration: float = 0.0) -> None:
        """
        Simulate contracting ``v`` onto ``w``.

        The smaller of the two relative active neighbourhoods is added to the
        star of the other vertex, rows are swapped if needed so that ``w``
        keeps the expanded row, and ``v`` is marked contracted.
        """
        v, w = int(v), int(w)
        if self.membership(v) and self.membership(w) and v != w:
            v_minus_w = self.active_relative_neighbors(v, w)
            w_minus_v = self.active_relative_neighbors(w, v)
            if len(w_minus_v) < len(v_minus_w):
                for x in w_minus_v:
                    self.insert_edge(v, x, filtration)
                self._swap_rows(v, w)
            else:
                for y in v_minus_w:
                    self.insert_edge(w, y, filtration)
            self._contracted[self._vertex_to_row[v]] = True
        if self.membership(v) and not self.membership(w):
            self.relabel(v, w)
        self._result = None


# ----------------------------
# Simplex tree convenience
# ----------------------------

def collapse_simplex_tree(
    tree: SimplexTree,
    max_dimension: Optional[int] = None,
    *,
    config: Optional[CollapseConfig] = None,
) -> Tuple[SimplexTree, CollapseResult]:
    """
    Strong-collapse the 1-skeleton of ``tree`` and return the flag expansion
    of the core (values taken from ``tree``) together with the collapse result.

    ``max_dimension`` defaults to the dimension of ``tree`` (at least 1).
    """
    if tree.num_vertices() == 0:
        raise InvalidArgumentError("Cannot collapse an empty complex.")
    mat = FlagComplexMatrix.from_simplex_tree(tree, config=config)
    res = mat.strong_collapse()

    dim = max(tree.dimension(), 1) if max_dimension is None else int(max_dimension)
    if dim < 0:
        raise InvalidArgumentError(f"max_dimension must be non-negative. Got {max_dimension}.")

    out = SimplexTree()
    for v in res.vertices:
        out.insert_with_subfaces([v], tree.filtration((v,)))
    if dim >= 1:
        for e in res.edges:
            out.insert_with_subfaces(e, tree.filtration(e))
        out.expansion(dim)
    n_undef = out.num_undefined()
    if n_undef == 0:
        out.finalize_order()
    else:
        logger.warning("collapse_simplex_tree: %d simplices have an undefined filtration value; order not finalized", n_undef)
    return out, res
