# simplicial_filtrations/complex/export.py
from __future__ import annotations

from typing import Optional, Sequence

import networkx as nx

from .combinatorics import canon_edge
from .simplex_tree import SimplexTree

__all__ = ["to_gudhi", "graph_to_simplex_tree", "to_networkx"]


def to_gudhi(st: SimplexTree, *, include_undefined: bool = False) -> "gudhi.SimplexTree":
    """
    Copy a filtered complex into a Gudhi SimplexTree, e.g. to compute persistence.

    Parameters
    ----------
    st : SimplexTree
    include_undefined : bool
        If False (default), a complex holding undefined values is rejected.
        If True, undefined values are written as +inf.

    Returns
    -------
    gst : gudhi.SimplexTree
    """
    try:
        import gudhi
    except ImportError as e:
        raise ImportError("to_gudhi requires `gudhi`. Install with `pip install gudhi`.") from e

    from ..errors import PreconditionViolation

    n_undef = st.num_undefined()
    if n_undef and not include_undefined:
        raise PreconditionViolation(
            f"{n_undef} simplices have an undefined filtration value; pass include_undefined=True to export anyway."
        )

    gst = gudhi.SimplexTree()
    for sig in st:
        v = st.filtration(sig)
        gst.insert(list(sig), filtration=float("inf") if v != v else float(v))
    gst.make_filtration_non_decreasing()
    return gst


def graph_to_simplex_tree(
    G: nx.Graph,
    *,
    max_dim: int = 1,
    use_weights: bool = False,
    weight: str = "weight",
    nodes: Optional[Sequence] = None,
) -> SimplexTree:
    """
    Convert a NetworkX graph to a SimplexTree by inserting:
      - vertices at filtration 0
      - edges at filtration = weight (if use_weights) else 0
      - cliques up to dimension max_dim, valued by their largest edge

    Node labels that are not non-negative ints are numbered in ``nodes`` order
    (``G.nodes()`` order by default).
    """
    nodes = list(G.nodes()) if nodes is None else list(nodes)
    if all(isinstance(n, int) and n >= 0 for n in nodes):
        node_to_index = {n: n for n in nodes}
    else:
        node_to_index = {n: i for i, n in enumerate(nodes)}

    edges = []
    weights = []
    for u, v, data in G.edges(data=True):
        iu, iv = node_to_index[u], node_to_index[v]
        if iu == iv:
            continue
        edges.append(canon_edge(iu, iv))
        weights.append(float(data.get(weight, 0.0)) if use_weights else 0.0)

    st = SimplexTree.from_edges(edges, weights=weights, vertices=node_to_index.values())
    if int(max_dim) > 1:
        st.expansion(int(max_dim))
    return st


def to_networkx(st: SimplexTree, *, weight: str = "weight") -> nx.Graph:
    """1-skeleton as a NetworkX graph, edge values stored under ``weight``."""
    G = nx.Graph()
    for (v,) in st.skeleton(0):
        G.add_node(v, filtration=st.filtration([v]))
    for a, b in st.skeleton(1):
        G.add_edge(a, b, **{weight: st.filtration([a, b])})
    return G
