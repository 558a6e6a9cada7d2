# simplicial_filtrations/complex/combinatorics.py
from __future__ import annotations

from typing import Iterable, Iterator, List, Tuple

from ..errors import InvalidArgumentError

Simplex = Tuple[int, ...]  # sorted, duplicate-free vertex ids
Edge = Tuple[int, int]


def canon_edge(a: int, b: int) -> Edge:
    return (a, b) if a < b else (b, a)


def canon_simplex(sig: Iterable[int]) -> Simplex:
    """Sorted tuple of unique vertex ids. Raises on an empty or negative vertex set."""
    out = tuple(sorted({int(x) for x in sig}))
    if len(out) == 0:
        raise InvalidArgumentError("A simplex needs at least one vertex.")
    if out[0] < 0:
        raise InvalidArgumentError(f"Vertex ids must be non-negative. Got {out}.")
    return out


def simplex_dim(sig: Simplex) -> int:
    return len(sig) - 1


def boundary_faces(sig: Simplex) -> List[Simplex]:
    """Codimension-1 faces, the i-th one omitting sig[i]. Empty for a vertex."""
    if len(sig) <= 1:
        return []
    return [sig[:i] + sig[i + 1:] for i in range(len(sig))]


def opposite_vertex(sig: Simplex, face: Simplex) -> int:
    """The single vertex of ``sig`` that is not in the facet ``face``."""
    rest = [v for v in sig if v not in face]
    if len(rest) != 1:
        raise InvalidArgumentError(f"{face} is not a facet of {sig}.")
    return rest[0]


def is_face(face: Simplex, coface: Simplex) -> bool:
    """Sorted-merge containment test."""
    i = 0
    for v in coface:
        if i < len(face) and face[i] == v:
            i += 1
        elif i < len(face) and face[i] < v:
            return False
    return i == len(face)


def iter_subfaces(sig: Simplex, *, min_size: int = 1) -> Iterator[Simplex]:
    """
    All subsets of ``sig`` with at least ``min_size`` vertices, ``sig`` itself included.

    Depth-first over an owned stack of ``(position, chosen)`` frames: at each
    position a vertex is either kept or dropped. The generator holds no
    state outside the stack, so every call starts a fresh, finite traversal.
    At each position the branch that keeps the vertex is explored first.
    """
    n = len(sig)
    stack: List[Tuple[int, Simplex]] = [(0, ())]
    while stack:
        pos, chosen = stack.pop()
        if pos == n:
            if len(chosen) >= min_size:
                yield chosen
            continue
        # can we still reach min_size if we drop sig[pos]?
        if len(chosen) + (n - pos - 1) >= min_size:
            stack.append((pos + 1, chosen))
        stack.append((pos + 1, chosen + (sig[pos],)))


def faces_of_dimension(sig: Simplex, dim: int) -> List[Simplex]:
    return [f for f in iter_subfaces(sig, min_size=dim + 1) if len(f) == dim + 1]
