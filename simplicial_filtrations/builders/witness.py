# simplicial_filtrations/builders/witness.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..complex.combinatorics import boundary_faces, canon_simplex
from ..complex.simplex_tree import SimplexTree
from ..errors import InvalidArgumentError, PreconditionViolation, VertexNotFoundError
from .landmarks import nearest_landmark_table

logger = logging.getLogger(__name__)

__all__ = ["WitnessConfig", "WitnessComplex", "EuclideanWitnessComplex"]

LandmarkRow = List[Tuple[int, float]]  # (landmark id, squared distance), ascending


@dataclass(frozen=True)
class WitnessConfig:
    """
    Settings of the (relaxed) witness filtration.

    max_alpha_square :
        Relaxation alpha^2 >= 0. A witness sees a landmark whose squared
        distance exceeds the first omitted landmark's by at most this much.
    limit_dimension :
        Largest simplex dimension to build; None for no limit.
    seed_landmarks :
        If True, every landmark of the table is inserted as a vertex with
        value 0 before the first round, and rounds start at edges. If False,
        vertices are witnessed like any other simplex (rounds start at 0).
    """
    max_alpha_square: float = 0.0
    limit_dimension: Optional[int] = None
    seed_landmarks: bool = True

    def __post_init__(self):
        _check_alpha(self.max_alpha_square)
        _check_limit(self.limit_dimension)


def _check_alpha(a: float) -> float:
    a = float(a)
    if math.isnan(a) or a < 0:
        raise InvalidArgumentError(f"Squared relaxation parameter must be non-negative. Got {a}.")
    return a


def _check_limit(k: Optional[int]) -> Optional[int]:
    if k is None:
        return None
    k = int(k)
    if k < 0:
        raise InvalidArgumentError(f"Limit dimension must be non-negative. Got {k}.")
    return k


def _normalize_table(table) -> List[LandmarkRow]:
    rows: List[LandmarkRow] = []
    for w, row in enumerate(table):
        pairs = [(int(l), float(d)) for l, d in row]
        for (_, d0), (_, d1) in zip(pairs[:-1], pairs[1:]):
            if d1 < d0:
                raise InvalidArgumentError(f"Landmark list of witness {w} is not sorted by distance.")
        ids = [l for l, _ in pairs]
        if len(set(ids)) != len(ids):
            raise InvalidArgumentError(f"Landmark list of witness {w} repeats a landmark.")
        if ids and min(ids) < 0:
            raise InvalidArgumentError(f"Landmark ids must be non-negative (witness {w}).")
        rows.append(pairs)
    return rows


class WitnessComplex:
    """
    Relaxed witness filtration built dimension by dimension.

    At round k every active witness walks its sorted landmark list and
    enumerates the k-simplices it can see. The walk only extends prefixes that
    are already simplices of the complex, and a k-simplex is inserted only
    when all of its (k-1)-faces exist, so no subset whose boundary was never
    witnessed is explored. A witness that produces no k-simplex is dropped
    for all later rounds.

    The value of a witnessed simplex is ``max(0, d(last) - d(first omitted))``
    raised to the largest value of its facets; when several witnesses see
    the same simplex the smallest value is kept.

    Parameters
    ----------
    nearest_landmark_table :
        One sequence per witness of ``(landmark_id, squared_distance)`` pairs
        sorted by increasing distance. Ties keep the input order.
    n_landmarks :
        Landmarks are ``0..n_landmarks-1``. By default, the ids found in the table.
    config :
        :class:`WitnessConfig`.
    """

    def __init__(
        self,
        nearest_landmark_table: Sequence[Sequence[Tuple[int, float]]],
        *,
        n_landmarks: Optional[int] = None,
        config: Optional[WitnessConfig] = None,
    ):
        self.table = _normalize_table(nearest_landmark_table)
        if len(self.table) == 0:
            raise InvalidArgumentError("WitnessComplex needs at least one witness.")
        self.config = WitnessConfig() if config is None else config
        seen = {l for row in self.table for l, _ in row}
        if n_landmarks is None:
            self.landmarks = sorted(seen)
        else:
            if seen and max(seen) >= int(n_landmarks):
                raise InvalidArgumentError(f"Table references landmark {max(seen)} but n_landmarks={n_landmarks}.")
            self.landmarks = list(range(int(n_landmarks)))

    def create_complex(
        self,
        tree: Optional[SimplexTree] = None,
        *,
        max_alpha_square: Optional[float] = None,
        limit_dimension: Optional[int] = None,
    ) -> SimplexTree:
        """
        Fill ``tree`` (a new complex when omitted) with the witness filtration.

        ``max_alpha_square`` and ``limit_dimension`` override the config.

        Raises
        ------
        InvalidArgumentError
            Negative relaxation or limit dimension.
        PreconditionViolation
            ``tree`` is not empty.
        """
        alpha2 = _check_alpha(self.config.max_alpha_square if max_alpha_square is None else max_alpha_square)
        limit = _check_limit(self.config.limit_dimension if limit_dimension is None else limit_dimension)
        tree = SimplexTree() if tree is None else tree
        if tree.num_vertices() > 0:
            raise PreconditionViolation("Witness complex cannot create complex - complex is not empty.")

        n_landmarks = len(self.landmarks)
        max_k = n_landmarks - 1 if limit is None else min(limit, n_landmarks - 1)

        k = 0
        if self.config.seed_landmarks:
            for l in self.landmarks:
                tree.insert_with_subfaces([l], 0.0)
            k = 1

        active = [w for w, row in enumerate(self.table) if row]
        while active and k <= max_k:
            still_active: List[int] = []
            for w in active:
                simplex: List[int] = []
                if self._add_all_faces_of_dimension(tree, k, alpha2, math.inf, self.table[w], 0, simplex):
                    still_active.append(w)
            logger.debug(
                "witness: round %d kept %d of %d witnesses, %d simplices of dim %d",
                k, len(still_active), len(active), len(tree.skeleton(k)), k,
            )
            active = still_active
            k += 1

        if tree.num_simplices():
            tree.finalize_order()
        logger.info(
            "Witness complex: %d landmarks, %d simplices, dimension %d",
            tree.num_vertices(),
            tree.num_simplices(),
            tree.dimension(),
        )
        return tree

    def _add_all_faces_of_dimension(
        self,
        tree: SimplexTree,
        dim: int,
        alpha2: float,
        norelax_dist2: float,
        row: LandmarkRow,
        start: int,
        simplex: List[int],
    ) -> bool:
        """
        Insert every ``dim``-dimensional extension of the prefix ``simplex``
        seen by one witness from position ``start`` of its landmark list.

        ``norelax_dist2`` is the squared distance of the first landmark the
        walk skipped (+inf while none was skipped); candidates farther than
        that by more than ``alpha2`` are out of reach. Returns True when the
        witness saw at least one simplex of the target dimension.
        """
        will_be_active = False
        i = start
        while i < len(row) and row[i][1] - alpha2 <= norelax_dist2:
            landmark, dist2 = row[i]
            simplex.append(landmark)
            if dim > 0:
                if simplex in tree:
                    will_be_active = self._add_all_faces_of_dimension(
                        tree, dim - 1, alpha2, norelax_dist2, row, i + 1, simplex
                    ) or will_be_active
            else:
                value = dist2 - norelax_dist2 if dist2 > norelax_dist2 else 0.0
                value = self._bound_by_facets(tree, simplex, value)
                if value is not None:
                    will_be_active = True
                    self._insert_or_lower(tree, simplex, value)
            simplex.pop()
            # from here on the landmark is skipped
            if dist2 < norelax_dist2:
                norelax_dist2 = dist2
            i += 1
        return will_be_active

    @staticmethod
    def _bound_by_facets(tree: SimplexTree, simplex: List[int], value: float) -> Optional[float]:
        """None when a facet is missing, else ``value`` raised to the facets' maximum."""
        for f in boundary_faces(canon_simplex(simplex)):
            if f not in tree:
                return None
            value = max(value, tree.filtration(f))
        return value

    @staticmethod
    def _insert_or_lower(tree: SimplexTree, simplex: List[int], value: float) -> None:
        sig, inserted = tree.insert_with_subfaces(simplex, value)
        if not inserted and value < tree.filtration(sig):
            tree.assign_filtration(sig, value)


class EuclideanWitnessComplex(WitnessComplex):
    """
    Witness filtration of landmark and witness point clouds in R^d.

    The nearest-landmark table is computed with a KD-tree over the landmarks
    (squared Euclidean distances, ``k`` nearest landmarks per witness, all of
    them by default). Complex vertices are landmark row indices.
    """

    def __init__(
        self,
        landmarks: np.ndarray,
        witnesses: np.ndarray,
        *,
        k: Optional[int] = None,
        config: Optional[WitnessConfig] = None,
    ):
        self.landmark_points = np.asarray(landmarks, dtype=float)
        self.witness_points = np.asarray(witnesses, dtype=float)
        table = nearest_landmark_table(self.landmark_points, self.witness_points, k=k)
        super().__init__(table, n_landmarks=self.landmark_points.shape[0], config=config)

    def get_point(self, vertex: int) -> np.ndarray:
        v = int(vertex)
        if v < 0 or v >= self.landmark_points.shape[0]:
            raise VertexNotFoundError(f"Landmark {vertex} does not exist.")
        return self.landmark_points[v]
