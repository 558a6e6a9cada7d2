# simplicial_filtrations/geometry/kernel.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

import numpy as np

from ..errors import InvalidArgumentError

__all__ = ["GeometricKernel", "KernelConfig", "EuclideanKernel"]


# ============================================================
# Kernel interface
# ============================================================

class GeometricKernel(Protocol):
    """
    Geometric primitives consumed by the Alpha builder.

    Both predicates are pure functions of the point set and symmetric under
    permutation of its rows.
    """

    def circumcenter(self, points: np.ndarray) -> np.ndarray:
        ...

    def squared_circumradius(self, points: np.ndarray) -> float:
        ...

    def is_inside_open_sphere(self, face_points: np.ndarray, extra_point: np.ndarray) -> bool:
        ...


@dataclass(frozen=True)
class KernelConfig:
    """
    Numeric settings of :class:`EuclideanKernel`.

    tolerance :
        Relative slack of the strict in-sphere test. A point whose squared
        distance to the center is within ``tolerance * max(1, r^2)`` of ``r^2``
        counts as lying on the sphere (so not inside).
    rank_tol :
        Absolute cutoff on singular values of the Gram matrix when checking
        affine independence.
        None uses numpy's default.
    """
    tolerance: float = 1e-12
    rank_tol: Optional[float] = None

    def __post_init__(self):
        if not (self.tolerance >= 0.0):
            raise InvalidArgumentError(f"tolerance must be >= 0. Got {self.tolerance}.")


def _as_point_set(P: np.ndarray, *, name: str = "points") -> np.ndarray:
    P = np.asarray(P, dtype=float)
    if P.ndim == 1:
        P = P.reshape(1, -1)
    if P.ndim != 2 or P.shape[0] == 0:
        raise InvalidArgumentError(f"{name} must be a non-empty (k, d) array. Got shape {P.shape}.")
    return P


# ============================================================
# Euclidean kernel
# ============================================================

@dataclass(frozen=True)
class EuclideanKernel:
    """
    Circumspheres in R^d computed inside the affine hull of the point set.

    For points p0..pk the center is ``c = p0 + A^T lam`` with rows
    ``A[i] = p_{i+1} - p0``; equidistance gives the Gram system
    ``(A A^T) lam = diag(A A^T) / 2``. The sphere found this way is the
    smallest sphere through all the points.
    """
    config: KernelConfig = field(default_factory=KernelConfig)
    name: str = "euclidean"

    def circumsphere(self, points: np.ndarray) -> Tuple[np.ndarray, float]:
        """(center, squared radius) of the smallest sphere through ``points``."""
        P = _as_point_set(points)
        p0 = P[0]
        if P.shape[0] == 1:
            return p0.copy(), 0.0

        A = P[1:] - p0                      # (k, d)
        if A.shape[0] > A.shape[1]:
            raise InvalidArgumentError(
                f"{P.shape[0]} points cannot be affinely independent in R^{P.shape[1]}."
            )
        G = A @ A.T                          # (k, k)
        rank = np.linalg.matrix_rank(G, tol=self.config.rank_tol)
        if rank < A.shape[0]:
            raise InvalidArgumentError(
                "Degenerate simplex for circumsphere: points are not affinely independent."
            )
        lam = np.linalg.solve(G, 0.5 * np.diag(G))
        offset = A.T @ lam
        return p0 + offset, float(offset @ offset)

    def circumcenter(self, points: np.ndarray) -> np.ndarray:
        return self.circumsphere(points)[0]

    def squared_circumradius(self, points: np.ndarray) -> float:
        return self.circumsphere(points)[1]

    def is_inside_open_sphere(self, face_points: np.ndarray, extra_point: np.ndarray) -> bool:
        """
        True when ``extra_point`` lies strictly inside the smallest sphere
        through ``face_points``. Points on the sphere are not inside.
        """
        center, r2 = self.circumsphere(face_points)
        q = np.asarray(extra_point, dtype=float).reshape(-1)
        if q.shape[0] != center.shape[0]:
            raise InvalidArgumentError(
                f"Dim mismatch: extra_point d={q.shape[0]} vs face_points d={center.shape[0]}."
            )
        diff = q - center
        d2 = float(diff @ diff)
        slack = self.config.tolerance * max(1.0, r2)
        return d2 < r2 - slack
