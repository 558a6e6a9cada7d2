# simplicial_filtrations/builders/landmarks.py
from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

from ..errors import InvalidArgumentError

__all__ = ["nearest_landmark_table", "choose_n_farthest_points", "pick_n_random_points"]


def _as_cloud(X: np.ndarray, *, name: str) -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.ndim != 2:
        raise InvalidArgumentError(f"{name} must be 1D or 2D. Got shape {X.shape}.")
    if X.shape[0] == 0:
        raise InvalidArgumentError(f"{name} must not be empty.")
    return X


def nearest_landmark_table(
    landmarks: np.ndarray,
    witnesses: np.ndarray,
    *,
    k: Optional[int] = None,
) -> List[List[Tuple[int, float]]]:
    """
    For each witness, its ``k`` nearest landmarks with squared distances.

    Parameters
    ----------
    landmarks : (L, d) array
    witnesses : (W, d) array
    k : optional int
        Number of landmarks per witness (clipped to L). None means all.

    Returns
    -------
    list of list of (landmark_id, squared_distance)
        One row per witness, ascending by distance; equal distances are
        ordered by landmark id.
    """
    L = _as_cloud(landmarks, name="landmarks")
    W = _as_cloud(witnesses, name="witnesses")
    if L.shape[1] != W.shape[1]:
        raise InvalidArgumentError(f"Dim mismatch: landmarks d={L.shape[1]} vs witnesses d={W.shape[1]}.")

    n_l = L.shape[0]
    kk = n_l if k is None else int(k)
    if kk < 1:
        raise InvalidArgumentError(f"k must be >= 1. Got {k}.")
    kk = min(kk, n_l)

    tree = cKDTree(L)
    dists, idx = tree.query(W, k=kk)
    if kk == 1:
        dists = dists.reshape(-1, 1)
        idx = idx.reshape(-1, 1)

    table: List[List[Tuple[int, float]]] = []
    for d_row, i_row in zip(dists, idx):
        d2 = d_row**2
        order = np.lexsort((i_row, d2))
        table.append([(int(i_row[j]), float(d2[j])) for j in order])
    return table


def choose_n_farthest_points(points: np.ndarray, n: int, *, start: int = 0) -> np.ndarray:
    """
    Greedy farthest-point sampling.

    Starts at ``start`` and repeatedly adds the point farthest from the ones
    already chosen. Returns at most ``n`` distinct indices (fewer when the
    cloud has fewer distinct points).
    """
    P = _as_cloud(points, name="points")
    n = int(n)
    if n < 0:
        raise InvalidArgumentError(f"n must be >= 0. Got {n}.")
    if not (0 <= int(start) < P.shape[0]):
        raise InvalidArgumentError(f"start must be in [0, {P.shape[0]}). Got {start}.")
    if n == 0:
        return np.zeros(0, dtype=int)

    chosen = [int(start)]
    min_d2 = np.full(P.shape[0], np.inf)
    while len(chosen) < min(n, P.shape[0]):
        diff = P - P[chosen[-1]]
        min_d2 = np.minimum(min_d2, np.einsum("ij,ij->i", diff, diff))
        nxt = int(np.argmax(min_d2))
        if min_d2[nxt] <= 0.0:
            # only duplicates of chosen points remain
            break
        chosen.append(nxt)
    return np.asarray(chosen, dtype=int)


def pick_n_random_points(
    points: np.ndarray,
    n: int,
    *,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Sorted indices of ``min(n, len(points))`` points drawn without replacement."""
    P = _as_cloud(points, name="points")
    n = int(n)
    if n < 0:
        raise InvalidArgumentError(f"n must be >= 0. Got {n}.")
    rng = np.random.default_rng() if rng is None else rng
    idx = rng.choice(P.shape[0], size=min(n, P.shape[0]), replace=False)
    return np.sort(idx.astype(int))
