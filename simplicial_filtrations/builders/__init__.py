from __future__ import annotations

from .alpha import AlphaComplex, AlphaConfig
from .landmarks import choose_n_farthest_points, nearest_landmark_table, pick_n_random_points
from .witness import EuclideanWitnessComplex, WitnessComplex, WitnessConfig

__all__ = [
    "AlphaComplex",
    "AlphaConfig",
    "WitnessComplex",
    "WitnessConfig",
    "EuclideanWitnessComplex",
    "nearest_landmark_table",
    "choose_n_farthest_points",
    "pick_n_random_points",
]
