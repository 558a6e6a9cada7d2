from __future__ import annotations

from .kernel import EuclideanKernel, GeometricKernel, KernelConfig
from .triangulation import Triangulation, VertexArena, delaunay_triangulation

__all__ = [
    "EuclideanKernel",
    "GeometricKernel",
    "KernelConfig",
    "Triangulation",
    "VertexArena",
    "delaunay_triangulation",
]
