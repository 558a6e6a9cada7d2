# simplicial_filtrations/errors.py
from __future__ import annotations

"""
Exception types raised by simplicial_filtrations.

Every failure is raised synchronously to the caller; nothing is retried.
Each class also derives from the closest builtin so that generic handlers
(``except ValueError``, ``except KeyError``) keep working.
"""

__all__ = [
    "SimplicialError",
    "InvalidArgumentError",
    "PreconditionViolation",
    "SimplexNotFoundError",
    "VertexNotFoundError",
    "UnsupportedFamilyError",
]


class SimplicialError(Exception):
    """Base class for all library errors."""


class InvalidArgumentError(SimplicialError, ValueError):
    """Bad input: empty vertex/point/witness sets, negative parameters, malformed arrays."""


class PreconditionViolation(SimplicialError, RuntimeError):
    """
    The target structure is not in a state the call can work with
    (degenerate triangulation, non-empty target complex, undefined filtration
    values at ordering time, ...). The structure is left as it was.
    """


class SimplexNotFoundError(SimplicialError, KeyError):
    """Lookup of a simplex that is not in the complex."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class VertexNotFoundError(SimplexNotFoundError):
    """Lookup of a vertex / point handle that does not exist."""


class UnsupportedFamilyError(SimplicialError, NotImplementedError):
    """Root-system family that has no construction."""
