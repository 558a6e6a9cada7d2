# simplicial_filtrations/__init__.py
from __future__ import annotations

"""
simplicial_filtrations: filtered simplicial complexes from point clouds.

Recommended usage:
    import simplicial_filtrations as sf

Public API:
    - Curated user-facing symbols are re-exported from :mod:`simplicial_filtrations.api`.
    - Subpackages are available as namespaces (``sf.complex``, ``sf.geometry``,
      ``sf.builders``, ``sf.reduction``).
"""

import logging

# ------------------------------------------------------------
# Version
# ------------------------------------------------------------
try:
    from ._version import __version__  # type: ignore
except Exception:  # pragma: no cover
    __version__ = "0+unknown"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# ------------------------------------------------------------
# Curated public API re-export
# ------------------------------------------------------------
from . import builders, complex, geometry, reduction
from .api import *  # noqa: F401,F403
from .api import __all__ as _api_all

__all__ = ["__version__", *_api_all, "builders", "complex", "geometry", "reduction"]
