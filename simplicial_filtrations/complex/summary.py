# simplicial_filtrations/complex/summary.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

__all__ = ["ComplexSummary", "summarize_simplex_tree"]


# ----------------------------
# Summary data container
# ----------------------------

@dataclass
class ComplexSummary:
    """
    Counts and filtration range of a filtered complex.

    Attributes
    ----------
    counts :
        Number of simplices per dimension, ``counts[d]`` for d = 0..dimension.
    n_undefined :
        Simplices whose filtration value is still undefined.
    filtration_min, filtration_max :
        Range of the defined values (None for a complex without any).
    filtration_quantiles :
        Optional (25%, 50%, 75%) quantiles of the defined values.
    monotone :
        Whether every face value is <= each coface value.
    warnings :
        Human-readable warnings collected while summarizing.
    """
    counts: Tuple[int, ...]
    n_undefined: int = 0
    filtration_min: Optional[float] = None
    filtration_max: Optional[float] = None
    filtration_quantiles: Optional[Tuple[float, float, float]] = None
    monotone: bool = True
    warnings: Tuple[str, ...] = ()

    @property
    def dimension(self) -> int:
        return len(self.counts) - 1

    @property
    def n_simplices(self) -> int:
        return int(sum(self.counts))

    # ----------------------------
    # formatting
    # ----------------------------

    def to_text(self) -> str:
        lines: List[str] = []
        lines.append("Filtered Complex Summary")
        lines.append(f"  dimension = {self.dimension}, n_simplices = {self.n_simplices}")

        lines.append("")
        lines.append("  simplex counts:")
        for d, c in enumerate(self.counts):
            lines.append(f"    #( {d}-simplices ) = {c}")

        if self.filtration_min is not None:
            lines.append("")
            lines.append(f"  filtration range = [{self.filtration_min:g}, {self.filtration_max:g}]")
            if self.filtration_quantiles is not None:
                q1, q2, q3 = self.filtration_quantiles
                lines.append(f"  quartiles = {q1:g} / {q2:g} / {q3:g}")

        for w in self.warnings:
            lines.append("")
            lines.append(f"  WARNING: {w}")

        return "\n".join(lines)

    def to_markdown(self) -> str:
        md: List[str] = []
        md.append("### Filtered Complex Summary")
        md.append(f"- $\\dim = {self.dimension}$, $n_\\text{{simplices}} = {self.n_simplices}$")
        md.append("")
        md.append("**Simplex Counts:**")
        md.append("")
        md.append("\n".join([f"- $\\#(\\text{{{d}-simplices}}) = {c}$" for d, c in enumerate(self.counts)]))

        if self.filtration_min is not None:
            md.append("")
            md.append(f"**Filtration range:** $[{self.filtration_min:g}, {self.filtration_max:g}]$")

        if self.warnings:
            md.append("")
            md.append("**Warnings:**")
            md.append("")
            for w in self.warnings:
                md.append(f"- {w}")

        return "\n".join(md)


def summarize_simplex_tree(st, *, quantiles: bool = True) -> ComplexSummary:
    dim = st.dimension()
    counts = tuple(len(st.skeleton(d)) for d in range(dim + 1))

    values = np.array([st.filtration(s) for s in st], dtype=float)
    defined = values[~np.isnan(values)] if values.size else values
    n_undef = int(values.size - defined.size)

    warnings: List[str] = []
    if n_undef:
        warnings.append(f"{n_undef} simplices have an undefined filtration value.")

    monotone = st.is_monotone()
    if not monotone:
        warnings.append("Filtration is not monotone; call enforce_monotonicity() before ordering.")

    fmin = fmax = None
    qs = None
    if defined.size:
        fmin = float(defined.min())
        fmax = float(defined.max())
        finite = defined[np.isfinite(defined)]
        if quantiles and finite.size:
            q = np.quantile(finite, [0.25, 0.5, 0.75])
            qs = (float(q[0]), float(q[1]), float(q[2]))

    return ComplexSummary(
        counts=counts,
        n_undefined=n_undef,
        filtration_min=fmin,
        filtration_max=fmax,
        filtration_quantiles=qs,
        monotone=monotone,
        warnings=tuple(warnings),
    )
