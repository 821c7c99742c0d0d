"""Section grids and model predictions along them.

The section view shows each model where it intersects the current section: the
section variables vary over a grid while every other predictor is fixed at the
conditioning point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .data.table import PreparedTable
from .errors import InvalidArgument
from .models import Predictor


def plot_type(table: PreparedTable, response: str, section: Sequence[str]) -> str:
    """Return the section plot code.

    The first letter describes the response and the following ones the section
    variables: ``c`` for continuous, ``f`` for factor (categorical).  Mixed
    two-variable sections list the factor first, e.g. ``cfc``.
    """
    letter = lambda name: "f" if table.is_categorical(name) else "c"  # noqa: E731
    head = letter(response)
    if len(section) == 1:
        return head + letter(section[0])
    kinds = sorted(letter(s) for s in section)
    if kinds == ["c", "f"]:
        return head + "fc"
    return head + "".join(kinds)


@dataclass(frozen=True)
class SectionGrid:
    """Values of the section variables at which models are evaluated."""

    frame: pd.DataFrame
    shape: tuple

    @classmethod
    def build(
        cls,
        table: PreparedTable,
        section: Sequence[str],
        *,
        resolution: Optional[int] = None,
        view3d: bool = False,
        probs: bool = False,
        limits: Optional[Dict[str, tuple]] = None,
    ) -> "SectionGrid":
        """Grid over the observed range (or ``limits``) of each section column.

        Numeric columns get ``resolution`` points: 50 by default, 20 for 3-D
        views and 15 for class-probability glyphs.  Categorical columns use
        their levels.
        """
        if not 1 <= len(section) <= 2:
            raise InvalidArgument(f"section must have 1 or 2 columns, got {len(section)}")
        if resolution is None:
            resolution = 20 if view3d else (15 if probs else 50)
        limits = limits or {}
        axes: List[pd.Series] = []
        for name in section:
            col = table.frame[name]
            if table.is_categorical(name):
                axes.append(pd.Series(pd.Categorical(col.cat.categories, dtype=col.dtype), name=name))
            else:
                lo, hi = limits.get(name, (float(col.min()), float(col.max())))
                axes.append(pd.Series(np.linspace(lo, hi, int(resolution)), name=name))

        if len(axes) == 1:
            frame = axes[0].to_frame()
            return cls(frame=frame.reset_index(drop=True), shape=(len(axes[0]),))

        a, b = axes
        # first column varies fastest
        ia = np.tile(np.arange(len(a)), len(b))
        ib = np.repeat(np.arange(len(b)), len(a))
        frame = pd.DataFrame({
            a.name: a.iloc[ia].reset_index(drop=True),
            b.name: b.iloc[ib].reset_index(drop=True),
        })
        return cls(frame=frame, shape=(len(a), len(b)))

    def __len__(self) -> int:
        return len(self.frame)


def make_newdata(
    grid: SectionGrid | pd.DataFrame,
    point: pd.Series,
    table: Optional[PreparedTable] = None,
) -> pd.DataFrame:
    """Combine the section grid with the conditioning point.

    Every column of ``point`` not present in the grid is repeated for each grid
    row.  With ``table`` given, categorical columns keep the table's dtype.
    """
    g = grid.frame if isinstance(grid, SectionGrid) else grid
    n = len(g)
    cols = {name: g[name].reset_index(drop=True) for name in g.columns}
    for name, value in point.items():
        if name in cols:
            continue
        if table is not None and name in table.frame.columns and table.is_categorical(name):
            cols[name] = pd.Series(
                pd.Categorical([value] * n, dtype=table.frame[name].dtype), name=name
            )
        else:
            cols[name] = pd.Series([value] * n, name=name)
    return pd.DataFrame(cols)


@dataclass
class SectionPrediction:
    """Output of one predictor over a section grid."""

    name: str
    fit: np.ndarray
    lower: Optional[np.ndarray] = None
    upper: Optional[np.ndarray] = None
    probabilities: Optional[pd.DataFrame] = None


def section_predictions(
    predictors: Sequence[Predictor],
    newdata: pd.DataFrame,
    *,
    conf: bool = False,
    probs: bool = False,
) -> List[SectionPrediction]:
    """Evaluate every predictor on ``newdata`` in one call each.

    Bounds and probabilities are requested only when asked for and supported.
    Errors raised by a predictor propagate to the caller.
    """
    out = []
    for p in predictors:
        if conf and p.supports_bounds:
            fit, lower, upper = p.predict_with_bounds(newdata)
            pred = SectionPrediction(p.name, fit, lower, upper)
        else:
            pred = SectionPrediction(p.name, p.predict(newdata))
        if probs and p.supports_probabilities:
            pred.probabilities = p.predict_probabilities(newdata)
        if len(pred.fit) != len(newdata):
            raise ValueError(
                f"{p.name} returned {len(pred.fit)} predictions for {len(newdata)} rows"
            )
        out.append(pred)
    return out


__all__ = [
    "SectionGrid",
    "SectionPrediction",
    "make_newdata",
    "plot_type",
    "section_predictions",
]
