"""Similarity weights of observations relative to a conditioning point.

A weight of 1 means the observation lies on the current section; 0 means it is
at least ``bandwidth`` away and is not drawn.  Everything here is a pure
function of its arguments so the tour can recompute rows freely.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..data.table import PreparedTable, column_scales
from ..errors import InvalidArgument
from .distance import check_kind, distance
from .kernels import get_kernel


def check_bandwidth(bandwidth: float) -> float:
    try:
        b = float(bandwidth)
    except (TypeError, ValueError):
        raise InvalidArgument(f"bandwidth must be a number, got {bandwidth!r}") from None
    if not (math.isfinite(b) and b > 0):
        raise InvalidArgument(f"bandwidth must be positive and finite, got {bandwidth!r}")
    return b


def weights_from_distance(d: np.ndarray, bandwidth: float, kernel: str = "tricube") -> np.ndarray:
    """Map distances to weights with the named compactly supported kernel."""
    b = check_bandwidth(bandwidth)
    fn = get_kernel(kernel)
    d = np.asarray(d, dtype=float)
    if d.size == 0:
        return np.zeros(0, dtype=float)
    w = fn(d / b)
    w[d >= b] = 0.0
    return w


def similarity_weights(
    point: Mapping[str, Any] | pd.Series | pd.DataFrame,
    rows: pd.DataFrame,
    bandwidth: float,
    *,
    distance_kind: str = "euclidean",
    lambda_: Optional[float] = None,
    columns: Optional[Sequence[str]] = None,
    scale: Optional[Mapping[str, float]] = None,
    kernel: str = "tricube",
) -> np.ndarray:
    """Return one weight in ``[0, 1]`` per row of ``rows``.

    ``columns`` defaults to every column of ``rows``; ``scale`` defaults to the
    standard deviations of ``rows`` itself.  An empty ``rows`` gives an empty
    vector.
    """
    b = check_bandwidth(bandwidth)
    check_kind(distance_kind)
    cols = list(rows.columns) if columns is None else list(columns)
    if len(rows) == 0:
        return np.zeros(0, dtype=float)
    if scale is None:
        if rows[cols].isna().to_numpy().any():
            raise InvalidArgument("rows contain missing values")
        scale = column_scales(PreparedTable.from_frame(rows[cols]), cols)
    d = distance(point, rows, cols, kind=distance_kind, scale=scale, lambda_=lambda_)
    return weights_from_distance(d, b, kernel)


class SimilarityWeighter:
    """Weights bound to one table, column set, scale, lambda and kernel.

    This is the unit re-evaluated on every tour step and bandwidth change.  It
    keeps no state between calls.
    """

    def __init__(
        self,
        table: PreparedTable,
        columns: Sequence[str],
        *,
        lambda_: Optional[float] = None,
        kernel: str = "tricube",
        scale: Optional[Mapping[str, float]] = None,
    ) -> None:
        missing = [c for c in columns if c not in table.frame.columns]
        if missing:
            raise InvalidArgument(f"unknown weighting columns: {missing}")
        get_kernel(kernel)
        if lambda_ is not None and not lambda_ >= 0:
            raise InvalidArgument(f"lambda must be non-negative, got {lambda_!r}")
        self.table = table
        self.columns = list(columns)
        self.lambda_ = lambda_
        self.kernel = kernel
        self.scale = column_scales(table, self.columns, scale)
        self._rows = table.frame[self.columns]

    @property
    def n_rows(self) -> int:
        return len(self._rows)

    def distances(self, point: Any, distance_kind: str = "euclidean") -> np.ndarray:
        return distance(
            point,
            self._rows,
            self.columns,
            kind=distance_kind,
            scale=self.scale,
            lambda_=self.lambda_,
        )

    def __call__(self, point: Any, bandwidth: float, distance_kind: str = "euclidean") -> np.ndarray:
        b = check_bandwidth(bandwidth)
        check_kind(distance_kind)
        if self.n_rows == 0:
            return np.zeros(0, dtype=float)
        return weights_from_distance(self.distances(point, distance_kind), b, self.kernel)

    def matrix(self, path: pd.DataFrame, bandwidth: float, distance_kind: str = "euclidean") -> np.ndarray:
        """Return the ``(len(path), n_rows)`` weight matrix for a whole path."""
        b = check_bandwidth(bandwidth)
        check_kind(distance_kind)
        out = np.zeros((len(path), self.n_rows), dtype=float)
        for i in range(len(path)):
            out[i] = self(path.iloc[i], b, distance_kind)
        return out


__all__ = [
    "check_bandwidth",
    "weights_from_distance",
    "similarity_weights",
    "SimilarityWeighter",
]
