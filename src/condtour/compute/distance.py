"""Mixed-type dissimilarity between a conditioning point and table rows."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..errors import InvalidArgument

DistanceKind = Literal["euclidean", "maxnorm"]
DISTANCE_KINDS = ("euclidean", "maxnorm")


def check_kind(kind: str) -> str:
    if kind not in DISTANCE_KINDS:
        raise InvalidArgument(f"distance must be one of {DISTANCE_KINDS}, got {kind!r}")
    return kind


def _categorical_like(col: pd.Series) -> bool:
    dt = col.dtype
    return (
        isinstance(dt, pd.CategoricalDtype)
        or pd.api.types.is_bool_dtype(dt)
        or not pd.api.types.is_numeric_dtype(dt)
    )


def _point_value(point: Any, name: str) -> Any:
    if isinstance(point, pd.DataFrame):
        if len(point) != 1:
            raise InvalidArgument("conditioning point must have exactly one row")
        return point[name].iloc[0]
    return point[name]


def distance(
    point: Mapping[str, Any] | pd.Series | pd.DataFrame,
    rows: pd.DataFrame,
    columns: Sequence[str],
    *,
    kind: str = "euclidean",
    scale: Optional[Mapping[str, float]] = None,
    lambda_: Optional[float] = None,
) -> np.ndarray:
    """Return the distance from ``point`` to every row of ``rows``.

    Numeric columns contribute ``|point - row| / scale``; categorical columns
    contribute ``lambda_`` on a mismatch.  Under ``euclidean`` the
    contributions are squared, summed and square-rooted; under ``maxnorm`` the
    largest one wins.  ``lambda_=None`` turns any categorical mismatch into an
    infinite distance.  Columns with a zero (or missing) scale contribute
    nothing.
    """
    check_kind(kind)
    if lambda_ is not None and not lambda_ >= 0:
        raise InvalidArgument(f"lambda must be non-negative, got {lambda_!r}")
    scale = scale or {}
    n = len(rows)
    acc = np.zeros(n, dtype=float)
    if n == 0:
        return acc

    for name in columns:
        col = rows[name]
        target = _point_value(point, name)
        if _categorical_like(col):
            mismatch = (col.astype(object) != target).to_numpy(dtype=bool)
            if lambda_ is None:
                contrib = np.where(mismatch, np.inf, 0.0)
            else:
                contrib = np.where(mismatch, float(lambda_), 0.0)
        else:
            s = float(scale.get(name, 0.0))
            if not s > 0:
                continue
            contrib = np.abs(col.to_numpy(dtype=float) - float(target)) / s

        if kind == "euclidean":
            acc += contrib * contrib
        else:
            np.maximum(acc, contrib, out=acc)

    if kind == "euclidean":
        return np.sqrt(acc)
    return acc


__all__ = ["DistanceKind", "DISTANCE_KINDS", "check_kind", "distance"]
