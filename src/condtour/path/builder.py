"""Tour path construction: cluster, sequence, interpolate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..data.table import PreparedTable
from ..errors import InvalidArgument
from ..utils.logging import get_logger
from .cluster import cluster
from .sequence import path_length, sequence

log = get_logger("condtour.path")


@dataclass(frozen=True)
class TourPath:
    """Ordered centroids and the dense path interpolated between them.

    ``centroid_positions`` are the 1-based path positions occupied by the
    centroids, so ``path.iloc[p - 1]`` equals a centroid for each ``p``.
    """

    centroids: pd.DataFrame
    path: pd.DataFrame
    n_interp: int
    centroid_positions: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.path)

    @property
    def columns(self) -> List[str]:
        return list(self.path.columns)

    @classmethod
    def from_frame(cls, path: pd.DataFrame) -> "TourPath":
        """Wrap a caller-supplied path; every row counts as a centroid."""
        if len(path) == 0:
            raise InvalidArgument("path must contain at least one row")
        frame = path.reset_index(drop=True)
        return cls(
            centroids=frame.copy(),
            path=frame,
            n_interp=0,
            centroid_positions=tuple(range(1, len(frame) + 1)),
        )


def interpolate(centroids: pd.DataFrame, n_interp: int) -> pd.DataFrame:
    """Insert ``n_interp`` evenly spaced points between consecutive rows.

    Numeric columns blend linearly; categorical columns keep the start value
    for ``t < 0.5`` and switch to the end value from the midpoint on.  The
    result has ``(k - 1) * (n_interp + 1) + 1`` rows for ``k`` centroids.
    """
    if isinstance(n_interp, bool) or int(n_interp) != n_interp or n_interp < 0:
        raise InvalidArgument(f"n_interp must be a non-negative integer, got {n_interp!r}")
    n_interp = int(n_interp)
    k = len(centroids)
    if k == 0:
        return centroids.iloc[0:0].copy()
    t = np.arange(n_interp + 1, dtype=float) / (n_interp + 1)
    start = np.repeat(np.arange(k - 1), n_interp + 1)
    frac = np.tile(t, k - 1)
    # closing point is the last centroid itself
    start = np.append(start, k - 1)
    frac = np.append(frac, 0.0)
    end = np.minimum(start + 1, k - 1)

    cols = {}
    for name in centroids.columns:
        col = centroids[name]
        if isinstance(col.dtype, pd.CategoricalDtype):
            codes = col.cat.codes.to_numpy()
            picked = np.where(frac < 0.5, codes[start], codes[end])
            cols[name] = pd.Categorical.from_codes(picked, dtype=col.dtype)
        else:
            v = col.to_numpy(dtype=float)
            cols[name] = v[start] + frac * (v[end] - v[start])
    return pd.DataFrame(cols, columns=list(centroids.columns))


def build_path(
    table: PreparedTable,
    n_centroids: int,
    n_interp: int = 4,
    *,
    columns: Optional[Sequence[str]] = None,
    seed: int = 0,
    sequencing: str = "repetitive_nn",
) -> TourPath:
    """Select, order and densify representative conditioning points.

    Parameters
    ----------
    table:
        Prepared data; only ``columns`` (default: all) take part.
    n_centroids:
        Number of representative points, in ``[2, n_rows]``.
    n_interp:
        Points inserted between consecutive centroids.
    seed:
        Random state for k-means; a fixed seed makes the result reproducible.
    sequencing:
        Name of the ordering heuristic, see :mod:`condtour.path.sequence`.

    The function keeps no state, so an aborted call can simply be repeated.
    """
    if isinstance(n_interp, bool) or int(n_interp) != n_interp or n_interp < 0:
        raise InvalidArgument(f"n_interp must be a non-negative integer, got {n_interp!r}")
    sub = table if columns is None else table.subset(columns)
    clustering = cluster(sub, n_centroids, seed=seed)
    order = sequence(clustering.dissimilarity, sequencing)
    centroids = clustering.centers.iloc[order].reset_index(drop=True)
    dense = interpolate(centroids, int(n_interp))
    step = int(n_interp) + 1
    positions = tuple(1 + i * step for i in range(len(centroids)))
    log.info(
        "[path] %s order over %d centroids (length %.3f), path length %d",
        sequencing,
        len(centroids),
        path_length(clustering.dissimilarity, order),
        len(dense),
    )
    return TourPath(
        centroids=centroids,
        path=dense,
        n_interp=int(n_interp),
        centroid_positions=positions,
    )


__all__ = ["TourPath", "build_path", "interpolate"]
