"""Clustering capability used to pick representative tour stops.

Purely numeric tables are standardised and clustered with k-means; tables
with categorical columns use medoids of a Gower dissimilarity so that no
synthetic category has to be invented.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import cut_tree, linkage
from scipy.spatial.distance import squareform
from sklearn.cluster import KMeans

from ..data.table import PreparedTable
from ..errors import InvalidArgument
from ..utils.logging import get_logger

log = get_logger("condtour.path")


@dataclass(frozen=True)
class Clustering:
    """Representatives of a ``k``-way clustering.

    ``centers`` holds one row per cluster in data units; ``dissimilarity`` is
    the ``(k, k)`` matrix later handed to the sequencing step.
    """

    centers: pd.DataFrame
    labels: np.ndarray
    dissimilarity: np.ndarray
    method: str
    medoid_rows: Optional[np.ndarray] = None


def check_k(k: int, n_rows: int) -> int:
    if isinstance(k, bool):
        raise InvalidArgument(f"number of centroids must be an integer, got {k!r}")
    try:
        as_int = int(k)
    except (TypeError, ValueError, OverflowError):
        raise InvalidArgument(f"number of centroids must be an integer, got {k!r}") from None
    if as_int != k:
        raise InvalidArgument(f"number of centroids must be an integer, got {k!r}")
    k = as_int
    if k < 2 or k > n_rows:
        raise InvalidArgument(
            f"number of centroids must be in [2, {n_rows}], got {k}"
        )
    return k


def standardise(frame: pd.DataFrame) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(z, mean, sd)`` with zero-variance columns left unscaled."""
    x = frame.to_numpy(dtype=float)
    mean = x.mean(axis=0)
    sd = x.std(axis=0, ddof=1) if len(x) > 1 else np.zeros(x.shape[1])
    sd = np.where(np.isfinite(sd) & (sd > 0), sd, 1.0)
    return (x - mean) / sd, mean, sd


def pairwise_euclidean(z: np.ndarray) -> np.ndarray:
    diff = z[:, None, :] - z[None, :, :]
    return np.sqrt((diff * diff).sum(axis=-1))


def gower_dissimilarity(a: pd.DataFrame, b: pd.DataFrame, ranges: dict) -> np.ndarray:
    """Gower dissimilarity between every row of ``a`` and every row of ``b``.

    Numeric columns contribute ``|x - y| / range``; categorical columns
    contribute a mismatch indicator.  Contributions are averaged over columns.
    """
    out = np.zeros((len(a), len(b)), dtype=float)
    cols = list(a.columns)
    if not cols:
        return out
    for name in cols:
        ca, cb = a[name], b[name]
        if isinstance(ca.dtype, pd.CategoricalDtype):
            va = ca.astype(object).to_numpy()
            vb = cb.astype(object).to_numpy()
            out += (va[:, None] != vb[None, :]).astype(float)
        else:
            r = ranges.get(name, 0.0)
            if r > 0:
                va = ca.to_numpy(dtype=float)
                vb = cb.to_numpy(dtype=float)
                out += np.abs(va[:, None] - vb[None, :]) / r
    return out / len(cols)


def numeric_ranges(frame: pd.DataFrame) -> dict:
    out = {}
    for name in frame.columns:
        col = frame[name]
        if not isinstance(col.dtype, pd.CategoricalDtype):
            vals = col.to_numpy(dtype=float)
            out[name] = float(vals.max() - vals.min()) if vals.size else 0.0
    return out


def kmeans_centers(table: PreparedTable, k: int, *, seed: int = 0) -> Clustering:
    """Cluster a numeric table with scikit-learn's ``KMeans``."""
    z, mean, sd = standardise(table.frame)
    km = KMeans(n_clusters=k, n_init=10, random_state=seed)
    labels = km.fit_predict(z)
    centers_z = np.asarray(km.cluster_centers_, dtype=float)
    centers = pd.DataFrame(centers_z * sd + mean, columns=table.columns)
    return Clustering(
        centers=centers,
        labels=np.asarray(labels, dtype=int),
        dissimilarity=pairwise_euclidean(centers_z),
        method="kmeans",
    )


def medoid_centers(table: PreparedTable, k: int) -> Clustering:
    """Pick ``k`` medoids from an average-linkage tree over Gower dissimilarity."""
    frame = table.frame
    ranges = numeric_ranges(frame)
    d = gower_dissimilarity(frame, frame, ranges)
    np.fill_diagonal(d, 0.0)
    d = 0.5 * (d + d.T)
    z = linkage(squareform(d, checks=False), method="average")
    labels = cut_tree(z, n_clusters=k).ravel().astype(int)

    medoids: List[int] = []
    for c in range(k):
        members = np.flatnonzero(labels == c)
        within = d[np.ix_(members, members)].sum(axis=1)
        medoids.append(int(members[int(np.argmin(within))]))
    rows = np.asarray(medoids, dtype=int)
    centers = frame.iloc[rows].reset_index(drop=True)
    return Clustering(
        centers=centers,
        labels=labels,
        dissimilarity=d[np.ix_(rows, rows)],
        method="medoids",
        medoid_rows=rows,
    )


def cluster(table: PreparedTable, k: int, *, seed: int = 0) -> Clustering:
    """Return ``k`` representative rows of ``table``.

    Raises :class:`InvalidArgument` when ``k`` is outside ``[2, n_rows]``.
    """
    k = check_k(k, table.n_rows)
    if table.categorical_columns():
        result = medoid_centers(table, k)
    else:
        result = kmeans_centers(table, k, seed=seed)
    log.info(
        "[path] clustered %d rows x %d columns into %d %s centres",
        table.n_rows,
        len(table.columns),
        k,
        result.method,
    )
    return result


__all__ = [
    "Clustering",
    "check_k",
    "cluster",
    "gower_dissimilarity",
    "kmeans_centers",
    "medoid_centers",
    "numeric_ranges",
    "pairwise_euclidean",
    "standardise",
]
