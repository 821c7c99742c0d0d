"""Ordering and grouping of condition variables for display.

Related condition variables are shown side by side: columns are seriated by a
pairwise association measure and adjacent columns are paired into selector
panels.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import leaves_list, linkage, optimal_leaf_ordering
from scipy.spatial.distance import squareform

from .data.table import MAX_CONDITION_GROUPS, PreparedTable
from .errors import InvalidArgument
from .utils.logging import get_logger

log = get_logger("condtour.arrange")


# ---------------------------------------------------------------------------
# association measures
# ---------------------------------------------------------------------------


def _pearson(x: np.ndarray, y: np.ndarray) -> float:
    sx, sy = x.std(), y.std()
    if sx == 0 or sy == 0:
        return 0.0
    return float(abs(np.mean((x - x.mean()) * (y - y.mean())) / (sx * sy)))


def _cramers_v(a: pd.Series, b: pd.Series) -> float:
    table = pd.crosstab(a, b).to_numpy(dtype=float)
    n = table.sum()
    r, c = table.shape
    if n == 0 or min(r, c) < 2:
        return 0.0
    expected = table.sum(axis=1, keepdims=True) * table.sum(axis=0, keepdims=True) / n
    chi2 = float(np.sum((table - expected) ** 2 / np.where(expected > 0, expected, 1.0)))
    return float(np.sqrt(chi2 / (n * (min(r, c) - 1))))


def _correlation_ratio(cat: pd.Series, x: np.ndarray) -> float:
    total = np.sum((x - x.mean()) ** 2)
    if total == 0:
        return 0.0
    codes = cat.cat.codes.to_numpy()
    between = 0.0
    for code in np.unique(codes):
        grp = x[codes == code]
        between += grp.size * (grp.mean() - x.mean()) ** 2
    return float(np.sqrt(between / total))


def association(table: PreparedTable, columns: Sequence[str]) -> np.ndarray:
    """Symmetric association matrix in ``[0, 1]`` with a unit diagonal.

    |Pearson r| for numeric pairs, Cramer's V for categorical pairs and the
    correlation ratio for mixed pairs.
    """
    cols = list(columns)
    n = len(cols)
    frame = table.frame
    out = np.eye(n, dtype=float)
    for i in range(n):
        for j in range(i + 1, n):
            a, b = frame[cols[i]], frame[cols[j]]
            ca, cb = table.is_categorical(cols[i]), table.is_categorical(cols[j])
            if ca and cb:
                v = _cramers_v(a, b)
            elif ca:
                v = _correlation_ratio(a, b.to_numpy(dtype=float))
            elif cb:
                v = _correlation_ratio(b, a.to_numpy(dtype=float))
            else:
                v = _pearson(a.to_numpy(dtype=float), b.to_numpy(dtype=float))
            out[i, j] = out[j, i] = min(max(v, 0.0), 1.0)
    return out


# ---------------------------------------------------------------------------
# seriation methods
# ---------------------------------------------------------------------------


def _seriate_hierarchical(assoc: np.ndarray) -> List[int]:
    n = assoc.shape[0]
    if n < 3:
        return list(range(n))
    d = 1.0 - assoc
    np.fill_diagonal(d, 0.0)
    y = squareform(d, checks=False)
    z = optimal_leaf_ordering(linkage(y, method="average"), y)
    return [int(i) for i in leaves_list(z)]


def _seriate_greedy(assoc: np.ndarray) -> List[int]:
    n = assoc.shape[0]
    if n < 3:
        return list(range(n))
    a = assoc.copy()
    np.fill_diagonal(a, -np.inf)
    i, j = np.unravel_index(int(np.argmax(a)), a.shape)
    chain = [int(min(i, j)), int(max(i, j))]
    left = set(range(n)) - set(chain)
    while left:
        best = None
        for cand in sorted(left):
            for end, at_front in ((chain[0], True), (chain[-1], False)):
                score = assoc[cand, end]
                if best is None or score > best[0]:
                    best = (score, cand, at_front)
        _, cand, at_front = best
        if at_front:
            chain.insert(0, cand)
        else:
            chain.append(cand)
        left.discard(cand)
    return chain


def _seriate_none(assoc: np.ndarray) -> List[int]:
    return list(range(assoc.shape[0]))


SERIATION: Dict[str, Callable[[np.ndarray], List[int]]] = {
    "default": _seriate_hierarchical,
    "greedy": _seriate_greedy,
    "none": _seriate_none,
}


def _pair_up(order: List[int]) -> List[List[int]]:
    groups = []
    for pos in range(0, len(order), 2):
        groups.append(order[pos:pos + 2])
    return groups


def arrange_conditions(
    table: PreparedTable,
    method: str = "default",
    *,
    columns: Sequence[str] | None = None,
    max_groups: int = MAX_CONDITION_GROUPS,
) -> List[List[str]]:
    """Return condition columns as an ordered list of display groups.

    Columns are seriated by association with the named ``method`` and
    consecutive columns are paired.  When more than ``max_groups`` groups
    result, the groups whose members are least associated with any other
    candidate are dropped; the survivors keep their seriated order.
    """
    if method not in SERIATION:
        raise InvalidArgument(
            f"unknown ordering method {method!r}; expected one of {sorted(SERIATION)}"
        )
    if max_groups < 1:
        raise InvalidArgument(f"max_groups must be >= 1, got {max_groups}")
    cols = list(table.columns if columns is None else columns)
    if not cols:
        raise InvalidArgument("no condition variables to arrange")
    if len(cols) == 1:
        return [cols]

    assoc = association(table, cols)
    order = SERIATION[method](assoc)
    groups = _pair_up(order)

    if len(groups) > max_groups:
        off = assoc.copy()
        np.fill_diagonal(off, 0.0)
        strength = off.max(axis=1)
        score = [max(strength[i] for i in g) for g in groups]
        # ties keep the earlier group
        ranked = sorted(range(len(groups)), key=lambda g: (-score[g], g))
        keep = sorted(ranked[:max_groups])
        dropped = [cols[i] for g in sorted(ranked[max_groups:]) for i in groups[g]]
        log.warning(
            "[arrange] showing %d of %d condition groups; dropped %s",
            max_groups,
            len(groups),
            dropped,
        )
        groups = [groups[g] for g in keep]

    return [[cols[i] for i in g] for g in groups]


__all__ = ["SERIATION", "arrange_conditions", "association"]
