"""Open-path sequencing heuristics.

Given a symmetric dissimilarity matrix, return a visiting order of its nodes
that keeps consecutive stops close.  Exact optimality is not a goal; every
method is deterministic for a fixed input.
"""

from __future__ import annotations

from typing import Callable, Dict, List

import numpy as np

from ..errors import InvalidArgument

Sequencer = Callable[[np.ndarray], List[int]]


def path_length(d: np.ndarray, order: List[int]) -> float:
    """Total length of the open path visiting ``order``."""
    if len(order) < 2:
        return 0.0
    idx = np.asarray(order, dtype=int)
    return float(d[idx[:-1], idx[1:]].sum())


def _check_matrix(d: np.ndarray) -> np.ndarray:
    d = np.asarray(d, dtype=float)
    if d.ndim != 2 or d.shape[0] != d.shape[1]:
        raise InvalidArgument(f"dissimilarity must be square, got shape {d.shape}")
    if not np.all(np.isfinite(d)):
        raise InvalidArgument("dissimilarity contains non-finite values")
    return d


def _nn_from(d: np.ndarray, start: int) -> List[int]:
    n = d.shape[0]
    visited = np.zeros(n, dtype=bool)
    order = [start]
    visited[start] = True
    cur = start
    for _ in range(n - 1):
        row = np.where(visited, np.inf, d[cur])
        # argmin returns the lowest index among ties
        nxt = int(np.argmin(row))
        order.append(nxt)
        visited[nxt] = True
        cur = nxt
    return order


def nearest_neighbor(d: np.ndarray) -> List[int]:
    d = _check_matrix(d)
    if d.shape[0] == 0:
        return []
    return _nn_from(d, 0)


def repetitive_nn(d: np.ndarray) -> List[int]:
    """Nearest-neighbour path from every start; the shortest one wins."""
    d = _check_matrix(d)
    n = d.shape[0]
    if n == 0:
        return []
    best, best_len = None, np.inf
    for s in range(n):
        order = _nn_from(d, s)
        length = path_length(d, order)
        if length < best_len - 1e-12:
            best, best_len = order, length
    return list(best)


def two_opt(d: np.ndarray, max_rounds: int = 100) -> List[int]:
    """Repetitive nearest neighbour refined by open-path 2-opt moves."""
    d = _check_matrix(d)
    order = repetitive_nn(d)
    n = len(order)
    if n < 4:
        return order
    for _ in range(max_rounds):
        improved = False
        for i in range(0, n - 2):
            for j in range(i + 2, n):
                a, b = order[i], order[i + 1]
                c = order[j]
                before = d[a, b] + (d[c, order[j + 1]] if j + 1 < n else 0.0)
                after = d[a, c] + (d[b, order[j + 1]] if j + 1 < n else 0.0)
                if after < before - 1e-12:
                    order[i + 1:j + 1] = order[i + 1:j + 1][::-1]
                    improved = True
        if not improved:
            break
    return order


def identity(d: np.ndarray) -> List[int]:
    d = _check_matrix(d)
    return list(range(d.shape[0]))


SEQUENCERS: Dict[str, Sequencer] = {
    "repetitive_nn": repetitive_nn,
    "nearest_neighbor": nearest_neighbor,
    "two_opt": two_opt,
    "identity": identity,
}


def sequence(d: np.ndarray, method: str = "repetitive_nn") -> List[int]:
    """Return a permutation of ``range(len(d))`` using the named heuristic."""
    try:
        fn = SEQUENCERS[method]
    except KeyError:
        raise InvalidArgument(
            f"unknown sequencing method {method!r}; expected one of {sorted(SEQUENCERS)}"
        ) from None
    return fn(d)


__all__ = [
    "SEQUENCERS",
    "Sequencer",
    "identity",
    "nearest_neighbor",
    "path_length",
    "repetitive_nn",
    "sequence",
    "two_opt",
]
