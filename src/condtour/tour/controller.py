"""Tour state machine.

:class:`TourController` owns the cursor over a :class:`~condtour.path.TourPath`,
the precomputed weight matrix and the current bandwidth.  Views never mutate
any of it: they subscribe, receive a :class:`TourEvent` after each completed
transition and read back the slice of state they need.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..compute.distance import check_kind
from ..compute.weights import SimilarityWeighter, check_bandwidth
from ..data.table import PreparedTable
from ..errors import InvalidArgument, TourEndedError
from ..path.builder import TourPath
from ..utils.logging import get_logger
from .state import Camera, TourEvent, TourSnapshot, TourState

log = get_logger("condtour.tour")

Observer = Callable[["TourController", TourEvent], None]


def _readonly(a: np.ndarray) -> np.ndarray:
    v = a.view()
    v.setflags(write=False)
    return v


class TourController:
    """Cursor, bandwidth and weights of one conditional tour session.

    Parameters
    ----------
    table:
        Prepared observations.
    path:
        Tour path; its columns are the variables the weights are computed on
        unless ``columns`` narrows them.
    bandwidth:
        Initial bandwidth (threshold distance), positive.
    distance:
        ``"euclidean"`` or ``"maxnorm"``.
    lambda_:
        Penalty per categorical mismatch; ``None`` hides mismatching rows.
    kernel, scale:
        Passed to :class:`~condtour.compute.weights.SimilarityWeighter`.
    base_point:
        Values for non-path variables of the conditioning point; defaults to
        the first observation.
    precompute:
        Compute the whole weight matrix up front at the initial bandwidth.
    reset_bandwidth_on_move:
        Return to the initial bandwidth whenever the cursor moves.
    """

    def __init__(
        self,
        table: PreparedTable,
        path: TourPath,
        *,
        columns: Optional[Sequence[str]] = None,
        bandwidth: float = 1.0,
        distance: str = "euclidean",
        lambda_: Optional[float] = None,
        kernel: str = "tricube",
        scale: Optional[Mapping[str, float]] = None,
        base_point: Optional[pd.Series] = None,
        precompute: bool = True,
        reset_bandwidth_on_move: bool = False,
    ) -> None:
        if len(path) == 0:
            raise InvalidArgument("tour path is empty")
        cols = list(path.columns if columns is None else columns)
        not_in_path = [c for c in cols if c not in path.columns]
        if not_in_path:
            raise InvalidArgument(f"weighting columns missing from path: {not_in_path}")

        self._table = table
        self._path = path
        self._weighter = SimilarityWeighter(table, cols, lambda_=lambda_, kernel=kernel, scale=scale)
        self._initial_bandwidth = check_bandwidth(bandwidth)
        self._reset_on_move = bool(reset_bandwidth_on_move)
        base = table.first_row() if base_point is None else base_point.copy()
        self._base = base.astype(object)
        self._state = TourState(1, self._initial_bandwidth, check_kind(distance))
        self._camera = Camera()
        self._observers: List[Observer] = []
        self._ended = False

        self._matrix: Optional[np.ndarray] = None
        self._matrix_bandwidth: Optional[float] = None
        # (visible counts, max weights) at the initial bandwidth, lazy mode only
        self._diagnostics: Optional[Tuple[np.ndarray, np.ndarray]] = None
        if precompute:
            self._build_matrix(self._initial_bandwidth)

        self._point = self._point_at(1)
        self._weights = self._weights_for(1, self._initial_bandwidth, self._point)
        log.info(
            "[tour] session start: %d path positions, %d observations, bandwidth=%g, %s",
            len(path),
            table.n_rows,
            self._initial_bandwidth,
            "precomputed" if precompute else "lazy",
        )

    # ------------------------------------------------------------------
    # read-only accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> TourState:
        return self._state

    @property
    def camera(self) -> Camera:
        return self._camera

    @property
    def path(self) -> TourPath:
        return self._path

    @property
    def table(self) -> PreparedTable:
        return self._table

    @property
    def columns(self) -> List[str]:
        return list(self._weighter.columns)

    @property
    def path_length(self) -> int:
        return len(self._path)

    @property
    def initial_bandwidth(self) -> float:
        return self._initial_bandwidth

    @property
    def matrix_bandwidth(self) -> Optional[float]:
        return self._matrix_bandwidth

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def conditioning_point(self) -> pd.Series:
        return self._point.copy()

    @property
    def weights(self) -> np.ndarray:
        """Weights of the current path position under the current bandwidth."""
        return _readonly(self._weights)

    @property
    def weight_matrix(self) -> Optional[np.ndarray]:
        return None if self._matrix is None else _readonly(self._matrix)

    def visible_counts(self) -> np.ndarray:
        """Number of observations with positive weight at each path position."""
        return self._diagnostic_summary()[0].copy()

    def max_weights(self) -> np.ndarray:
        """Largest weight each observation receives anywhere on the path."""
        return self._diagnostic_summary()[1].copy()

    # ------------------------------------------------------------------
    # observers
    # ------------------------------------------------------------------
    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register ``callback(controller, event)``; returns an unsubscribe function."""
        self._observers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return _unsubscribe

    def _notify(self, event: TourEvent) -> None:
        for cb in list(self._observers):
            cb(self, event)

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------
    def advance(self) -> TourState:
        return self._move(self._state.path_index + 1)

    def retreat(self) -> TourState:
        return self._move(self._state.path_index - 1)

    def jump_to(self, index: int) -> TourState:
        """Move to ``index`` (1-based), clamped to the path."""
        if isinstance(index, (bool, np.bool_)):
            raise InvalidArgument(f"path index must be an integer, got {index!r}")
        try:
            i = int(index)
        except (TypeError, ValueError, OverflowError):
            raise InvalidArgument(f"path index must be an integer, got {index!r}") from None
        if i != index:
            raise InvalidArgument(f"path index must be an integer, got {index!r}")
        return self._move(i)

    def adjust_bandwidth(self, delta: float) -> TourState:
        """Scale the bandwidth by ``1 + delta`` and reweight the current position only."""
        self._check_active()
        prev = self._state
        try:
            new_bw = prev.bandwidth * (1.0 + float(delta))
        except (TypeError, ValueError):
            raise InvalidArgument(f"bandwidth delta must be a number, got {delta!r}") from None
        new_bw = check_bandwidth(new_bw)
        weights = self._weighter(self._point, new_bw, prev.distance)
        self._state = dataclasses.replace(prev, bandwidth=new_bw)
        self._weights = weights
        log.debug("[tour] bandwidth %g -> %g at position %d", prev.bandwidth, new_bw, prev.path_index)
        self._notify(TourEvent("bandwidth", self._state, prev))
        return self._state

    def recompute_matrix(self) -> TourState:
        """Rebuild the whole weight matrix at the current bandwidth."""
        self._check_active()
        self._build_matrix(self._state.bandwidth)
        self._weights = self._matrix[self._state.path_index - 1].copy()
        log.info("[tour] weight matrix recomputed at bandwidth %g", self._state.bandwidth)
        self._notify(TourEvent("matrix", self._state, self._state))
        return self._state

    def rotate(self, d_theta: float, d_phi: float) -> Camera:
        """Turn the 3-D perspective view; weights and cursor are unaffected."""
        self._check_active()
        self._camera = self._camera.rotated(float(d_theta), float(d_phi))
        self._notify(TourEvent("camera", self._state, self._state))
        return self._camera

    def snapshot(self) -> TourSnapshot:
        """Capture the current state for static rendering; nothing is mutated."""
        self._check_active()
        return TourSnapshot.capture(
            self._state,
            self._camera,
            self.path_length,
            self._point,
            self._weights,
            self.max_weights(),
            self.visible_counts(),
        )

    def end(self) -> None:
        """Release the weight matrix and refuse further transitions."""
        if self._ended:
            return
        self._ended = True
        self._matrix = None
        self._matrix_bandwidth = None
        self._diagnostics = None
        log.info("[tour] interactive session ended at position %d", self._state.path_index)
        self._notify(TourEvent("end", self._state, self._state))
        self._observers.clear()

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _check_active(self) -> None:
        if self._ended:
            raise TourEndedError("the tour has ended")

    def _clamp(self, index: int) -> int:
        return max(1, min(int(index), self.path_length))

    def _point_at(self, index: int) -> pd.Series:
        row = self._path.path.iloc[index - 1]
        point = self._base.copy()
        for name in row.index:
            point[name] = row[name]
        return point

    def _build_matrix(self, bandwidth: float) -> None:
        m = self._weighter.matrix(self._path.path, bandwidth, self._state.distance)
        m.setflags(write=False)
        self._matrix = m
        self._matrix_bandwidth = bandwidth

    def _weights_for(self, index: int, bandwidth: float, point: pd.Series) -> np.ndarray:
        if self._matrix is not None and bandwidth == self._matrix_bandwidth:
            return self._matrix[index - 1].copy()
        return self._weighter(point, bandwidth, self._state.distance)

    def _summarise(self, m: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        counts = (m > 0).sum(axis=1)
        maxima = m.max(axis=0) if m.shape[0] else np.zeros(self._table.n_rows)
        return counts, maxima

    def _diagnostic_summary(self) -> Tuple[np.ndarray, np.ndarray]:
        if self._matrix is not None:
            return self._summarise(self._matrix)
        if self._diagnostics is None:
            # built once; the initial bandwidth never changes
            m = self._weighter.matrix(self._path.path, self._initial_bandwidth, self._state.distance)
            self._diagnostics = self._summarise(m)
        return self._diagnostics

    def _move(self, target: int) -> TourState:
        self._check_active()
        prev = self._state
        index = self._clamp(target)
        if index == prev.path_index:
            return prev
        bandwidth = self._initial_bandwidth if self._reset_on_move else prev.bandwidth
        point = self._point_at(index)
        weights = self._weights_for(index, bandwidth, point)
        self._state = dataclasses.replace(prev, path_index=index, bandwidth=bandwidth)
        self._point = point
        self._weights = weights
        log.debug("[tour] position %d -> %d of %d", prev.path_index, index, self.path_length)
        self._notify(TourEvent("move", self._state, prev))
        return self._state


__all__ = ["Observer", "TourController"]
