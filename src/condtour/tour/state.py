"""Immutable value types exchanged between the tour controller and its views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np
import pandas as pd

EventKind = Literal["move", "bandwidth", "camera", "matrix", "end"]


@dataclass(frozen=True)
class TourState:
    """Cursor over the path plus the active bandwidth.

    ``path_index`` is 1-based and lies in ``[1, path_length]``.
    """

    path_index: int
    bandwidth: float
    distance: str = "euclidean"


@dataclass(frozen=True)
class Camera:
    """Viewing angles of the 3-D perspective view, in degrees.

    ``theta`` is the azimuth and ``phi`` the colatitude.
    """

    theta: float = 45.0
    phi: float = 20.0

    def rotated(self, d_theta: float, d_phi: float) -> "Camera":
        return Camera(theta=self.theta + d_theta, phi=self.phi + d_phi)


@dataclass(frozen=True)
class TourEvent:
    kind: EventKind
    state: TourState
    previous: Optional[TourState] = None


def _frozen(a: np.ndarray) -> np.ndarray:
    out = np.array(a, dtype=float, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class TourSnapshot:
    """Read-only bundle handed to a renderer for static output."""

    state: TourState
    camera: Camera
    path_length: int
    point: pd.Series
    weights: np.ndarray
    max_weights: np.ndarray
    visible_counts: np.ndarray

    @classmethod
    def capture(
        cls,
        state: TourState,
        camera: Camera,
        path_length: int,
        point: pd.Series,
        weights: np.ndarray,
        max_weights: np.ndarray,
        visible_counts: np.ndarray,
    ) -> "TourSnapshot":
        return cls(
            state=state,
            camera=camera,
            path_length=int(path_length),
            point=point.copy(),
            weights=_frozen(weights),
            max_weights=_frozen(max_weights),
            visible_counts=_frozen(visible_counts),
        )


__all__ = ["Camera", "EventKind", "TourEvent", "TourSnapshot", "TourState"]
