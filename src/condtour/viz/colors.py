"""Colour helpers for observations and model curves."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import matplotlib as mpl
import numpy as np
import pandas as pd
from matplotlib.colors import to_rgba, to_rgba_array


def weight_colors(colors, weights: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Fade ``colors`` toward white by ``1 - weight``.

    Returns ``(rgba, order)``: one RGBA row per observation and the indices of
    observations with positive weight, lightest first, so heavier points are
    drawn on top.  Weight-0 observations are absent from ``order``.
    """
    w = np.clip(np.asarray(weights, dtype=float).reshape(-1), 0.0, 1.0)
    if isinstance(colors, str) or (
        isinstance(colors, tuple) and len(colors) in (3, 4) and not isinstance(colors[0], str)
    ):
        rgba = np.tile(to_rgba(colors), (w.size, 1))
    else:
        rgba = to_rgba_array(colors)
        if rgba.shape[0] == 1:
            rgba = np.tile(rgba, (w.size, 1))
    if rgba.shape[0] != w.size:
        raise ValueError(f"got {rgba.shape[0]} colours for {w.size} weights")
    out = rgba.copy()
    out[:, :3] = 1.0 - w[:, None] * (1.0 - rgba[:, :3])
    positive = np.flatnonzero(w > 0)
    order = positive[np.argsort(w[positive], kind="stable")]
    return out, order


def cont2color(
    x, cmap: str = "viridis", limits: Optional[Tuple[float, float]] = None
) -> np.ndarray:
    """Map numeric values to RGBA through ``cmap``."""
    x = np.asarray(x, dtype=float)
    lo, hi = limits if limits is not None else (np.nanmin(x), np.nanmax(x))
    span = hi - lo
    u = np.zeros_like(x) if span == 0 else (x - lo) / span
    return mpl.colormaps[cmap](np.clip(u, 0.0, 1.0))


def factor2color(x, palette: Optional[Sequence[str]] = None) -> np.ndarray:
    """Map categorical values to RGBA, one palette entry per level."""
    if isinstance(x, pd.Series) and isinstance(x.dtype, pd.CategoricalDtype):
        cat = pd.Categorical(x)
    else:
        cat = pd.Categorical(np.asarray(x))
    n_levels = len(cat.categories)
    if palette is None:
        cmap = mpl.colormaps["tab10" if n_levels <= 10 else "tab20"]
        table = cmap(np.arange(n_levels) % cmap.N)
    else:
        table = to_rgba_array([palette[i % len(palette)] for i in range(n_levels)])
    return table[np.asarray(cat.codes)]


__all__ = ["weight_colors", "cont2color", "factor2color"]
