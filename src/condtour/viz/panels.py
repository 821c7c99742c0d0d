"""Drawing routines for the three tour figures.

Each function clears and redraws one axis from plain inputs (the prepared
table, weights, predictions) so the viewer can call them after every
transition.  Styling comes from slices of the merged viewer configuration.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..data.table import PreparedTable
from ..section import SectionGrid, SectionPrediction
from ..tour.state import Camera
from .colors import cont2color, factor2color, weight_colors


# ---------------------------------------------------------------------------
# axis helpers
# ---------------------------------------------------------------------------


def axis_positions(values: Any, table: PreparedTable, name: str) -> np.ndarray:
    """Numeric plotting positions; categorical values map to level codes."""
    if table.is_categorical(name):
        cats = table.frame[name].cat.categories
        return pd.Categorical(np.asarray(values), categories=cats).codes.astype(float)
    return np.asarray(values, dtype=float)


def _label_axis(ax: plt.Axes, table: PreparedTable, name: str, which: str) -> None:
    set_label = ax.set_xlabel if which == "x" else ax.set_ylabel
    set_label(name)
    if table.is_categorical(name):
        cats = list(table.frame[name].cat.categories)
        ticks = np.arange(len(cats))
        if which == "x":
            ax.set_xticks(ticks, [str(c) for c in cats])
            ax.set_xlim(-0.5, len(cats) - 0.5)
        else:
            ax.set_yticks(ticks, [str(c) for c in cats])
            ax.set_ylim(-0.5, len(cats) - 0.5)


def _model_color(cfg: Mapping[str, Any], i: int) -> str:
    colors = cfg.get("colors") or ["#000000"]
    return colors[i % len(colors)]


# ---------------------------------------------------------------------------
# section panel
# ---------------------------------------------------------------------------


def draw_section_panel(
    ax: plt.Axes,
    table: PreparedTable,
    response: str,
    section: Sequence[str],
    grid: SectionGrid,
    predictions: Sequence[SectionPrediction],
    weights: np.ndarray,
    *,
    viz_data: Mapping[str, Any],
    viz_models: Mapping[str, Any],
    camera: Optional[Camera] = None,
    title: str = "Conditional expectation",
) -> None:
    """Draw observations near the section and the models across it.

    One section variable gives curves over the grid; two give a filled image of
    the first model (or a surface when ``ax`` is a 3-D axis).  Observations are
    faded by weight and weight-0 observations are not drawn.
    """
    ax.cla()
    y_obs = table.frame[response]
    base = viz_data.get("color", "#000000")

    if len(section) == 1:
        _draw_section_1d(ax, table, response, section[0], grid, predictions, weights,
                         base, viz_data, viz_models)
    elif getattr(ax, "name", "") == "3d":
        _draw_section_3d(ax, table, response, section, grid, predictions, weights,
                         base, viz_data, viz_models, camera or Camera())
    else:
        if table.is_categorical(response):
            obs_colors = factor2color(y_obs)
        else:
            obs_colors = cont2color(y_obs.to_numpy(dtype=float), viz_models.get("cmap", "viridis"))
        _draw_section_2d(ax, table, response, section, grid, predictions, weights,
                         obs_colors, viz_data, viz_models)
    ax.set_title(title)


def _draw_section_1d(ax, table, response, name, grid, predictions, weights, base,
                     viz_data, viz_models) -> None:
    x_obs = axis_positions(table.frame[name], table, name)
    y_obs = axis_positions(table.frame[response], table, response)
    rgba, order = weight_colors(base, weights)
    if order.size:
        ax.scatter(x_obs[order], y_obs[order], c=rgba[order],
                   s=viz_data.get("size", 18.0), marker=viz_data.get("marker", "o"))

    x_grid = axis_positions(grid.frame[name], table, name)
    lw = viz_models.get("line_width", 2.0)
    for i, pred in enumerate(predictions):
        color = _model_color(viz_models, i)
        fit = axis_positions(pred.fit, table, response)
        style = "-" if not table.is_categorical(name) else "-o"
        ax.plot(x_grid, fit, style, color=color, lw=lw, label=pred.name)
        if pred.lower is not None and pred.upper is not None:
            ls = viz_models.get("bounds_style", "--")
            ax.plot(x_grid, pred.lower, ls, color=color, lw=lw / 2)
            ax.plot(x_grid, pred.upper, ls, color=color, lw=lw / 2)

    _label_axis(ax, table, name, "x")
    _label_axis(ax, table, response, "y")
    if predictions:
        ax.legend(loc="best", fontsize=8)


def _draw_section_2d(ax, table, response, section, grid, predictions, weights, obs_colors,
                     viz_data, viz_models) -> None:
    a, b = section
    na, nb = grid.shape
    xa = axis_positions(grid.frame[a], table, a).reshape(nb, na)
    xb = axis_positions(grid.frame[b], table, b).reshape(nb, na)
    if predictions:
        fit = predictions[0].fit
        if table.is_categorical(response):
            cats = table.frame[response].cat.categories
            colors = factor2color(pd.Series(pd.Categorical(np.asarray(fit), categories=cats)))
        else:
            y = table.frame[response]
            colors = cont2color(np.asarray(fit, dtype=float), viz_models.get("cmap", "viridis"),
                                (float(y.min()), float(y.max())))
        ax.imshow(
            colors.reshape(nb, na, 4),
            origin="lower",
            aspect="auto",
            extent=(xa.min() - _half_step(xa[0, :]), xa.max() + _half_step(xa[0, :]),
                    xb.min() - _half_step(xb[:, 0]), xb.max() + _half_step(xb[:, 0])),
            alpha=0.5,
            interpolation="nearest",
        )

    rgba, order = weight_colors(obs_colors, weights)
    if order.size:
        xo = axis_positions(table.frame[a], table, a)
        yo = axis_positions(table.frame[b], table, b)
        ax.scatter(xo[order], yo[order], c=rgba[order], edgecolors="#000000", linewidths=0.3,
                   s=viz_data.get("size", 18.0), marker=viz_data.get("marker", "o"))
    _label_axis(ax, table, a, "x")
    _label_axis(ax, table, b, "y")


def _half_step(v: np.ndarray) -> float:
    v = np.unique(np.asarray(v, dtype=float))
    if v.size < 2:
        return 0.5
    return float(np.min(np.diff(v))) / 2.0


def _draw_section_3d(ax, table, response, section, grid, predictions, weights, base,
                     viz_data, viz_models, camera: Camera) -> None:
    a, b = section
    na, nb = grid.shape
    xa = axis_positions(grid.frame[a], table, a).reshape(nb, na)
    xb = axis_positions(grid.frame[b], table, b).reshape(nb, na)
    for i, pred in enumerate(predictions):
        z = np.asarray(pred.fit, dtype=float).reshape(nb, na)
        ax.plot_surface(xa, xb, z, color=_model_color(viz_models, i),
                        alpha=viz_models.get("surface_alpha", 0.6), linewidth=0)
    rgba, order = weight_colors(base, weights)
    if order.size:
        ax.scatter(
            axis_positions(table.frame[a], table, a)[order],
            axis_positions(table.frame[b], table, b)[order],
            table.frame[response].to_numpy(dtype=float)[order],
            c=rgba[order],
            s=viz_data.get("size", 18.0),
            depthshade=False,
        )
    ax.set_xlabel(a)
    ax.set_ylabel(b)
    ax.set_zlabel(response)
    ax.view_init(elev=camera.phi, azim=camera.theta)


# ---------------------------------------------------------------------------
# condition selectors
# ---------------------------------------------------------------------------


def condition_layout(n_groups: int, max_cols: int = 4) -> Tuple[int, int]:
    """Rows and columns of the condition-selector figure."""
    if n_groups < 1:
        return (1, 1)
    cols = min(max_cols, int(np.ceil(np.sqrt(n_groups))))
    rows = int(np.ceil(n_groups / cols))
    return rows, cols


def draw_condition_panel(
    ax: plt.Axes,
    table: PreparedTable,
    group: Sequence[str],
    point: pd.Series,
    *,
    viz_cond: Mapping[str, Any],
) -> None:
    """Show the distribution of one condition group and the current point.

    Single numeric columns get a histogram, single categorical columns a bar
    chart, pairs a scatterplot (categorical axes by level code).
    """
    ax.cla()
    hl = viz_cond.get("point_color", "#e41a1c")
    if len(group) == 1:
        name = group[0]
        col = table.frame[name]
        if table.is_categorical(name):
            counts = col.value_counts(sort=False).reindex(col.cat.categories, fill_value=0)
            colors = [viz_cond.get("bar_highlight", hl) if c == point[name]
                      else viz_cond.get("bar_color", "#bdbdbd")
                      for c in counts.index]
            ax.bar(np.arange(len(counts)), counts.to_numpy(), color=colors)
            _label_axis(ax, table, name, "x")
        else:
            ax.hist(col.to_numpy(dtype=float), bins=int(viz_cond.get("hist_bins", 20)),
                    color=viz_cond.get("bar_color", "#bdbdbd"))
            ax.axvline(float(point[name]), color=hl, lw=2)
            ax.set_xlabel(name)
        ax.set_yticks([])
        return

    a, b = group[:2]
    xa = axis_positions(table.frame[a], table, a)
    xb = axis_positions(table.frame[b], table, b)
    ax.scatter(xa, xb, s=8, color="#000000", alpha=viz_cond.get("data_alpha", 0.4))
    pa = axis_positions([point[a]], table, a)
    pb = axis_positions([point[b]], table, b)
    ax.scatter(pa, pb, s=viz_cond.get("point_size", 60.0), color=hl, marker="x", zorder=3)
    _label_axis(ax, table, a, "x")
    _label_axis(ax, table, b, "y")


# ---------------------------------------------------------------------------
# diagnostics
# ---------------------------------------------------------------------------


def draw_weight_histogram(
    ax: plt.Axes, max_weights: np.ndarray, *, viz_diag: Mapping[str, Any]
) -> None:
    """Histogram of each observation's largest weight along the path."""
    ax.cla()
    ax.hist(np.asarray(max_weights, dtype=float), bins=int(viz_diag.get("hist_bins", 20)),
            range=(0.0, 1.0), color=viz_diag.get("hist_color", "#4c72b0"))
    ax.set_xlabel("maximum weight along path")
    ax.set_ylabel("observations")


def draw_visible_counts(
    ax: plt.Axes,
    visible_counts: np.ndarray,
    path_index: int,
    *,
    viz_diag: Mapping[str, Any],
    centroid_positions: Sequence[int] = (),
) -> None:
    """Observations with positive weight at each path position.

    The current position is marked; clicking this axis jumps the tour there.
    """
    ax.cla()
    counts = np.asarray(visible_counts)
    pos = np.arange(1, counts.size + 1)
    ax.plot(pos, counts, color=viz_diag.get("line_color", "#333333"), lw=1.0)
    if centroid_positions:
        cp = np.asarray(centroid_positions, dtype=int)
        ax.plot(cp, counts[cp - 1], "o", ms=3, color=viz_diag.get("line_color", "#333333"))
    ax.axvline(path_index, color=viz_diag.get("marker_color", "#e41a1c"), lw=1.5)
    ax.set_xlim(0.5, max(counts.size, 1) + 0.5)
    ax.set_xlabel("path position")
    ax.set_ylabel("visible observations")


__all__: List[str] = [
    "axis_positions",
    "condition_layout",
    "draw_condition_panel",
    "draw_section_panel",
    "draw_visible_counts",
    "draw_weight_histogram",
]

