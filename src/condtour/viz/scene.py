"""Static drawing context shared by the interactive viewer and snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..data.table import PreparedTable
from ..models import Predictor
from ..section import SectionGrid, SectionPrediction, make_newdata, plot_type, section_predictions
from ..tour.state import Camera
from .defaults import merge_defaults
from .panels import (
    condition_layout,
    draw_condition_panel,
    draw_section_panel,
    draw_visible_counts,
    draw_weight_histogram,
)


@dataclass
class TourFigures:
    section_fig: plt.Figure
    section_ax: plt.Axes
    condition_fig: plt.Figure
    condition_axes: List[plt.Axes]
    diagnostics_fig: plt.Figure
    histogram_ax: plt.Axes
    counts_ax: plt.Axes

    def all(self) -> Tuple[plt.Figure, plt.Figure, plt.Figure]:
        return (self.section_fig, self.condition_fig, self.diagnostics_fig)

    def close(self) -> None:
        for fig in self.all():
            plt.close(fig)


@dataclass
class TourScene:
    """Everything about a session's figures that does not change during the tour."""

    table: PreparedTable
    response: str
    section: Sequence[str]
    predictors: Sequence[Predictor]
    condition_groups: Sequence[Sequence[str]]
    view3d: bool = False
    conf: bool = False
    probs: bool = False
    viz: Dict[str, Any] = field(default_factory=dict)
    grid: Optional[SectionGrid] = None
    centroid_positions: Sequence[int] = ()

    def __post_init__(self) -> None:
        self.viz = merge_defaults(self.viz)
        self.section = list(self.section)
        self.plot_type = plot_type(self.table, self.response, self.section)
        self.use3d = bool(self.view3d) and self.plot_type == "ccc"
        if self.grid is None:
            self.grid = SectionGrid.build(
                self.table, self.section, view3d=self.use3d, probs=self.probs
            )

    # ------------------------------------------------------------------
    def predictions(self, point: pd.Series) -> List[SectionPrediction]:
        newdata = make_newdata(self.grid, point.drop(labels=[self.response], errors="ignore"),
                               self.table)
        return section_predictions(self.predictors, newdata, conf=self.conf, probs=self.probs)

    def new_figures(self) -> TourFigures:
        figs = self.viz["figures"]
        sfig = plt.figure(figsize=tuple(figs["section"]["size"]))
        sax = sfig.add_subplot(111, projection="3d" if self.use3d else None)
        if sfig.canvas.manager is not None:
            sfig.canvas.manager.set_window_title(figs["section"]["title"])

        rows, cols = condition_layout(len(self.condition_groups), int(figs["condition"]["max_cols"]))
        cfig = plt.figure(figsize=tuple(figs["condition"]["size"]))
        caxes = [cfig.add_subplot(rows, cols, i + 1) for i in range(len(self.condition_groups))]
        cfig.suptitle(figs["condition"]["title"])

        dfig, (hax, vax) = plt.subplots(1, 2, figsize=tuple(figs["diagnostics"]["size"]))
        dfig.suptitle(figs["diagnostics"]["title"])
        return TourFigures(sfig, sax, cfig, caxes, dfig, hax, vax)

    # ------------------------------------------------------------------
    def draw_section(
        self,
        figures: TourFigures,
        point: pd.Series,
        weights: np.ndarray,
        camera: Camera,
        predictions: Optional[List[SectionPrediction]] = None,
    ) -> List[SectionPrediction]:
        preds = self.predictions(point) if predictions is None else predictions
        draw_section_panel(
            figures.section_ax,
            self.table,
            self.response,
            self.section,
            self.grid,
            preds,
            weights,
            viz_data=self.viz["data"],
            viz_models=self.viz["models"],
            camera=camera,
            title=self.viz["figures"]["section"]["title"],
        )
        return preds

    def draw_conditions(self, figures: TourFigures, point: pd.Series) -> None:
        for ax, group in zip(figures.condition_axes, self.condition_groups):
            draw_condition_panel(ax, self.table, group, point, viz_cond=self.viz["condition"])

    def draw_diagnostics(
        self,
        figures: TourFigures,
        max_weights: np.ndarray,
        visible_counts: np.ndarray,
        path_index: int,
    ) -> None:
        draw_weight_histogram(figures.histogram_ax, max_weights, viz_diag=self.viz["diagnostics"])
        draw_visible_counts(
            figures.counts_ax,
            visible_counts,
            path_index,
            viz_diag=self.viz["diagnostics"],
            centroid_positions=self.centroid_positions,
        )


__all__ = ["TourFigures", "TourScene"]
