"""Static PDF output of a tour snapshot."""

from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import List, Optional

from ..tour.state import TourSnapshot
from ..utils.logging import get_logger
from .scene import TourScene

log = get_logger("condtour.viz")

SUFFIXES = ("expectation", "condition", "diagnostics")


def snapshot_paths(directory: str | Path, prefix: str = "snapshot",
                   timestamp: Optional[_dt.datetime] = None) -> List[Path]:
    """``<prefix>_<YYYY-mm-dd_HH.MM.SS>-{expectation,condition,diagnostics}.pdf``."""
    ts = (timestamp or _dt.datetime.now()).strftime("%Y-%m-%d_%H.%M.%S")
    base = Path(directory)
    return [base / f"{prefix}_{ts}-{suffix}.pdf" for suffix in SUFFIXES]


def write_snapshot(
    scene: TourScene,
    snapshot: TourSnapshot,
    directory: str | Path = ".",
    prefix: str = "snapshot",
    timestamp: Optional[_dt.datetime] = None,
) -> List[Path]:
    """Render ``snapshot`` into three PDF files and return their paths.

    Fresh figures are used, so an open interactive viewer is not touched.
    """
    paths = snapshot_paths(directory, prefix, timestamp)
    paths[0].parent.mkdir(parents=True, exist_ok=True)
    figures = scene.new_figures()
    try:
        scene.draw_section(figures, snapshot.point, snapshot.weights, snapshot.camera)
        scene.draw_conditions(figures, snapshot.point)
        scene.draw_diagnostics(
            figures, snapshot.max_weights, snapshot.visible_counts, snapshot.state.path_index
        )
        for fig, path in zip(figures.all(), paths):
            fig.savefig(path, format="pdf")
            log.info("[viz] snapshot written: %s", path)
    finally:
        figures.close()
    return paths


__all__ = ["SUFFIXES", "snapshot_paths", "write_snapshot"]
