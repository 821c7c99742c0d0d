from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .arrange import arrange_conditions
from .config.loader import load_tour_config, validate_tour_config
from .config.schema import TourConfig
from .compute.weights import SimilarityWeighter
from .data.table import Partition, PreparedTable
from .errors import PartitionError, SetupError
from .models import as_predictors
from .path.builder import TourPath, build_path
from .tour.controller import TourController
from .tour.events import Event, KeyBindings, run_event_loop
from .tour.state import TourSnapshot
from .utils.logging import get_logger

log = get_logger("condtour.api")

Conditions = Union[None, Sequence[str], Sequence[Sequence[str]]]


# -----------------------------------------------------------------------------
# session
# -----------------------------------------------------------------------------


@dataclass
class TourSession:
    """A configured tour: controller, drawing context and optional viewer."""

    controller: TourController
    partition: Partition
    config: TourConfig
    scene: Any = None
    viewer: Any = None

    def snapshot(self, directory: str | Path | None = None) -> List[Path]:
        """Write the current state to the three snapshot PDFs."""
        from .viz.snapshot import write_snapshot

        return write_snapshot(
            self.scene,
            self.controller.snapshot(),
            directory if directory is not None else self.config.snapshot.directory,
            self.config.snapshot.prefix,
        )

    def run(
        self,
        events: Iterable[Event],
        on_snapshot: Optional[Callable[[TourSnapshot], None]] = None,
    ) -> int:
        """Replay ``events`` against the controller; the session ends afterwards.

        Snapshots are written as PDF files unless ``on_snapshot`` handles them.
        """
        if on_snapshot is None:
            from .viz.snapshot import write_snapshot

            def on_snapshot(snap: TourSnapshot) -> None:
                write_snapshot(self.scene, snap, self.config.snapshot.directory,
                               self.config.snapshot.prefix)

        return run_event_loop(self.controller, events, on_snapshot)

    def end(self) -> None:
        self.controller.end()


# -----------------------------------------------------------------------------
# helpers
# -----------------------------------------------------------------------------


def _resolve_config(config: Any) -> TourConfig:
    if config is None:
        return TourConfig()
    if isinstance(config, TourConfig):
        return config
    if isinstance(config, (str, Path)):
        return load_tour_config(config)
    if isinstance(config, Mapping):
        return validate_tour_config(config)
    raise TypeError(f"config must be a TourConfig, mapping or path, got {type(config).__name__}")


def _is_grouped(conditions: Sequence[Any]) -> bool:
    return any(not isinstance(c, str) for c in conditions)


def _resolve_conditions(
    table: PreparedTable,
    response: str,
    section: Sequence[str],
    conditions: Conditions,
    predictors: Sequence[Any],
    cfg: TourConfig,
) -> List[List[str]]:
    """Condition groups, in order of preference:

    1. groups given by the caller, truncated to ``max_groups``;
    2. a flat list of names, arranged after removing section columns;
    3. the feature columns every predictor declares, arranged;
    4. every column other than response and section, arranged.
    """
    if isinstance(conditions, str):
        conditions = [conditions]
    max_groups = cfg.conditions.max_groups
    order = cfg.conditions.order
    if conditions is not None and len(conditions) and _is_grouped(conditions):
        groups = [[c] if isinstance(c, str) else list(c) for c in conditions]
        if len(groups) > max_groups:
            log.warning("[api] using the first %d of %d condition groups", max_groups, len(groups))
        return groups[:max_groups]

    if conditions is not None:
        names = [c for c in conditions if c not in section]
    else:
        declared = [getattr(p, "columns", None) for p in predictors]
        if declared and all(d is not None for d in declared):
            seen: List[str] = []
            for cols in declared:
                seen.extend(c for c in cols if c not in seen)
            names = [c for c in seen
                     if c in table.frame.columns and c != response and c not in section]
        else:
            names = [c for c in table.columns if c != response and c not in section]
    Partition(response, tuple(section), tuple((n,) for n in names)).validate(table.columns)
    return arrange_conditions(table, order, columns=names, max_groups=max_groups)


def _coerce_path(path: Any, table: PreparedTable) -> TourPath:
    if isinstance(path, TourPath):
        frame = path.path
    else:
        frame = pd.DataFrame(path)
    unknown = [c for c in frame.columns if c not in table.frame.columns]
    if unknown:
        raise PartitionError(f"path columns not in data: {unknown}")
    cols = {}
    for name in frame.columns:
        if table.is_categorical(name):
            cols[name] = pd.Categorical(np.asarray(frame[name]), dtype=table.frame[name].dtype)
        else:
            cols[name] = frame[name].to_numpy(dtype=float)
    coerced = pd.DataFrame(cols, columns=list(frame.columns))
    if isinstance(path, TourPath):
        return TourPath(path.centroids, coerced, path.n_interp, path.centroid_positions)
    return TourPath.from_frame(coerced)


# -----------------------------------------------------------------------------
# public API
# -----------------------------------------------------------------------------


def make_path(
    data: pd.DataFrame,
    n_centroids: int,
    n_interp: int = 4,
    *,
    columns: Optional[Sequence[str]] = None,
    seed: int = 0,
    sequencing: str = "repetitive_nn",
) -> TourPath:
    """Build a tour path through ``data`` (rows with missing values are dropped)."""
    table = PreparedTable.from_frame(data if columns is None else data[list(columns)])
    return build_path(table, n_centroids, n_interp, seed=seed, sequencing=sequencing)


def similarity_weight(
    x: Union[pd.Series, pd.DataFrame, Mapping[str, Any]],
    data: pd.DataFrame,
    threshold: float = 1.0,
    distance: str = "euclidean",
    lambda_: Optional[float] = None,
    *,
    scale: Optional[Mapping[str, float]] = None,
    kernel: str = "tricube",
) -> np.ndarray:
    """Weights of the rows of ``data`` relative to ``x``.

    Only the columns of ``x`` take part.  A single point gives one weight per
    row of ``data``; a multi-row frame gives a ``(len(x), len(data))`` matrix.
    Rows of ``data`` with missing values are dropped first.
    """
    if isinstance(x, pd.DataFrame):
        cols = list(x.columns)
    elif isinstance(x, pd.Series):
        cols = list(x.index)
    else:
        x = pd.Series(dict(x))
        cols = list(x.index)
    table = PreparedTable.from_frame(data[cols])
    weighter = SimilarityWeighter(table, cols, lambda_=lambda_, kernel=kernel, scale=scale)
    if isinstance(x, pd.DataFrame) and len(x) != 1:
        return weighter.matrix(x.reset_index(drop=True), threshold, distance)
    return weighter(x, threshold, distance)


def condtour(
    data: pd.DataFrame,
    models: Any,
    path: Any = None,
    *,
    response: str,
    section: Union[str, Sequence[str]],
    conditions: Conditions = None,
    threshold: Optional[float] = None,
    lambda_: Optional[float] = None,
    distance: Optional[str] = None,
    kernel: Optional[str] = None,
    view3d: bool = False,
    corder: Optional[str] = None,
    conf: bool = False,
    probs: bool = False,
    config: Any = None,
    viewer: bool = True,
    show: bool = True,
) -> TourSession:
    """Set up a conditional tour of ``models`` through ``data``.

    Every setup problem (bad partition, empty table, invalid path size) is
    raised here, before any figure is created.  ``path`` may be a
    :class:`~condtour.path.TourPath` or a frame of conditioning points; when
    omitted one is built over the condition columns with the ``path`` section
    of the configuration.  Keyword arguments left as ``None`` fall back to the
    configuration.  With ``viewer`` the matplotlib viewer is attached and, with
    ``show``, displayed until its windows close.
    """
    cfg = _resolve_config(config)
    if corder is not None:
        cfg = cfg.model_copy(update={"conditions": cfg.conditions.model_copy(update={"order": corder})})
    predictors = as_predictors(models)
    table = PreparedTable.from_frame(data)
    section_cols = [section] if isinstance(section, str) else list(section)

    groups = _resolve_conditions(table, response, section_cols, conditions, predictors, cfg)
    partition = Partition(response, tuple(section_cols), tuple(tuple(g) for g in groups))
    partition.validate(table.columns)

    if path is None:
        pc = cfg.path
        tour_path = build_path(
            table,
            pc.n_centroids,
            pc.n_interp,
            columns=partition.condition_columns,
            seed=pc.seed,
            sequencing=pc.sequencing,
        )
    else:
        tour_path = _coerce_path(path, table)
        clash = [c for c in tour_path.columns if c == response or c in section_cols]
        if clash:
            raise PartitionError(f"path cannot contain response or section variables: {clash}")

    rest = [c for c in table.columns if c != response and c not in section_cols]
    if not rest:
        raise SetupError("no columns left to condition on")
    wc = cfg.weights
    controller = TourController(
        table,
        tour_path,
        bandwidth=wc.threshold if threshold is None else threshold,
        distance=distance or wc.distance,
        lambda_=wc.lambda_ if lambda_ is None else lambda_,
        kernel=kernel or wc.kernel,
        base_point=table.frame[rest].iloc[0].copy(),
        precompute=cfg.tour.precompute,
        reset_bandwidth_on_move=cfg.tour.reset_bandwidth_on_move,
    )
    log.info(
        "[api] tour of %d model(s): response=%s section=%s, %d condition groups",
        len(predictors),
        response,
        section_cols,
        len(groups),
    )

    from .viz.scene import TourScene

    scene = TourScene(
        table=table,
        response=response,
        section=section_cols,
        predictors=predictors,
        condition_groups=groups,
        view3d=view3d,
        conf=conf,
        probs=probs,
        viz=dict(cfg.viz),
        centroid_positions=tour_path.centroid_positions,
    )
    session = TourSession(controller, partition, cfg, scene=scene)
    if viewer:
        from .viz.view import TourViewer

        session.viewer = TourViewer(
            controller,
            scene,
            bindings=KeyBindings.from_config(cfg.tour),
            drag_step=cfg.tour.drag_step,
            snapshot_dir=cfg.snapshot.directory,
            snapshot_prefix=cfg.snapshot.prefix,
        )
        if show:
            session.viewer.show()
    return session


__all__ = ["TourSession", "condtour", "make_path", "similarity_weight"]
