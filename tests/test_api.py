import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LinearRegression

from condtour import condtour, make_path, similarity_weight
from condtour.config import TourConfig
from condtour.errors import EmptyTableError, InvalidArgument, PartitionError
from condtour.models import EstimatorPredictor
from condtour.path.builder import TourPath
from condtour.tour.events import Advance, AdjustBandwidth, End, Snapshot


def _tour(df, model, **kw):
    kw.setdefault("viewer", False)
    kw.setdefault("config", {"path": {"n_centroids": 5, "n_interp": 1}})
    return condtour(df, model, response="y", **kw)


def test_setup_builds_path_over_conditions(numeric_df, linear_predictor):
    session = _tour(numeric_df, linear_predictor, section="x1")
    assert session.viewer is None
    assert session.partition.section == ("x1",)
    assert sorted(session.partition.condition_columns) == ["x2", "x3"]
    assert sorted(session.controller.columns) == ["x2", "x3"]
    assert session.controller.path_length == 9
    assert session.scene.plot_type == "cc"


def test_explicit_groups_are_kept(numeric_df, linear_predictor):
    session = _tour(numeric_df, linear_predictor, section="x1",
                    conditions=[["x3"], ["x2"]])
    assert [list(g) for g in session.partition.conditions] == [["x3"], ["x2"]]


def test_flat_conditions_drop_section_columns(numeric_df, linear_predictor):
    session = _tour(numeric_df, linear_predictor, section=["x1"], conditions=["x1", "x2"])
    assert session.partition.condition_columns == ["x2"]


def test_single_string_condition(numeric_df, linear_predictor):
    session = _tour(numeric_df, linear_predictor, section="x1", conditions="x3")
    assert session.partition.condition_columns == ["x3"]


def test_conditions_default_to_declared_model_columns(numeric_df):
    est = LinearRegression().fit(numeric_df[["x1", "x2"]], numeric_df["y"])
    model = EstimatorPredictor(est, columns=["x1", "x2"])
    session = _tour(numeric_df, model, section="x1")
    assert session.partition.condition_columns == ["x2"]


def test_setup_errors_before_viewer(numeric_df, linear_predictor):
    with pytest.raises(PartitionError):
        _tour(numeric_df, linear_predictor, section="y")
    with pytest.raises(PartitionError):
        _tour(numeric_df, linear_predictor, section="x1", conditions=["nope"])
    with pytest.raises(PartitionError):
        _tour(numeric_df, linear_predictor, section=["x1", "x2", "x3"])
    with pytest.raises(EmptyTableError):
        _tour(numeric_df.assign(x2=np.nan), linear_predictor, section="x1")
    with pytest.raises(TypeError):
        _tour(numeric_df, object(), section="x1")
    with pytest.raises(InvalidArgument):
        _tour(numeric_df, linear_predictor, section="x1",
              config={"path": {"n_centroids": 500}})
    with pytest.raises(ValueError, match="invalid tour config"):
        _tour(numeric_df, linear_predictor, section="x1", config={"weights": {"threshold": -1}})


def test_path_with_response_or_section_rejected(numeric_df, linear_predictor):
    bad = pd.DataFrame({"x1": [0.0, 1.0], "x2": [0.0, 1.0]})
    with pytest.raises(PartitionError):
        _tour(numeric_df, linear_predictor, path=bad, section="x1")
    with pytest.raises(PartitionError):
        _tour(numeric_df, linear_predictor, path=pd.DataFrame({"zz": [1.0]}), section="x1")


def test_user_path_and_overrides(numeric_df, linear_predictor):
    path = pd.DataFrame({"x2": [-1.0, 0.0, 1.0], "x3": [0.0, 0.0, 0.0]})
    session = _tour(numeric_df, linear_predictor, path=path, section="x1",
                    threshold=2.0, distance="maxnorm", corder="none")
    assert isinstance(session.controller.path, TourPath)
    assert session.controller.path_length == 3
    assert session.controller.state.bandwidth == 2.0
    assert session.controller.state.distance == "maxnorm"
    assert session.config.conditions.order == "none"
    point = session.controller.conditioning_point
    assert point["x2"] == -1.0
    assert "x1" not in point.index


def test_run_writes_snapshots(numeric_df, linear_predictor, tmp_path):
    cfg = {"path": {"n_centroids": 4, "n_interp": 0},
           "snapshot": {"directory": str(tmp_path), "prefix": "run"}}
    session = _tour(numeric_df, linear_predictor, section=["x1", "x2"], view3d=True, config=cfg)
    assert session.scene.use3d
    handled = session.run([Advance(), AdjustBandwidth(0.2), Snapshot(), End(), Advance()])
    assert handled == 4
    assert session.controller.ended
    pdfs = sorted(p.name for p in tmp_path.glob("run_*.pdf"))
    assert len(pdfs) == 3
    assert pdfs[0].endswith("-condition.pdf")


def test_run_with_callback(numeric_df, linear_predictor):
    session = _tour(numeric_df, linear_predictor, section="x1")
    snaps = []
    session.run([Advance(), Snapshot()], on_snapshot=snaps.append)
    assert snaps[0].state.path_index == 2
    assert session.controller.ended


def test_viewer_attached_without_show(numeric_df, linear_predictor):
    session = _tour(numeric_df, linear_predictor, section="x1", viewer=True, show=False,
                    config=TourConfig())
    assert session.viewer is not None
    session.controller.advance()
    session.end()
    assert session.viewer._closed


def test_make_path(numeric_df):
    tp = make_path(numeric_df, 6, 2, columns=["x1", "x2"], seed=3)
    assert tp.columns == ["x1", "x2"]
    assert len(tp) == 16
    assert len(tp.centroids) == 6


def test_similarity_weight_point_and_matrix(numeric_df):
    point = numeric_df[["x1", "x2"]].iloc[0]
    w = similarity_weight(point, numeric_df, threshold=1.0)
    assert w.shape == (len(numeric_df),)
    assert w[0] == pytest.approx(1.0)
    assert np.all((w >= 0) & (w <= 1))

    m = similarity_weight(numeric_df[["x1", "x2"]].iloc[:3], numeric_df, threshold=1.0)
    assert m.shape == (3, len(numeric_df))
    assert np.allclose(m[0], w)

    wd = similarity_weight({"x1": 0.0}, numeric_df, threshold=0.5)
    assert wd.shape == (len(numeric_df),)


def test_estimator_without_columns_uses_fit_order(numeric_df):
    est = LinearRegression().fit(numeric_df[["x1", "x2", "x3"]], numeric_df["y"])
    session = _tour(numeric_df, EstimatorPredictor(est), section="x2",
                    conditions=["x1", "x3"])
    point = session.controller.conditioning_point
    (pred,) = session.scene.predictions(point)
    grid = session.scene.grid.frame
    expected = est.predict(pd.DataFrame({
        "x1": np.full(len(grid), point["x1"], dtype=float),
        "x2": grid["x2"].to_numpy(dtype=float),
        "x3": np.full(len(grid), point["x3"], dtype=float),
    }))
    assert len(pred.fit) == len(grid)
    assert np.allclose(pred.fit, expected)
