import numpy as np
import pandas as pd
import pytest

from condtour.compute.weights import SimilarityWeighter
from condtour.data.table import PreparedTable
from condtour.errors import InvalidArgument, TourEndedError
from condtour.path.builder import TourPath, build_path
from condtour.tour.controller import TourController
from condtour.tour.state import Camera, TourSnapshot


@pytest.fixture
def controller(numeric_table, simple_path):
    return TourController(numeric_table, simple_path, bandwidth=1.0)


def _recorder(ctrl):
    events = []
    ctrl.subscribe(lambda c, e: events.append(e))
    return events


def test_initial_state(controller, numeric_table, simple_path):
    s = controller.state
    assert s.path_index == 1
    assert s.bandwidth == 1.0
    assert controller.path_length == len(simple_path)
    assert controller.weight_matrix.shape == (len(simple_path), numeric_table.n_rows)
    assert np.array_equal(controller.weights, controller.weight_matrix[0])


def test_advance_clamps_at_end(controller):
    L = controller.path_length
    for _ in range(L):
        controller.advance()
    assert controller.state.path_index == L
    controller.advance()
    assert controller.state.path_index == L


def test_retreat_clamps_at_start(controller):
    controller.jump_to(controller.path_length)
    for _ in range(controller.path_length + 2):
        controller.retreat()
    assert controller.state.path_index == 1


def test_boundary_moves_do_not_notify(controller):
    events = _recorder(controller)
    controller.retreat()
    assert events == []
    controller.advance()
    assert [e.kind for e in events] == ["move"]
    assert events[0].previous.path_index == 1
    assert events[0].state.path_index == 2


def test_move_updates_point_and_weights(controller, simple_path):
    controller.jump_to(3)
    point = controller.conditioning_point
    assert point["x1"] == simple_path.path["x1"].iloc[2]
    assert point["x2"] == simple_path.path["x2"].iloc[2]
    assert np.array_equal(controller.weights, controller.weight_matrix[2])


def test_non_path_columns_come_from_first_row(controller, numeric_table):
    point = controller.conditioning_point
    assert point["x3"] == numeric_table.frame["x3"].iloc[0]


def test_jump_to_clamps_and_validates(controller):
    controller.jump_to(99)
    assert controller.state.path_index == controller.path_length
    controller.jump_to(-4)
    assert controller.state.path_index == 1
    controller.jump_to(np.int64(2))
    assert controller.state.path_index == 2
    for bad in (2.5, "3", True, None, float("inf"), float("nan")):
        with pytest.raises(InvalidArgument):
            controller.jump_to(bad)


def test_adjust_bandwidth_leaves_matrix_rows(controller):
    controller.jump_to(2)
    before = controller.weight_matrix.copy()
    events = _recorder(controller)
    controller.adjust_bandwidth(0.5)
    assert controller.state.bandwidth == pytest.approx(1.5)
    assert np.array_equal(controller.weight_matrix, before)
    assert [e.kind for e in events] == ["bandwidth"]

    weighter = SimilarityWeighter(controller.table, controller.columns)
    expected = weighter(controller.conditioning_point, 1.5)
    assert np.allclose(controller.weights, expected)
    assert (controller.weights > 0).sum() >= (before[1] > 0).sum()


def test_bandwidth_carried_across_moves(controller):
    controller.adjust_bandwidth(1.0)
    controller.advance()
    assert controller.state.bandwidth == pytest.approx(2.0)
    weighter = SimilarityWeighter(controller.table, controller.columns)
    assert np.allclose(controller.weights, weighter(controller.conditioning_point, 2.0))


def test_reset_bandwidth_on_move(numeric_table, simple_path):
    ctrl = TourController(numeric_table, simple_path, bandwidth=1.0, reset_bandwidth_on_move=True)
    ctrl.adjust_bandwidth(1.0)
    ctrl.advance()
    assert ctrl.state.bandwidth == 1.0
    assert np.array_equal(ctrl.weights, ctrl.weight_matrix[1])


@pytest.mark.parametrize("delta", [-1.0, -2.0, np.inf, np.nan])
def test_invalid_bandwidth_leaves_state(controller, delta):
    before = controller.state
    weights = controller.weights.copy()
    events = _recorder(controller)
    with pytest.raises(InvalidArgument):
        controller.adjust_bandwidth(delta)
    assert controller.state == before
    assert np.array_equal(controller.weights, weights)
    assert events == []


def test_recompute_matrix(controller):
    controller.adjust_bandwidth(0.5)
    events = _recorder(controller)
    controller.recompute_matrix()
    assert controller.matrix_bandwidth == pytest.approx(1.5)
    assert np.array_equal(controller.weights, controller.weight_matrix[0])
    assert [e.kind for e in events] == ["matrix"]


def test_lazy_controller_matches_precomputed(numeric_table, simple_path):
    eager = TourController(numeric_table, simple_path, bandwidth=0.9)
    lazy = TourController(numeric_table, simple_path, bandwidth=0.9, precompute=False)
    assert lazy.weight_matrix is None
    for _ in range(3):
        eager.advance()
        lazy.advance()
        assert np.allclose(eager.weights, lazy.weights)
    assert np.array_equal(eager.visible_counts(), lazy.visible_counts())


def test_lazy_diagnostics_built_once(numeric_table, simple_path, monkeypatch):
    calls = []
    original = SimilarityWeighter.matrix

    def counting(self, *args, **kwargs):
        calls.append(args)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(SimilarityWeighter, "matrix", counting)
    eager = TourController(numeric_table, simple_path, bandwidth=0.9)
    lazy = TourController(numeric_table, simple_path, bandwidth=0.9, precompute=False)
    calls.clear()
    for _ in range(4):
        lazy.advance()
        lazy.adjust_bandwidth(0.5)
        counts, maxima = lazy.visible_counts(), lazy.max_weights()
    assert len(calls) == 1
    assert lazy.weight_matrix is None
    assert np.array_equal(counts, eager.visible_counts())
    assert np.allclose(maxima, eager.max_weights())
    lazy.snapshot()
    assert len(calls) == 1
    lazy.end()
    assert lazy._diagnostics is None


def test_read_only_views(controller):
    with pytest.raises(ValueError):
        controller.weights[0] = 0.5
    with pytest.raises(ValueError):
        controller.weight_matrix[0, 0] = 0.5


def test_diagnostics(controller):
    m = controller.weight_matrix
    assert np.array_equal(controller.visible_counts(), (m > 0).sum(axis=1))
    assert np.allclose(controller.max_weights(), m.max(axis=0))


def test_rotate_changes_camera_only(controller):
    state = controller.state
    events = _recorder(controller)
    cam = controller.rotate(2.0, -2.0)
    assert cam == Camera(theta=47.0, phi=18.0)
    assert controller.state == state
    assert [e.kind for e in events] == ["camera"]


def test_snapshot_is_immutable_copy(controller):
    controller.advance()
    snap = controller.snapshot()
    assert isinstance(snap, TourSnapshot)
    assert snap.state == controller.state
    assert snap.path_length == controller.path_length
    with pytest.raises(ValueError):
        snap.weights[0] = 1.0
    snap.point["x1"] = 123.0
    assert controller.conditioning_point["x1"] != 123.0
    controller.advance()
    assert snap.state.path_index == 2


def test_end_releases_and_blocks(controller):
    events = _recorder(controller)
    controller.end()
    assert controller.ended
    assert controller.weight_matrix is None
    assert [e.kind for e in events] == ["end"]
    for op in (controller.advance, controller.retreat, controller.snapshot,
               controller.recompute_matrix):
        with pytest.raises(TourEndedError):
            op()
    with pytest.raises(TourEndedError):
        controller.adjust_bandwidth(0.1)
    with pytest.raises(TourEndedError):
        controller.rotate(1.0, 0.0)
    controller.end()
    assert len(events) == 1


def test_unsubscribe(controller):
    events = []
    unsubscribe = controller.subscribe(lambda c, e: events.append(e))
    controller.advance()
    unsubscribe()
    controller.advance()
    assert len(events) == 1


def test_categorical_path_hard_filter(mixed_df):
    table = PreparedTable.from_frame(mixed_df[["x1", "g"]])
    tp = build_path(table, 3, 2)
    ctrl = TourController(table, tp, bandwidth=50.0)
    for _ in range(ctrl.path_length):
        level = ctrl.conditioning_point["g"]
        mismatched = (table.frame["g"] != level).to_numpy()
        assert np.all(ctrl.weights[mismatched] == 0.0)
        ctrl.advance()


def test_bad_construction(numeric_table, simple_path):
    with pytest.raises(InvalidArgument):
        TourController(numeric_table, simple_path, bandwidth=0.0)
    with pytest.raises(InvalidArgument):
        TourController(numeric_table, simple_path, columns=["x3"])
    with pytest.raises(InvalidArgument):
        TourController(numeric_table, simple_path, distance="manhattan")
    empty = TourPath(pd.DataFrame({"x1": []}), pd.DataFrame({"x1": []}), 0, ())
    with pytest.raises(InvalidArgument):
        TourController(numeric_table, empty)
