import numpy as np
import pandas as pd
import pytest

from condtour.compute.kernels import KERNELS, get_kernel
from condtour.compute.weights import SimilarityWeighter, similarity_weights, weights_from_distance
from condtour.data.table import PreparedTable
from condtour.errors import InvalidArgument


@pytest.mark.parametrize("kernel", sorted(KERNELS))
def test_weights_in_unit_interval_and_cut_at_bandwidth(kernel):
    d = np.array([0.0, 0.1, 0.5, 0.99, 1.0, 1.5, np.inf])
    w = weights_from_distance(d, 1.0, kernel)
    assert np.all((w >= 0) & (w <= 1))
    assert w[0] == 1.0
    assert np.all(w[d >= 1.0] == 0.0)


@pytest.mark.parametrize("kernel", sorted(KERNELS))
def test_weights_monotone_in_distance(kernel):
    d = np.linspace(0.0, 2.0, 41)
    w = weights_from_distance(d, 1.3, kernel)
    assert np.all(np.diff(w) <= 1e-12)


def test_tricube_values():
    u = np.array([0.0, 0.5])
    assert np.allclose(get_kernel("tricube")(u), [1.0, (1 - 0.125) ** 3])


def test_unknown_kernel():
    with pytest.raises(InvalidArgument):
        get_kernel("gaussian")


@pytest.mark.parametrize("bw", [0.0, -1.0, np.inf, np.nan, "wide"])
def test_bad_bandwidth(bw):
    with pytest.raises(InvalidArgument):
        weights_from_distance(np.array([0.1]), bw)


def test_categorical_mismatch_gets_zero_weight_without_lambda():
    rows = pd.DataFrame({
        "x": [0.0, 0.0, 0.01, 5.0],
        "g": ["A", "B", "B", "A"],
    })
    w = similarity_weights({"x": 0.0, "g": "A"}, rows, 100.0)
    assert w[1] == 0.0 and w[2] == 0.0
    assert w[0] == 1.0
    assert w[3] > 0.0


def test_lambda_penalises_but_keeps_mismatch():
    rows = pd.DataFrame({"x": [0.0, 0.0], "g": ["A", "B"]})
    w = similarity_weights({"x": 0.0, "g": "A"}, rows, 2.0, lambda_=1.0)
    assert w[0] == 1.0
    assert 0.0 < w[1] < 1.0


def test_empty_rows_give_empty_vector():
    rows = pd.DataFrame({"x": pd.Series([], dtype=float)})
    assert similarity_weights({"x": 0.0}, rows, 1.0).shape == (0,)


def test_missing_values_rejected_without_scale():
    rows = pd.DataFrame({"x": [0.0, np.nan]})
    with pytest.raises(InvalidArgument):
        similarity_weights({"x": 0.0}, rows, 1.0)


def test_weighter_matches_function(numeric_table):
    cols = ["x1", "x2"]
    weighter = SimilarityWeighter(numeric_table, cols)
    point = numeric_table.frame.iloc[3]
    w1 = weighter(point, 1.0)
    w2 = similarity_weights(point, numeric_table.frame, 1.0, columns=cols, scale=weighter.scale)
    assert np.allclose(w1, w2)
    assert w1[3] == 1.0


def test_weighter_matrix_rows(numeric_table, simple_path):
    weighter = SimilarityWeighter(numeric_table, ["x1", "x2"])
    m = weighter.matrix(simple_path.path, 0.8)
    assert m.shape == (len(simple_path), numeric_table.n_rows)
    assert np.allclose(m[2], weighter(simple_path.path.iloc[2], 0.8))


def test_weighter_rejects_unknown_columns(numeric_table):
    with pytest.raises(InvalidArgument):
        SimilarityWeighter(numeric_table, ["nope"])


def test_scales_are_sample_sd():
    table = PreparedTable.from_frame(pd.DataFrame({"x": [1.0, 2.0, 3.0, 4.0]}))
    weighter = SimilarityWeighter(table, ["x"])
    assert weighter.scale["x"] == pytest.approx(np.std([1, 2, 3, 4], ddof=1))
