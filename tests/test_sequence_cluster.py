import numpy as np
import pandas as pd
import pytest

from condtour.data.table import PreparedTable
from condtour.errors import InvalidArgument
from condtour.path.cluster import check_k, cluster, gower_dissimilarity, numeric_ranges
from condtour.path.sequence import SEQUENCERS, path_length, repetitive_nn, sequence, two_opt


def _line_matrix(xs):
    xs = np.asarray(xs, dtype=float)
    return np.abs(xs[:, None] - xs[None, :])


@pytest.mark.parametrize("method", sorted(SEQUENCERS))
def test_sequencers_return_permutations(method):
    d = _line_matrix([3.0, 0.0, 7.0, 1.0, 5.0])
    order = sequence(d, method)
    assert sorted(order) == list(range(5))


def test_repetitive_nn_finds_line_order():
    d = _line_matrix([3.0, 0.0, 7.0, 1.0, 5.0])
    order = repetitive_nn(d)
    assert path_length(d, order) == pytest.approx(7.0)


def test_two_opt_not_worse_than_repetitive_nn(rng):
    pts = rng.uniform(size=(12, 2))
    d = np.sqrt(((pts[:, None, :] - pts[None, :, :]) ** 2).sum(-1))
    assert path_length(d, two_opt(d)) <= path_length(d, repetitive_nn(d)) + 1e-12


def test_sequence_is_deterministic(rng):
    pts = rng.uniform(size=(9, 2))
    d = np.sqrt(((pts[:, None, :] - pts[None, :, :]) ** 2).sum(-1))
    assert sequence(d) == sequence(d)


def test_identity_and_unknown_method():
    d = _line_matrix([0.0, 1.0, 2.0])
    assert sequence(d, "identity") == [0, 1, 2]
    with pytest.raises(InvalidArgument):
        sequence(d, "christofides")


def test_check_k_bounds():
    assert check_k(2, 5) == 2
    for bad in (1, 6, True, None, "x", 2.5, float("inf")):
        with pytest.raises(InvalidArgument):
            check_k(bad, 5)


def test_numeric_cluster_uses_kmeans(numeric_table):
    res = cluster(numeric_table, 4, seed=0)
    assert res.method == "kmeans"
    assert res.centers.shape == (4, numeric_table.frame.shape[1])
    assert res.dissimilarity.shape == (4, 4)
    assert np.allclose(np.diag(res.dissimilarity), 0.0)


def test_mixed_cluster_uses_medoids(mixed_df):
    table = PreparedTable.from_frame(mixed_df)
    res = cluster(table, 5)
    assert res.method == "medoids"
    assert len(set(res.labels)) == 5
    assert res.medoid_rows is not None
    for c, row in enumerate(res.medoid_rows):
        assert res.labels[row] == c


def test_gower_range_and_mismatch():
    frame = pd.DataFrame({
        "x": [0.0, 10.0],
        "g": pd.Categorical(["A", "B"]),
    })
    d = gower_dissimilarity(frame, frame, numeric_ranges(frame))
    assert np.allclose(d, [[0.0, 1.0], [1.0, 0.0]])
