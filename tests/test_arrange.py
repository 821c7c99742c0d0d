import logging

import numpy as np
import pandas as pd
import pytest

from condtour.arrange import SERIATION, arrange_conditions, association
from condtour.data.table import PreparedTable
from condtour.errors import InvalidArgument


@pytest.fixture
def assoc_table(rng):
    n = 80
    a = rng.normal(size=n)
    c = rng.normal(size=n)
    g = np.where(a > 0, "hi", "lo")
    return PreparedTable.from_frame(pd.DataFrame({
        "a": a,
        "c": c,
        "b": a + rng.normal(scale=0.05, size=n),
        "d": c + rng.normal(scale=0.05, size=n),
        "g": g,
    }))


def test_association_properties(assoc_table):
    m = association(assoc_table, assoc_table.columns)
    assert np.allclose(m, m.T)
    assert np.allclose(np.diag(m), 1.0)
    assert np.all((m >= 0) & (m <= 1))
    cols = assoc_table.columns
    assert m[cols.index("a"), cols.index("b")] > 0.9
    assert m[cols.index("a"), cols.index("g")] > 0.5


def test_constant_column_has_zero_association():
    table = PreparedTable.from_frame(pd.DataFrame({"x": [1.0, 2.0, 3.0], "k": [5.0, 5.0, 5.0]}))
    assert association(table, ["x", "k"])[0, 1] == 0.0


@pytest.mark.parametrize("method", sorted(SERIATION))
def test_every_column_in_exactly_one_group(assoc_table, method):
    groups = arrange_conditions(assoc_table, method)
    flat = [c for g in groups for c in g]
    assert sorted(flat) == sorted(assoc_table.columns)
    assert all(1 <= len(g) <= 2 for g in groups)


def test_related_columns_paired(assoc_table):
    groups = arrange_conditions(assoc_table, "default", columns=["a", "c", "b", "d"])
    pairs = {frozenset(g) for g in groups}
    assert pairs == {frozenset({"a", "b"}), frozenset({"c", "d"})}


def test_none_keeps_order(assoc_table):
    groups = arrange_conditions(assoc_table, "none", columns=["a", "c", "b"])
    assert groups == [["a", "c"], ["b"]]


def test_deterministic(assoc_table):
    assert arrange_conditions(assoc_table) == arrange_conditions(assoc_table)


def test_single_column():
    table = PreparedTable.from_frame(pd.DataFrame({"x": [1.0, 2.0]}))
    assert arrange_conditions(table) == [["x"]]


def test_errors(assoc_table):
    with pytest.raises(InvalidArgument):
        arrange_conditions(assoc_table, "magic")
    with pytest.raises(InvalidArgument):
        arrange_conditions(assoc_table, columns=[])
    with pytest.raises(InvalidArgument):
        arrange_conditions(assoc_table, max_groups=0)


def test_truncation_drops_weakest_groups(rng, caplog):
    n = 50
    base = rng.normal(size=n)
    data = {"s1": base, "s2": base + rng.normal(scale=0.01, size=n)}
    for i in range(4):
        data[f"noise{i}"] = rng.normal(size=n)
    table = PreparedTable.from_frame(pd.DataFrame(data))
    with caplog.at_level(logging.WARNING, logger="condtour"):
        groups = arrange_conditions(table, "default", max_groups=1)
    assert len(groups) == 1
    assert {"s1", "s2"} & set(groups[0])
    assert any("dropped" in r.getMessage() for r in caplog.records)
