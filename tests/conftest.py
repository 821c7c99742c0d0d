import os

os.environ["MPLBACKEND"] = "Agg"

import numpy as np
import pandas as pd
import pytest

from condtour.data.table import PreparedTable
from condtour.models import FunctionPredictor
from condtour.path.builder import TourPath


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def numeric_df(rng):
    n = 60
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    x3 = 0.8 * x1 + rng.normal(scale=0.3, size=n)
    y = 1.0 + 2.0 * x1 - x2 + rng.normal(scale=0.1, size=n)
    return pd.DataFrame({"y": y, "x1": x1, "x2": x2, "x3": x3})


@pytest.fixture
def mixed_df(rng):
    n = 40
    return pd.DataFrame({
        "y": rng.normal(size=n),
        "x1": rng.normal(size=n),
        "x2": rng.uniform(0, 10, size=n),
        "g": rng.choice(["A", "B", "C"], size=n),
    })


@pytest.fixture
def numeric_table(numeric_df):
    return PreparedTable.from_frame(numeric_df)


@pytest.fixture
def line_table():
    return PreparedTable.from_frame(pd.DataFrame({"x": [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]}))


@pytest.fixture
def simple_path():
    """Hand-made path over x1/x2, every row a centroid."""
    return TourPath.from_frame(pd.DataFrame({
        "x1": [-1.0, -0.5, 0.0, 0.5, 1.0],
        "x2": [0.0, 0.2, 0.4, 0.6, 0.8],
    }))


@pytest.fixture
def linear_predictor():
    def linear_fit(rows):
        return 1.0 + 2.0 * rows["x1"].to_numpy() - rows["x2"].to_numpy()

    return FunctionPredictor(linear_fit)
