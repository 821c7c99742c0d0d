"""Interactive conditional tour comparing a linear fit with the true surface.

Keys: ``]``/``[`` move along the path, ``.``/``,`` change the bandwidth,
arrows turn the 3-D view, ``s`` saves a snapshot, ``q`` quits.  Set
``CONDTOUR_BACKEND=Agg`` to build the figures without opening windows.
"""

from __future__ import annotations

import argparse

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from condtour import EstimatorPredictor, FunctionPredictor, condtour
from condtour.logging import init_logging


def _make_data(n: int = 400, seed: int = 1) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    x3 = rng.normal(size=n)
    kind = rng.choice(["a", "b", "c"], size=n)
    y = np.sin(x1) + 0.5 * x2 ** 2 - 0.3 * x3 + (kind == "b") + rng.normal(scale=0.2, size=n)
    return pd.DataFrame({"y": y, "x1": x1, "x2": x2, "x3": x3, "kind": kind})


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--view3d", action="store_true", help="two section variables in 3-D")
    parser.add_argument("--threshold", type=float, default=1.0)
    parser.add_argument("--log", default="info", choices=["none", "info", "debug"])
    args = parser.parse_args()

    init_logging(args.log)
    data = _make_data()
    numeric = ["x1", "x2", "x3"]
    linear = EstimatorPredictor(
        LinearRegression().fit(data[numeric], data["y"]), columns=numeric, name="linear"
    )

    def truth(rows):
        r = rows.reset_index(drop=True)
        return (np.sin(r["x1"]) + 0.5 * r["x2"] ** 2 - 0.3 * r["x3"]
                + (r["kind"].astype(str) == "b")).to_numpy(dtype=float)

    truth_model = FunctionPredictor(truth, name="truth")

    section = ["x1", "x2"] if args.view3d else "x1"
    condtour(
        data,
        [linear, truth_model],
        response="y",
        section=section,
        threshold=args.threshold,
        lambda_=1.0,
        view3d=args.view3d,
    )


if __name__ == "__main__":
    main()
