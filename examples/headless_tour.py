"""Scripted conditional tour, no window required.

- Simulates a small data set with an interaction between ``x1`` and ``x2``.
- Fits two scikit-learn models and wraps them as predictors.
- Replays a fixed sequence of tour events and writes snapshot PDFs.
"""

from __future__ import annotations

import argparse
import json
import os

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression

from condtour import EstimatorPredictor, condtour
from condtour.config import dump_effective_config, load_tour_config
from condtour.tour.events import AdjustBandwidth, Advance, End, JumpTo, Snapshot
from condtour.utils.logging import configure_logging, logger


def _make_data(n: int = 300, seed: int = 0) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    x1 = rng.uniform(-2, 2, n)
    x2 = rng.uniform(-2, 2, n)
    x3 = 0.5 * x1 + rng.normal(scale=0.5, size=n)
    g = rng.choice(["north", "south"], size=n)
    y = x1 * x2 + np.where(g == "north", 1.0, -1.0) + rng.normal(scale=0.3, size=n)
    return pd.DataFrame({"y": y, "x1": x1, "x2": x2, "x3": x3, "g": g})


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--out", default="snapshots", help="snapshot directory")
    parser.add_argument("--override", type=str, help="JSON blob of config overrides")
    args = parser.parse_args()

    configure_logging()

    base = os.path.join(os.path.dirname(__file__), "..")
    overrides = {"snapshot": {"directory": args.out}, "path": {"n_centroids": 12}}
    if args.override:
        overrides.update(json.loads(args.override))
    cfg = load_tour_config(os.path.join(base, "configs/tour.yaml"), overrides=overrides)
    dump_effective_config(cfg, os.path.join(args.out, "effective.yaml"))

    data = _make_data()
    features = ["x1", "x2", "x3"]
    linear = LinearRegression().fit(data[features], data["y"])
    forest = RandomForestRegressor(n_estimators=50, random_state=0).fit(data[features], data["y"])
    models = [
        EstimatorPredictor(linear, columns=features, name="linear"),
        EstimatorPredictor(forest, columns=features, name="forest"),
    ]

    session = condtour(
        data.drop(columns="g"),
        models,
        response="y",
        section="x1",
        config=cfg,
        viewer=False,
    )
    logger.info("[headless_tour] path length %d", session.controller.path_length)

    events = [Snapshot()]
    events += [Advance()] * 5
    events += [AdjustBandwidth(0.5), Snapshot(), JumpTo(session.controller.path_length), Snapshot(), End()]
    handled = session.run(events)
    print("[headless_tour] done. events handled:", handled)


if __name__ == "__main__":
    main()
