from __future__ import annotations

import argparse
import pathlib
import sys

import pandas as pd

from .arrange import arrange_conditions
from .compute.weights import SimilarityWeighter
from .config.loader import DEFAULT_CONFIG_PATH, load_tour_config
from .data.table import PreparedTable
from .errors import CondtourError
from .logging import init_logging_from_cfg
from .path.builder import build_path


def _read_csv(p: str) -> pd.DataFrame:
    if not pathlib.Path(p).exists():
        raise SystemExit(f"no such file: {p}")
    return pd.read_csv(p)


def _write_csv(frame: pd.DataFrame, out: str | None, index: bool = False) -> None:
    if out:
        pathlib.Path(out).parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(out, index=index)
    else:
        frame.to_csv(sys.stdout, index=index)


def _config(args):
    cfg = load_tour_config(args.config)
    init_logging_from_cfg(cfg)
    return cfg


def cmd_path(args):
    cfg = _config(args)
    data = _read_csv(args.data)
    if args.columns:
        data = data[args.columns]
    table = PreparedTable.from_frame(data)
    tour_path = build_path(
        table,
        args.n_centroids if args.n_centroids is not None else cfg.path.n_centroids,
        args.n_interp if args.n_interp is not None else cfg.path.n_interp,
        seed=args.seed if args.seed is not None else cfg.path.seed,
        sequencing=args.sequencing or cfg.path.sequencing,
    )
    out = tour_path.centroids if args.centroids else tour_path.path
    _write_csv(out, args.out)
    return 0


def cmd_arrange(args):
    cfg = _config(args)
    data = _read_csv(args.data)
    keep = [c for c in data.columns if c not in set(args.exclude or ())]
    table = PreparedTable.from_frame(data[keep])
    groups = arrange_conditions(
        table,
        args.method or cfg.conditions.order,
        max_groups=args.max_groups or cfg.conditions.max_groups,
    )
    for g in groups:
        print(", ".join(g))
    return 0


def cmd_weights(args):
    cfg = _config(args)
    data = _read_csv(args.data)
    path = _read_csv(args.path)
    missing = [c for c in path.columns if c not in data.columns]
    if missing:
        raise SystemExit(f"path columns not in data: {missing}")
    cols = list(path.columns)
    table = PreparedTable.from_frame(data[cols])
    wc = cfg.weights
    weighter = SimilarityWeighter(
        table,
        cols,
        lambda_=args.lambda_ if args.lambda_ is not None else wc.lambda_,
        kernel=args.kernel or wc.kernel,
    )
    m = weighter.matrix(
        path,
        args.threshold if args.threshold is not None else wc.threshold,
        args.distance or wc.distance,
    )
    _write_csv(pd.DataFrame(m, columns=[f"obs{i + 1}" for i in range(m.shape[1])]), args.out)
    return 0


def make_parser():
    p = argparse.ArgumentParser(prog="condtour")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="tour config YAML")
    sub = p.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("path", help="Build a tour path through a CSV data set")
    pp.add_argument("--data", required=True, help="input CSV")
    pp.add_argument("--n-centroids", dest="n_centroids", type=int, default=None)
    pp.add_argument("--n-interp", dest="n_interp", type=int, default=None)
    pp.add_argument("--columns", nargs="+", default=None, help="columns to build the path over")
    pp.add_argument("--seed", type=int, default=None)
    pp.add_argument("--sequencing", default=None,
                    choices=["repetitive_nn", "nearest_neighbor", "two_opt", "identity"])
    pp.add_argument("--centroids", action="store_true", help="write the ordered centroids only")
    pp.add_argument("--out", default=None, help="output CSV (default: stdout)")
    pp.set_defaults(func=cmd_path)

    pa = sub.add_parser("arrange", help="Order and group condition variables")
    pa.add_argument("--data", required=True, help="input CSV")
    pa.add_argument("--method", default=None, choices=["default", "greedy", "none"])
    pa.add_argument("--exclude", nargs="+", default=None, help="columns to leave out")
    pa.add_argument("--max-groups", dest="max_groups", type=int, default=None)
    pa.set_defaults(func=cmd_arrange)

    pw = sub.add_parser("weights", help="Weight matrix of observations along a path")
    pw.add_argument("--data", required=True, help="input CSV")
    pw.add_argument("--path", required=True, help="path CSV (one conditioning point per row)")
    pw.add_argument("--threshold", type=float, default=None)
    pw.add_argument("--distance", default=None, choices=["euclidean", "maxnorm"])
    pw.add_argument("--lambda", dest="lambda_", type=float, default=None)
    pw.add_argument("--kernel", default=None,
                    choices=["tricube", "epanechnikov", "triangular", "cosine"])
    pw.add_argument("--out", default=None, help="output CSV (default: stdout)")
    pw.set_defaults(func=cmd_weights)

    return p


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    parser = make_parser()
    ns = parser.parse_args(argv)
    try:
        return ns.func(ns)
    except (CondtourError, ValueError) as exc:
        print(f"condtour: error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
