import io

import pandas as pd
import pytest

from condtour.cli import main


@pytest.fixture
def data_csv(tmp_path, numeric_df):
    p = tmp_path / "data.csv"
    numeric_df.to_csv(p, index=False)
    return p


def _run(argv, tmp_path):
    return main(["--config", str(tmp_path / "no-config.yaml"), *argv])


def test_path_to_file(data_csv, tmp_path):
    out = tmp_path / "out" / "path.csv"
    rc = _run(["path", "--data", str(data_csv), "--columns", "x1", "x2",
               "--n-centroids", "5", "--n-interp", "2", "--out", str(out)], tmp_path)
    assert rc == 0
    frame = pd.read_csv(out)
    assert list(frame.columns) == ["x1", "x2"]
    assert len(frame) == 13


def test_path_centroids_to_stdout(data_csv, tmp_path, capsys):
    rc = _run(["path", "--data", str(data_csv), "--columns", "x1",
               "--n-centroids", "4", "--centroids"], tmp_path)
    assert rc == 0
    frame = pd.read_csv(io.StringIO(capsys.readouterr().out))
    assert len(frame) == 4


def test_arrange_prints_groups(data_csv, tmp_path, capsys):
    rc = _run(["arrange", "--data", str(data_csv), "--exclude", "y", "--method", "greedy"],
              tmp_path)
    assert rc == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    names = {n.strip() for line in lines for n in line.split(",")}
    assert names == {"x1", "x2", "x3"}


def test_weights_matrix(data_csv, tmp_path, capsys):
    path_csv = tmp_path / "tour.csv"
    pd.DataFrame({"x1": [0.0, 1.0], "x2": [0.0, 0.5]}).to_csv(path_csv, index=False)
    rc = _run(["weights", "--data", str(data_csv), "--path", str(path_csv),
               "--threshold", "1.5", "--distance", "maxnorm"], tmp_path)
    assert rc == 0
    m = pd.read_csv(io.StringIO(capsys.readouterr().out))
    assert m.shape == (2, 60)
    assert list(m.columns[:2]) == ["obs1", "obs2"]
    assert ((m >= 0) & (m <= 1)).all().all()


def test_errors_return_exit_code(data_csv, tmp_path, capsys):
    rc = _run(["path", "--data", str(data_csv), "--n-centroids", "1000"], tmp_path)
    assert rc == 2
    assert "condtour: error:" in capsys.readouterr().err


def test_bad_config_reports_error(data_csv, tmp_path, capsys):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("weights: {kernel: gaussian}\n")
    rc = main(["--config", str(cfg), "arrange", "--data", str(data_csv)])
    assert rc == 2
    assert "invalid tour config" in capsys.readouterr().err


def test_missing_data_file(tmp_path):
    with pytest.raises(SystemExit):
        _run(["arrange", "--data", str(tmp_path / "absent.csv")], tmp_path)
