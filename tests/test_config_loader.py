from pathlib import Path

import pytest
import yaml

from condtour.config import TourConfig, dump_effective_config, load_tour_config
from condtour.config.loader import read_yaml, validate_tour_config
from condtour.utils.dict_merge import deep_update

REPO_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "tour.yaml"


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_tour_config(tmp_path / "absent.yaml")
    assert cfg == TourConfig()
    assert cfg.weights.lambda_ is None
    assert cfg.path.n_centroids == 25


def test_shipped_yaml_matches_defaults():
    assert load_tour_config(REPO_CONFIG) == TourConfig()


def test_file_and_overrides(tmp_path):
    p = tmp_path / "tour.yaml"
    p.write_text("weights: {threshold: 2.5, lambda: 0.5}\npath: {n_interp: 2}\n")
    cfg = load_tour_config(p, overrides={"path": {"seed": 3}, "weights": {"distance": "maxnorm"}})
    assert cfg.weights.threshold == 2.5
    assert cfg.weights.lambda_ == 0.5
    assert cfg.weights.distance == "maxnorm"
    assert cfg.path.n_interp == 2 and cfg.path.seed == 3


@pytest.mark.parametrize("bad", [
    {"weights": {"threshold": 0}},
    {"weights": {"lambda": -1}},
    {"weights": {"kernel": "gaussian"}},
    {"path": {"n_centroids": 1}},
    {"tour": {"bandwidth_step": 1.5}},
    {"unknown": {}},
    {"path": {"typo": 1}},
])
def test_validation_errors_name_keys(bad):
    with pytest.raises(ValueError) as err:
        validate_tour_config(bad)
    assert "invalid tour config" in str(err.value)


def test_top_level_must_be_mapping(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(TypeError):
        read_yaml(p)


def test_dump_effective_config_round_trips(tmp_path):
    cfg = load_tour_config(tmp_path / "absent.yaml", overrides={"weights": {"lambda": 1.0}})
    out = dump_effective_config(cfg, tmp_path / "out" / "effective.yaml")
    data = yaml.safe_load(out.read_text())
    assert data["weights"]["lambda"] == 1.0
    assert load_tour_config(out) == cfg


def test_deep_update_is_non_destructive():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    out = deep_update(base, {"a": {"b": 5}})
    assert out == {"a": {"b": 5, "c": 2}, "d": 3}
    assert base["a"]["b"] == 1
    assert deep_update(base, None) == base
