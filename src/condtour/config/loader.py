"""Tour configuration loader."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from condtour.utils.dict_merge import deep_update
from .schema import TourConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "load_tour_config",
    "read_yaml",
    "validate_tour_config",
    "dump_effective_config",
]

DEFAULT_CONFIG_PATH = "configs/tour.yaml"


def read_yaml(path: str | Path) -> Dict[str, Any]:
    """Return the mapping stored in ``path`` or ``{}`` when the file is absent."""
    p = Path(path)
    if not p.exists():
        return {}
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise TypeError(f"Top-level YAML at {path} must be a mapping")
        return data


def _format_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def load_tour_config(
    path: str | Path | None = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> TourConfig:
    """Load, merge and validate a :class:`TourConfig`.

    ``path`` defaults to ``configs/tour.yaml`` relative to the working
    directory; a missing file yields the schema defaults.  ``overrides`` is a
    nested mapping merged on top of the file.
    """
    raw = read_yaml(path if path is not None else DEFAULT_CONFIG_PATH)
    return validate_tour_config(deep_update(raw, overrides))


def validate_tour_config(data: Mapping[str, Any]) -> TourConfig:
    """Validate an in-memory mapping; errors name the offending dotted keys."""
    try:
        return TourConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ValueError(f"invalid tour config: {_format_error(exc)}") from exc


def dump_effective_config(cfg: TourConfig, out: str | Path) -> Path:
    """Write ``cfg`` as YAML to ``out`` and return the path."""
    p = Path(out)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = cfg.model_dump(by_alias=True)
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
    return p
