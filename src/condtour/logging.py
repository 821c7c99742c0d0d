from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

_LEVEL_MAP = {
    "none": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

ENV_LEVEL = "CONDTOUR_LOG_LEVEL"


def _normalize(level: Optional[str]) -> int:
    if not level:
        return logging.WARNING
    key = str(level).strip().lower()
    if key in _LEVEL_MAP:
        return _LEVEL_MAP[key]
    return getattr(logging, key.upper(), logging.WARNING)


def level_from_cfg(cfg: Any) -> int:
    """Return the logging level named by ``cfg.logging.level``.

    ``cfg`` may be a :class:`~condtour.config.schema.TourConfig` or a plain
    mapping.  The ``CONDTOUR_LOG_LEVEL`` environment variable wins over both.
    """
    env = os.getenv(ENV_LEVEL)
    if env:
        return _normalize(env)
    if cfg is None:
        return logging.WARNING
    if isinstance(cfg, Mapping):
        lg = cfg.get("logging", {}) or {}
        return _normalize(lg.get("level"))
    lg = getattr(cfg, "logging", None)
    return _normalize(getattr(lg, "level", None))


def init_logging(level: int | str | None = None) -> None:
    """Install a root handler once and set the ``condtour`` level.

    Repeated calls may change the level but never add a second handler.
    """
    lvl = _normalize(level) if isinstance(level, str) or level is None else int(level)

    fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    datefmt = "%H:%M:%S"

    root = logging.getLogger()
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        root.addHandler(h)
    root.setLevel(lvl)

    logging.getLogger("condtour").setLevel(lvl)


def init_logging_from_cfg(cfg: Any) -> None:
    init_logging(level_from_cfg(cfg))
