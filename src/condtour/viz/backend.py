from __future__ import annotations

import importlib
import os
import sys
from typing import Optional

from ..utils.logging import get_logger

log = get_logger("condtour.viz")

ENV_BACKEND = "CONDTOUR_BACKEND"
NON_INTERACTIVE = {"agg", "pdf", "ps", "svg", "cairo", "template"}


def _has_display() -> bool:
    """Best-effort check for a GUI display."""
    if sys.platform.startswith("linux"):
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
    return True


def _tk_available() -> bool:
    try:
        import tkinter  # noqa: F401
    except ImportError:
        return False
    return True


def detect_backend(prefer: str = "TkAgg") -> str:
    """Pick a matplotlib backend for the tour viewer.

    ``CONDTOUR_BACKEND`` wins, then ``MPLBACKEND``; otherwise ``prefer`` is used
    when a display and Tk are available, and ``Agg`` when they are not.
    """
    for var in (ENV_BACKEND, "MPLBACKEND"):
        env = os.environ.get(var)
        if env:
            return env
    if prefer.lower() in ("tkagg", "tk") and _tk_available() and _has_display():
        return "TkAgg"
    return "Agg"


def setup_matplotlib_backend(
    prefer: str = "TkAgg", fallback: str = "Agg", force: Optional[str] = None
) -> str:
    """Select the backend before pyplot is imported and return the one in use.

    Once pyplot has been imported the current backend is left alone.
    """
    if "matplotlib.pyplot" in sys.modules:
        import matplotlib

        return matplotlib.get_backend()

    requested = force or os.environ.get(ENV_BACKEND) or os.environ.get("MPLBACKEND")
    backend = requested or detect_backend(prefer=prefer)
    if not requested and backend.lower() != prefer.lower():
        backend = fallback

    import matplotlib

    try:
        matplotlib.use(backend, force=True)
    except (ImportError, ValueError):
        log.warning("[viz] backend %s unavailable, using %s", backend, fallback)
        matplotlib.use(fallback, force=True)

    importlib.import_module("matplotlib.pyplot")
    log.debug("[viz] matplotlib backend %s", matplotlib.get_backend())
    return matplotlib.get_backend()


def is_interactive_backend(name: Optional[str] = None) -> bool:
    """True when ``name`` (default: the active backend) can show windows."""
    if name is None:
        import matplotlib

        name = matplotlib.get_backend()
    return name.lower() not in NON_INTERACTIVE


__all__ = ["detect_backend", "setup_matplotlib_backend", "is_interactive_backend"]
