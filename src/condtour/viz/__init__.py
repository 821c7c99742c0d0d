"""Matplotlib rendering for conditional tours.

:class:`TourViewer` is a thin observer of a
:class:`~condtour.tour.TourController`; :func:`write_snapshot` renders a
:class:`~condtour.tour.TourSnapshot` to PDF files.
"""

from .backend import setup_matplotlib_backend

# Initialize backend once at import time; safe in headless or GUI contexts.
setup_matplotlib_backend()

from .defaults import VIZ_DEFAULTS, merge_defaults  # noqa: E402
from .scene import TourFigures, TourScene  # noqa: E402
from .snapshot import snapshot_paths, write_snapshot  # noqa: E402
from .view import TourViewer  # noqa: E402

__all__ = [
    "VIZ_DEFAULTS",
    "merge_defaults",
    "setup_matplotlib_backend",
    "TourFigures",
    "TourScene",
    "TourViewer",
    "snapshot_paths",
    "write_snapshot",
]
