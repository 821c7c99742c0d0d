from copy import deepcopy
from typing import Any, Dict, Mapping

from condtour.utils.dict_merge import deep_update

# Viewer defaults used when no YAML ``viz`` section is supplied.
VIZ_DEFAULTS: Dict[str, Any] = {
    "figures": {
        "section": {"size": [6.0, 5.0], "title": "Conditional expectation"},
        "condition": {"size": [7.0, 6.0], "title": "Condition selectors", "max_cols": 4},
        "diagnostics": {"size": [8.0, 3.5], "title": "Tour diagnostics"},
    },
    "data": {
        "color": "#000000",
        "marker": "o",
        "size": 18.0,
    },
    "models": {
        "colors": ["#1b9e77", "#d95f02", "#7570b3", "#e7298a", "#66a61e"],
        "line_width": 2.0,
        "bounds_style": "--",
        "surface_alpha": 0.6,
        "cmap": "viridis",
    },
    "condition": {
        "point_color": "#e41a1c",
        "point_size": 60.0,
        "bar_color": "#bdbdbd",
        "bar_highlight": "#e41a1c",
        "hist_bins": 20,
        "data_alpha": 0.4,
    },
    "diagnostics": {
        "hist_bins": 20,
        "hist_color": "#4c72b0",
        "line_color": "#333333",
        "marker_color": "#e41a1c",
    },
}


def merge_defaults(user_viz: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Return ``VIZ_DEFAULTS`` merged with ``user_viz``."""
    base = deepcopy(VIZ_DEFAULTS)
    if not user_viz:
        return base
    return deep_update(base, user_viz)
