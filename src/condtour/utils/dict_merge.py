from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping, Optional


def deep_update(base: Mapping[str, Any], override: Optional[Mapping[str, Any]]) -> dict:
    """Return a copy of *base* recursively updated with *override*.

    Nested mappings in ``override`` are merged into copies of the corresponding
    sub-dictionaries in ``base``; any other value replaces the entry.  Neither
    argument is modified.  ``override=None`` returns a plain deep copy.
    """
    result = deepcopy(dict(base))
    if not override:
        return result
    stack = [(result, override)]
    while stack:
        dst, src = stack.pop()
        for k, v in src.items():
            if isinstance(v, Mapping) and isinstance(dst.get(k), dict):
                dst[k] = deepcopy(dst[k])
                stack.append((dst[k], v))
            else:
                dst[k] = deepcopy(v)
    return result


__all__ = ["deep_update"]
