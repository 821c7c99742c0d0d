from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from ..errors import InvalidArgument

# Each kernel maps u = d / bandwidth >= 0 to [0, 1]: 1 at u = 0, non-increasing,
# and exactly 0 for u >= 1.
Kernel = Callable[[np.ndarray], np.ndarray]


def tricube(u: np.ndarray) -> np.ndarray:
    v = np.clip(1.0 - u ** 3, 0.0, 1.0)
    return v ** 3


def epanechnikov(u: np.ndarray) -> np.ndarray:
    return np.clip(1.0 - u * u, 0.0, 1.0)


def triangular(u: np.ndarray) -> np.ndarray:
    return np.clip(1.0 - u, 0.0, 1.0)


def cosine(u: np.ndarray) -> np.ndarray:
    out = np.cos(0.5 * np.pi * np.minimum(u, 1.0))
    # cos(pi/2) is 6e-17, not 0
    out[u >= 1.0] = 0.0
    return np.clip(out, 0.0, 1.0)


KERNELS: Dict[str, Kernel] = {
    "tricube": tricube,
    "epanechnikov": epanechnikov,
    "triangular": triangular,
    "cosine": cosine,
}


def get_kernel(name: str) -> Kernel:
    try:
        return KERNELS[name]
    except KeyError:
        raise InvalidArgument(
            f"unknown kernel {name!r}; expected one of {sorted(KERNELS)}"
        ) from None


__all__ = ["Kernel", "KERNELS", "get_kernel", "tricube", "epanechnikov", "triangular", "cosine"]
