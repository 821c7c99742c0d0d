"""Prediction capability consumed by the section view.

The engine never looks at what kind of model it is given.  Callers wrap each
model in a :class:`Predictor` that says what it can do: point predictions
always, interval bounds and class probabilities optionally.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
import pandas as pd

Bounds = Tuple[np.ndarray, np.ndarray, np.ndarray]


@runtime_checkable
class Predictor(Protocol):
    name: str
    supports_bounds: bool
    supports_probabilities: bool

    def predict(self, rows: pd.DataFrame) -> np.ndarray: ...

    def predict_with_bounds(self, rows: pd.DataFrame) -> Bounds: ...

    def predict_probabilities(self, rows: pd.DataFrame) -> pd.DataFrame: ...


class FunctionPredictor:
    """Predictor built from plain callables.

    ``fn(rows)`` returns one prediction per row.  ``bounds(rows)`` returns
    ``(fit, lower, upper)`` and ``probabilities(rows)`` a frame with one column
    per class; both are optional.
    """

    def __init__(
        self,
        fn: Callable[[pd.DataFrame], Any],
        *,
        bounds: Optional[Callable[[pd.DataFrame], Bounds]] = None,
        probabilities: Optional[Callable[[pd.DataFrame], Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        self._fn = fn
        self._bounds = bounds
        self._probabilities = probabilities
        self.name = name or getattr(fn, "__name__", "model")

    @property
    def supports_bounds(self) -> bool:
        return self._bounds is not None

    @property
    def supports_probabilities(self) -> bool:
        return self._probabilities is not None

    def predict(self, rows: pd.DataFrame) -> np.ndarray:
        return np.asarray(self._fn(rows)).reshape(-1)

    def predict_with_bounds(self, rows: pd.DataFrame) -> Bounds:
        if self._bounds is None:
            raise NotImplementedError(f"{self.name} does not provide interval bounds")
        fit, lower, upper = self._bounds(rows)
        return (
            np.asarray(fit, dtype=float).reshape(-1),
            np.asarray(lower, dtype=float).reshape(-1),
            np.asarray(upper, dtype=float).reshape(-1),
        )

    def predict_probabilities(self, rows: pd.DataFrame) -> pd.DataFrame:
        if self._probabilities is None:
            raise NotImplementedError(f"{self.name} does not provide class probabilities")
        out = self._probabilities(rows)
        if not isinstance(out, pd.DataFrame):
            out = pd.DataFrame(np.asarray(out, dtype=float))
        return out.reset_index(drop=True)


class EstimatorPredictor:
    """Adapter for scikit-learn style estimators.

    ``columns`` selects (and orders) the feature columns passed to the
    estimator.  By default the names in ``feature_names_in_`` are used, in fit
    order, and every incoming column is passed when the estimator has none.
    Probabilities come from ``predict_proba`` labelled by ``classes_`` when the
    estimator has both.
    """

    def __init__(self, estimator: Any, *, columns: Optional[Sequence[str]] = None,
                 name: Optional[str] = None) -> None:
        self.estimator = estimator
        self.columns = None if columns is None else list(columns)
        self.name = name or type(estimator).__name__
        self.supports_bounds = False

    @property
    def supports_probabilities(self) -> bool:
        return hasattr(self.estimator, "predict_proba")

    def _features(self, rows: pd.DataFrame) -> pd.DataFrame:
        if self.columns is not None:
            return rows[self.columns]
        fitted = getattr(self.estimator, "feature_names_in_", None)
        if fitted is not None:
            return rows[list(fitted)]
        return rows

    def predict(self, rows: pd.DataFrame) -> np.ndarray:
        return np.asarray(self.estimator.predict(self._features(rows))).reshape(-1)

    def predict_with_bounds(self, rows: pd.DataFrame) -> Bounds:
        raise NotImplementedError(f"{self.name} does not provide interval bounds")

    def predict_probabilities(self, rows: pd.DataFrame) -> pd.DataFrame:
        proba = np.asarray(self.estimator.predict_proba(self._features(rows)), dtype=float)
        classes = getattr(self.estimator, "classes_", None)
        cols = list(classes) if classes is not None else list(range(proba.shape[1]))
        return pd.DataFrame(proba, columns=cols)


def as_predictors(models: Any) -> list:
    """Normalise one predictor or a sequence of them to a list.

    Anything that is not already a :class:`Predictor` is rejected so that
    model-specific dispatch stays with the caller.
    """
    items = list(models) if isinstance(models, (list, tuple)) else [models]
    out = []
    for i, m in enumerate(items):
        if not isinstance(m, Predictor):
            raise TypeError(
                f"model {i} is {type(m).__name__}; wrap it in FunctionPredictor "
                "or EstimatorPredictor"
            )
        out.append(m)
    return out


__all__ = ["Bounds", "Predictor", "FunctionPredictor", "EstimatorPredictor", "as_predictors"]
