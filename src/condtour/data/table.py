"""Prepared data tables and the predictor partition.

A :class:`PreparedTable` is the immutable view of the analyst's data that the
engine works on: missing values removed, every column classified as numeric or
categorical, and per-column scales fixed for the session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..errors import EmptyTableError, PartitionError, SetupError
from ..utils.logging import get_logger

log = get_logger("condtour.data")

MAX_CONDITION_GROUPS = 20


def _as_category(col: pd.Series) -> pd.Series:
    if isinstance(col.dtype, pd.CategoricalDtype):
        return col.cat.remove_unused_categories()
    return col.astype("category")


def is_categorical(col: pd.Series) -> bool:
    return isinstance(col.dtype, pd.CategoricalDtype)


@dataclass(frozen=True)
class PreparedTable:
    """Data table with missing rows dropped and column kinds resolved."""

    frame: pd.DataFrame
    dropped: int = 0

    @classmethod
    def from_frame(cls, data: pd.DataFrame) -> "PreparedTable":
        """Validate ``data`` and return a prepared copy.

        Column names must be unique.  ``object``, ``string`` and ``bool``
        columns become categorical; every other column must be numeric.
        """
        if not isinstance(data, pd.DataFrame):
            data = pd.DataFrame(data)
        if data.columns.has_duplicates:
            dup = sorted({str(c) for c in data.columns[data.columns.duplicated()]})
            raise SetupError(f"duplicate column names: {dup}")

        n0 = len(data)
        frame = data.dropna(axis=0, how="any").reset_index(drop=True)
        dropped = n0 - len(frame)
        if dropped:
            log.info("[data] dropped %d of %d rows with missing values", dropped, n0)
        if frame.empty:
            raise EmptyTableError("no observations left after removing missing values")

        cols = {}
        for name in frame.columns:
            col = frame[name]
            if is_categorical(col) or col.dtype == object or col.dtype == bool \
                    or pd.api.types.is_string_dtype(col.dtype):
                cols[name] = _as_category(col)
            elif pd.api.types.is_numeric_dtype(col.dtype):
                cols[name] = col.astype(float)
            else:
                raise SetupError(f"column {name!r} has unsupported dtype {col.dtype}")
        return cls(frame=pd.DataFrame(cols), dropped=dropped)

    # ------------------------------------------------------------------
    @property
    def columns(self) -> List[str]:
        return list(self.frame.columns)

    @property
    def n_rows(self) -> int:
        return len(self.frame)

    def __len__(self) -> int:
        return len(self.frame)

    def is_categorical(self, name: str) -> bool:
        return is_categorical(self.frame[name])

    def numeric_columns(self, columns: Optional[Sequence[str]] = None) -> List[str]:
        cols = self.columns if columns is None else list(columns)
        return [c for c in cols if not self.is_categorical(c)]

    def categorical_columns(self, columns: Optional[Sequence[str]] = None) -> List[str]:
        cols = self.columns if columns is None else list(columns)
        return [c for c in cols if self.is_categorical(c)]

    def subset(self, columns: Sequence[str]) -> "PreparedTable":
        missing = [c for c in columns if c not in self.frame.columns]
        if missing:
            raise SetupError(f"unknown columns: {missing}")
        return PreparedTable(frame=self.frame[list(columns)], dropped=self.dropped)

    def first_row(self) -> pd.Series:
        return self.frame.iloc[0].copy()


@dataclass(frozen=True)
class Partition:
    """Disjoint response, section and condition roles."""

    response: str
    section: Tuple[str, ...]
    conditions: Tuple[Tuple[str, ...], ...]

    @property
    def condition_columns(self) -> List[str]:
        """Condition columns in display order, each listed once."""
        out: List[str] = []
        for group in self.conditions:
            for name in group:
                if name not in out:
                    out.append(name)
        return out

    def validate(self, columns: Sequence[str]) -> None:
        known = set(columns)
        if self.response not in known:
            raise PartitionError(f"response {self.response!r} is not a column")
        if not 1 <= len(self.section) <= 2:
            raise PartitionError(
                f"section must name 1 or 2 columns, got {len(self.section)}"
            )
        if len(set(self.section)) != len(self.section):
            raise PartitionError(f"section columns repeated: {list(self.section)}")
        unknown = [c for c in (*self.section, *self.condition_columns) if c not in known]
        if unknown:
            raise PartitionError(f"unknown columns: {unknown}")
        if not self.conditions or not self.condition_columns:
            raise PartitionError("at least one condition variable is required")
        if self.response in self.condition_columns:
            raise PartitionError("cannot have 'response' variable in conditions")
        if self.response in self.section:
            raise PartitionError("cannot have 'response' variable in section")
        common = set(self.section) & set(self.condition_columns)
        if common:
            raise PartitionError(
                f"cannot have variables common to both section and conditions: {sorted(common)}"
            )


def column_scales(
    table: PreparedTable,
    columns: Sequence[str],
    overrides: Optional[Mapping[str, float]] = None,
) -> Dict[str, float]:
    """Return the scale of every numeric column in ``columns``.

    The scale is the sample standard deviation over the whole table unless
    ``overrides`` supplies one.  Zero or non-finite scales become ``0.0`` and
    the corresponding column is ignored by the distance.
    """
    overrides = dict(overrides or {})
    out: Dict[str, float] = {}
    for name in table.numeric_columns(columns):
        if name in overrides:
            s = float(overrides[name])
        else:
            vals = table.frame[name].to_numpy(dtype=float)
            s = float(np.std(vals, ddof=1)) if vals.size > 1 else 0.0
        out[name] = s if np.isfinite(s) and s > 0 else 0.0
    return out


__all__ = [
    "MAX_CONDITION_GROUPS",
    "PreparedTable",
    "Partition",
    "column_scales",
    "is_categorical",
]
