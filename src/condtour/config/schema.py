"""Pydantic models for tour configuration."""
from __future__ import annotations

import math
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DistanceName = Literal["euclidean", "maxnorm"]
KernelName = Literal["tricube", "epanechnikov", "triangular", "cosine"]
SequencingName = Literal["repetitive_nn", "nearest_neighbor", "two_opt", "identity"]
OrderName = Literal["default", "greedy", "none"]


class WeightsConfig(BaseModel):
    threshold: float = Field(default=1.0, gt=0)
    lambda_: float | None = Field(default=None, alias="lambda", ge=0)
    distance: DistanceName = "euclidean"
    kernel: KernelName = "tricube"

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("threshold")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("threshold must be finite")
        return v


class PathConfig(BaseModel):
    n_centroids: int = Field(default=25, ge=2)
    n_interp: int = Field(default=4, ge=0)
    seed: int = 0
    sequencing: SequencingName = "repetitive_nn"

    model_config = ConfigDict(extra="forbid")


class ConditionsConfig(BaseModel):
    order: OrderName = "default"
    max_groups: int = Field(default=20, ge=1)

    model_config = ConfigDict(extra="forbid")


class TourControlConfig(BaseModel):
    bandwidth_step: float = Field(default=0.01, gt=0, lt=1)
    rotate_step: float = Field(default=2.0, gt=0)
    drag_step: float = Field(default=1.0, gt=0)
    precompute: bool = True
    reset_bandwidth_on_move: bool = False

    model_config = ConfigDict(extra="forbid")


class SnapshotConfig(BaseModel):
    directory: str = "."
    prefix: str = "snapshot"

    model_config = ConfigDict(extra="forbid")


class LoggingConfig(BaseModel):
    level: Literal["none", "info", "debug"] = "info"

    model_config = ConfigDict(extra="forbid")


class TourConfig(BaseModel):
    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    path: PathConfig = Field(default_factory=PathConfig)
    conditions: ConditionsConfig = Field(default_factory=ConditionsConfig)
    tour: TourControlConfig = Field(default_factory=TourControlConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    viz: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "DistanceName",
    "KernelName",
    "SequencingName",
    "OrderName",
    "WeightsConfig",
    "PathConfig",
    "ConditionsConfig",
    "TourControlConfig",
    "SnapshotConfig",
    "LoggingConfig",
    "TourConfig",
]
