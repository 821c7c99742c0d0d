"""Data preparation helpers."""

from .table import MAX_CONDITION_GROUPS, Partition, PreparedTable, column_scales

__all__ = ["MAX_CONDITION_GROUPS", "Partition", "PreparedTable", "column_scales"]
