"""Exception hierarchy for condtour."""

from __future__ import annotations


class CondtourError(Exception):
    """Base class for all errors raised by condtour."""


class SetupError(CondtourError, ValueError):
    """Invalid session configuration, detected before any tour starts."""


class PartitionError(SetupError):
    """Response, section and condition roles overlap or are malformed."""


class EmptyTableError(SetupError):
    """No observations remain after missing-value removal."""


class InvalidArgument(CondtourError, ValueError):
    """An argument is outside its valid range."""


class TourEndedError(CondtourError, RuntimeError):
    """A transition was requested after :meth:`TourController.end`."""


__all__ = [
    "CondtourError",
    "SetupError",
    "PartitionError",
    "EmptyTableError",
    "InvalidArgument",
    "TourEndedError",
]
