# src/errors.py
from __future__ import annotations


class MetricsError(RuntimeError):
    """Base class for failures raised while producing dashboard metrics."""


class DataUnavailable(MetricsError):
    """The backing reporting source could not be reached or answered with an error."""


class InvalidWindow(MetricsError, ValueError):
    """The requested reporting window is malformed or empty."""


class InvariantViolation(MetricsError):
    """Metrics data breaks a structural or numeric invariant of the snapshot."""
