from __future__ import annotations


class GraphingError(Exception):
    """Base class for graphing errors."""


class GraphDataError(GraphingError, ValueError):
    """Raised when a value buffer or construction argument is rejected."""


class AxisLimitError(GraphingError, ValueError):
    """Raised for an out-of-range axis index or a non-finite explicit axis limit."""
