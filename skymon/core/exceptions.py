#!/usr/bin/env python3
"""
skymon Exceptions

Caller-input errors are raised by the filter builder before any store call.
Store, timeout and invariant errors come out of the query engine.
"""

from typing import Optional


class SkymonError(Exception):
    """Base class for all skymon errors."""


class QueryValidationError(SkymonError):
    """Request parameters could not be turned into a Query."""


class MissingTimeRange(QueryValidationError):
    def __init__(self) -> None:
        super().__init__("timerange wasn't specified")


class InvalidTimestamp(QueryValidationError):
    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"{field} timestamp is not valid; expected to be epoch format, but received {value}"
        )


class InvalidFrequency(QueryValidationError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"frequency value is not valid; received {value}")


class InvalidMetricType(QueryValidationError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"metric type is not valid; received {value}")


class StoreUnavailable(SkymonError):
    """Backing store could not be opened or provisioned."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class InconsistentAggregate(SkymonError):
    """Store returned more than one row for a single-group aggregation."""

    def __init__(self, rows: int) -> None:
        self.rows = rows
        super().__init__(f"only one aggregation is expected, store returned {rows}")


class QueryTimeout(SkymonError):
    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"query exceeded its time budget of {seconds:g}s")
