"""
Query filter builder.

Turns raw request parameters into a validated Query. Pure, no I/O.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from ...core.exceptions import (
    InvalidFrequency, InvalidMetricType, InvalidTimestamp, MissingTimeRange
)
from .model import Frequency, MetricType, Query

_EPOCH = re.compile(r"[+-]?[0-9]+")


def parse_epoch(field: str, value: str) -> datetime:
    """Parse an epoch-seconds string into a UTC datetime."""
    if not _EPOCH.fullmatch(value):
        raise InvalidTimestamp(field, value)
    try:
        seconds = int(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        raise InvalidTimestamp(field, value) from e


def parse_frequency(value: Optional[str]) -> Frequency:
    try:
        return Frequency(value or "")
    except ValueError as e:
        raise InvalidFrequency(value) from e


def parse_metric_type(value: Optional[str]) -> MetricType:
    try:
        return MetricType(value or "")
    except ValueError as e:
        raise InvalidMetricType(value) from e


def build_query(
    start: Optional[str],
    end: Optional[str],
    frequency: Optional[str] = None,
    metric_type: Optional[str] = None,
) -> Query:
    """
    Build a Query from request parameters.

    Args:
        start: Range start, epoch seconds (required)
        end: Range end, epoch seconds (required)
        frequency: "", "seconds", "minutes", "hours", "days", "months" or "years"
        metric_type: "", "cpu_load" or "concurrency"

    Raises:
        MissingTimeRange, InvalidTimestamp, InvalidFrequency, InvalidMetricType
    """
    if not start or not end:
        raise MissingTimeRange()

    start_at = parse_epoch("start", start)
    end_at = parse_epoch("end", end)

    return Query(
        start_at=start_at,
        end_at=end_at,
        frequency=parse_frequency(frequency),
        metric_type=parse_metric_type(metric_type),
    )
