"""
Query value and the closed metric-type / frequency enums.

Every Frequency is either stored resolution or maps to exactly one bucket
unit; tests/unit/test_query_filters.py checks that partition.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

CPU_LOAD_FIELD = "cpu_load"
CONCURRENCY_FIELD = "concurrency"
METRIC_FIELDS: Tuple[str, ...] = (CPU_LOAD_FIELD, CONCURRENCY_FIELD)


class MetricType(Enum):
    ALL = ""
    CPU_LOAD = "cpu_load"
    CONCURRENCY = "concurrency"

    @property
    def fields(self) -> Tuple[str, ...]:
        """Stored fields implied by this metric type."""
        return _TYPE_FIELDS[self]


class Frequency(Enum):
    NONE = ""
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"

    @property
    def is_stored_resolution(self) -> bool:
        return self in _STORED_RESOLUTION

    @property
    def bucket_unit(self) -> Optional[str]:
        """Truncation unit for bucketed frequencies, None for stored resolution."""
        if self in _STORED_RESOLUTION:
            return None
        return _BUCKET_UNITS[self]


_TYPE_FIELDS = {
    MetricType.ALL: METRIC_FIELDS,
    MetricType.CPU_LOAD: (CPU_LOAD_FIELD,),
    MetricType.CONCURRENCY: (CONCURRENCY_FIELD,),
}

# samples are stored at minute granularity, so seconds cannot be finer
_STORED_RESOLUTION = frozenset({Frequency.NONE, Frequency.SECONDS, Frequency.MINUTES})

_BUCKET_UNITS = {
    Frequency.HOURS: "hour",
    Frequency.DAYS: "day",
    Frequency.MONTHS: "month",
    Frequency.YEARS: "year",
}

BUCKET_UNITS: Tuple[str, ...] = tuple(_BUCKET_UNITS.values())


@dataclass(frozen=True)
class Query:
    """Parameters that metrics can be queried for."""
    start_at: datetime
    end_at: datetime
    metric_type: MetricType = MetricType.ALL
    frequency: Frequency = Frequency.NONE

    def __str__(self) -> str:
        return (
            f"start={self.start_at.isoformat()} end={self.end_at.isoformat()} "
            f"type={self.metric_type.value or 'all'} frequency={self.frequency.value or 'none'}"
        )
