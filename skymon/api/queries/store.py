"""
Backing store interface.

The query engine only talks to a store through these three lookups, so a
backend can be swapped without touching query shaping.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Sequence

Row = Dict[str, Any]


class MetricStore(ABC):
    """Read side of a time-series store holding cpu_load / concurrency samples.

    Rows are plain dicts. Series rows carry a UTC ``timestamp`` plus the
    requested fields; whole-range rows carry the requested fields only.
    Unrecorded or all-missing values are None.
    """

    @abstractmethod
    def range_query(self, start_at: datetime, end_at: datetime, fields: Sequence[str]) -> List[Row]:
        """Samples with start_at <= timestamp <= end_at, oldest first, projected to fields."""

    @abstractmethod
    def bucketed_aggregate(
        self, start_at: datetime, end_at: datetime, unit: str, fields: Sequence[str]
    ) -> List[Row]:
        """Mean of fields per bucket (timestamp truncated to unit), oldest bucket first."""

    @abstractmethod
    def whole_range_aggregate(self, start_at: datetime, end_at: datetime, fields: Sequence[str]) -> List[Row]:
        """Mean of fields over the whole range as a single group; no rows when nothing matched."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Make sure the store is ready to serve queries. Safe to call repeatedly."""

    def close(self) -> None:
        pass
