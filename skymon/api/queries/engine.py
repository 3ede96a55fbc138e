"""
Metric query engine.

Picks between a direct range read and a bucketed aggregation for series,
collapses the whole range into one group for averages, and shapes store rows
into Metric / MetricAverage results.
"""

import logging
from typing import List, Optional

from ...core.exceptions import InconsistentAggregate
from ..schemas import Metric, MetricAverage
from .model import Query
from .store import MetricStore

logger = logging.getLogger("skymon.queries")


class MetricQueryEngine:
    """Runs Query values against a MetricStore."""

    def __init__(self, store: MetricStore) -> None:
        self.store = store

    def get_series(self, query: Query) -> List[Metric]:
        """
        Series of metrics for the query, oldest first.

        Stored-resolution frequencies read samples as they are; coarser
        frequencies return one averaged row per bucket. An empty list means
        no data matched.
        """
        fields = query.metric_type.fields

        if query.frequency.is_stored_resolution:
            logger.debug(f"range read: {query}")
            rows = self.store.range_query(query.start_at, query.end_at, fields)
        else:
            unit = query.frequency.bucket_unit
            logger.debug(f"bucketed read by {unit}: {query}")
            rows = self.store.bucketed_aggregate(query.start_at, query.end_at, unit, fields)

        return [Metric(**row) for row in rows]

    def get_average(self, query: Query) -> Optional[MetricAverage]:
        """
        Average of the metrics over the whole query range, or None when no
        sample matched. The frequency is ignored.
        """
        fields = query.metric_type.fields
        rows = self.store.whole_range_aggregate(query.start_at, query.end_at, fields)

        if len(rows) > 1:
            raise InconsistentAggregate(len(rows))
        if not rows:
            return None

        values = {name: rows[0].get(name) for name in fields}
        return MetricAverage(start_time=query.start_at, end_time=query.end_at, **values)
